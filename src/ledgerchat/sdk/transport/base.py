"""Abstract ledger client interface."""

from __future__ import annotations

import abc
from typing import Sequence

from solders.hash import Hash

from ledgerchat.protocol import Identity, MessageTransaction


class LedgerClientBase(abc.ABC):
    """Thin adapter over a ledger network endpoint.

    Every operation is a network round-trip that may raise
    ``LedgerTransportError`` (unreachable endpoint, malformed response) or
    ``RpcError`` (semantic rejection).  Implementations never retry;
    retry policy belongs to the caller.
    """

    async def connect(self) -> None:
        """Open any pooled connections."""

    async def disconnect(self) -> None:
        """Release pooled connections."""

    async def __aenter__(self) -> LedgerClientBase:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    @abc.abstractmethod
    async def get_balance(self, address: str) -> int:
        """Return the balance of *address* in lamports."""

    @abc.abstractmethod
    async def request_funds(self, address: str, lamports: int) -> str:
        """Ask the network faucet to credit *address*.  Returns a signature."""

    @abc.abstractmethod
    async def await_confirmation(self, signature: str) -> bool:
        """Wait for *signature* to land.  ``True`` on success, ``False`` if it failed."""

    @abc.abstractmethod
    async def get_latest_blockhash(self) -> Hash:
        """Return a recent blockhash to bind new transactions to."""

    @abc.abstractmethod
    async def submit(
        self,
        transaction: MessageTransaction,
        signers: Sequence[Identity],
    ) -> str:
        """Sign and submit *transaction*.  Returns the transaction signature."""
