"""Funding guard -- keep the sender solvent on test clusters."""

from __future__ import annotations

import logging

from ledgerchat.protocol import LAMPORTS_PER_SOL, FundingError, Identity
from ledgerchat.sdk.transport import LedgerClientBase

logger = logging.getLogger(__name__)


class FundingGuard:
    """Tops the sender up from the faucet when its balance runs low.

    The balance is queried fresh on every call.  At most one funds request
    is issued per call, and only when the balance is below *threshold*.
    """

    def __init__(
        self,
        client: LedgerClientBase,
        *,
        threshold: int = LAMPORTS_PER_SOL // 100,
        top_up: int = LAMPORTS_PER_SOL,
    ) -> None:
        self._client = client
        self.threshold = threshold
        self.top_up = top_up

    async def ensure_funded(self, identity: Identity) -> bool:
        """Return ``True`` if a top-up was requested and confirmed.

        Raises:
            FundingError: If the top-up transaction failed to confirm.
            LedgerError: On transport or RPC failures.
        """
        address = identity.public_address
        balance = await self._client.get_balance(address)
        logger.info("Balance for %s: %s lamports", address, balance)

        if balance >= self.threshold:
            return False

        logger.info("Requesting airdrop of %s lamports...", self.top_up)
        signature = await self._client.request_funds(address, self.top_up)
        if not await self._client.await_confirmation(signature):
            raise FundingError(f"Airdrop {signature} did not confirm")
        logger.info("Airdrop successful: %s", signature)
        return True
