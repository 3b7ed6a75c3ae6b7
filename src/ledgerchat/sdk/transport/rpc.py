"""Solana JSON-RPC client via httpx with connection pooling."""

from __future__ import annotations

import asyncio
import base64
import contextlib
import itertools
import logging
from typing import Any, Iterator, Sequence

import httpx
from solders.hash import Hash

from ledgerchat.protocol import (
    Commitment,
    FaucetUnavailableError,
    Identity,
    LedgerTransportError,
    MessageTransaction,
    RpcError,
    commitment_reached,
)
from ledgerchat.sdk.transport.base import LedgerClientBase

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _malformed(method: str) -> Iterator[None]:
    """Turn a shape error while reading a result into ``LedgerTransportError``."""
    try:
        yield
    except (KeyError, IndexError, TypeError, AttributeError, ValueError) as exc:
        raise LedgerTransportError(f"{method} returned malformed result") from exc


def _signature(method: str, result: Any) -> str:
    if not isinstance(result, str) or not result:
        raise LedgerTransportError(f"{method} returned malformed result")
    return result


class RpcLedgerClient(LedgerClientBase):
    """Stateless JSON-RPC client using httpx AsyncClient.

    A single ``httpx.AsyncClient`` is created in ``connect()`` and reused
    for all requests (connection pooling).  Call ``disconnect()`` to close
    it.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        cluster: str = "devnet",
        commitment: str = Commitment.CONFIRMED.value,
        poll_interval: float = 1.0,
        timeout: float = 30.0,
    ) -> None:
        self._rpc_url = rpc_url
        self._cluster = cluster
        self._commitment = commitment
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._ids = itertools.count(1)
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the shared httpx AsyncClient."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._rpc_url,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )

    async def disconnect(self) -> None:
        """Close the httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _call(self, method: str, params: list[Any]) -> Any:
        """POST one JSON-RPC request and return its ``result``.

        Raises:
            LedgerTransportError: On connection failures, HTTP errors or a
                response that is not a JSON-RPC envelope.
            RpcError: When the endpoint returns an ``error`` object.
        """
        if self._client is None:
            raise RuntimeError("RpcLedgerClient not connected. Call connect() first.")
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            resp = await self._client.post("", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            raise LedgerTransportError(f"{method} failed: {exc}") from exc
        except ValueError as exc:
            raise LedgerTransportError(f"{method} returned malformed JSON") from exc

        if not isinstance(body, dict):
            raise LedgerTransportError(f"{method} returned malformed response")
        error = body.get("error")
        if error is not None:
            raise RpcError(
                code=error.get("code", 0),
                message=error.get("message", ""),
                data=error.get("data"),
            )
        if "result" not in body:
            raise LedgerTransportError(f"{method} response has no result")
        return body["result"]

    async def get_balance(self, address: str) -> int:
        result = await self._call(
            "getBalance", [address, {"commitment": self._commitment}]
        )
        with _malformed("getBalance"):
            return int(result["value"])

    async def request_funds(self, address: str, lamports: int) -> str:
        """Request an airdrop.  Only test clusters run a faucet."""
        if self._cluster == "mainnet-beta":
            raise FaucetUnavailableError(
                "Funds requests are only available on test clusters"
            )
        result = await self._call("requestAirdrop", [address, lamports])
        signature = _signature("requestAirdrop", result)
        logger.debug("Airdrop of %s lamports to %s: %s", lamports, address, signature)
        return signature

    async def await_confirmation(self, signature: str) -> bool:
        """Poll ``getSignatureStatuses`` until *signature* is confirmed or failed."""
        while True:
            result = await self._call(
                "getSignatureStatuses",
                [[signature], {"searchTransactionHistory": False}],
            )
            with _malformed("getSignatureStatuses"):
                status = (result.get("value") or [None])[0]
                failed = status is not None and status.get("err") is not None
                confirmed = status is not None and commitment_reached(
                    status.get("confirmationStatus"), self._commitment
                )
            if failed:
                logger.warning("Transaction %s failed: %s", signature, status["err"])
                return False
            if confirmed:
                return True
            await asyncio.sleep(self._poll_interval)

    async def get_latest_blockhash(self) -> Hash:
        result = await self._call(
            "getLatestBlockhash", [{"commitment": self._commitment}]
        )
        with _malformed("getLatestBlockhash"):
            return Hash.from_string(result["value"]["blockhash"])

    async def submit(
        self,
        transaction: MessageTransaction,
        signers: Sequence[Identity],
    ) -> str:
        """Bind to a fresh blockhash, sign, and send with preflight checks."""
        blockhash = await self.get_latest_blockhash()
        tx = transaction.sign(blockhash, tuple(signers))
        encoded = base64.b64encode(bytes(tx)).decode("ascii")
        result = await self._call(
            "sendTransaction",
            [
                encoded,
                {"encoding": "base64", "preflightCommitment": self._commitment},
            ],
        )
        return _signature("sendTransaction", result)
