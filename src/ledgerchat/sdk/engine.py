"""Submission & reconciliation: build, submit, record or classify.

``SubmissionEngine.send`` is the only place ledger errors are caught.
Every failure is folded into a :class:`FailureCategory`; nothing
propagates past ``send`` and the message list is only appended to after
the ledger hands back a transaction signature.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import httpx

from ledgerchat.protocol import (
    DEFAULT_EXPLORER_URL,
    DEFAULT_TRANSFER_LAMPORTS,
    MAX_MEMO_BYTES,
    Identity,
    LedgerChatError,
    Recipient,
    RpcError,
    ValidationError,
    build_message_transaction,
    explorer_tx_url,
    shorten_address,
)
from ledgerchat.sdk.funding import FundingGuard
from ledgerchat.sdk.message import MessageRecord
from ledgerchat.sdk.transport import LedgerClientBase

logger = logging.getLogger(__name__)

# Matched case-insensitively against the error message and simulation logs
_INSUFFICIENT_FUNDS = re.compile(
    r"insufficient funds|insufficient lamports|no record of a prior credit",
    re.IGNORECASE,
)


class FailureCategory(str, Enum):
    """User-facing failure classes."""

    INSUFFICIENT_FUNDS = "insufficient_funds"
    VALIDATION = "validation"
    GENERIC = "generic"


class SendState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    SUBMITTING = "submitting"
    RECORDED = "recorded"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SendFailure:
    category: FailureCategory
    reason: str


@dataclass(frozen=True)
class SendResult:
    """Outcome of one send: exactly one of ``record`` / ``failure`` is set."""

    record: Optional[MessageRecord] = None
    failure: Optional[SendFailure] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def error_description(exc: BaseException) -> str:
    if isinstance(exc, RpcError):
        return exc.description
    return str(exc)


def classify_error(exc: BaseException) -> FailureCategory:
    """Map an exception to its user-facing category.

    Deterministic: the same description always yields the same category.
    """
    if isinstance(exc, ValidationError):
        return FailureCategory.VALIDATION
    if _INSUFFICIENT_FUNDS.search(error_description(exc)):
        return FailureCategory.INSUFFICIENT_FUNDS
    return FailureCategory.GENERIC


class SubmissionEngine:
    """Turns message text into a ledger transaction and a MessageRecord.

    Sends are serialized: at most one submission per identity is in
    flight, so the ledger never sees two competing transactions from the
    same payer.
    """

    def __init__(
        self,
        client: LedgerClientBase,
        identity: Identity,
        recipient: Recipient,
        *,
        cluster: str = "devnet",
        explorer_url: str = DEFAULT_EXPLORER_URL,
        lamports: int = DEFAULT_TRANSFER_LAMPORTS,
        max_memo_bytes: int = MAX_MEMO_BYTES,
        on_record: Callable[[MessageRecord], None] | None = None,
        guard: FundingGuard | None = None,
    ) -> None:
        self._client = client
        self._identity = identity
        self._recipient = recipient
        self._cluster = cluster
        self._explorer_url = explorer_url
        self._lamports = lamports
        self._max_memo_bytes = max_memo_bytes
        self._on_record = on_record
        self._guard = guard
        self._ids = itertools.count(1)
        self._lock = asyncio.Lock()
        self._state = SendState.IDLE

    @property
    def state(self) -> SendState:
        return self._state

    async def send(self, text: str) -> SendResult:
        """Build, submit and record *text*.  Never raises for ledger errors."""
        async with self._lock:
            try:
                return await self._send_locked(text)
            finally:
                self._state = SendState.IDLE

    async def _send_locked(self, text: str) -> SendResult:
        try:
            if self._guard is not None:
                await self._guard.ensure_funded(self._identity)

            self._state = SendState.BUILDING
            tx = build_message_transaction(
                self._identity,
                self._recipient,
                text,
                lamports=self._lamports,
                max_memo_bytes=self._max_memo_bytes,
            )

            self._state = SendState.SUBMITTING
            signature = await self._client.submit(tx, tx.signers)
        except (LedgerChatError, httpx.HTTPError) as exc:
            self._state = SendState.REJECTED
            category = classify_error(exc)
            logger.warning(
                "Failed to send message (%s): %s", category.value, exc, exc_info=True
            )
            return SendResult(failure=SendFailure(category, error_description(exc)))

        record = self._reconcile(tx.text, signature)
        self._state = SendState.RECORDED
        if self._on_record is not None:
            self._on_record(record)
        return SendResult(record=record)

    def _reconcile(self, text: str, signature: str) -> MessageRecord:
        url = explorer_tx_url(signature, self._cluster, self._explorer_url)
        logger.info("Transaction signature: %s", signature)
        logger.info("View your transaction here: %s", url)
        return MessageRecord(
            id=next(self._ids),
            display_text=f"{shorten_address(self._identity.pubkey)}: {text}",
            proof_reference=url,
            signature=signature,
            text=text,
        )
