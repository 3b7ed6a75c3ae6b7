"""ChatSession -- the surface a UI binds to.

Provides on_mount(), send(), the ordered message list, the preserved
input draft, notifications, and sync wrappers.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

import httpx

from ledgerchat.protocol import (
    Identity,
    LedgerChatError,
    Recipient,
    shorten_address,
)
from ledgerchat.sdk._sync import _run_sync
from ledgerchat.sdk.config import ChatConfig
from ledgerchat.sdk.engine import FailureCategory, SendResult, SubmissionEngine
from ledgerchat.sdk.funding import FundingGuard
from ledgerchat.sdk.identity import IdentityProvider, default_identity_provider
from ledgerchat.sdk.message import MessageRecord
from ledgerchat.sdk.transport import LedgerClientBase, create_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A modal-style alert: a title, a body and a single acknowledgement."""

    title: str
    body: str
    category: FailureCategory | None = None


SUCCESS_NOTIFICATION = Notification("Success", "Message sent successfully!")

_FAILURE_NOTIFICATIONS = {
    FailureCategory.INSUFFICIENT_FUNDS: Notification(
        "Insufficient Funds",
        "Not enough SOL to complete the transaction. "
        "Consider airdropping more SOL to your account.",
        FailureCategory.INSUFFICIENT_FUNDS,
    ),
    FailureCategory.VALIDATION: Notification(
        "Invalid Message",
        "Message is empty or too long to fit in a single transaction.",
        FailureCategory.VALIDATION,
    ),
    FailureCategory.GENERIC: Notification(
        "Error",
        "Failed to send message. Please try again.",
        FailureCategory.GENERIC,
    ),
}


class ChatSession:
    """One chat between the configured sender and a fixed recipient.

    Usage::

        session = ChatSession(ChatConfig(recipient="CNmW...eNzS"))
        await session.on_mount()
        result = await session.send_and_wait("gm")
        for record in session.messages:
            print(record.display_text, record.proof_reference)

    Async context manager::

        async with ChatSession(config) as session:
            session.send("hello")   # returns an asyncio.Task

    Sync usage::

        session = ChatSession(config)
        session.on_mount_sync()
        session.send_sync("hello")
        session.close_sync()
    """

    def __init__(
        self,
        config: ChatConfig | None = None,
        identity_provider: IdentityProvider | None = None,
        *,
        client: LedgerClientBase | None = None,
        recipient: Recipient | str | None = None,
        on_notify: Callable[[Notification], None] | None = None,
    ) -> None:
        """Create a session.  No I/O happens here -- call ``on_mount()``."""
        self._config = config or ChatConfig()
        self._identity_provider = identity_provider or default_identity_provider(
            self._config.key_path
        )
        self._client = client or create_client(self._config)
        self._recipient_arg = recipient
        self._on_notify = on_notify

        self._identity: Identity | None = None
        self._recipient: Recipient | None = None
        self._engine: SubmissionEngine | None = None
        self._guard = FundingGuard(
            self._client,
            threshold=self._config.fund_threshold,
            top_up=self._config.top_up_lamports,
        )
        self._messages: list[MessageRecord] = []
        self._draft = ""
        self._mounted = False
        self._ready_lock = asyncio.Lock()

    # -- Properties ----------------------------------------------------------

    @property
    def config(self) -> ChatConfig:
        return self._config

    @property
    def identity(self) -> Identity:
        if self._identity is None:
            raise RuntimeError("Session not mounted. Call await session.on_mount() first.")
        return self._identity

    @property
    def recipient(self) -> Recipient:
        if self._recipient is None:
            raise RuntimeError("Session not mounted. Call await session.on_mount() first.")
        return self._recipient

    @property
    def sender_label(self) -> str:
        return f"Sender Wallet: {shorten_address(self.identity.pubkey)}"

    @property
    def recipient_label(self) -> str:
        return f"Receiver Wallet: {shorten_address(self.recipient.pubkey)}"

    @property
    def messages(self) -> tuple[MessageRecord, ...]:
        """Read-only snapshot of confirmed messages, oldest first."""
        return tuple(self._messages)

    @property
    def draft(self) -> str:
        """Current input text.  Kept on failure, cleared once it is sent."""
        return self._draft

    @draft.setter
    def draft(self, value: str) -> None:
        self._draft = value

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    # -- Lifecycle -----------------------------------------------------------

    async def on_mount(self) -> bool:
        """Load the identity, connect, and run the funding guard once.

        Returns ``True`` if the sender is funded (or was topped up).
        Ledger failures are logged, not raised; identity and recipient
        configuration errors are raised.
        """
        await self._ensure_ready()
        try:
            await self._guard.ensure_funded(self._identity)
        except (LedgerChatError, httpx.HTTPError):
            logger.warning(
                "Funding check failed for %s",
                self._identity.public_address,
                exc_info=True,
            )
            return False
        return True

    async def close(self) -> None:
        """Disconnect the ledger client."""
        await self._client.disconnect()
        self._mounted = False

    async def __aenter__(self) -> ChatSession:
        await self.on_mount()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # -- Messaging -----------------------------------------------------------

    def send(self, text: str | None = None) -> asyncio.Task:
        """Schedule a send and return its task.

        The outcome also reaches the UI through the notification
        callback.  Must be called with an event loop running.
        """
        return asyncio.get_running_loop().create_task(self.send_and_wait(text))

    async def send_and_wait(self, text: str | None = None) -> SendResult:
        """Send *text* (default: the current draft) and return the outcome.

        The draft is cleared on success only if it is what was sent.
        """
        await self._ensure_ready()
        message = self._draft if text is None else text

        result = await self._engine.send(message)

        if result.ok:
            if self._draft == message:
                self._draft = ""
            self._notify(SUCCESS_NOTIFICATION)
        else:
            self._notify(_FAILURE_NOTIFICATIONS[result.failure.category])
        return result

    # -- Sync wrappers -------------------------------------------------------

    def on_mount_sync(self) -> bool:
        """Synchronous wrapper for on_mount()."""
        return _run_sync(self.on_mount())

    def send_sync(self, text: str | None = None) -> SendResult:
        """Synchronous wrapper for send_and_wait()."""
        return _run_sync(self.send_and_wait(text))

    def close_sync(self) -> None:
        """Synchronous wrapper for close()."""
        _run_sync(self.close())

    # -- Internal methods ----------------------------------------------------

    async def _ensure_ready(self) -> None:
        async with self._ready_lock:
            if not self._mounted:
                await self._mount_locked()

    async def _mount_locked(self) -> None:
        if self._identity is None:
            self._identity = self._identity_provider.load()

        recipient = self._recipient_arg or self._config.recipient
        if not recipient:
            raise LedgerChatError(
                "No recipient configured. Pass recipient= or set LEDGERCHAT_RECIPIENT."
            )
        self._recipient = (
            recipient if isinstance(recipient, Recipient)
            else Recipient.from_address(recipient)
        )

        await self._client.connect()
        if self._engine is None:
            self._engine = self._make_engine()
        self._mounted = True

    def _make_engine(self) -> SubmissionEngine:
        return SubmissionEngine(
            self._client,
            self._identity,
            self._recipient,
            cluster=self._config.cluster,
            explorer_url=self._config.explorer_url,
            lamports=self._config.transfer_lamports,
            max_memo_bytes=self._config.max_memo_bytes,
            on_record=self._messages.append,
            guard=self._guard if self._config.fund_policy == "every-send" else None,
        )

    def _notify(self, notification: Notification) -> None:
        if self._on_notify is not None:
            self._on_notify(notification)
