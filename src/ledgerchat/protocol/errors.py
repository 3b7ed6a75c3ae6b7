"""ledgerchat exception hierarchy.

All ledgerchat-specific exceptions inherit from :class:`LedgerChatError`.
"""

from __future__ import annotations

from typing import Any


class LedgerChatError(Exception):
    """Base exception for all ledgerchat errors."""


class InvalidAddressError(LedgerChatError):
    """Raised when a base58 address string fails validation."""


class ValidationError(LedgerChatError):
    """Raised when message input is rejected before it reaches the ledger."""


class EmptyMessageError(ValidationError):
    """Raised when the message text is empty after trimming."""


class MessageTooLargeError(ValidationError):
    """Raised when a message does not fit in a single memo instruction."""


class MessageEncodingError(ValidationError):
    """Raised when message text cannot be encoded as UTF-8."""


class LedgerError(LedgerChatError):
    """Base for failures talking to the ledger network."""


class LedgerTransportError(LedgerError):
    """Raised when the RPC endpoint is unreachable or returns garbage."""


class RpcError(LedgerError):
    """Raised when the RPC endpoint answers with a JSON-RPC error object.

    Covers semantic rejections: failed preflight simulation, insufficient
    funds, malformed instructions, airdrop rate limits.
    """

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    @property
    def logs(self) -> list[str]:
        """Program logs attached to a failed simulation, if any."""
        if isinstance(self.data, dict):
            return list(self.data.get("logs") or [])
        return []

    @property
    def description(self) -> str:
        """Message plus simulation logs, for pattern matching."""
        return "\n".join([self.message, *self.logs])


class FaucetUnavailableError(LedgerError):
    """Raised when a funds request is made against a production cluster."""


class FundingError(LedgerError):
    """Raised when a top-up was requested but never confirmed."""


class IdentityError(LedgerChatError):
    """Base for failures loading the sender identity."""


class InvalidKeyError(IdentityError):
    """Raised when keypair material is malformed or inconsistent."""
