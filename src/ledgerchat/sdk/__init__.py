"""ledgerchat SDK -- sessions, identities and the ledger client."""

from ledgerchat.sdk.config import ChatConfig
from ledgerchat.sdk.engine import (
    FailureCategory,
    SendFailure,
    SendResult,
    SendState,
    SubmissionEngine,
    classify_error,
)
from ledgerchat.sdk.funding import FundingGuard
from ledgerchat.sdk.identity import (
    EnvIdentityProvider,
    IdentityProvider,
    KeyFileIdentityProvider,
    StaticIdentityProvider,
)
from ledgerchat.sdk.message import MessageRecord
from ledgerchat.sdk.session import ChatSession, Notification

__all__ = [
    "ChatConfig",
    "ChatSession",
    "EnvIdentityProvider",
    "FailureCategory",
    "FundingGuard",
    "IdentityProvider",
    "KeyFileIdentityProvider",
    "MessageRecord",
    "Notification",
    "SendFailure",
    "SendResult",
    "SendState",
    "StaticIdentityProvider",
    "SubmissionEngine",
    "classify_error",
]
