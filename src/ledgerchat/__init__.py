"""ledgerchat -- chat messages carried as Solana memo transactions.

Top-level convenience re-exports::

    from ledgerchat import ChatSession, ChatConfig
    from ledgerchat.protocol import build_message_transaction
"""

__version__ = "0.1.0"

from ledgerchat.sdk.config import ChatConfig
from ledgerchat.sdk.message import MessageRecord
from ledgerchat.sdk.session import ChatSession, Notification

__all__ = ["__version__", "ChatConfig", "ChatSession", "MessageRecord", "Notification"]
