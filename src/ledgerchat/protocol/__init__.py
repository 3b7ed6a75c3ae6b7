"""ledgerchat protocol -- chat messages encoded as Solana memo transactions.

Public API re-exports for ``ledgerchat.protocol``.
"""

from ledgerchat.protocol.types import (
    LAMPORTS_PER_SOL,
    MEMO_PROGRAM_ID,
    DEFAULT_TRANSFER_LAMPORTS,
    MAX_MEMO_BYTES,
    PACKET_DATA_SIZE,
    DEFAULT_EXPLORER_URL,
    Commitment,
    commitment_reached,
    parse_pubkey,
    shorten_address,
    explorer_tx_url,
)

from ledgerchat.protocol.errors import (
    LedgerChatError,
    InvalidAddressError,
    ValidationError,
    EmptyMessageError,
    MessageTooLargeError,
    MessageEncodingError,
    LedgerError,
    LedgerTransportError,
    RpcError,
    FaucetUnavailableError,
    FundingError,
    IdentityError,
    InvalidKeyError,
)

from ledgerchat.protocol.crypto import (
    Identity,
    identity_from_keypair_bytes,
    identity_from_json,
    identity_from_base58,
    identity_to_json,
)

from ledgerchat.protocol.memo import (
    Recipient,
    MessageTransaction,
    build_message_transaction,
    decode_memo,
)

__all__ = [
    # Types
    "LAMPORTS_PER_SOL",
    "MEMO_PROGRAM_ID",
    "DEFAULT_TRANSFER_LAMPORTS",
    "MAX_MEMO_BYTES",
    "PACKET_DATA_SIZE",
    "DEFAULT_EXPLORER_URL",
    "Commitment",
    "commitment_reached",
    "parse_pubkey",
    "shorten_address",
    "explorer_tx_url",
    # Errors
    "LedgerChatError",
    "InvalidAddressError",
    "ValidationError",
    "EmptyMessageError",
    "MessageTooLargeError",
    "MessageEncodingError",
    "LedgerError",
    "LedgerTransportError",
    "RpcError",
    "FaucetUnavailableError",
    "FundingError",
    "IdentityError",
    "InvalidKeyError",
    # Identity
    "Identity",
    "identity_from_keypair_bytes",
    "identity_from_json",
    "identity_from_base58",
    "identity_to_json",
    # Memo transactions
    "Recipient",
    "MessageTransaction",
    "build_message_transaction",
    "decode_memo",
]
