"""Core constants and small helpers shared across ledgerchat."""

from __future__ import annotations

from enum import Enum

from solders.pubkey import Pubkey

from ledgerchat.protocol.errors import InvalidAddressError


LAMPORTS_PER_SOL = 1_000_000_000

# SPL Memo program (v2), deployed at the same address on every cluster
MEMO_PROGRAM_ID = Pubkey.from_string("MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr")

# Nominal value moved by every chat transaction
DEFAULT_TRANSFER_LAMPORTS = 1000

# Conventional memo size cap; a transfer+memo of this size stays well under PACKET_DATA_SIZE
MAX_MEMO_BYTES = 566

# Maximum serialized transaction size accepted by the network
PACKET_DATA_SIZE = 1232

DEFAULT_EXPLORER_URL = "https://explorer.solana.com"


class Commitment(str, Enum):
    """Confirmation levels understood by the RPC endpoint.

    Using ``str, Enum`` so that ``Commitment.CONFIRMED == "confirmed"`` is True.
    """

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


_COMMITMENT_RANK = {
    Commitment.PROCESSED: 0,
    Commitment.CONFIRMED: 1,
    Commitment.FINALIZED: 2,
}


def commitment_reached(status: str | None, target: str) -> bool:
    """Return True if a reported confirmation status satisfies *target*."""
    if status is None:
        return False
    try:
        return _COMMITMENT_RANK[Commitment(status)] >= _COMMITMENT_RANK[Commitment(target)]
    except ValueError:
        return False


def parse_pubkey(address: str | Pubkey) -> Pubkey:
    """Parse a base58 address into a ``Pubkey``.

    Raises:
        InvalidAddressError: If *address* is not a valid 32-byte base58 key.
    """
    if isinstance(address, Pubkey):
        return address
    try:
        return Pubkey.from_string(address.strip())
    except (ValueError, TypeError) as exc:
        raise InvalidAddressError(f"Invalid address {address!r}: {exc}") from exc


def shorten_address(address: str | Pubkey) -> str:
    """``CNmWr7eW...eNzS`` -> ``CNmW...eNzS``."""
    s = str(address)
    return f"{s[:4]}...{s[-4:]}"


def explorer_tx_url(
    signature: str,
    cluster: str,
    explorer_url: str = DEFAULT_EXPLORER_URL,
) -> str:
    """Build the public explorer lookup URL for a transaction signature."""
    return f"{explorer_url.rstrip('/')}/tx/{signature}?cluster={cluster}"
