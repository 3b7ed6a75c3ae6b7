"""Chat message -> memo transaction encoding.

A chat message travels as one transaction with exactly two instructions,
in this order:

1. a System Program transfer of a nominal amount from sender to recipient
2. a Memo program instruction whose data is the raw UTF-8 message text

The transfer anchors the transaction for explorers and indexers; the memo
carries the payload.  There is no framing, escaping or length prefix.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.hash import Hash
from solders.instruction import Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from ledgerchat.protocol.crypto import Identity
from ledgerchat.protocol.errors import (
    EmptyMessageError,
    InvalidKeyError,
    MessageEncodingError,
    MessageTooLargeError,
)
from ledgerchat.protocol.types import (
    DEFAULT_TRANSFER_LAMPORTS,
    MAX_MEMO_BYTES,
    MEMO_PROGRAM_ID,
    PACKET_DATA_SIZE,
    parse_pubkey,
)


@dataclass(frozen=True)
class Recipient:
    """The counterparty address; fixed for a session."""

    pubkey: Pubkey

    @classmethod
    def from_address(cls, address: str | Pubkey) -> Recipient:
        return cls(parse_pubkey(address))

    @property
    def public_address(self) -> str:
        return str(self.pubkey)


@dataclass(frozen=True)
class MessageTransaction:
    """One atomic transfer+memo unit, not yet bound to a blockhash."""

    sender: Identity
    recipient: Recipient
    lamports: int
    memo: bytes

    @property
    def signers(self) -> tuple[Identity, ...]:
        return (self.sender,)

    @property
    def text(self) -> str:
        return self.memo.decode("utf-8")

    @property
    def instructions(self) -> list[Instruction]:
        """``[transfer, memo]`` -- the order is part of the wire format."""
        transfer_ix = transfer(
            TransferParams(
                from_pubkey=self.sender.pubkey,
                to_pubkey=self.recipient.pubkey,
                lamports=self.lamports,
            )
        )
        memo_ix = Instruction(MEMO_PROGRAM_ID, self.memo, [])
        return [transfer_ix, memo_ix]

    def compile(self, blockhash: Hash) -> Message:
        """Compile to a legacy message paid for by the sender."""
        return Message.new_with_blockhash(
            self.instructions, self.sender.pubkey, blockhash
        )

    def sign(self, blockhash: Hash, signers: tuple[Identity, ...] | None = None) -> Transaction:
        """Compile and sign.

        Signatures are produced by each ``Identity`` in the order the
        message lists its required signers.

        Raises:
            InvalidKeyError: If a required signer is missing.
            MessageTooLargeError: If the signed transaction exceeds the
                network packet size.
        """
        message = self.compile(blockhash)
        by_key = {s.pubkey: s for s in (signers or self.signers)}
        required = message.account_keys[: message.header.num_required_signatures]
        signatures = []
        for key in required:
            signer = by_key.get(key)
            if signer is None:
                raise InvalidKeyError(f"Missing signer for {key}")
            signatures.append(signer.sign(bytes(message)))
        tx = Transaction.populate(message, signatures)
        size = len(bytes(tx))
        if size > PACKET_DATA_SIZE:
            raise MessageTooLargeError(
                f"Transaction is {size} bytes (limit {PACKET_DATA_SIZE})"
            )
        return tx


def build_message_transaction(
    identity: Identity,
    recipient: Recipient,
    text: str,
    *,
    lamports: int = DEFAULT_TRANSFER_LAMPORTS,
    max_memo_bytes: int = MAX_MEMO_BYTES,
) -> MessageTransaction:
    """Encode *text* as a transfer+memo transaction from *identity*.

    Raises:
        EmptyMessageError: If *text* is empty after trimming.
        MessageEncodingError: If *text* holds characters UTF-8 cannot encode.
        MessageTooLargeError: If the encoded text exceeds *max_memo_bytes*.
    """
    message = text.strip()
    if not message:
        raise EmptyMessageError("Message text is empty")

    try:
        memo = message.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise MessageEncodingError(f"Message is not valid UTF-8 text: {exc}") from exc
    if len(memo) > max_memo_bytes:
        raise MessageTooLargeError(
            f"Message is {len(memo)} bytes (limit {max_memo_bytes})"
        )

    return MessageTransaction(
        sender=identity,
        recipient=recipient,
        lamports=lamports,
        memo=memo,
    )


def decode_memo(message: Message) -> str:
    """Return the chat text carried by a compiled transfer+memo message."""
    for ix in message.instructions:
        if message.account_keys[ix.program_id_index] == MEMO_PROGRAM_ID:
            return bytes(ix.data).decode("utf-8")
    raise ValueError("Message carries no memo instruction")
