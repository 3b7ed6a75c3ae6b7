"""Tests for transfer+memo transaction encoding."""

from __future__ import annotations

import pytest
from solders.hash import Hash
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from ledgerchat.protocol import (
    DEFAULT_TRANSFER_LAMPORTS,
    MAX_MEMO_BYTES,
    MEMO_PROGRAM_ID,
    EmptyMessageError,
    Identity,
    InvalidKeyError,
    MessageEncodingError,
    MessageTooLargeError,
    build_message_transaction,
    decode_memo,
)


def _program_ids(message):
    return [message.account_keys[ix.program_id_index] for ix in message.instructions]


class TestBuild:
    """build_message_transaction input handling."""

    @pytest.mark.parametrize("text", ["hello", "gm frens", "héllo wörld", "🚀 to the moon"])
    def test_memo_is_raw_text_bytes(self, identity, recipient, text):
        tx = build_message_transaction(identity, recipient, text)
        assert tx.memo == text.encode("utf-8")
        assert tx.text == text

    def test_text_is_trimmed(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "  hello \n")
        assert tx.memo == b"hello"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_text_rejected(self, identity, recipient, text):
        with pytest.raises(EmptyMessageError):
            build_message_transaction(identity, recipient, text)

    def test_lone_surrogate_rejected(self, identity, recipient):
        with pytest.raises(MessageEncodingError, match="not valid UTF-8"):
            build_message_transaction(identity, recipient, "hi \ud800")

    def test_fixed_nominal_amount(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "hi")
        assert tx.lamports == DEFAULT_TRANSFER_LAMPORTS == 1000

    def test_sender_is_only_signer(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "hi")
        assert tx.signers == (identity,)

    def test_oversized_memo_rejected(self, identity, recipient):
        with pytest.raises(MessageTooLargeError):
            build_message_transaction(identity, recipient, "x" * (MAX_MEMO_BYTES + 1))

    def test_limit_counts_bytes_not_characters(self, identity, recipient):
        # 2 bytes per character in UTF-8
        text = "é" * (MAX_MEMO_BYTES // 2 + 1)
        with pytest.raises(MessageTooLargeError):
            build_message_transaction(identity, recipient, text)

    def test_custom_limit(self, identity, recipient):
        with pytest.raises(MessageTooLargeError):
            build_message_transaction(identity, recipient, "hello", max_memo_bytes=4)


class TestCompile:
    """Instruction layout of the compiled message."""

    def test_instruction_order_transfer_then_memo(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "hello")
        message = tx.compile(Hash.default())
        assert _program_ids(message) == [SYSTEM_PROGRAM_ID, MEMO_PROGRAM_ID]

    def test_exactly_two_instructions(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "hello")
        assert len(tx.instructions) == 2
        assert len(tx.compile(Hash.default()).instructions) == 2

    def test_memo_has_no_accounts(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "hello")
        memo_ix = tx.instructions[1]
        assert memo_ix.program_id == MEMO_PROGRAM_ID
        assert memo_ix.accounts == []
        assert bytes(memo_ix.data) == b"hello"

    def test_transfer_moves_from_sender_to_recipient(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "hello")
        transfer_ix = tx.instructions[0]
        keys = [meta.pubkey for meta in transfer_ix.accounts]
        assert keys == [identity.pubkey, recipient.pubkey]

    def test_sender_pays(self, identity, recipient):
        message = build_message_transaction(identity, recipient, "hello").compile(Hash.default())
        assert message.account_keys[0] == identity.pubkey

    @pytest.mark.parametrize("text", ["hello", "multi\nline", "ünïcödé ✓"])
    def test_decode_round_trip(self, identity, recipient, text):
        message = build_message_transaction(identity, recipient, text).compile(Hash.default())
        assert decode_memo(message) == text


class TestSign:
    """Signing and packet-size checks."""

    def test_signature_verifies(self, identity, recipient):
        tx = build_message_transaction(identity, recipient, "hello").sign(Hash.default())
        assert len(tx.signatures) == 1
        tx.verify()

    def test_signature_matches_identity(self, identity, recipient):
        built = build_message_transaction(identity, recipient, "hello")
        tx = built.sign(Hash.default())
        message = built.compile(Hash.default())
        assert tx.signatures[0] == identity.sign(bytes(message))

    def test_missing_signer_rejected(self, identity, recipient):
        built = build_message_transaction(identity, recipient, "hello")
        with pytest.raises(InvalidKeyError):
            built.sign(Hash.default(), (Identity.generate(),))

    def test_max_memo_fits_packet(self, identity, recipient):
        built = build_message_transaction(identity, recipient, "x" * MAX_MEMO_BYTES)
        tx = built.sign(Hash.default())
        assert len(bytes(tx)) <= 1232

    def test_oversized_transaction_rejected(self, identity, recipient):
        built = build_message_transaction(
            identity, recipient, "x" * 1200, max_memo_bytes=2000
        )
        with pytest.raises(MessageTooLargeError):
            built.sign(Hash.default())
