"""Tests for ledgerchat.protocol.errors module."""

from __future__ import annotations

from ledgerchat.protocol.errors import (
    EmptyMessageError,
    FaucetUnavailableError,
    FundingError,
    IdentityError,
    InvalidAddressError,
    InvalidKeyError,
    LedgerChatError,
    LedgerError,
    LedgerTransportError,
    MessageEncodingError,
    MessageTooLargeError,
    RpcError,
    ValidationError,
)


class TestHierarchy:
    def test_validation_errors(self):
        assert issubclass(EmptyMessageError, ValidationError)
        assert issubclass(MessageTooLargeError, ValidationError)
        assert issubclass(MessageEncodingError, ValidationError)
        assert issubclass(ValidationError, LedgerChatError)

    def test_ledger_errors(self):
        for cls in (LedgerTransportError, RpcError, FaucetUnavailableError, FundingError):
            assert issubclass(cls, LedgerError)
        assert issubclass(LedgerError, LedgerChatError)

    def test_identity_errors(self):
        assert issubclass(InvalidKeyError, IdentityError)
        assert issubclass(IdentityError, LedgerChatError)

    def test_invalid_address_is_ledgerchat_error(self):
        assert issubclass(InvalidAddressError, LedgerChatError)


class TestRpcError:
    def test_fields(self):
        err = RpcError(-32002, "Transaction simulation failed", {"logs": ["a", "b"]})
        assert err.code == -32002
        assert str(err) == "Transaction simulation failed"
        assert err.logs == ["a", "b"]

    def test_description_includes_logs(self):
        err = RpcError(
            -32002,
            "Transaction simulation failed: Error processing Instruction 0",
            {"logs": ["Program 11111111111111111111111111111111 invoke [1]",
                      "Transfer: insufficient lamports 0, need 1000"]},
        )
        assert "insufficient lamports" in err.description

    def test_no_data(self):
        err = RpcError(-32600, "Invalid request")
        assert err.logs == []
        assert err.description == "Invalid request"
