"""Shared test fixtures for ledgerchat tests."""

from __future__ import annotations

from typing import Sequence

import pytest
from solders.hash import Hash

from ledgerchat.protocol import Identity, MessageTransaction, Recipient

RECIPIENT_ADDRESS = "CNmWr7eWb5J3oJVt4xRwo4ggqiaYvs6zxB1UXRx4eNzS"


class FakeLedgerClient:
    """In-memory stand-in for the RPC client.

    ``balance`` is what ``get_balance`` reports.  ``submit_results`` is a
    queue of signatures (str) or exceptions consumed by ``submit``.
    """

    def __init__(self, balance: int = 10**9) -> None:
        self.balance = balance
        self.confirmations: list[bool] = []
        self.submit_results: list[str | Exception] = []
        self.balance_queries: list[str] = []
        self.fund_requests: list[tuple[str, int]] = []
        self.confirmed: list[str] = []
        self.submitted: list[MessageTransaction] = []
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    async def get_balance(self, address: str) -> int:
        self.balance_queries.append(address)
        return self.balance

    async def request_funds(self, address: str, lamports: int) -> str:
        self.fund_requests.append((address, lamports))
        return f"airdrop{len(self.fund_requests)}"

    async def await_confirmation(self, signature: str) -> bool:
        self.confirmed.append(signature)
        ok = self.confirmations.pop(0) if self.confirmations else True
        if ok and signature.startswith("airdrop"):
            self.balance += self.fund_requests[-1][1]
        return ok

    async def get_latest_blockhash(self) -> Hash:
        return Hash.default()

    async def submit(self, transaction: MessageTransaction, signers: Sequence[Identity]) -> str:
        # Exercise the real signing path so malformed transactions fail here too
        transaction.sign(Hash.default(), tuple(signers))
        outcome = self.submit_results.pop(0) if self.submit_results else f"sig{len(self.submitted) + 1}"
        if isinstance(outcome, Exception):
            raise outcome
        self.submitted.append(transaction)
        return outcome


@pytest.fixture()
def identity() -> Identity:
    return Identity.generate()


@pytest.fixture()
def recipient() -> Recipient:
    return Recipient.from_address(RECIPIENT_ADDRESS)


@pytest.fixture()
def fake_client() -> FakeLedgerClient:
    return FakeLedgerClient()


@pytest.fixture()
def ledgerchat_home(tmp_path, monkeypatch):
    """Isolate LEDGERCHAT_* environment and home directory per test."""
    for var in (
        "LEDGERCHAT_RPC_URL",
        "LEDGERCHAT_CLUSTER",
        "LEDGERCHAT_RECIPIENT",
        "LEDGERCHAT_KEY_PATH",
        "LEDGERCHAT_SECRET_KEY",
        "LEDGERCHAT_FUND_POLICY",
    ):
        monkeypatch.delenv(var, raising=False)
    home = tmp_path / ".ledgerchat"
    home.mkdir()
    monkeypatch.setenv("LEDGERCHAT_HOME", str(home))
    return home
