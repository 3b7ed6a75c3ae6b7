"""Tests for FundingGuard top-up behaviour."""

from __future__ import annotations

import pytest

from ledgerchat.protocol import LAMPORTS_PER_SOL, FundingError, RpcError
from ledgerchat.sdk.funding import FundingGuard


class TestEnsureFunded:
    async def test_empty_balance_tops_up_one_sol(self, fake_client, identity):
        fake_client.balance = 0
        guard = FundingGuard(fake_client)

        assert await guard.ensure_funded(identity) is True
        assert fake_client.fund_requests == [(identity.public_address, LAMPORTS_PER_SOL)]
        # Confirmation awaited before returning
        assert fake_client.confirmed == ["airdrop1"]
        assert fake_client.balance == LAMPORTS_PER_SOL

    async def test_funded_account_untouched(self, fake_client, identity):
        fake_client.balance = LAMPORTS_PER_SOL
        guard = FundingGuard(fake_client)

        assert await guard.ensure_funded(identity) is False
        assert fake_client.fund_requests == []
        assert fake_client.confirmed == []

    async def test_exactly_at_threshold_not_topped_up(self, fake_client, identity):
        fake_client.balance = LAMPORTS_PER_SOL // 100
        assert await FundingGuard(fake_client).ensure_funded(identity) is False
        assert fake_client.fund_requests == []

    async def test_just_below_threshold(self, fake_client, identity):
        fake_client.balance = LAMPORTS_PER_SOL // 100 - 1
        assert await FundingGuard(fake_client).ensure_funded(identity) is True
        assert len(fake_client.fund_requests) == 1

    async def test_at_most_one_request_per_call(self, fake_client, identity):
        fake_client.balance = 0
        guard = FundingGuard(fake_client, top_up=1)  # still below threshold afterwards
        await guard.ensure_funded(identity)
        assert len(fake_client.fund_requests) == 1

    async def test_balance_queried_every_call(self, fake_client, identity):
        guard = FundingGuard(fake_client)
        await guard.ensure_funded(identity)
        await guard.ensure_funded(identity)
        assert fake_client.balance_queries == [identity.public_address] * 2

    async def test_custom_threshold_and_top_up(self, fake_client, identity):
        fake_client.balance = 500
        guard = FundingGuard(fake_client, threshold=1000, top_up=2000)
        assert await guard.ensure_funded(identity) is True
        assert fake_client.fund_requests == [(identity.public_address, 2000)]

    async def test_unconfirmed_airdrop_raises(self, fake_client, identity):
        fake_client.balance = 0
        fake_client.confirmations = [False]
        with pytest.raises(FundingError, match="airdrop1"):
            await FundingGuard(fake_client).ensure_funded(identity)

    async def test_rpc_errors_propagate(self, fake_client, identity):
        async def rate_limited(address, lamports):
            raise RpcError(429, "Too many requests for a specific RPC call")

        fake_client.balance = 0
        fake_client.request_funds = rate_limited
        with pytest.raises(RpcError):
            await FundingGuard(fake_client).ensure_funded(identity)
