"""Tests for the trade aggregator."""

import httpx
import pytest

from cooked.models.sleeper import League, Trade
from cooked.services.sleeper_service import aggregate_trades
from helpers import FakeSleeper, make_league


def _transaction(transaction_id, type="trade", roster_ids=(1, 2), **extra):
    return {
        "transaction_id": transaction_id,
        "type": type,
        "status": "complete",
        "creator": "u1",
        "created": 1700000000000,
        "status_updated": 1700000000000,
        "roster_ids": list(roster_ids),
        "adds": {"4046": 2},
        "drops": {"4046": 1},
        "draft_picks": [],
        **extra,
    }


def _season(league_id, season):
    return League.model_validate(make_league(league_id, season))


class TestAggregateTrades:
    @pytest.mark.asyncio
    async def test_keeps_only_trades_across_rounds_and_seasons(self, settings):
        fake = FakeSleeper({
            "/league/L2/transactions/1": [
                _transaction("t1"),
                _transaction("w1", type="waiver"),
                _transaction("t2"),
            ],
            "/league/L2/transactions/5": [_transaction("f1", type="free_agent")],
            "/league/L1/transactions/16": [_transaction("t3")],
        })
        async with fake.client(settings) as http:
            trades = await aggregate_trades(http, [_season("L2", "2023"), _season("L1", "2022")], settings)

        assert sorted(trade.transaction_id for trade in trades) == ["t1", "t2", "t3"]
        assert {trade.transaction_id: trade.league_id for trade in trades}["t3"] == "L1"

    @pytest.mark.asyncio
    async def test_failed_rounds_contribute_nothing(self, settings):
        fake = FakeSleeper({
            "/league/L1/transactions/1": [_transaction("t1")],
            "/league/L1/transactions/2": httpx.Response(503),
            "/league/L1/transactions/3": httpx.ReadTimeout("slow"),
        })
        async with fake.client(settings) as http:
            trades = await aggregate_trades(http, [_season("L1", "2022")], settings)
        assert [trade.transaction_id for trade in trades] == ["t1"]

    @pytest.mark.asyncio
    async def test_fetches_rounds_one_through_sixteen(self, settings):
        fake = FakeSleeper({})
        async with fake.client(settings) as http:
            assert await aggregate_trades(http, [_season("L1", "2022")], settings) == []
        rounds = sorted(int(path.rsplit("/", 1)[1]) for path in fake.requests)
        assert rounds == list(range(1, 17))

    @pytest.mark.asyncio
    async def test_no_deduplication_across_seasons(self, settings):
        fake = FakeSleeper({
            "/league/L2/transactions/1": [_transaction("same")],
            "/league/L1/transactions/1": [_transaction("same")],
        })
        async with fake.client(settings) as http:
            trades = await aggregate_trades(http, [_season("L2", "2023"), _season("L1", "2022")], settings)
        assert len(trades) == 2


class TestTradeModel:
    def test_fewer_than_two_rosters_is_malformed(self):
        assert Trade.model_validate(_transaction("t1", roster_ids=[1])).is_malformed
        assert Trade.model_validate(_transaction("t2", roster_ids=[])).is_malformed
        assert not Trade.model_validate(_transaction("t3")).is_malformed

    def test_null_collections_become_empty(self):
        trade = Trade.model_validate(_transaction("t1", adds=None, drops=None, draft_picks=None))
        assert trade.adds == {} and trade.drops == {} and trade.draft_picks == []

    def test_draft_picks_are_parsed(self):
        trade = Trade.model_validate(_transaction("t1", draft_picks=[
            {"season": "2025", "round": 1, "roster_id": 1, "owner_id": 2, "previous_owner_id": 1},
        ]))
        assert trade.draft_picks[0].owner_id == 2
