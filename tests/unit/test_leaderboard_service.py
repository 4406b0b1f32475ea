"""Tests for LeaderboardService."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from gameify.config import LeaderboardConfig
from gameify.events import TierChangeEvent
from gameify.leaderboard.schemas import LeaderboardPeriod, TierDefinition, TierDirection
from gameify.leaderboard.service import LeaderboardService

BRONZE = TierDefinition(id="bronze", name="Bronze", icon="b", max_percentile=0.5)
GOLD = TierDefinition(id="gold", name="Gold", icon="g", max_percentile=1.0)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config():
    return LeaderboardConfig(
        periods=(LeaderboardPeriod.WEEKLY, LeaderboardPeriod.ALL_TIME),
        default_period=LeaderboardPeriod.WEEKLY,
        tiers=(GOLD, BRONZE),
    )


@pytest.fixture
def service(store, event_bus, config, clock):
    return LeaderboardService(store, event_bus, config, clock)


@pytest_asyncio.fixture
async def seeded(service):
    """Four players: a=500, b=400 (gold), c=300, d=200 (bronze)."""
    for user_id, xp in [("a", 500), ("b", 400), ("c", 300), ("d", 200)]:
        await service.update(user_id, xp, display_name=user_id.upper())
    return service


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestGetTop:
    @pytest.mark.asyncio
    async def test_ranks_and_tiers(self, seeded):
        top = await seeded.get_top(LeaderboardPeriod.WEEKLY, count=10)

        assert [e.user_id for e in top] == ["a", "b", "c", "d"]
        assert [e.rank for e in top] == [1, 2, 3, 4]
        assert [e.tier for e in top] == ["Gold", "Gold", "Bronze", "Bronze"]
        assert top[0].display_name == "A"

    @pytest.mark.asyncio
    async def test_count_limits_rows_not_population(self, seeded):
        top = await seeded.get_top(count=3)
        assert [e.tier for e in top] == ["Gold", "Gold", "Bronze"]

    @pytest.mark.asyncio
    async def test_every_period_written(self, seeded):
        top = await seeded.get_top(LeaderboardPeriod.ALL_TIME)
        assert len(top) == 4
        assert await seeded.get_top(LeaderboardPeriod.DAILY) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, -1])
    async def test_non_positive_count_rejected(self, service, count):
        with pytest.raises(ValueError):
            await service.get_top(count=count)


class TestGetStanding:
    @pytest.mark.asyncio
    async def test_bronze_player_gap_to_gold(self, seeded):
        standing = await seeded.get_standing("c")

        assert standing.rank == 3
        assert standing.tier == "Bronze"
        assert standing.tier_icon == "b"
        assert standing.xp == 300
        assert standing.points_to_next_tier == 100
        assert standing.at_risk_of_demotion is False

    @pytest.mark.asyncio
    async def test_lowest_gold_member_at_risk(self, seeded):
        standing = await seeded.get_standing("b")

        assert standing.tier == "Gold"
        assert standing.points_to_next_tier == 0
        assert standing.at_risk_of_demotion is True

    @pytest.mark.asyncio
    async def test_top_player_not_at_risk(self, seeded):
        assert (await seeded.get_standing("a")).at_risk_of_demotion is False

    @pytest.mark.asyncio
    async def test_absent_player_ranks_last_in_lowest_tier(self, seeded):
        standing = await seeded.get_standing("zed")

        assert standing.rank == 5
        assert standing.xp == 0
        assert standing.tier == "Bronze"
        assert standing.points_to_next_tier == 400

    @pytest.mark.asyncio
    async def test_empty_board_without_tiers(self, store, event_bus, clock):
        service = LeaderboardService(store, event_bus, LeaderboardConfig(), clock)
        standing = await service.get_standing("u1")
        assert standing.rank == 1
        assert standing.tier is None


class TestUpdate:
    @pytest.mark.asyncio
    async def test_first_entry_emits_nothing(self, service, recorder):
        assert await service.update("a", 100) is None
        assert recorder.of_type(TierChangeEvent) == []

    @pytest.mark.asyncio
    async def test_promotion(self, seeded, recorder):
        event = await seeded.update("d", 450)

        assert event is not None
        assert event.direction is TierDirection.PROMOTED
        assert event.previous_tier == BRONZE
        assert event.new_tier == GOLD
        assert recorder.of_type(TierChangeEvent) == [event]

    @pytest.mark.asyncio
    async def test_demotion(self, seeded, recorder):
        event = await seeded.update("b", 100)

        assert event.direction is TierDirection.DEMOTED
        assert event.previous_tier == GOLD
        assert event.new_tier == BRONZE

    @pytest.mark.asyncio
    async def test_same_tier_emits_nothing(self, seeded, recorder):
        assert await seeded.update("a", 900) is None
        assert recorder.of_type(TierChangeEvent) == []

    @pytest.mark.asyncio
    async def test_negative_xp_rejected(self, service):
        with pytest.raises(ValueError):
            await service.update("a", -1)

    @pytest.mark.asyncio
    async def test_tier_change_timestamp_is_utc_for_naive_clock(self, store, event_bus, config):
        service = LeaderboardService(
            store, event_bus, config, clock=lambda: datetime(2026, 1, 15, 12, 0)
        )
        for user_id, xp in [("a", 500), ("b", 400), ("c", 300), ("d", 200)]:
            await service.update(user_id, xp)

        event = await service.update("d", 450)

        assert event.timestamp == datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
