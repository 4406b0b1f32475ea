"""Tests for RuleEngine with the in-memory window store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from gameify.config import RulesConfig
from gameify.events import SuspiciousActivityEvent
from gameify.rules.engine import RuleEngine
from gameify.rules.windows import InMemoryRuleWindowStore


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_engine(event_bus, clock):
    def _make(**config) -> RuleEngine:
        return RuleEngine(RulesConfig(**config), event_bus, InMemoryRuleWindowStore(), clock)

    return _make


# ---------------------------------------------------------------------------
# Daily XP cap
# ---------------------------------------------------------------------------


class TestDailyCap:
    @pytest.mark.asyncio
    async def test_reaching_cap_exactly_is_allowed(self, make_engine):
        engine = make_engine(max_daily_xp=100)
        await engine.record_action("u1", "quiz", 50)

        result = await engine.validate("u1", "quiz", 50)

        assert result.allowed
        assert result.reason is None

    @pytest.mark.asyncio
    async def test_exceeding_cap_is_denied(self, make_engine, recorder):
        engine = make_engine(max_daily_xp=100)
        await engine.record_action("u1", "quiz", 80)

        result = await engine.validate("u1", "quiz", 30)

        assert not result.allowed
        assert result.reason == "Daily XP limit (100) would be exceeded."
        flagged = recorder.of_type(SuspiciousActivityEvent)
        assert len(flagged) == 1
        assert flagged[0].activity_type == "daily_xp_limit_exceeded"
        assert flagged[0].details == "User earned 110 XP today (limit: 100)"

    @pytest.mark.asyncio
    async def test_every_denial_is_flagged(self, make_engine, recorder):
        engine = make_engine(max_daily_xp=10)
        for _ in range(3):
            await engine.validate("u1", "quiz", 11)
        assert len(recorder.of_type(SuspiciousActivityEvent)) == 3

    @pytest.mark.asyncio
    async def test_callback_invoked_on_daily_denial(self, event_bus, clock):
        callback = AsyncMock()
        engine = RuleEngine(
            RulesConfig(max_daily_xp=10, on_suspicious_activity=callback),
            event_bus,
            clock=clock,
        )

        await engine.validate("u1", "quiz", 11)

        callback.assert_awaited_once()
        user_id, event = callback.await_args.args
        assert user_id == "u1"
        assert event.activity_type == "daily_xp_limit_exceeded"

    @pytest.mark.asyncio
    async def test_daily_window_resets_at_utc_midnight(self, make_engine, clock):
        clock.set(datetime(2026, 1, 15, 23, 50, tzinfo=timezone.utc))
        engine = make_engine(max_daily_xp=100)
        await engine.record_action("u1", "quiz", 100)
        assert not (await engine.validate("u1", "quiz", 1)).allowed

        clock.advance(minutes=15)

        assert (await engine.validate("u1", "quiz", 100)).allowed

    @pytest.mark.asyncio
    async def test_daily_check_runs_before_cooldown(self, make_engine, recorder):
        engine = make_engine(max_daily_xp=100, cooldowns={"quiz": timedelta(minutes=5)})
        await engine.record_action("u1", "quiz", 100)

        result = await engine.validate("u1", "quiz", 1)

        assert result.reason.startswith("Daily XP limit")


# ---------------------------------------------------------------------------
# Cooldowns
# ---------------------------------------------------------------------------


class TestCooldown:
    @pytest.mark.asyncio
    async def test_immediate_repeat_denied(self, make_engine, recorder):
        engine = make_engine(cooldowns={"quiz": timedelta(minutes=5)})
        await engine.record_action("u1", "quiz", 10)

        result = await engine.validate("u1", "quiz", 10)

        assert not result.allowed
        assert result.reason == "Cooldown for 'quiz' has not expired."
        assert recorder.of_type(SuspiciousActivityEvent) == []

    @pytest.mark.asyncio
    async def test_allowed_once_cooldown_elapses(self, make_engine, clock):
        engine = make_engine(cooldowns={"quiz": timedelta(minutes=5)})
        await engine.record_action("u1", "quiz", 10)

        clock.advance(minutes=4, seconds=59)
        assert not (await engine.validate("u1", "quiz", 10)).allowed

        clock.advance(seconds=1)
        assert (await engine.validate("u1", "quiz", 10)).allowed

    @pytest.mark.asyncio
    async def test_other_action_not_blocked(self, make_engine):
        engine = make_engine(cooldowns={"quiz": timedelta(minutes=5)})
        await engine.record_action("u1", "quiz", 10)

        assert (await engine.validate("u1", "lesson", 10)).allowed

    @pytest.mark.asyncio
    async def test_cooldown_is_per_user(self, make_engine):
        engine = make_engine(cooldowns={"quiz": timedelta(minutes=5)})
        await engine.record_action("u1", "quiz", 10)

        assert (await engine.validate("u2", "quiz", 10)).allowed

    @pytest.mark.asyncio
    async def test_get_cooldown_reports_remaining(self, make_engine, clock):
        engine = make_engine(cooldowns={"quiz": timedelta(minutes=5)})
        assert await engine.get_cooldown("u1", "quiz") is None

        await engine.record_action("u1", "quiz", 10)
        clock.advance(minutes=2)
        state = await engine.get_cooldown("u1", "quiz")

        assert state is not None
        assert not state.is_ready(clock())
        assert state.time_remaining(clock()) == timedelta(minutes=3)
        assert await engine.get_cooldown("u1", "lesson") is None


# ---------------------------------------------------------------------------
# Hourly action cap
# ---------------------------------------------------------------------------


class TestHourlyCap:
    @pytest.mark.asyncio
    async def test_denied_at_cap(self, make_engine, recorder):
        engine = make_engine(max_actions_per_hour=3)
        for _ in range(3):
            await engine.record_action("u1", "quiz", 1)

        result = await engine.validate("u1", "quiz", 1)

        assert not result.allowed
        assert result.reason == "Hourly action limit (3) reached."
        flagged = recorder.of_type(SuspiciousActivityEvent)
        assert [e.activity_type for e in flagged] == ["hourly_action_limit_exceeded"]

    @pytest.mark.asyncio
    async def test_callback_not_invoked_for_hourly_denial(self, event_bus, clock):
        callback = AsyncMock()
        engine = RuleEngine(
            RulesConfig(max_actions_per_hour=1, on_suspicious_activity=callback),
            event_bus,
            clock=clock,
        )
        await engine.record_action("u1", "quiz", 1)

        assert not (await engine.validate("u1", "quiz", 1)).allowed
        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resets_on_new_hour(self, make_engine, clock):
        clock.set(datetime(2026, 1, 15, 9, 59, tzinfo=timezone.utc))
        engine = make_engine(max_actions_per_hour=1)
        await engine.record_action("u1", "quiz", 1)
        assert not (await engine.validate("u1", "quiz", 1)).allowed

        clock.advance(minutes=1)
        assert (await engine.validate("u1", "quiz", 1)).allowed

    @pytest.mark.asyncio
    async def test_same_hour_next_day_is_a_new_window(self, make_engine, clock):
        clock.set(datetime(2026, 1, 15, 3, 10, tzinfo=timezone.utc))
        engine = make_engine(max_actions_per_hour=1)
        await engine.record_action("u1", "quiz", 1)

        clock.advance(days=1)
        assert (await engine.validate("u1", "quiz", 1)).allowed


class TestPreconditions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["", "   ", None])
    async def test_blank_user_rejected(self, make_engine, user_id):
        with pytest.raises(ValueError):
            await make_engine().validate(user_id, "quiz", 10)

    @pytest.mark.asyncio
    async def test_blank_action_rejected(self, make_engine):
        with pytest.raises(ValueError):
            await make_engine().record_action("u1", "", 10)

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, make_engine):
        with pytest.raises(ValueError):
            await make_engine().validate("u1", "quiz", -5)


# ---------------------------------------------------------------------------
# Naive host clocks
# ---------------------------------------------------------------------------


class TestNaiveClock:
    @pytest.fixture
    def naive_engine(self, event_bus):
        def naive_clock() -> datetime:
            return datetime(2026, 1, 15, 12, 0)

        return RuleEngine(
            RulesConfig(max_daily_xp=100, cooldowns={"quiz": timedelta(minutes=5)}),
            event_bus,
            InMemoryRuleWindowStore(),
            naive_clock,
        )

    @pytest.mark.asyncio
    async def test_suspicious_activity_timestamp_is_utc(self, naive_engine, recorder):
        await naive_engine.validate("u1", "quiz", 500)

        (event,) = recorder.of_type(SuspiciousActivityEvent)
        assert event.timestamp == datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_cooldown_recorded_as_utc(self, naive_engine):
        await naive_engine.record_action("u1", "quiz", 10)

        state = await naive_engine.get_cooldown("u1", "quiz")
        assert state.last_action_at.tzinfo is not None
        assert not (await naive_engine.validate("u1", "quiz", 10)).allowed
