"""Storage for rate-limit windows.

A window is three counters per player: XP earned in the current UTC
day, actions in the current UTC hour, and the last time each action was
performed. The in-memory store keeps them per process; the Redis store
shares them across processes and survives restarts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from gameify.rules.schemas import RuleWindow
from gameify.shared.utils.datetime_utils import day_key, ensure_utc, hour_key
from gameify.shared.utils.logging import get_logger

logger = get_logger(__name__)

DAILY_TTL_SECONDS = 2 * 24 * 3600
HOURLY_TTL_SECONDS = 2 * 3600


class RuleWindowStore(ABC):
    """Read and advance a player's rate-limit windows."""

    @abstractmethod
    async def get_window(self, user_id: str, now: datetime) -> RuleWindow:
        """Window as seen at ``now``; stale day/hour counters read as 0."""

    @abstractmethod
    async def record(self, user_id: str, action: str, xp_amount: int, now: datetime) -> None:
        """Add XP to the day, one action to the hour, and stamp the action."""


@dataclass
class _WindowState:
    day: str = ""
    hour: str = ""
    daily_xp: int = 0
    hourly_actions: int = 0
    last_action_at: dict[str, datetime] = field(default_factory=dict)


class InMemoryRuleWindowStore(RuleWindowStore):
    """Per-process windows. Lost on restart; not shared between instances."""

    def __init__(self) -> None:
        self._windows: dict[str, _WindowState] = {}

    async def get_window(self, user_id: str, now: datetime) -> RuleWindow:
        state = self._windows.get(user_id)
        if state is None:
            return RuleWindow()

        return RuleWindow(
            daily_xp=state.daily_xp if state.day == day_key(now) else 0,
            # hour key carries the date, so hour 3 yesterday is stale
            hourly_actions=state.hourly_actions if state.hour == hour_key(now) else 0,
            last_action_at=dict(state.last_action_at),
        )

    async def record(self, user_id: str, action: str, xp_amount: int, now: datetime) -> None:
        state = self._windows.setdefault(user_id, _WindowState())

        today = day_key(now)
        if state.day != today:
            state.day = today
            state.daily_xp = 0
        state.daily_xp += xp_amount

        state.last_action_at[action] = ensure_utc(now)

        this_hour = hour_key(now)
        if state.hour != this_hour:
            state.hour = this_hour
            state.hourly_actions = 0
        state.hourly_actions += 1

    def reset(self, user_id: str | None = None) -> None:
        """Forget one player's windows, or everyone's."""
        if user_id is None:
            self._windows.clear()
        else:
            self._windows.pop(user_id, None)


class RedisRuleWindowStore(RuleWindowStore):
    """Windows as Redis counters bucketed by UTC day and hour.

    Keys:
        {prefix}:daily_xp:{user}:{YYYYMMDD}     INCRBY, expires after 2 days
        {prefix}:hourly:{user}:{YYYYMMDDHH}     INCR, expires after 2 hours
        {prefix}:cooldown:{user}                hash of action -> ISO timestamp

    A new bucket key is a fresh counter, so resets need no bookkeeping.
    """

    def __init__(self, redis_client: Any, key_prefix: str = "gameify"):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _daily_key(self, user_id: str, now: datetime) -> str:
        return f"{self.key_prefix}:daily_xp:{user_id}:{day_key(now)}"

    def _hourly_key(self, user_id: str, now: datetime) -> str:
        return f"{self.key_prefix}:hourly:{user_id}:{hour_key(now)}"

    def _cooldown_key(self, user_id: str) -> str:
        return f"{self.key_prefix}:cooldown:{user_id}"

    async def get_window(self, user_id: str, now: datetime) -> RuleWindow:
        async with self.redis.pipeline(transaction=False) as pipe:
            pipe.get(self._daily_key(user_id, now))
            pipe.get(self._hourly_key(user_id, now))
            pipe.hgetall(self._cooldown_key(user_id))
            daily_raw, hourly_raw, stamps = await pipe.execute()

        last_action_at: dict[str, datetime] = {}
        for action, raw in (stamps or {}).items():
            action = action.decode() if isinstance(action, bytes) else action
            raw = raw.decode() if isinstance(raw, bytes) else raw
            try:
                last_action_at[action] = ensure_utc(datetime.fromisoformat(raw))
            except ValueError:
                logger.warning("invalid_cooldown_timestamp", user_id=user_id, action=action)

        return RuleWindow(
            daily_xp=int(daily_raw or 0),
            hourly_actions=int(hourly_raw or 0),
            last_action_at=last_action_at,
        )

    async def record(self, user_id: str, action: str, xp_amount: int, now: datetime) -> None:
        daily_key = self._daily_key(user_id, now)
        hourly_key = self._hourly_key(user_id, now)

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incrby(daily_key, xp_amount)
            pipe.expire(daily_key, DAILY_TTL_SECONDS)
            pipe.hset(self._cooldown_key(user_id), action, ensure_utc(now).isoformat())
            pipe.incr(hourly_key)
            pipe.expire(hourly_key, HOURLY_TTL_SECONDS)
            await pipe.execute()
