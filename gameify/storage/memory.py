"""In-memory GameStore for tests, prototypes and single-process hosts."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime

from gameify.boosts.schemas import XpBoost
from gameify.leaderboard.schemas import LeaderboardEntry, LeaderboardPeriod
from gameify.storage.base import GameStore
from gameify.streaks.schemas import StreakRecord


class InMemoryGameStore(GameStore):
    """Dict-backed store. Nothing survives the process."""

    def __init__(self) -> None:
        self._player_xp: dict[str, int] = {}
        self._player_levels: dict[str, int] = {}
        self._last_activity: dict[str, datetime] = {}
        self._counters: defaultdict[str, dict[str, int]] = defaultdict(dict)
        self._stats: defaultdict[str, dict[str, int]] = defaultdict(dict)
        self._streaks: dict[tuple[str, str], StreakRecord] = {}
        # insertion order is the tie-break order for equal XP
        self._leaderboard: defaultdict[LeaderboardPeriod, dict[str, LeaderboardEntry]] = (
            defaultdict(dict)
        )
        self._boosts: defaultdict[str, list[XpBoost]] = defaultdict(list)

    async def get_player_xp(self, user_id: str) -> int:
        return self._player_xp.get(user_id, 0)

    async def set_player_xp(self, user_id: str, xp: int) -> None:
        self._player_xp[user_id] = xp

    async def get_player_level(self, user_id: str) -> int:
        return self._player_levels.get(user_id, 1)

    async def set_player_level(self, user_id: str, level: int) -> None:
        self._player_levels[user_id] = level

    async def record_activity(self, user_id: str, at: datetime) -> None:
        self._last_activity[user_id] = at

    async def get_last_activity(self, user_id: str) -> datetime | None:
        return self._last_activity.get(user_id)

    async def get_all_player_ids(self) -> list[str]:
        return list(self._player_xp)

    async def increment_counter(self, user_id: str, counter: str, by: int = 1) -> int:
        counters = self._counters[user_id]
        counters[counter] = counters.get(counter, 0) + by
        return counters[counter]

    async def get_counter(self, user_id: str, counter: str) -> int:
        return self._counters.get(user_id, {}).get(counter, 0)

    async def get_counters(self, user_id: str) -> dict[str, int]:
        return dict(self._counters.get(user_id, {}))

    async def set_stat(self, user_id: str, key: str, value: int) -> None:
        self._stats[user_id][key] = value

    async def get_stats(self, user_id: str) -> dict[str, int]:
        return dict(self._stats.get(user_id, {}))

    async def get_streak(self, user_id: str, streak_id: str) -> StreakRecord:
        record = self._streaks.get((user_id, streak_id))
        return record.model_copy() if record else StreakRecord()

    async def set_streak(self, user_id: str, streak_id: str, record: StreakRecord) -> None:
        self._streaks[(user_id, streak_id)] = record.model_copy()

    async def get_leaderboard_entries(
        self,
        period: LeaderboardPeriod,
        count: int | None = None,
    ) -> list[LeaderboardEntry]:
        rows = sorted(
            self._leaderboard.get(period, {}).values(),
            key=lambda e: e.xp,
            reverse=True,
        )
        if count is not None:
            rows = rows[:count]
        return [row.model_copy() for row in rows]

    async def update_leaderboard(
        self,
        user_id: str,
        period: LeaderboardPeriod,
        xp: int,
        display_name: str | None = None,
    ) -> None:
        board = self._leaderboard[period]
        existing = board.get(user_id)
        board[user_id] = LeaderboardEntry(
            user_id=user_id,
            xp=xp,
            level=self._player_levels.get(user_id, 1),
            display_name=display_name or (existing.display_name if existing else None),
        )

    async def add_boost(self, user_id: str, boost: XpBoost) -> None:
        self._boosts[user_id].append(boost)

    async def get_active_boosts(self, user_id: str, now: datetime) -> list[XpBoost]:
        boosts = self._boosts.get(user_id)
        if not boosts:
            return []
        # expired boosts are pruned on read
        active = [b for b in boosts if b.is_active(now)]
        self._boosts[user_id] = active
        return list(active)
