"""Storage contract for all game data.

Engines read current state, compute, and write back through this
interface; per-user serialization is the caller's job (see
``gameify.shared.utils.locks``). Implementations propagate their own
I/O errors and perform no retries.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from gameify.boosts.schemas import XpBoost
from gameify.leaderboard.schemas import LeaderboardEntry, LeaderboardPeriod
from gameify.streaks.schemas import StreakRecord


class GameStore(ABC):
    """Abstract async store for players, counters, streaks, leaderboards and boosts."""

    # ===========================================
    # PLAYER
    # ===========================================

    @abstractmethod
    async def get_player_xp(self, user_id: str) -> int:
        """Total XP, 0 for a player never seen."""

    @abstractmethod
    async def set_player_xp(self, user_id: str, xp: int) -> None:
        pass

    @abstractmethod
    async def get_player_level(self, user_id: str) -> int:
        """Cached level, 1 for a player never seen."""

    @abstractmethod
    async def set_player_level(self, user_id: str, level: int) -> None:
        pass

    @abstractmethod
    async def record_activity(self, user_id: str, at: datetime) -> None:
        pass

    @abstractmethod
    async def get_last_activity(self, user_id: str) -> datetime | None:
        pass

    @abstractmethod
    async def get_all_player_ids(self) -> list[str]:
        pass

    # ===========================================
    # COUNTERS & STATS
    # ===========================================

    @abstractmethod
    async def increment_counter(self, user_id: str, counter: str, by: int = 1) -> int:
        """Atomically add ``by`` and return the new value."""

    @abstractmethod
    async def get_counter(self, user_id: str, counter: str) -> int:
        pass

    @abstractmethod
    async def get_counters(self, user_id: str) -> dict[str, int]:
        pass

    @abstractmethod
    async def set_stat(self, user_id: str, key: str, value: int) -> None:
        pass

    @abstractmethod
    async def get_stats(self, user_id: str) -> dict[str, int]:
        pass

    # ===========================================
    # STREAKS
    # ===========================================

    @abstractmethod
    async def get_streak(self, user_id: str, streak_id: str) -> StreakRecord:
        """Stored record, or an empty record if never written."""

    @abstractmethod
    async def set_streak(self, user_id: str, streak_id: str, record: StreakRecord) -> None:
        pass

    # ===========================================
    # LEADERBOARD
    # ===========================================

    @abstractmethod
    async def get_leaderboard_entries(
        self,
        period: LeaderboardPeriod,
        count: int | None = None,
    ) -> list[LeaderboardEntry]:
        """Entries sorted descending by XP.

        Ties keep a stable order. ``count=None`` returns every entry.
        """

    @abstractmethod
    async def update_leaderboard(
        self,
        user_id: str,
        period: LeaderboardPeriod,
        xp: int,
        display_name: str | None = None,
    ) -> None:
        pass

    # ===========================================
    # BOOSTS
    # ===========================================

    @abstractmethod
    async def add_boost(self, user_id: str, boost: XpBoost) -> None:
        pass

    @abstractmethod
    async def get_active_boosts(self, user_id: str, now: datetime) -> list[XpBoost]:
        """Boosts whose expiry is after ``now``."""
