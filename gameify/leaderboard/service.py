"""LeaderboardService: ranked listings, player standings and tier changes.

Entries come from the store sorted descending by XP. Ranks are 1-based
positions in that order; tiers are assigned from each rank's
percentile over the whole period, not only the rows returned.
"""

from __future__ import annotations

from gameify.config import LeaderboardConfig
from gameify.events import EventBus, TierChangeEvent
from gameify.exceptions import require_id
from gameify.leaderboard.schemas import (
    LeaderboardEntry,
    LeaderboardPeriod,
    PlayerStanding,
    TierDefinition,
    TierDirection,
)
from gameify.leaderboard.tiers import assign_tiers, calculate_tier, tier_index
from gameify.shared.utils.datetime_utils import Clock, ensure_utc, utcnow
from gameify.shared.utils.locks import KeyedLock
from gameify.shared.utils.logging import get_logger
from gameify.storage.base import GameStore

logger = get_logger(__name__)


class LeaderboardService:
    """Period leaderboards with percentile tiers."""

    def __init__(
        self,
        store: GameStore,
        event_bus: EventBus,
        config: LeaderboardConfig,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.event_bus = event_bus
        self.config = config
        self.clock = clock
        self._locks = KeyedLock()

    @property
    def tiers(self) -> tuple[TierDefinition, ...]:
        return self.config.tiers

    async def get_top(
        self,
        period: LeaderboardPeriod | None = None,
        count: int = 10,
    ) -> list[LeaderboardEntry]:
        """Top ``count`` entries with rank and tier name filled in."""
        if count <= 0:
            raise ValueError("count must be positive")

        period = period or self.config.default_period
        entries = await self.store.get_leaderboard_entries(period)
        tiers = assign_tiers(len(entries), self.tiers)

        ranked = []
        for rank, (entry, tier) in enumerate(zip(entries[:count], tiers), start=1):
            ranked.append(
                entry.model_copy(update={"rank": rank, "tier": tier.name if tier else None})
            )
        return ranked

    async def get_standing(
        self,
        user_id: str,
        period: LeaderboardPeriod | None = None,
    ) -> PlayerStanding:
        """Where ``user_id`` sits on ``period``.

        A player with no entry ranks last (N + 1) with 0 XP in the lowest
        tier.
        """
        require_id(user_id, "user_id")
        period = period or self.config.default_period

        entries = await self.store.get_leaderboard_entries(period)
        tiers = assign_tiers(len(entries), self.tiers)
        index = next((i for i, e in enumerate(entries) if e.user_id == user_id), None)

        if index is None:
            lowest = self.tiers[0] if self.tiers else None
            return PlayerStanding(
                rank=len(entries) + 1,
                xp=0,
                tier=lowest.name if lowest else None,
                tier_icon=lowest.icon if lowest else None,
                points_to_next_tier=self._points_to_next_tier(0, lowest, entries, tiers),
            )

        entry = entries[index]
        tier = tiers[index]
        return PlayerStanding(
            rank=index + 1,
            xp=entry.xp,
            tier=tier.name if tier else None,
            tier_icon=tier.icon if tier else None,
            points_to_next_tier=self._points_to_next_tier(entry.xp, tier, entries, tiers),
            at_risk_of_demotion=self._at_risk_of_demotion(index, tiers),
        )

    async def update(
        self,
        user_id: str,
        xp: int,
        display_name: str | None = None,
    ) -> TierChangeEvent | None:
        """Write ``xp`` to every configured period and report a tier change.

        The change is judged on the default period. A first entry onto the
        board is not a promotion and emits nothing.
        """
        require_id(user_id, "user_id")
        if xp < 0:
            raise ValueError("xp must not be negative")

        async with self._locks(user_id):
            previous_tier = await self._current_tier(user_id)
            for period in self.config.periods:
                await self.store.update_leaderboard(user_id, period, xp, display_name)
            new_tier = await self._current_tier(user_id)

        if new_tier is None or previous_tier is None:
            if new_tier is not None:
                logger.debug("leaderboard_entered", user_id=user_id, tier=new_tier.id)
            return None
        if new_tier.id == previous_tier.id:
            return None

        direction = (
            TierDirection.PROMOTED
            if tier_index(new_tier, self.tiers) > tier_index(previous_tier, self.tiers)
            else TierDirection.DEMOTED
        )
        event = TierChangeEvent(
            user_id=user_id,
            timestamp=ensure_utc(self.clock()),
            previous_tier=previous_tier,
            new_tier=new_tier,
            direction=direction,
        )
        await self.event_bus.publish(event)
        logger.info(
            "tier_changed",
            user_id=user_id,
            previous_tier=previous_tier.id,
            new_tier=new_tier.id,
            direction=direction.value,
        )
        return event

    async def _current_tier(self, user_id: str) -> TierDefinition | None:
        entries = await self.store.get_leaderboard_entries(self.config.default_period)
        for rank, entry in enumerate(entries, start=1):
            if entry.user_id == user_id:
                return calculate_tier(rank, len(entries), self.tiers)
        return None

    def _points_to_next_tier(
        self,
        xp: int,
        tier: TierDefinition | None,
        entries: list[LeaderboardEntry],
        tiers: list[TierDefinition | None],
    ) -> int:
        """XP gap to the lowest-ranked member of the nearest better tier
        that has members. 0 at the top or when no better tier is populated."""
        current = tier_index(tier, self.tiers)
        if current < 0:
            return 0

        for better in self.tiers[current + 1 :]:
            members = [e.xp for e, t in zip(entries, tiers) if t is not None and t.id == better.id]
            if members:
                return max(0, min(members) - xp)
        return 0

    def _at_risk_of_demotion(self, index: int, tiers: list[TierDefinition | None]) -> bool:
        tier = tiers[index]
        if tier is None or tier_index(tier, self.tiers) <= 0:
            return False
        below = tiers[index + 1] if index + 1 < len(tiers) else None
        return below is None or below.id != tier.id
