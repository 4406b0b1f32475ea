"""StreakService: record activity against configured streaks."""

from __future__ import annotations

from collections.abc import Sequence

from gameify.events import EventBus, StreakMilestoneEvent
from gameify.exceptions import UnknownStreakError, require_id
from gameify.shared.utils.datetime_utils import Clock, ensure_utc, utcnow
from gameify.shared.utils.locks import KeyedLock
from gameify.shared.utils.logging import get_logger
from gameify.storage.base import GameStore
from gameify.streaks.continuation import decide_continuation, is_alive, milestone_for
from gameify.streaks.schemas import StreakDefinition, StreakInfo

logger = get_logger(__name__)


class StreakService:
    """Tracks consecutive-period activity per player and streak."""

    def __init__(
        self,
        store: GameStore,
        event_bus: EventBus,
        definitions: Sequence[StreakDefinition],
        clock: Clock = utcnow,
    ):
        self.store = store
        self.event_bus = event_bus
        self.definitions = tuple(definitions)
        self.clock = clock
        self._locks = KeyedLock()

    def get_definition(self, streak_id: str) -> StreakDefinition | None:
        return next((d for d in self.definitions if d.id == streak_id), None)

    async def record(self, user_id: str, streak_id: str) -> StreakInfo:
        """Record one activity for ``streak_id``.

        Re-recording inside the same period changes nothing and fires no
        milestone.

        Raises:
            UnknownStreakError: No streak is configured with this id.
        """
        require_id(user_id, "user_id")
        require_id(streak_id, "streak_id")
        definition = self.get_definition(streak_id)
        if definition is None:
            raise UnknownStreakError(streak_id)

        async with self._locks(f"{user_id}:{streak_id}"):
            now = ensure_utc(self.clock())
            stored = await self.store.get_streak(user_id, streak_id)
            decision = decide_continuation(stored, definition, now)

            if not decision.changed:
                return StreakInfo(
                    definition=definition,
                    current_streak=stored.current_streak,
                    best_streak=stored.best_streak,
                    last_recorded_at=stored.last_recorded_at,
                    is_alive=True,
                )

            record = decision.record
            await self.store.set_streak(user_id, streak_id, record)

        logger.debug(
            "streak_recorded",
            user_id=user_id,
            streak_id=streak_id,
            outcome=decision.outcome.value,
            current_streak=record.current_streak,
        )

        milestone = milestone_for(record.current_streak, definition.milestones)
        if milestone is not None:
            await self.event_bus.publish(
                StreakMilestoneEvent(
                    user_id=user_id,
                    timestamp=now,
                    streak_id=streak_id,
                    milestone=milestone,
                    current_streak=record.current_streak,
                )
            )
            logger.info(
                "streak_milestone_reached",
                user_id=user_id,
                streak_id=streak_id,
                days=milestone.days,
                badge=milestone.badge,
            )

        return StreakInfo(
            definition=definition,
            current_streak=record.current_streak,
            best_streak=record.best_streak,
            last_recorded_at=record.last_recorded_at,
            is_alive=True,
            milestone_reached=milestone.badge if milestone else None,
        )

    async def get(self, user_id: str, streak_id: str) -> StreakInfo | None:
        """Read-only view; a lapsed streak reports 0 current but keeps its best.

        Returns None for an unknown streak id.
        """
        require_id(user_id, "user_id")
        definition = self.get_definition(streak_id)
        if definition is None:
            return None

        stored = await self.store.get_streak(user_id, streak_id)
        alive = is_alive(stored, definition, ensure_utc(self.clock()))
        return StreakInfo(
            definition=definition,
            current_streak=stored.current_streak if alive else 0,
            best_streak=stored.best_streak,
            last_recorded_at=stored.last_recorded_at,
            is_alive=alive,
        )

    async def get_all(self, user_id: str) -> list[StreakInfo]:
        """Every configured streak, in configuration order."""
        require_id(user_id, "user_id")
        result = []
        for definition in self.definitions:
            info = await self.get(user_id, definition.id)
            if info is not None:
                result.append(info)
        return result
