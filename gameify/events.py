"""Domain events and the in-process event bus.

Engines publish events after their state change is written. Handlers
are plain async functions subscribed per event class; a handler for a
base class also receives its subclasses.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import ClassVar, TypeVar

from pydantic import Field

from gameify.boosts.schemas import XpBoost
from gameify.leaderboard.schemas import TierDefinition, TierDirection
from gameify.shared.schemas.base import FrozenSchema
from gameify.shared.utils.datetime_utils import utcnow
from gameify.shared.utils.logging import get_logger
from gameify.streaks.schemas import StreakMilestone

logger = get_logger(__name__)

E = TypeVar("E", bound="GameEvent")
EventHandler = Callable[[E], Awaitable[None]]


class GameEvent(FrozenSchema):
    """Base for all events emitted by the engines."""

    event_type: ClassVar[str] = "game_event"

    user_id: str
    timestamp: datetime = Field(default_factory=utcnow)


class LevelUpEvent(GameEvent):
    """One level crossed. A multi-level jump emits one event per level."""

    event_type: ClassVar[str] = "level_up"

    previous_level: int
    new_level: int
    total_xp: int


class SuspiciousActivityEvent(GameEvent):
    event_type: ClassVar[str] = "suspicious_activity"

    activity_type: str
    details: str


class StreakMilestoneEvent(GameEvent):
    event_type: ClassVar[str] = "streak_milestone"

    streak_id: str
    milestone: StreakMilestone
    current_streak: int


class TierChangeEvent(GameEvent):
    event_type: ClassVar[str] = "tier_change"

    previous_tier: TierDefinition | None = None
    new_tier: TierDefinition
    direction: TierDirection


class BoostActivatedEvent(GameEvent):
    event_type: ClassVar[str] = "boost_activated"

    boost: XpBoost


class EventBus:
    """In-process pub/sub.

    ``publish`` awaits handlers in subscription order. A failing handler
    is logged and skipped; the publisher never sees its exception.
    """

    def __init__(self) -> None:
        self._handlers: list[tuple[type[GameEvent], EventHandler]] = []

    def subscribe(self, event_type: type[E], handler: EventHandler) -> None:
        self._handlers.append((event_type, handler))

    def unsubscribe(self, event_type: type[GameEvent], handler: EventHandler) -> None:
        try:
            self._handlers.remove((event_type, handler))
        except ValueError:
            logger.debug("handler_not_subscribed", event_type=event_type.event_type)

    def handler_count(self, event_type: type[GameEvent] | None = None) -> int:
        if event_type is None:
            return len(self._handlers)
        return sum(1 for registered, _ in self._handlers if registered is event_type)

    async def publish(self, event: GameEvent) -> None:
        for registered, handler in list(self._handlers):
            if not isinstance(event, registered):
                continue
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "event_handler_error",
                    event_type=event.event_type,
                    user_id=event.user_id,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )
