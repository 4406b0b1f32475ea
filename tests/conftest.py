"""Global pytest fixtures for gameify.

This module provides shared fixtures for testing including:
- A controllable clock
- In-memory store and event bus
- An event recorder subscribed to every game event
"""

from datetime import datetime, timedelta, timezone

import pytest

from gameify.events import EventBus, GameEvent
from gameify.storage.memory import InMemoryGameStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta | None = None, **kwargs) -> datetime:
        self.now += delta if delta is not None else timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


class EventRecorder:
    """Collects every event published on a bus."""

    def __init__(self, bus: EventBus):
        self.events: list[GameEvent] = []
        bus.subscribe(GameEvent, self._record)

    async def _record(self, event: GameEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[GameEvent]) -> list[GameEvent]:
        return [e for e in self.events if isinstance(e, event_type)]


# ===========================================
# CORE FIXTURES
# ===========================================


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2026-01-15 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def store() -> InMemoryGameStore:
    return InMemoryGameStore()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus: EventBus) -> EventRecorder:
    return EventRecorder(event_bus)
