"""Pydantic v2 schemas for streaks."""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import Field, field_validator

from gameify.shared.schemas.base import BaseSchema, FrozenSchema


class StreakPeriod(str, Enum):
    """Length of one streak step."""

    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def duration(self) -> timedelta:
        if self is StreakPeriod.DAILY:
            return timedelta(days=1)
        return timedelta(days=7)


class StreakMilestone(FrozenSchema):
    """Reward point reached when the streak count equals ``days``."""

    days: int = Field(ge=1)
    xp_bonus: int = Field(default=0, ge=0)
    badge: str | None = None


class StreakDefinition(FrozenSchema):
    """A streak type configured by the host."""

    id: str = Field(min_length=1)
    name: str = ""
    period: StreakPeriod = StreakPeriod.DAILY
    grace_period: timedelta = timedelta(hours=36)
    milestones: tuple[StreakMilestone, ...] = ()

    @field_validator("grace_period")
    @classmethod
    def _non_negative_grace(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("grace_period must not be negative")
        return value

    @field_validator("milestones")
    @classmethod
    def _sort_milestones(
        cls, value: tuple[StreakMilestone, ...]
    ) -> tuple[StreakMilestone, ...]:
        # stable: duplicate day values keep their configured order
        return tuple(sorted(value, key=lambda m: m.days))

    @property
    def break_after(self) -> timedelta:
        """Elapsed time beyond which the streak is broken."""
        return self.period.duration + self.grace_period


class StreakRecord(BaseSchema):
    """Persisted streak numbers for one player and one streak."""

    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    last_recorded_at: datetime | None = None


class StreakInfo(BaseSchema):
    """Current streak state for a player."""

    definition: StreakDefinition
    current_streak: int
    best_streak: int
    last_recorded_at: datetime | None = None
    is_alive: bool
    milestone_reached: str | None = None
