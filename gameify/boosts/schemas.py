"""Pydantic v2 schemas for XP boosts."""

from datetime import datetime, timedelta
from uuid import uuid4

from pydantic import Field, field_validator

from gameify.shared.schemas.base import FrozenSchema
from gameify.shared.utils.datetime_utils import ensure_utc, utcnow


def _short_id() -> str:
    return uuid4().hex[:8]


class XpBoost(FrozenSchema):
    """A temporary XP multiplier.

    Immutable; activation produces a copy stamped with ``activated_at``.
    """

    id: str = Field(default_factory=_short_id)
    multiplier: float = Field(default=1.0, gt=0.0)
    duration: timedelta
    reason: str = ""
    activated_at: datetime = Field(default_factory=utcnow)

    @field_validator("duration")
    @classmethod
    def _positive_duration(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("duration must be positive")
        return value

    @field_validator("activated_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def expires_at(self) -> datetime:
        return self.activated_at + self.duration

    def is_active(self, now: datetime) -> bool:
        """True while ``now`` is before the expiry instant."""
        return ensure_utc(now) < self.expires_at
