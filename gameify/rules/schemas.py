"""Pydantic v2 schemas for the rule engine."""

from datetime import datetime, timedelta

from pydantic import Field

from gameify.shared.schemas.base import BaseSchema


class RuleValidationResult(BaseSchema):
    """Outcome of a rule check. Denial is a value, not an error."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "RuleValidationResult":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "RuleValidationResult":
        return cls(allowed=False, reason=reason)


class RuleWindow(BaseSchema):
    """Snapshot of one player's rate-limit windows at a given instant.

    Counters already reflect the day/hour resets for that instant.
    """

    daily_xp: int = 0
    hourly_actions: int = 0
    last_action_at: dict[str, datetime] = Field(default_factory=dict)


class CooldownState(BaseSchema):
    """Cooldown of one action for one player."""

    action: str
    last_action_at: datetime
    cooldown: timedelta

    def is_ready(self, now: datetime) -> bool:
        return now - self.last_action_at >= self.cooldown

    def time_remaining(self, now: datetime) -> timedelta:
        remaining = self.cooldown - (now - self.last_action_at)
        return remaining if remaining > timedelta(0) else timedelta(0)
