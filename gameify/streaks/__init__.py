"""Consecutive-period activity streaks."""

from gameify.streaks.continuation import (
    StreakDecision,
    StreakOutcome,
    decide_continuation,
    is_alive,
    milestone_for,
)
from gameify.streaks.schemas import (
    StreakDefinition,
    StreakInfo,
    StreakMilestone,
    StreakPeriod,
    StreakRecord,
)

__all__ = [
    "StreakDecision",
    "StreakDefinition",
    "StreakInfo",
    "StreakMilestone",
    "StreakOutcome",
    "StreakPeriod",
    "StreakRecord",
    "decide_continuation",
    "is_alive",
    "milestone_for",
]
