"""Streak continuation: started, same period, continued or broken.

Pure decision over a stored record and the current time; the service
persists whatever record comes back.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from gameify.shared.utils.datetime_utils import ensure_utc
from gameify.streaks.schemas import StreakDefinition, StreakMilestone, StreakRecord


class StreakOutcome(str, Enum):
    """What a record call did to the streak."""

    STARTED = "started"
    SAME_PERIOD = "same_period"
    CONTINUED = "continued"
    BROKEN = "broken"


@dataclass(frozen=True)
class StreakDecision:
    """Immutable result of a continuation decision."""

    outcome: StreakOutcome
    record: StreakRecord

    @property
    def changed(self) -> bool:
        return self.outcome is not StreakOutcome.SAME_PERIOD


def decide_continuation(
    record: StreakRecord,
    definition: StreakDefinition,
    now: datetime,
) -> StreakDecision:
    """Apply one activity at ``now`` to ``record``.

    - never recorded: streak starts at 1
    - within the period: unchanged, the record is returned as is
    - within period + grace: +1
    - later: back to 1, best kept
    """
    now = ensure_utc(now)

    if record.last_recorded_at is None:
        outcome = StreakOutcome.STARTED
        current = 1
    else:
        elapsed = now - ensure_utc(record.last_recorded_at)
        if elapsed < definition.period.duration:
            return StreakDecision(StreakOutcome.SAME_PERIOD, record)
        if elapsed <= definition.break_after:
            outcome = StreakOutcome.CONTINUED
            current = record.current_streak + 1
        else:
            outcome = StreakOutcome.BROKEN
            current = 1

    return StreakDecision(
        outcome,
        StreakRecord(
            current_streak=current,
            best_streak=max(record.best_streak, current),
            last_recorded_at=now,
        ),
    )


def is_alive(record: StreakRecord, definition: StreakDefinition, now: datetime) -> bool:
    """True if the streak could still be continued at ``now``."""
    if record.last_recorded_at is None:
        return False
    return ensure_utc(now) - ensure_utc(record.last_recorded_at) <= definition.break_after


def milestone_for(
    current_streak: int,
    milestones: tuple[StreakMilestone, ...],
) -> StreakMilestone | None:
    """First milestone, ascending by days, matching ``current_streak`` exactly."""
    for milestone in sorted(milestones, key=lambda m: m.days):
        if milestone.days == current_streak:
            return milestone
    return None
