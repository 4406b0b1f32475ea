"""Combine concurrent XP boosts into one multiplier."""

from collections.abc import Iterable
from datetime import datetime

from gameify.boosts.schemas import XpBoost


def combine_multipliers(
    boosts: Iterable[XpBoost],
    max_multiplier: float,
    now: datetime,
) -> float:
    """Product of every boost active at ``now``, capped at ``max_multiplier``.

    No active boosts gives exactly 1.0.
    """
    total = 1.0
    for boost in boosts:
        if boost.is_active(now):
            total *= boost.multiplier
    return min(total, max_multiplier)
