"""Time-limited XP boosts."""

from gameify.boosts.multiplier import combine_multipliers
from gameify.boosts.schemas import XpBoost

__all__ = ["XpBoost", "combine_multipliers"]
