"""Level curve math. Deterministic for a given configuration.

Cumulative XP per level is summed ascending from level 2 into one table,
and every lookup reads that table, so ``get_level`` and
``get_total_xp_for_level`` can never disagree. For the linear and
exponential curves the table grows only as far as the levels actually
looked up, so a large ``max_level`` costs nothing until players get
there.
"""

from bisect import bisect_right

from gameify.config import LevelCurve, LevelingConfig
from gameify.exceptions import ConfigurationError


class LevelCalculator:
    """Maps total XP to levels for one configured curve."""

    def __init__(self, config: LevelingConfig):
        self.config = config
        if config.curve is LevelCurve.EXPONENTIAL and config.max_level > 1:
            # the cost of max_level bounds every lower level's cost
            try:
                int(config.base_xp * config.multiplier ** (config.max_level - 2))
            except OverflowError as exc:
                raise ConfigurationError(
                    f"Exponential curve overflows before max_level {config.max_level}"
                ) from exc

        # _totals[i] is the cumulative XP for level i + 1
        if config.curve is LevelCurve.CUSTOM:
            self._totals = [0, *config.custom_thresholds[: config.max_level - 1]]
        else:
            self._totals = [0]

    @property
    def max_reachable_level(self) -> int:
        """Highest level any XP total can reach.

        Equal to ``max_level`` except for a custom curve with fewer
        thresholds than levels.
        """
        if self.config.curve is LevelCurve.CUSTOM:
            return len(self._totals)
        return self.config.max_level

    def _can_grow(self) -> bool:
        return (
            self.config.curve is not LevelCurve.CUSTOM
            and len(self._totals) < self.config.max_level
        )

    def _grow(self) -> None:
        next_level = len(self._totals) + 1
        self._totals.append(self._totals[-1] + self.get_xp_for_level(next_level))

    def get_level(self, total_xp: int) -> int:
        """Level for a total. Reaching a threshold exactly reaches the level."""
        if total_xp <= 0:
            return 1
        while self._can_grow() and self._totals[-1] <= total_xp:
            self._grow()
        return max(1, bisect_right(self._totals, total_xp))

    def get_xp_for_level(self, level: int) -> int:
        """Incremental XP to go from ``level - 1`` to ``level``."""
        if level <= 1:
            return 0

        curve = self.config.curve
        if curve is LevelCurve.LINEAR:
            return self.config.base_xp
        if curve is LevelCurve.EXPONENTIAL:
            return int(self.config.base_xp * self.config.multiplier ** (level - 2))
        return self.get_total_xp_for_level(level) - self.get_total_xp_for_level(level - 1)

    def get_total_xp_for_level(self, level: int) -> int:
        """Cumulative XP needed to reach ``level``."""
        if level <= 1:
            return 0
        while self._can_grow() and len(self._totals) < level:
            self._grow()
        if level <= len(self._totals):
            return self._totals[level - 1]

        if self.config.curve is LevelCurve.CUSTOM:
            return self._totals[-1]

        # beyond max_level; keep summing ascending
        total = self._totals[-1]
        for step in range(len(self._totals) + 1, level + 1):
            total += self.get_xp_for_level(step)
        return total

    def get_progress(self, total_xp: int) -> float:
        """Fraction of the current level band already earned, in [0.0, 1.0]."""
        level = self.get_level(total_xp)
        if level >= self.config.max_level:
            return 1.0

        current = self.get_total_xp_for_level(level)
        band = self.get_total_xp_for_level(level + 1) - current
        if band <= 0:
            return 1.0

        progress = (total_xp - current) / band
        return min(1.0, max(0.0, progress))
