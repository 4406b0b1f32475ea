"""XP and level curves."""

from gameify.experience.calculator import LevelCalculator
from gameify.experience.schemas import XpResult

__all__ = ["LevelCalculator", "XpResult"]
