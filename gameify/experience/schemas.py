"""Pydantic v2 schemas for the experience system."""

from gameify.shared.schemas.base import BaseSchema


class XpResult(BaseSchema):
    """Response after an XP award attempt.

    A throttled award applies no XP: ``final_xp`` is 0 and ``total_xp``
    and ``level`` are the player's unchanged values.
    """

    base_xp: int
    multiplier: float = 1.0
    final_xp: int
    total_xp: int
    level: int
    leveled_up: bool = False
    throttled: bool = False
