"""Pydantic v2 schemas for leaderboards and tiers."""

from enum import Enum

from pydantic import Field

from gameify.shared.schemas.base import BaseSchema, FrozenSchema


class LeaderboardPeriod(str, Enum):
    """Time period a leaderboard ranks over."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL_TIME = "all_time"


class TierDirection(str, Enum):
    """Direction of a tier change."""

    PROMOTED = "promoted"
    DEMOTED = "demoted"


class TierDefinition(FrozenSchema):
    """A percentile bracket; a player belongs to the first tier, ascending,
    whose max_percentile is at least their percentile."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    icon: str = ""
    max_percentile: float = Field(default=1.0, gt=0.0, le=1.0)


class LeaderboardEntry(BaseSchema):
    """Single entry in a leaderboard.

    Rows read from a store carry rank 0 and no tier; ranked rows returned
    by LeaderboardService carry both.
    """

    user_id: str
    xp: int = 0
    level: int = 1
    display_name: str | None = None
    rank: int = 0
    tier: str | None = None


class PlayerStanding(BaseSchema):
    """A player's position on one leaderboard period."""

    rank: int
    xp: int
    tier: str | None = None
    tier_icon: str | None = None
    points_to_next_tier: int = 0
    at_risk_of_demotion: bool = False
