"""Leaderboards and percentile tiers."""

from gameify.leaderboard.schemas import (
    LeaderboardEntry,
    LeaderboardPeriod,
    PlayerStanding,
    TierDefinition,
    TierDirection,
)
from gameify.leaderboard.tiers import (
    assign_tiers,
    calculate_tier,
    next_tier,
    percentile_for_rank,
    tier_index,
)

__all__ = [
    "LeaderboardEntry",
    "LeaderboardPeriod",
    "PlayerStanding",
    "TierDefinition",
    "TierDirection",
    "assign_tiers",
    "calculate_tier",
    "next_tier",
    "percentile_for_rank",
    "tier_index",
]
