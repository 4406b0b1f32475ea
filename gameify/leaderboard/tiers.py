"""Percentile tier assignment. Pure functions over a sorted tier list.

Rank 1 of N has percentile 1.0 (best); rank N of N has 1/N (worst).
A player belongs to the first tier, walking ascending by
``max_percentile``, whose ``max_percentile`` covers their percentile.
"""

from collections.abc import Sequence

from gameify.leaderboard.schemas import TierDefinition


def _ascending(tiers: Sequence[TierDefinition]) -> list[TierDefinition]:
    return sorted(tiers, key=lambda t: t.max_percentile)


def percentile_for_rank(rank: int, total_players: int) -> float:
    if total_players <= 0:
        raise ValueError("total_players must be positive")
    if rank < 1:
        raise ValueError("rank must be 1 or greater")
    return 1.0 - (rank - 1) / total_players


def calculate_tier(
    rank: int,
    total_players: int,
    tiers: Sequence[TierDefinition],
) -> TierDefinition | None:
    """Tier for a 1-based rank, or None with no tiers or no players.

    An uncovered percentile falls back to the highest tier.
    """
    if not tiers or total_players == 0:
        return None

    percentile = percentile_for_rank(rank, total_players)
    ordered = _ascending(tiers)
    for tier in ordered:
        if percentile <= tier.max_percentile:
            return tier
    return ordered[-1]


def tier_index(tier: TierDefinition | None, tiers: Sequence[TierDefinition]) -> int:
    """Ascending position of ``tier``; -1 for None or an unknown tier."""
    if tier is None:
        return -1
    for index, candidate in enumerate(_ascending(tiers)):
        if candidate.id == tier.id:
            return index
    return -1


def next_tier(
    tier: TierDefinition | None,
    tiers: Sequence[TierDefinition],
) -> TierDefinition | None:
    """The next better tier, or None at the top."""
    index = tier_index(tier, tiers)
    ordered = _ascending(tiers)
    if index < 0 or index + 1 >= len(ordered):
        return None
    return ordered[index + 1]


def assign_tiers(
    total_players: int,
    tiers: Sequence[TierDefinition],
) -> list[TierDefinition | None]:
    """Tier for every rank 1..total_players, in rank order."""
    return [calculate_tier(rank, total_players, tiers) for rank in range(1, total_players + 1)]
