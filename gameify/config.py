"""Configuration for gameify.

Two layers:

- ``GameifySettings``: process-level settings read from the environment
  (``GAMEIFY_*``) for logging, Redis and the default rule caps.
- ``GameifyOptions``: the frozen game design built with
  ``GameifyOptionsBuilder``. Engines only
  ever see a finished options value, so two engines never share a
  mutable list.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import timedelta
from enum import Enum
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from gameify.exceptions import ConfigurationError
from gameify.leaderboard.schemas import LeaderboardPeriod, TierDefinition
from gameify.shared.schemas.base import FrozenSchema
from gameify.streaks.schemas import StreakDefinition, StreakMilestone, StreakPeriod

SuspiciousActivityCallback = Callable[[str, Any], Awaitable[None]]


class GameifySettings(BaseSettings):
    """Process settings for a host embedding gameify."""

    model_config = {"env_prefix": "GAMEIFY_", "case_sensitive": False}

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=True, description="Render logs as JSON")
    service_name: str = Field(default="gameify", description="Bound to every log entry")

    # Rule windows
    rule_window_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Where rate-limit windows live (memory is per process)",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL for the redis rule-window backend",
    )
    redis_key_prefix: str = Field(
        default="gameify",
        description="Prefix for every Redis key written by gameify",
    )

    # Default rule caps
    max_daily_xp: int = Field(default=5000, gt=0)
    max_actions_per_hour: int = Field(default=200, gt=0)


@lru_cache
def get_settings() -> GameifySettings:
    """Get cached gameify settings."""
    return GameifySettings()


# ===========================================
# GAME DESIGN OPTIONS
# ===========================================


class LevelCurve(str, Enum):
    """How XP required per level grows."""

    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    CUSTOM = "custom"


class LevelingConfig(FrozenSchema):
    """XP curve configuration.

    ``custom_thresholds[i]`` is the cumulative XP needed to reach level
    ``i + 2``.
    """

    curve: LevelCurve = LevelCurve.EXPONENTIAL
    base_xp: int = Field(default=100, gt=0)
    multiplier: float = Field(default=1.5, gt=0.0)
    max_level: int = Field(default=100, ge=1)
    custom_thresholds: tuple[int, ...] = ()

    @field_validator("custom_thresholds")
    @classmethod
    def _non_decreasing(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        for previous, current in zip(value, value[1:]):
            if current < previous:
                raise ValueError("custom_thresholds must be non-decreasing")
        return value

    @model_validator(mode="after")
    def _custom_needs_thresholds(self) -> "LevelingConfig":
        if self.curve is LevelCurve.CUSTOM and not self.custom_thresholds:
            raise ValueError("custom curve requires at least one threshold")
        return self


class RulesConfig(FrozenSchema):
    """Anti-cheat and rate-limiting rules."""

    max_daily_xp: int = Field(default=5000, gt=0)
    max_actions_per_hour: int = Field(default=200, gt=0)
    cooldowns: dict[str, timedelta] = Field(default_factory=dict)
    on_suspicious_activity: SuspiciousActivityCallback | None = Field(
        default=None, exclude=True
    )

    @field_validator("cooldowns")
    @classmethod
    def _check_cooldowns(cls, value: dict[str, timedelta]) -> dict[str, timedelta]:
        for action, duration in value.items():
            if not action:
                raise ValueError("cooldown action must be non-empty")
            if duration < timedelta(0):
                raise ValueError(f"cooldown for '{action}' must not be negative")
        return dict(value)


class BoostsConfig(FrozenSchema):
    """Boost stacking limits."""

    max_stackable_boosts: int = Field(default=3, ge=1)
    max_multiplier: float = Field(default=5.0, gt=0.0)


class LeaderboardConfig(FrozenSchema):
    """Leaderboard periods and tier brackets.

    Tiers are stored ascending by ``max_percentile``; the ascending index
    of a tier is its rank for promotion/demotion purposes.
    """

    periods: tuple[LeaderboardPeriod, ...] = (LeaderboardPeriod.WEEKLY,)
    default_period: LeaderboardPeriod = LeaderboardPeriod.WEEKLY
    tiers: tuple[TierDefinition, ...] = ()

    @field_validator("tiers")
    @classmethod
    def _sort_tiers(cls, value: tuple[TierDefinition, ...]) -> tuple[TierDefinition, ...]:
        ordered = tuple(sorted(value, key=lambda t: t.max_percentile))
        for lower, upper in zip(ordered, ordered[1:]):
            if lower.max_percentile == upper.max_percentile:
                raise ValueError(
                    f"tiers '{lower.id}' and '{upper.id}' share max_percentile "
                    f"{lower.max_percentile}"
                )
        ids = [t.id for t in ordered]
        if len(set(ids)) != len(ids):
            raise ValueError("tier ids must be unique")
        return ordered

    @model_validator(mode="after")
    def _default_is_tracked(self) -> "LeaderboardConfig":
        if not self.periods:
            raise ValueError("at least one leaderboard period is required")
        if self.default_period not in self.periods:
            raise ValueError(
                f"default_period '{self.default_period.value}' is not one of the "
                "configured periods"
            )
        return self


class GameifyOptions(FrozenSchema):
    """Complete, immutable game design handed to GameEngine."""

    leveling: LevelingConfig = Field(default_factory=LevelingConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    boosts: BoostsConfig = Field(default_factory=BoostsConfig)
    leaderboard: LeaderboardConfig = Field(default_factory=LeaderboardConfig)
    streaks: tuple[StreakDefinition, ...] = ()

    @field_validator("streaks")
    @classmethod
    def _unique_streak_ids(
        cls, value: tuple[StreakDefinition, ...]
    ) -> tuple[StreakDefinition, ...]:
        ids = [s.id for s in value]
        if len(set(ids)) != len(ids):
            raise ValueError("streak ids must be unique")
        return value

    def streak(self, streak_id: str) -> StreakDefinition | None:
        for definition in self.streaks:
            if definition.id == streak_id:
                return definition
        return None


class GameifyOptionsBuilder:
    """Fluent builder for GameifyOptions.

    Example:
        options = (
            GameifyOptionsBuilder()
            .leveling(curve=LevelCurve.LINEAR, base_xp=100)
            .cooldown("quiz", timedelta(minutes=5))
            .tier("bronze", "Bronze", max_percentile=0.5)
            .tier("gold", "Gold", max_percentile=1.0)
            .streak("daily-login", milestones=[StreakMilestone(days=7, badge="week")])
            .build()
        )
    """

    def __init__(self) -> None:
        self._leveling: dict[str, Any] = {}
        self._rules: dict[str, Any] = {}
        self._cooldowns: dict[str, timedelta] = {}
        self._boosts: dict[str, Any] = {}
        self._leaderboard: dict[str, Any] = {}
        self._tiers: list[TierDefinition] = []
        self._streaks: list[StreakDefinition] = []

    @classmethod
    def from_settings(cls, settings: GameifySettings | None = None) -> "GameifyOptionsBuilder":
        """Start a builder with rule caps taken from the environment."""
        settings = settings or get_settings()
        return cls().rules(
            max_daily_xp=settings.max_daily_xp,
            max_actions_per_hour=settings.max_actions_per_hour,
        )

    def leveling(self, **fields: Any) -> "GameifyOptionsBuilder":
        self._leveling.update(_known_fields(LevelingConfig, fields))
        return self

    def rules(self, **fields: Any) -> "GameifyOptionsBuilder":
        cooldowns = fields.pop("cooldowns", None)
        if cooldowns:
            self._cooldowns.update(cooldowns)
        self._rules.update(_known_fields(RulesConfig, fields))
        return self

    def cooldown(self, action: str, duration: timedelta) -> "GameifyOptionsBuilder":
        self._cooldowns[action] = duration
        return self

    def on_suspicious_activity(
        self, callback: SuspiciousActivityCallback
    ) -> "GameifyOptionsBuilder":
        self._rules["on_suspicious_activity"] = callback
        return self

    def boosts(self, **fields: Any) -> "GameifyOptionsBuilder":
        self._boosts.update(_known_fields(BoostsConfig, fields))
        return self

    def leaderboard(self, **fields: Any) -> "GameifyOptionsBuilder":
        tiers = fields.pop("tiers", None)
        if tiers is not None:
            self._tiers = list(tiers)
        self._leaderboard.update(_known_fields(LeaderboardConfig, fields))
        return self

    def tier(
        self,
        tier_id: str,
        name: str,
        icon: str = "",
        max_percentile: float = 1.0,
    ) -> "GameifyOptionsBuilder":
        self._tiers.append(
            TierDefinition(id=tier_id, name=name, icon=icon, max_percentile=max_percentile)
        )
        return self

    def streak(
        self,
        streak_id: str,
        name: str = "",
        period: StreakPeriod = StreakPeriod.DAILY,
        grace_period: timedelta = timedelta(hours=36),
        milestones: list[StreakMilestone] | tuple[StreakMilestone, ...] = (),
    ) -> "GameifyOptionsBuilder":
        self._streaks.append(
            StreakDefinition(
                id=streak_id,
                name=name or streak_id,
                period=period,
                grace_period=grace_period,
                milestones=tuple(milestones),
            )
        )
        return self

    def build(self) -> GameifyOptions:
        """Validate and freeze. The builder stays reusable."""
        return GameifyOptions(
            leveling=LevelingConfig(**self._leveling),
            rules=RulesConfig(**self._rules, cooldowns=dict(self._cooldowns)),
            boosts=BoostsConfig(**self._boosts),
            leaderboard=LeaderboardConfig(**self._leaderboard, tiers=tuple(self._tiers)),
            streaks=tuple(self._streaks),
        )


def _known_fields(model: type[FrozenSchema], fields: dict[str, Any]) -> dict[str, Any]:
    unknown = sorted(set(fields) - set(model.model_fields))
    if unknown:
        raise ConfigurationError(
            f"Unknown {model.__name__} option(s): {', '.join(unknown)}"
        )
    return fields
