"""gameify: XP, levels, rate-limit rules, boosts, leaderboard tiers and streaks."""

from gameify.boosts.schemas import XpBoost
from gameify.boosts.service import BoostService
from gameify.config import (
    BoostsConfig,
    GameifyOptions,
    GameifyOptionsBuilder,
    GameifySettings,
    LeaderboardConfig,
    LevelCurve,
    LevelingConfig,
    RulesConfig,
    get_settings,
)
from gameify.engine import GameEngine, PlayerProfile
from gameify.events import (
    BoostActivatedEvent,
    EventBus,
    GameEvent,
    LevelUpEvent,
    StreakMilestoneEvent,
    SuspiciousActivityEvent,
    TierChangeEvent,
)
from gameify.exceptions import (
    BoostLimitExceededError,
    ConfigurationError,
    GameifyError,
    UnknownStreakError,
)
from gameify.experience.calculator import LevelCalculator
from gameify.experience.schemas import XpResult
from gameify.experience.service import XpService
from gameify.leaderboard.schemas import (
    LeaderboardEntry,
    LeaderboardPeriod,
    PlayerStanding,
    TierDefinition,
    TierDirection,
)
from gameify.leaderboard.service import LeaderboardService
from gameify.rules.engine import RuleEngine
from gameify.rules.schemas import CooldownState, RuleValidationResult
from gameify.storage import GameStore, InMemoryGameStore
from gameify.streaks.schemas import (
    StreakDefinition,
    StreakInfo,
    StreakMilestone,
    StreakPeriod,
)
from gameify.streaks.service import StreakService

__version__ = "0.1.0"

__all__ = [
    "BoostActivatedEvent",
    "BoostLimitExceededError",
    "BoostService",
    "BoostsConfig",
    "ConfigurationError",
    "CooldownState",
    "EventBus",
    "GameEngine",
    "GameEvent",
    "GameStore",
    "GameifyError",
    "GameifyOptions",
    "GameifyOptionsBuilder",
    "GameifySettings",
    "InMemoryGameStore",
    "LeaderboardConfig",
    "LeaderboardEntry",
    "LeaderboardPeriod",
    "LeaderboardService",
    "LevelCalculator",
    "LevelCurve",
    "LevelUpEvent",
    "LevelingConfig",
    "PlayerProfile",
    "PlayerStanding",
    "RuleEngine",
    "RuleValidationResult",
    "RulesConfig",
    "StreakDefinition",
    "StreakInfo",
    "StreakMilestone",
    "StreakMilestoneEvent",
    "StreakPeriod",
    "StreakService",
    "SuspiciousActivityEvent",
    "TierChangeEvent",
    "TierDefinition",
    "TierDirection",
    "UnknownStreakError",
    "XpBoost",
    "XpResult",
    "XpService",
    "get_settings",
]
