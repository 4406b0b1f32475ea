"""GameEngine: one entry point wiring every service from one options value."""

from __future__ import annotations

from pydantic import Field

from gameify.boosts.schemas import XpBoost
from gameify.boosts.service import BoostService
from gameify.config import GameifyOptions, GameifyOptionsBuilder, GameifySettings, get_settings
from gameify.events import EventBus
from gameify.exceptions import require_id
from gameify.experience.calculator import LevelCalculator
from gameify.experience.service import XpService
from gameify.leaderboard.service import LeaderboardService
from gameify.rules.engine import RuleEngine
from gameify.rules.windows import RedisRuleWindowStore, RuleWindowStore
from gameify.shared.clients.redis_client import close_redis_client, get_redis_client
from gameify.shared.schemas.base import BaseSchema
from gameify.shared.utils.datetime_utils import Clock, utcnow
from gameify.shared.utils.logging import configure_logging, get_logger
from gameify.storage.base import GameStore
from gameify.storage.memory import InMemoryGameStore
from gameify.streaks.schemas import StreakInfo
from gameify.streaks.service import StreakService

logger = get_logger(__name__)


class PlayerProfile(BaseSchema):
    """Everything known about one player, on the default leaderboard period."""

    user_id: str
    total_xp: int
    level: int
    level_progress: float
    tier: str | None = None
    rank: int
    streaks: list[StreakInfo] = Field(default_factory=list)
    active_boosts: list[XpBoost] = Field(default_factory=list)
    stats: dict[str, int] = Field(default_factory=dict)
    counters: dict[str, int] = Field(default_factory=dict)


class GameEngine:
    """Facade over the XP, rule, boost, leaderboard and streak services.

    All services share one store, one event bus and one clock.
    """

    def __init__(
        self,
        options: GameifyOptions | None = None,
        store: GameStore | None = None,
        event_bus: EventBus | None = None,
        window_store: RuleWindowStore | None = None,
        clock: Clock = utcnow,
    ):
        self.options = options or GameifyOptions()
        self.store = store or InMemoryGameStore()
        self.events = event_bus or EventBus()
        self.clock = clock

        self.level_calculator = LevelCalculator(self.options.leveling)
        self.rules = RuleEngine(self.options.rules, self.events, window_store, clock)
        self.boosts = BoostService(self.store, self.events, self.options.boosts, clock)
        self.xp = XpService(
            self.store,
            self.events,
            self.boosts,
            self.rules,
            self.level_calculator,
            clock,
        )
        self.leaderboard = LeaderboardService(
            self.store, self.events, self.options.leaderboard, clock
        )
        self.streaks = StreakService(self.store, self.events, self.options.streaks, clock)

    @classmethod
    async def from_settings(
        cls,
        options: GameifyOptions | None = None,
        settings: GameifySettings | None = None,
        store: GameStore | None = None,
        clock: Clock = utcnow,
    ) -> "GameEngine":
        """Build an engine from environment settings.

        Configures logging, seeds rule caps when no options are given and
        connects the Redis rule-window backend when selected.
        """
        settings = settings or get_settings()
        configure_logging(
            level=settings.log_level,
            json_format=settings.log_json,
            service_name=settings.service_name,
        )

        if options is None:
            options = GameifyOptionsBuilder.from_settings(settings).build()

        window_store: RuleWindowStore | None = None
        if settings.rule_window_backend == "redis":
            client = await get_redis_client(settings.redis_url)
            window_store = RedisRuleWindowStore(client, settings.redis_key_prefix)

        logger.info(
            "game_engine_started",
            rule_window_backend=settings.rule_window_backend,
            streaks=len(options.streaks),
            tiers=len(options.leaderboard.tiers),
        )
        return cls(options=options, store=store, window_store=window_store, clock=clock)

    async def close(self) -> None:
        if isinstance(self.rules.window_store, RedisRuleWindowStore):
            await close_redis_client()

    async def get_profile(self, user_id: str) -> PlayerProfile:
        require_id(user_id, "user_id")

        total_xp = await self.store.get_player_xp(user_id)
        standing = await self.leaderboard.get_standing(user_id)

        return PlayerProfile(
            user_id=user_id,
            total_xp=total_xp,
            level=self.level_calculator.get_level(total_xp),
            level_progress=self.level_calculator.get_progress(total_xp),
            tier=standing.tier,
            rank=standing.rank,
            streaks=await self.streaks.get_all(user_id),
            active_boosts=await self.boosts.get_active_boosts(user_id),
            stats=await self.store.get_stats(user_id),
            counters=await self.store.get_counters(user_id),
        )
