"""BoostService: activate and read time-limited XP multipliers."""

from __future__ import annotations

from gameify.boosts.multiplier import combine_multipliers
from gameify.boosts.schemas import XpBoost
from gameify.config import BoostsConfig
from gameify.events import BoostActivatedEvent, EventBus
from gameify.exceptions import BoostLimitExceededError, require_id
from gameify.shared.utils.datetime_utils import Clock, ensure_utc, utcnow
from gameify.shared.utils.locks import KeyedLock
from gameify.shared.utils.logging import get_logger
from gameify.storage.base import GameStore

logger = get_logger(__name__)


class BoostService:
    """Manages per-player boosts and their stacking limit."""

    def __init__(
        self,
        store: GameStore,
        event_bus: EventBus,
        config: BoostsConfig,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.event_bus = event_bus
        self.config = config
        self.clock = clock
        self._locks = KeyedLock()

    async def activate(self, user_id: str, boost: XpBoost) -> XpBoost:
        """Start ``boost`` now for ``user_id``.

        Returns the stored copy, stamped with the activation time.

        Raises:
            BoostLimitExceededError: The player already holds
                ``max_stackable_boosts`` active boosts.
        """
        require_id(user_id, "user_id")

        async with self._locks(user_id):
            now = ensure_utc(self.clock())
            active = await self.store.get_active_boosts(user_id, now)
            if len(active) >= self.config.max_stackable_boosts:
                logger.warning(
                    "boost_limit_reached",
                    user_id=user_id,
                    active=len(active),
                    max_boosts=self.config.max_stackable_boosts,
                )
                raise BoostLimitExceededError(self.config.max_stackable_boosts)

            activated = boost.model_copy(update={"activated_at": now})
            await self.store.add_boost(user_id, activated)

        await self.event_bus.publish(
            BoostActivatedEvent(user_id=user_id, timestamp=now, boost=activated)
        )
        logger.info(
            "boost_activated",
            user_id=user_id,
            boost_id=activated.id,
            multiplier=activated.multiplier,
            expires_at=activated.expires_at.isoformat(),
            reason=activated.reason,
        )
        return activated

    async def get_multiplier(self, user_id: str) -> float:
        require_id(user_id, "user_id")
        now = ensure_utc(self.clock())
        active = await self.store.get_active_boosts(user_id, now)
        return combine_multipliers(active, self.config.max_multiplier, now)

    async def get_active_boosts(self, user_id: str) -> list[XpBoost]:
        require_id(user_id, "user_id")
        return await self.store.get_active_boosts(user_id, ensure_utc(self.clock()))
