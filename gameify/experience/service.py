"""XpService: award XP through rules and boosts, and track levels."""

from __future__ import annotations

from gameify.boosts.service import BoostService
from gameify.events import EventBus, LevelUpEvent
from gameify.exceptions import require_id
from gameify.experience.calculator import LevelCalculator
from gameify.experience.schemas import XpResult
from gameify.rules.engine import RuleEngine
from gameify.shared.utils.datetime_utils import Clock, ensure_utc, utcnow
from gameify.shared.utils.locks import KeyedLock
from gameify.shared.utils.logging import get_logger
from gameify.storage.base import GameStore

logger = get_logger(__name__)


class XpService:
    """Manages player XP and levels."""

    def __init__(
        self,
        store: GameStore,
        event_bus: EventBus,
        boosts: BoostService,
        rules: RuleEngine,
        calculator: LevelCalculator,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.event_bus = event_bus
        self.boosts = boosts
        self.rules = rules
        self.calculator = calculator
        self.clock = clock
        self._locks = KeyedLock()

    async def add(self, user_id: str, amount: int, action: str) -> XpResult:
        """Award ``amount`` base XP for ``action``.

        Rules are checked against the base amount; the boosted amount is
        what gets applied and recorded. A throttled award applies nothing
        and is returned as a result, not raised.
        """
        require_id(user_id, "user_id")
        require_id(action, "action")
        if amount <= 0:
            raise ValueError("XP amount must be positive")

        async with self._locks(user_id):
            # 1. Rules
            verdict = await self.rules.validate(user_id, action, amount)
            if not verdict.allowed:
                current_xp = await self.store.get_player_xp(user_id)
                logger.warning(
                    "xp_award_throttled",
                    user_id=user_id,
                    action=action,
                    amount=amount,
                    reason=verdict.reason,
                )
                return XpResult(
                    base_xp=amount,
                    multiplier=1.0,
                    final_xp=0,
                    total_xp=current_xp,
                    level=self.calculator.get_level(current_xp),
                    throttled=True,
                )

            # 2. Boosts
            multiplier = await self.boosts.get_multiplier(user_id)
            final_xp = int(amount * multiplier)

            # 3. Apply
            previous_xp = await self.store.get_player_xp(user_id)
            previous_level = self.calculator.get_level(previous_xp)
            total_xp = previous_xp + final_xp
            await self.store.set_player_xp(user_id, total_xp)
            await self.store.record_activity(user_id, ensure_utc(self.clock()))

            new_level = self.calculator.get_level(total_xp)
            if new_level != previous_level:
                await self.store.set_player_level(user_id, new_level)

            # 4. Windows see the boosted amount
            await self.rules.record_action(user_id, action, final_xp)

        # 5. One event per level crossed
        now = ensure_utc(self.clock())
        for level in range(previous_level + 1, new_level + 1):
            await self.event_bus.publish(
                LevelUpEvent(
                    user_id=user_id,
                    timestamp=now,
                    previous_level=level - 1,
                    new_level=level,
                    total_xp=total_xp,
                )
            )

        logger.info(
            "xp_awarded",
            user_id=user_id,
            action=action,
            base_xp=amount,
            multiplier=multiplier,
            final_xp=final_xp,
            total_xp=total_xp,
            level=new_level,
        )
        return XpResult(
            base_xp=amount,
            multiplier=multiplier,
            final_xp=final_xp,
            total_xp=total_xp,
            level=new_level,
            leveled_up=new_level > previous_level,
        )

    async def get_total_xp(self, user_id: str) -> int:
        require_id(user_id, "user_id")
        return await self.store.get_player_xp(user_id)

    async def get_level(self, user_id: str) -> int:
        require_id(user_id, "user_id")
        return self.calculator.get_level(await self.store.get_player_xp(user_id))

    async def get_progress(self, user_id: str) -> float:
        require_id(user_id, "user_id")
        return self.calculator.get_progress(await self.store.get_player_xp(user_id))
