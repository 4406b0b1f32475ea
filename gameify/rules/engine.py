"""RuleEngine: daily XP caps, per-action cooldowns and hourly action caps.

Checks run in a fixed order (daily XP, then cooldown, then hourly
count) and stop at the first denial. A denial is returned as a
RuleValidationResult; only callers of ``record_action`` change state.
"""

from __future__ import annotations

from gameify.config import RulesConfig
from gameify.events import EventBus, SuspiciousActivityEvent
from gameify.exceptions import require_id
from gameify.rules.schemas import CooldownState, RuleValidationResult
from gameify.rules.windows import InMemoryRuleWindowStore, RuleWindowStore
from gameify.shared.utils.datetime_utils import Clock, ensure_utc, utcnow
from gameify.shared.utils.logging import get_logger

logger = get_logger(__name__)

DAILY_XP_LIMIT_EXCEEDED = "daily_xp_limit_exceeded"
HOURLY_ACTION_LIMIT_EXCEEDED = "hourly_action_limit_exceeded"


class RuleEngine:
    """Rate limiter for XP-earning actions."""

    def __init__(
        self,
        config: RulesConfig,
        event_bus: EventBus,
        window_store: RuleWindowStore | None = None,
        clock: Clock = utcnow,
    ):
        self.config = config
        self.event_bus = event_bus
        self.window_store = window_store or InMemoryRuleWindowStore()
        self.clock = clock

    async def validate(self, user_id: str, action: str, xp_amount: int) -> RuleValidationResult:
        """Decide whether ``action`` worth ``xp_amount`` may be applied now."""
        require_id(user_id, "user_id")
        require_id(action, "action")
        if xp_amount < 0:
            raise ValueError("xp_amount must not be negative")

        now = ensure_utc(self.clock())
        window = await self.window_store.get_window(user_id, now)

        # 1. Daily XP cap, inclusive
        projected = window.daily_xp + xp_amount
        if projected > self.config.max_daily_xp:
            event = await self._flag(
                user_id,
                DAILY_XP_LIMIT_EXCEEDED,
                f"User earned {projected} XP today (limit: {self.config.max_daily_xp})",
            )
            if self.config.on_suspicious_activity is not None:
                await self.config.on_suspicious_activity(user_id, event)
            return RuleValidationResult.deny(
                f"Daily XP limit ({self.config.max_daily_xp}) would be exceeded."
            )

        # 2. Cooldown for this action only
        cooldown = self.config.cooldowns.get(action)
        last_action_at = window.last_action_at.get(action)
        if cooldown is not None and last_action_at is not None:
            if now - last_action_at < cooldown:
                logger.debug("action_on_cooldown", user_id=user_id, action=action)
                return RuleValidationResult.deny(f"Cooldown for '{action}' has not expired.")

        # 3. Hourly action cap
        if window.hourly_actions >= self.config.max_actions_per_hour:
            await self._flag(
                user_id,
                HOURLY_ACTION_LIMIT_EXCEEDED,
                f"User performed {window.hourly_actions} actions this hour "
                f"(limit: {self.config.max_actions_per_hour})",
            )
            return RuleValidationResult.deny(
                f"Hourly action limit ({self.config.max_actions_per_hour}) reached."
            )

        return RuleValidationResult.allow()

    async def record_action(self, user_id: str, action: str, xp_amount: int) -> None:
        """Apply an allowed action to the windows. Never call for a denied one."""
        require_id(user_id, "user_id")
        require_id(action, "action")
        await self.window_store.record(user_id, action, xp_amount, ensure_utc(self.clock()))

    async def get_cooldown(self, user_id: str, action: str) -> CooldownState | None:
        """Cooldown state for display, or None if the action has no cooldown
        or has never been performed."""
        require_id(user_id, "user_id")
        cooldown = self.config.cooldowns.get(action)
        if cooldown is None:
            return None

        window = await self.window_store.get_window(user_id, ensure_utc(self.clock()))
        last_action_at = window.last_action_at.get(action)
        if last_action_at is None:
            return None
        return CooldownState(action=action, last_action_at=last_action_at, cooldown=cooldown)

    async def _flag(self, user_id: str, activity_type: str, details: str) -> SuspiciousActivityEvent:
        event = SuspiciousActivityEvent(
            user_id=user_id,
            timestamp=ensure_utc(self.clock()),
            activity_type=activity_type,
            details=details,
        )
        logger.warning(
            "suspicious_activity",
            user_id=user_id,
            activity_type=activity_type,
            details=details,
        )
        await self.event_bus.publish(event)
        return event
