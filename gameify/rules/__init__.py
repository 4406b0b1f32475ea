"""Anti-cheat and rate-limiting rules."""

from gameify.rules.schemas import CooldownState, RuleValidationResult, RuleWindow
from gameify.rules.windows import (
    InMemoryRuleWindowStore,
    RedisRuleWindowStore,
    RuleWindowStore,
)

__all__ = [
    "CooldownState",
    "InMemoryRuleWindowStore",
    "RedisRuleWindowStore",
    "RuleValidationResult",
    "RuleWindow",
    "RuleWindowStore",
]
