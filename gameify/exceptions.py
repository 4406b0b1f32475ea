"""Custom exceptions for gameify.

Rule denials and throttled XP awards are result values, not exceptions.
What is raised here is either a rejection at the boost-activation
boundary or a misconfigured host.
"""


class GameifyError(Exception):
    """Base exception for gameify errors."""

    def __init__(self, message: str, error_type: str = "gameify_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class BoostLimitExceededError(GameifyError):
    """Raised when a player already holds the maximum number of active boosts."""

    def __init__(self, max_boosts: int):
        super().__init__(
            f"Maximum stackable boosts ({max_boosts}) reached",
            "boost_limit_exceeded",
        )
        self.max_boosts = max_boosts


class UnknownStreakError(GameifyError):
    """Raised when a streak id has no definition."""

    def __init__(self, streak_id: str):
        super().__init__(
            f"Streak '{streak_id}' not found",
            "unknown_streak",
        )
        self.streak_id = streak_id


class ConfigurationError(GameifyError):
    """Raised for invalid options that span more than one config model."""

    def __init__(self, message: str):
        super().__init__(message, "configuration_error")


def require_id(value: str | None, field: str) -> str:
    """Reject None or blank identifiers."""
    if value is None or not str(value).strip():
        raise ValueError(f"{field} must be a non-empty string")
    return value
