"""Structured logging configuration using structlog.

gameify never configures logging on import. Hosts call
``configure_logging`` once (``GameEngine.from_settings`` does it for
them); until then structlog's defaults apply.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

# keys bound by bind_player_context in the current context
_player_keys: ContextVar[tuple[str, ...]] = ContextVar("gameify_player_keys", default=())


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    service_name: str = "gameify",
) -> None:
    """
    Configure structured logging for the host process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines with structured tracebacks if True,
            console output otherwise
        service_name: Name bound to every log entry

    Raises:
        ValueError: If ``level`` is not a standard level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        # event_handler_error entries carry the handler traceback as data
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    _player_keys.set(())
    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Optional logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_player_context(user_id: str, **kwargs: Any) -> None:
    """
    Bind the acting player to all subsequent log entries.

    Hosts call this at the start of handling a player action so that
    every log line emitted by the engines carries the same user_id.
    Extra keyword context is bound alongside and cleared with it.
    """
    structlog.contextvars.bind_contextvars(user_id=user_id, **kwargs)
    bound = dict.fromkeys((*_player_keys.get(), "user_id", *kwargs))
    _player_keys.set(tuple(bound))


def clear_player_context() -> None:
    """Remove every key added by bind_player_context."""
    structlog.contextvars.unbind_contextvars(*_player_keys.get())
    _player_keys.set(())
