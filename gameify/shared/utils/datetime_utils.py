"""Datetime utilities for timezone-aware operations.

Every engine takes a ``Clock`` so tests can move time deterministically;
the default clock is :func:`utcnow`.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return current UTC time with timezone info.

    Returns:
        Current UTC datetime with tzinfo=timezone.utc
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime object is timezone-aware and in UTC.

    If the datetime is naive (no tzinfo), it's assumed to be UTC.
    If the datetime has a different timezone, it's converted to UTC.

    Args:
        dt: A datetime object (naive or aware)

    Returns:
        Timezone-aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    else:
        return dt.astimezone(timezone.utc)


def day_key(dt: datetime) -> str:
    """UTC calendar day bucket, e.g. ``20260118``."""
    return ensure_utc(dt).strftime("%Y%m%d")


def hour_key(dt: datetime) -> str:
    """UTC calendar hour bucket, e.g. ``2026011809``.

    Includes the date so hour 3 today never matches hour 3 yesterday.
    """
    return ensure_utc(dt).strftime("%Y%m%d%H")


__all__ = [
    "Clock",
    "day_key",
    "ensure_utc",
    "hour_key",
    "utcnow",
]
