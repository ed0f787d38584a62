"""Timestamp utilities for UTC handling and storage formatting.

All timestamps in the maintenance toolkit are timezone-aware UTC. The store
keeps them as fixed-width ISO 8601 strings so that plain string comparison
orders them chronologically, which the cleanup predicates rely on.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def to_storage(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for database storage.

    Args:
        dt: Datetime to format (naive values are treated as UTC)

    Returns:
        Fixed-width ISO 8601 string with microseconds and 'Z' suffix, or None

    Example:
        >>> to_storage(datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00.000000Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime(STORAGE_FORMAT)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as an ISO 8601 string for API responses.

    Millisecond precision with a 'Z' suffix, e.g. ``2025-11-04T12:00:00.123Z``.

    Args:
        dt: Datetime to format

    Returns:
        ISO 8601 formatted string
    """
    dt_utc = ensure_utc(dt)
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def cutoff_before(now: datetime, seconds: int) -> datetime:
    """Return the instant ``seconds`` before ``now`` (in UTC).

    Args:
        now: Reference time
        seconds: Window length in seconds

    Returns:
        Timezone-aware cutoff datetime
    """
    return ensure_utc(now) - timedelta(seconds=seconds)
