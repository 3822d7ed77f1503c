"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime, timedelta

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def next_timestamp(after: datetime | None = None) -> datetime:
    """
    Return the current UTC time, strictly later than `after`.

    Task timestamps must increase on every mutation. When the wall clock has
    not moved past `after` (coarse clock, fast successive writes, or a clock
    step backwards) the result is `after` plus one microsecond, which is the
    finest resolution the document store keeps.

    Args:
        after: The previous timestamp of the same record, if any

    Returns:
        Timezone-aware datetime in UTC
    """
    now = utc_now()
    previous = ensure_utc(after)
    if previous is not None and now <= previous:
        return previous + _TICK
    return now
