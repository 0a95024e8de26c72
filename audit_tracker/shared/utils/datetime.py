"""
UTC datetime utilities for consistent timezone handling.

Every timestamp stored on a task (created_at, updated_at, submitted_at,
comment and history timestamps) is timezone-aware UTC. Due dates are plain
calendar dates and are compared as midnight UTC of that day.
"""

from datetime import UTC, date, datetime, time


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of datetime.now() or datetime.utcnow(); both are naive.

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
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def start_of_day_utc(day: date) -> datetime:
    """Return midnight UTC of the given calendar date (how due dates are compared)."""
    return datetime.combine(day, time.min, tzinfo=UTC)
