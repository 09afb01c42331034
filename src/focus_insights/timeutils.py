"""
Time utilities for session analytics.

All calendar-day reasoning happens in the timezone of the caller-supplied
`now`: an aware `now` pins the zone explicitly, a naive `now` means the host's
local zone. Session timestamps are converted into that zone before their
calendar date is taken.
"""

from __future__ import annotations

import calendar
import logging
from datetime import UTC, date, datetime

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp, returning None when it cannot be parsed.

    Accepts both 'Z' suffix and '+00:00' offsets. Datetime instances pass
    through unchanged so callers can mix parsed and raw values.

    Args:
        value: ISO 8601 string, datetime, or None.

    Returns:
        Parsed datetime (naive or aware, as written) or None if the value is
        missing or malformed.

    Example:
        >>> parse_timestamp('2026-10-17T09:30:00Z')
        datetime.datetime(2026, 10, 17, 9, 30, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp('yesterday') is None
        True
    """
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparsable timestamp skipped: %r", value)
        return None


def ensure_aware(dt: datetime) -> datetime:
    """Attach UTC to a naive datetime so it compares with aware values."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def to_reference_zone(dt: datetime, now: datetime) -> datetime:
    """
    Express `dt` in the same zone as `now`.

    Args:
        dt: Session timestamp, naive or aware.
        now: Reference instant that defines the calendar.

    Returns:
        Datetime comparable with `now`. Naive timestamps are assumed to be
        written in `now`'s zone already.
    """
    if now.tzinfo is None:
        if dt.tzinfo is None:
            return dt
        return dt.astimezone().replace(tzinfo=None)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=now.tzinfo)
    return dt.astimezone(now.tzinfo)


def local_date(value: str | datetime | None, now: datetime) -> date | None:
    """
    Calendar day of a timestamp as seen from `now`'s timezone.

    Returns:
        The date, or None if the timestamp is malformed.
    """
    dt = parse_timestamp(value)
    if dt is None:
        return None
    return to_reference_zone(dt, now).date()


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def start_of_day(now: datetime) -> datetime:
    """Midnight at the start of `now`'s calendar day, same zone as `now`."""
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
