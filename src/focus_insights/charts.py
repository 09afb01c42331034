"""
Chart bucketing for the stats screen.

PURPOSE: Turn a session snapshot into fixed calendar buckets of hours.
AI CONTEXT: Pure data shaping. Rendering lives in presenters.ChartPresenter.

BUCKET LAYOUTS:
- week:  7 day buckets, oldest to newest, ending at now's day
- month: one bucket per day of now's month, future days forced to 0
- year:  12 month buckets of now's year

USAGE:
    series = bucket_for_range(sessions, "week", now)
    heights = [p.value_hours / series.max_value for p in series.points]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .filters import TimeRange
from .models import Session
from .timeutils import MS_PER_HOUR, days_in_month, local_date, to_reference_zone

__all__ = ["ChartPoint", "ChartSeries", "bucket_for_range"]

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class ChartPoint:
    """One bar of the chart."""

    label: str
    short_label: str
    value_hours: float


@dataclass(frozen=True)
class ChartSeries:
    """
    Ordered chart bars plus the scale ceiling.

    max_value is never below 1 so bar heights can be computed as
    value_hours / max_value without a zero check.
    """

    points: tuple[ChartPoint, ...]
    max_value: float

    def to_dict(self) -> dict:
        return {
            "points": [
                {"label": p.label, "short_label": p.short_label, "value_hours": p.value_hours}
                for p in self.points
            ],
            "max_value": self.max_value,
        }


def _daily_ms(sessions: Iterable[Session], now: datetime) -> dict[date, int]:
    totals: dict[date, int] = {}
    for session in sessions:
        day = local_date(session.started_at, now)
        if day is None:
            logger.debug("Session %s left out of chart: malformed started_at", session.id)
            continue
        totals[day] = totals.get(day, 0) + session.duration_ms
    return totals


def _week_points(totals: dict[date, int], today: date) -> list[ChartPoint]:
    points = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        name = WEEKDAY_NAMES[day.weekday()]
        points.append(ChartPoint(name, name.upper(), totals.get(day, 0) / MS_PER_HOUR))
    return points


def _month_points(totals: dict[date, int], today: date) -> list[ChartPoint]:
    points = []
    for day_number in range(1, days_in_month(today.year, today.month) + 1):
        day = today.replace(day=day_number)
        value = 0.0 if day > today else totals.get(day, 0) / MS_PER_HOUR
        points.append(ChartPoint(str(day_number), str(day_number), value))
    return points


def _year_points(totals: dict[date, int], today: date) -> list[ChartPoint]:
    per_month = [0] * 12
    for day, total in totals.items():
        if day.year == today.year:
            per_month[day.month - 1] += total
    return [
        ChartPoint(name, name[:3].upper(), per_month[index] / MS_PER_HOUR)
        for index, name in enumerate(MONTH_NAMES)
    ]


def bucket_for_range(
    sessions: Iterable[Session],
    time_range: TimeRange,
    now: datetime,
) -> ChartSeries:
    """
    Aggregate session durations into calendar buckets for a chart.

    Each bucket holds the fractional hours of every session whose start
    timestamp falls on the bucket's day (week, month) or month (year), as
    seen in `now`'s timezone. Sessions with malformed timestamps are left
    out. The month layout always has one bucket per day of the month; days
    after today stay at 0 even if a session is dated in the future.

    Business context: The stats screen shows one bar chart per range and
    scales bars against max_value.

    Args:
        sessions: Session snapshot.
        time_range: "week", "month" or "year".
        now: Reference instant.

    Returns:
        ChartSeries with 7, days-in-month, or 12 points.

    Raises:
        ValueError: If time_range is not one of the supported ranges.

    Example:
        >>> series = bucket_for_range([], 'year', now)
        >>> len(series.points), series.max_value
        (12, 1.0)
    """
    if time_range not in ("week", "month", "year"):
        raise ValueError(f"Unknown time range: {time_range!r}")

    today = to_reference_zone(now, now).date()
    totals = _daily_ms(sessions, now)
    if time_range == "week":
        points = _week_points(totals, today)
    elif time_range == "month":
        points = _month_points(totals, today)
    else:
        points = _year_points(totals, today)

    max_value = max([1.0] + [p.value_hours for p in points])
    return ChartSeries(points=tuple(points), max_value=max_value)
