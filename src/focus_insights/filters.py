"""
Filter engine for Focus Insights.

PURPOSE: Narrow a session snapshot by category, date range and free text.
AI CONTEXT: Pure data processing - no I/O, inputs are never mutated.

COMPOSITION RULES:
- Every active criterion narrows the result (logical AND)
- category_id: exact match
- date_range: inclusive bounds on started_at, compared as date-times
- search_query: case-insensitive substring of title OR notes
- No active criteria: an order-preserving copy of the input

ERROR HANDLING:
Malformed session timestamps or unparsable range bounds make the affected
comparison non-matching. Nothing is raised to the caller.

USAGE:
    visible = filter_sessions(sessions, SessionFilter(search_query="draft"))
    this_month = sessions_in_range(sessions, "month", now)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Literal

from .models import DateRange, Session, SessionFilter
from .timeutils import ensure_aware, parse_timestamp, start_of_day, to_reference_zone

__all__ = [
    "TimeRange",
    "filter_sessions",
    "range_start",
    "sessions_in_range",
    "sort_by_started_desc",
]

TimeRange = Literal["week", "month", "year"]

SessionPredicate = Callable[[Session], bool]


def _category_predicate(category_id: str) -> SessionPredicate:
    return lambda session: session.category_id == category_id


def _date_range_predicate(date_range: DateRange) -> SessionPredicate:
    start = parse_timestamp(date_range.start)
    end = parse_timestamp(date_range.end)
    if start is None or end is None:
        return lambda session: False

    lower = ensure_aware(start)
    upper = ensure_aware(end)

    def matches(session: Session) -> bool:
        started = parse_timestamp(session.started_at)
        if started is None:
            return False
        return lower <= ensure_aware(started) <= upper

    return matches


def _search_predicate(query: str) -> SessionPredicate:
    needle = query.lower()

    def matches(session: Session) -> bool:
        if needle in session.title.lower():
            return True
        return bool(session.notes) and needle in str(session.notes).lower()

    return matches


def _build_predicates(criteria: SessionFilter) -> list[SessionPredicate]:
    predicates: list[SessionPredicate] = []
    if criteria.category_id:
        predicates.append(_category_predicate(criteria.category_id))
    if criteria.date_range:
        predicates.append(_date_range_predicate(criteria.date_range))
    if criteria.search_query and criteria.search_query.strip():
        predicates.append(_search_predicate(criteria.search_query))
    return predicates


def filter_sessions(
    sessions: Iterable[Session],
    criteria: SessionFilter | None = None,
) -> list[Session]:
    """
    Apply filter criteria to a session snapshot.

    Composes the active criteria into one predicate and keeps every session
    that satisfies all of them, preserving the input order. Applying the
    same criteria twice yields the same list, and adding a criterion can
    only shrink the result.

    Business context: The home screen list, search bar and filter chips all
    funnel through this function, so its output is what the paginated list
    windows over.

    Args:
        sessions: Session snapshot in any order.
        criteria: Filter value object. None or an empty filter returns a
            copy of the input.

    Returns:
        New list of matching sessions in their original relative order.

    Raises:
        None: Malformed timestamps make a session non-matching instead.

    Example:
        >>> filter_sessions(sessions, SessionFilter(category_id='work'))
        [Session(id='s1', ..., category_id='work', ...)]
    """
    if criteria is None:
        return list(sessions)
    predicates = _build_predicates(criteria)
    if not predicates:
        return list(sessions)
    return [s for s in sessions if all(predicate(s) for predicate in predicates)]


def range_start(time_range: TimeRange, now: datetime) -> datetime:
    """
    Earliest start instant included in a stats-screen time range.

    - week: exactly seven days before `now` (rolling, not calendar-aligned)
    - month: midnight on the 1st of `now`'s month
    - year: midnight on 1 January of `now`'s year

    Raises:
        ValueError: If time_range is not week, month or year.
    """
    if time_range == "week":
        return now - timedelta(days=7)
    if time_range == "month":
        return start_of_day(now).replace(day=1)
    if time_range == "year":
        return start_of_day(now).replace(month=1, day=1)
    raise ValueError(f"Unknown time range: {time_range!r}")


def sessions_in_range(
    sessions: Iterable[Session],
    time_range: TimeRange,
    now: datetime,
) -> list[Session]:
    """
    Keep sessions that started within the stats-screen time range.

    The range is open-ended toward the future: anything started at or after
    range_start() is kept. Sessions with malformed timestamps are dropped.

    Args:
        sessions: Session snapshot.
        time_range: "week", "month" or "year".
        now: Reference instant.

    Returns:
        New list of sessions in input order.

    Example:
        >>> len(sessions_in_range(sessions, 'week', now))
        4
    """
    lower = range_start(time_range, now)
    result: list[Session] = []
    for session in sessions:
        started = parse_timestamp(session.started_at)
        if started is not None and to_reference_zone(started, now) >= lower:
            result.append(session)
    return result


def sort_by_started_desc(sessions: Iterable[Session]) -> list[Session]:
    """
    Sort sessions newest first by start timestamp.

    Sessions with malformed timestamps sink to the end, keeping their
    relative order.
    """
    parsed = [(s, parse_timestamp(s.started_at)) for s in sessions]
    valid = [(s, ensure_aware(dt)) for s, dt in parsed if dt is not None]
    invalid = [s for s, dt in parsed if dt is None]
    valid.sort(key=lambda pair: pair[1], reverse=True)
    return [s for s, _ in valid] + invalid
