"""
Statistics engine for Focus Insights.

PURPOSE: Calculate dashboard and stats-screen metrics from session snapshots.
AI CONTEXT: Pure data processing - no visualization, no I/O, no clock reads.

METRIC CATEGORIES:
1. Day Metrics: Today vs yesterday totals, day-over-day growth
2. Consistency Metrics: Current streak, longest streak, last active day
3. Session Metrics: Average session length, half-split trend
4. Category Metrics: Monthly-goal progress, time breakdown with shares

CALENDAR MODEL:
Every time-dependent method takes an explicit `now`. Calendar days are taken
in `now`'s timezone, so the same snapshot always yields the same numbers for
the same `now`. Sessions whose start timestamp cannot be parsed are left out
of day-based metrics but still count toward duration totals.

USAGE:
    engine = StatisticsEngine()
    totals = engine.compute_today_yesterday(sessions, now)
    growth = engine.compute_growth(totals.today_ms, totals.yesterday_ms)
    streaks = engine.compute_streaks(sessions, now)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .config import Config
from .filters import TimeRange
from .models import Category, Session
from .timeutils import (
    MS_PER_HOUR,
    MS_PER_MINUTE,
    ensure_aware,
    local_date,
    parse_timestamp,
    to_reference_zone,
)

__all__ = [
    "DayTotals",
    "StreakStats",
    "CategoryProgress",
    "CategoryBreakdown",
    "RangeSummary",
    "StatisticsEngine",
    "round_half_up",
]

logger = logging.getLogger(__name__)

MS_PER_DAY = 24 * MS_PER_HOUR


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves rounded toward +infinity.

    Python's round() uses banker's rounding (round(2.5) == 2); percentages
    and minute averages shown to users round halves up instead.

    Example:
        >>> round_half_up(2.5), round_half_up(-2.5)
        (3, -2)
    """
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class DayTotals:
    """Tracked time on `now`'s calendar day and the day before."""

    today_ms: int
    yesterday_ms: int

    @property
    def today_hours(self) -> int:
        """Whole hours of today's total."""
        return self.today_ms // MS_PER_HOUR

    @property
    def today_minutes(self) -> int:
        """Whole minutes left over after today_hours."""
        return (self.today_ms % MS_PER_HOUR) // MS_PER_MINUTE


@dataclass(frozen=True)
class StreakStats:
    """Current run ending today and the longest run in the scanned window."""

    current: int
    longest: int


@dataclass(frozen=True)
class CategoryProgress:
    """Home-dashboard progress of one category toward the monthly goal."""

    category_id: str
    name: str
    color: str
    icon: str
    total_ms: int
    percent: int

    @property
    def hours(self) -> float:
        return self.total_ms / MS_PER_HOUR


@dataclass(frozen=True)
class CategoryBreakdown:
    """Stats-screen share of one category within the selected range."""

    category_id: str
    name: str
    color: str
    icon: str
    count: int
    total_ms: int
    percentage: float


@dataclass(frozen=True)
class RangeSummary:
    """
    Headline numbers for the stats screen.

    total_ms / total_sessions / average_minutes / trend_percent describe the
    selected range; streaks and last_active always describe the full history.
    """

    time_range: str
    total_ms: int
    total_sessions: int
    average_minutes: int
    trend_percent: int
    current_streak: int
    longest_streak: int
    last_active: str | None

    @property
    def total_hours(self) -> int:
        return self.total_ms // MS_PER_HOUR

    @property
    def total_minutes(self) -> int:
        return (self.total_ms % MS_PER_HOUR) // MS_PER_MINUTE


class StatisticsEngine:
    """
    Calculator for focus-session statistics.

    DESIGN:
    - Stateless: Each method operates on the snapshot it is given
    - Pure: No side effects, inputs are never mutated
    - Deterministic: `now` is always a parameter, never read from the clock
    - Configurable: Goal and streak window from Config or constructor
    """

    def __init__(
        self,
        monthly_goal_hours: float | None = None,
        streak_max_days: int | None = None,
    ) -> None:
        """
        Initialize statistics engine with configurable parameters.

        Business context: Users who track part-time study want a lower
        monthly goal than full-time workers; the goal only changes the
        category progress percentage, not any totals.

        Args:
            monthly_goal_hours: Hours per category counted as 100% progress.
                Default: Config.MONTHLY_GOAL_HOURS (40.0)
            streak_max_days: Upper bound on the backward streak walk.
                Default: Config.STREAK_MAX_DAYS (365)

        Raises:
            ValueError: If either parameter is not positive.

        Example:
            >>> engine = StatisticsEngine(monthly_goal_hours=20)
            >>> engine.monthly_goal_hours
            20
        """
        self.monthly_goal_hours = monthly_goal_hours or Config.MONTHLY_GOAL_HOURS
        self.streak_max_days = streak_max_days or Config.STREAK_MAX_DAYS
        if self.monthly_goal_hours <= 0:
            raise ValueError("monthly_goal_hours must be positive")
        if self.streak_max_days <= 0:
            raise ValueError("streak_max_days must be positive")

    # =========================================================================
    # DAY METRICS
    # =========================================================================

    def daily_totals(self, sessions: Sequence[Session], now: datetime) -> dict[date, int]:
        """
        Sum durations per calendar day of the session start.

        Args:
            sessions: Session snapshot.
            now: Reference instant defining the timezone of the calendar.

        Returns:
            Dict mapping date -> total milliseconds. Days without sessions
            are absent. Sessions with malformed start timestamps are skipped.
        """
        totals: dict[date, int] = {}
        for session in sessions:
            day = local_date(session.started_at, now)
            if day is None:
                logger.debug("Session %s skipped: malformed started_at", session.id)
                continue
            totals[day] = totals.get(day, 0) + session.duration_ms
        return totals

    def compute_today_yesterday(self, sessions: Sequence[Session], now: datetime) -> DayTotals:
        """
        Total tracked time on today's and yesterday's calendar day.

        Partitions sessions by the calendar day of their start timestamp,
        as seen in `now`'s timezone, and sums durations for `now`'s day and
        the day before. A session crossing midnight counts fully toward the
        day it started.

        Business context: The energy ring on the home screen shows today's
        total and compares it to yesterday to motivate a daily habit.

        Args:
            sessions: Full session snapshot.
            now: Reference instant.

        Returns:
            DayTotals with today_ms and yesterday_ms; zeros when empty.

        Example:
            >>> totals = engine.compute_today_yesterday(sessions, now)
            >>> totals.today_hours, totals.today_minutes
            (1, 30)
        """
        today = to_reference_zone(now, now).date()
        yesterday = today - timedelta(days=1)
        totals = self.daily_totals(sessions, now)
        return DayTotals(today_ms=totals.get(today, 0), yesterday_ms=totals.get(yesterday, 0))

    def compute_growth(self, today_ms: int, yesterday_ms: int) -> int:
        """
        Day-over-day change of tracked time as a whole percentage.

        Formula:
        - yesterday > 0: round((today - yesterday) / yesterday * 100)
        - yesterday == 0 and today > 0: 100
        - both zero: 0

        The result is not clamped; a 5 minute yesterday followed by a 5 hour
        today reports +5900. Clamp for display in the caller.

        Args:
            today_ms: Today's total in milliseconds.
            yesterday_ms: Yesterday's total in milliseconds.

        Returns:
            Signed integer percentage.

        Example:
            >>> engine.compute_growth(120 * 60000, 60 * 60000)
            100
            >>> engine.compute_growth(30 * 60000, 0)
            100
        """
        if yesterday_ms > 0:
            return round_half_up((today_ms - yesterday_ms) / yesterday_ms * 100)
        return 100 if today_ms > 0 else 0

    # =========================================================================
    # CONSISTENCY METRICS
    # =========================================================================

    def _active_days(self, sessions: Sequence[Session], now: datetime) -> set[date]:
        days: set[date] = set()
        for session in sessions:
            day = local_date(session.started_at, now)
            if day is not None:
                days.add(day)
        return days

    def compute_streak(self, sessions: Sequence[Session], now: datetime) -> int:
        """
        Count consecutive days with at least one session, ending today.

        Walks backward one calendar day at a time starting from `now`'s day
        and stops at the first day without a session. A day with no session
        today therefore yields 0 even when yesterday closed a long run. The
        walk is capped at streak_max_days iterations.

        Business context: The streak badge rewards daily consistency. The
        "today required" rule means the badge drops to 0 until the first
        session of the day is logged.

        Args:
            sessions: Full session snapshot.
            now: Reference instant.

        Returns:
            Streak length in days, between 0 and streak_max_days.

        Example:
            >>> engine.compute_streak(sessions, now)
            3
        """
        active = self._active_days(sessions, now)
        if not active:
            return 0
        day = to_reference_zone(now, now).date()
        streak = 0
        for _ in range(self.streak_max_days):
            if day not in active:
                break
            streak += 1
            day -= timedelta(days=1)
        return streak

    def compute_streaks(self, sessions: Sequence[Session], now: datetime) -> StreakStats:
        """
        Current streak plus the longest run within the scanned window.

        Performs the same backward walk as compute_streak() over the full
        streak_max_days window. A running counter grows on each active day
        and resets on each gap; the longest value it reaches is reported.
        The current streak is the run that touches today and is frozen at
        the first gap.

        Args:
            sessions: Full session snapshot.
            now: Reference instant.

        Returns:
            StreakStats(current, longest) with 0 <= current <= longest.

        Example:
            >>> engine.compute_streaks(sessions, now)
            StreakStats(current=2, longest=5)
        """
        active = self._active_days(sessions, now)
        day = to_reference_zone(now, now).date()
        current = 0
        longest = 0
        run = 0
        touching_today = True
        for _ in range(self.streak_max_days):
            if day in active:
                run += 1
                longest = max(longest, run)
                if touching_today:
                    current = run
            else:
                run = 0
                touching_today = False
            day -= timedelta(days=1)
        return StreakStats(current=current, longest=longest)

    def days_since_last_session(self, sessions: Sequence[Session], now: datetime) -> int | None:
        """
        Whole days elapsed since the most recent session started.

        Measured as elapsed 24 hour periods, not calendar days, matching the
        "last active" caption of the stats screen. Sessions dated after `now`
        count as 0 days.

        Returns:
            Non-negative day count, or None when no session has a valid
            start timestamp.
        """
        starts = [
            to_reference_zone(dt, now)
            for dt in (parse_timestamp(s.started_at) for s in sessions)
            if dt is not None
        ]
        if not starts:
            return None
        elapsed = now - max(starts)
        return max(0, math.floor(elapsed.total_seconds() * 1000 / MS_PER_DAY))

    @staticmethod
    def last_active_label(days: int | None) -> str | None:
        """Caption for days_since_last_session(): Today, Yesterday or 'N days ago'."""
        if days is None:
            return None
        if days == 0:
            return "Today"
        if days == 1:
            return "Yesterday"
        return f"{days} days ago"

    # =========================================================================
    # SESSION METRICS
    # =========================================================================

    def compute_average(self, sessions: Sequence[Session]) -> int:
        """
        Mean session length in whole minutes.

        Computed over whatever snapshot is passed; the home dashboard passes
        the full unfiltered history so the figure does not jump while the
        user types into the search bar.

        Args:
            sessions: Session snapshot.

        Returns:
            Average duration rounded to the nearest minute; 0 when empty.

        Example:
            >>> engine.compute_average(sessions)
            42
        """
        if not sessions:
            return 0
        total = sum(s.duration_ms for s in sessions)
        return round_half_up(total / len(sessions) / MS_PER_MINUTE)

    def compute_trend(self, sessions: Sequence[Session]) -> int:
        """
        Change of the later half of a range versus the earlier half.

        Sessions are ordered by start time and split at the midpoint (the
        later half gets the extra session on odd counts). The percentage
        change of the later half's total over the earlier half's total is
        rounded and clamped to [TREND_MIN_PERCENT, TREND_MAX_PERCENT].

        Business context: Ranges on the stats screen have no natural
        "yesterday", so growth is shown as momentum within the range.

        Args:
            sessions: Sessions of the selected range.

        Returns:
            Clamped percentage; 0 with fewer than TREND_MIN_SESSIONS sessions
            or an empty earlier half.
        """
        dated = [(parse_timestamp(s.started_at), s) for s in sessions]
        ordered = sorted(
            ((ensure_aware(dt), s) for dt, s in dated if dt is not None),
            key=lambda pair: pair[0],
        )
        if len(ordered) < Config.TREND_MIN_SESSIONS:
            return 0
        midpoint = len(ordered) // 2
        earlier_ms = sum(s.duration_ms for _, s in ordered[:midpoint])
        later_ms = sum(s.duration_ms for _, s in ordered[midpoint:])
        if earlier_ms <= 0:
            return 0
        change = round_half_up((later_ms - earlier_ms) / earlier_ms * 100)
        return max(Config.TREND_MIN_PERCENT, min(Config.TREND_MAX_PERCENT, change))

    def compute_range_summary(
        self,
        range_sessions: Sequence[Session],
        all_sessions: Sequence[Session],
        time_range: TimeRange,
        now: datetime,
    ) -> RangeSummary:
        """
        Headline figures for the stats screen.

        Args:
            range_sessions: Sessions inside the selected range (see
                filters.sessions_in_range).
            all_sessions: Full history, used for streaks and last active.
            time_range: Label of the selected range.
            now: Reference instant.

        Returns:
            RangeSummary with range totals and history-wide consistency.
        """
        total_ms = sum(s.duration_ms for s in range_sessions)
        streaks = self.compute_streaks(all_sessions, now)
        return RangeSummary(
            time_range=time_range,
            total_ms=total_ms,
            total_sessions=len(range_sessions),
            average_minutes=self.compute_average(range_sessions),
            trend_percent=self.compute_trend(range_sessions),
            current_streak=streaks.current,
            longest_streak=streaks.longest,
            last_active=self.last_active_label(self.days_since_last_session(all_sessions, now)),
        )

    # =========================================================================
    # CATEGORY METRICS
    # =========================================================================

    @staticmethod
    def _totals_by_category(sessions: Sequence[Session]) -> tuple[dict[str, int], dict[str, int]]:
        totals: dict[str, int] = {}
        counts: dict[str, int] = {}
        for session in sessions:
            totals[session.category_id] = totals.get(session.category_id, 0) + session.duration_ms
            counts[session.category_id] = counts.get(session.category_id, 0) + 1
        return totals, counts

    def compute_category_progress(
        self,
        sessions: Sequence[Session],
        categories: Sequence[Category],
    ) -> list[CategoryProgress]:
        """
        Progress of each category toward the monthly hour goal.

        Sums every session of the category, converts to hours and divides
        by monthly_goal_hours. The percentage is rounded and clamped to
        [0, 100]. Sessions whose category no longer exists contribute to
        nothing.

        Business context: The home dashboard shows one progress card per
        visible category; a full ring means the goal was met.

        Args:
            sessions: Session snapshot (the home dashboard passes all).
            categories: Categories to report, in display order.

        Returns:
            One CategoryProgress per category, same order as given.

        Example:
            >>> [p.percent for p in engine.compute_category_progress(sessions, cats)]
            [25, 100]
        """
        totals, _ = self._totals_by_category(sessions)
        goal_ms = self.monthly_goal_hours * MS_PER_HOUR
        result: list[CategoryProgress] = []
        for category in categories:
            total_ms = totals.get(category.id, 0)
            percent = max(0, min(100, round_half_up(total_ms / goal_ms * 100)))
            result.append(
                CategoryProgress(
                    category_id=category.id,
                    name=category.name,
                    color=category.color,
                    icon=category.icon,
                    total_ms=total_ms,
                    percent=percent,
                )
            )
        return result

    def compute_category_breakdown(
        self,
        sessions: Sequence[Session],
        categories: Sequence[Category],
    ) -> list[CategoryBreakdown]:
        """
        Share of tracked time per category within a session subset.

        The grand total covers every supplied session, including sessions
        whose category was deleted, so the percentages of known categories
        add up to at most 100. Categories without sessions are dropped and
        the rest are sorted by total time, largest first.

        Business context: Drives the category bars on the stats screen for
        the selected week/month/year.

        Args:
            sessions: Sessions of the selected range.
            categories: Known categories.

        Returns:
            List of CategoryBreakdown sorted descending by total_ms.
            Empty when no session matches a known category.

        Example:
            >>> [(b.category_id, round(b.percentage)) for b in breakdown]
            [('work', 60), ('study', 40)]
        """
        totals, counts = self._totals_by_category(sessions)
        grand_total = sum(s.duration_ms for s in sessions)
        result = [
            CategoryBreakdown(
                category_id=category.id,
                name=category.name,
                color=category.color,
                icon=category.icon,
                count=counts[category.id],
                total_ms=totals[category.id],
                percentage=totals[category.id] / grand_total * 100 if grand_total > 0 else 0.0,
            )
            for category in categories
            if counts.get(category.id, 0) > 0
        ]
        result.sort(key=lambda b: b.total_ms, reverse=True)
        return result

    # =========================================================================
    # REPORTING
    # =========================================================================

    def generate_summary_report(
        self,
        sessions: Sequence[Session],
        categories: Sequence[Category],
        range_sessions: Sequence[Session],
        time_range: TimeRange,
        now: datetime,
    ) -> str:
        """
        Generate a plain-text summary of today's progress and the range.

        Business context: The CLI 'report' command prints this for people
        who want their numbers in a terminal or a cron mail.

        Args:
            sessions: Full session snapshot.
            categories: Known categories.
            range_sessions: Sessions inside the selected range.
            time_range: Label of the selected range.
            now: Reference instant.

        Returns:
            Multi-line report string.
        """
        totals = self.compute_today_yesterday(sessions, now)
        growth = self.compute_growth(totals.today_ms, totals.yesterday_ms)
        summary = self.compute_range_summary(range_sessions, sessions, time_range, now)
        breakdown = self.compute_category_breakdown(range_sessions, categories)

        lines = [
            "=" * 50,
            "FOCUS INSIGHTS - SESSION REPORT",
            "=" * 50,
            "",
            "📅 TODAY",
            f"  • Tracked: {totals.today_hours}h {totals.today_minutes}m",
            f"  • Versus yesterday: {growth:+d}%",
            f"  • Current streak: {summary.current_streak} days",
            f"  • Average session: {self.compute_average(sessions)} min",
            "",
            f"📊 THIS {time_range.upper()}",
            f"  • Total: {summary.total_hours}h {summary.total_minutes}m",
            f"  • Sessions: {summary.total_sessions}",
            f"  • Average: {summary.average_minutes} min",
            f"  • Trend: {summary.trend_percent:+d}%",
            f"  • Longest streak: {summary.longest_streak} days",
            f"  • Last active: {summary.last_active or 'never'}",
            "",
            "🗂  CATEGORIES",
        ]
        if not breakdown:
            lines.append("  • No sessions in range")
        for entry in breakdown:
            lines.append(
                f"  • {entry.name}: {entry.total_ms / MS_PER_HOUR:.1f}h "
                f"({entry.percentage:.0f}%, {entry.count} sessions)"
            )
        lines.extend(["", "=" * 50])
        return "\n".join(lines)
