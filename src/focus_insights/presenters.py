"""
Presenters for Focus Insights views.

PURPOSE: Testable layer between the snapshot repository and the UI.
AI CONTEXT: Presenters load a snapshot once, run the engine over it and
return view models (dataclasses). No HTML, no HTTP.

DESIGN PRINCIPLES:
1. Presenters receive a repository and a statistics engine, return view models
2. `now` is always a parameter, so views are reproducible
3. Results are memoized per (snapshot, filter, range, minute of now)
4. refresh() reloads the snapshot and drops every memoized result

USAGE:
    presenter = DashboardPresenter(repository, StatisticsEngine())
    view = presenter.get_dashboard(now)
    print(view.today_display, view.growth_display)
"""

from __future__ import annotations

import io
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, TypeVar

from .charts import ChartSeries, bucket_for_range
from .config import Config
from .filters import TimeRange, filter_sessions, sessions_in_range, sort_by_started_desc
from .models import Category, Session, SessionFilter
from .pagination import PaginationWindow
from .statistics import (
    CategoryBreakdown,
    CategoryProgress,
    RangeSummary,
    StatisticsEngine,
)
from .timeutils import MS_PER_HOUR, MS_PER_MINUTE, parse_timestamp

if TYPE_CHECKING:
    from .storage import SessionRepository

__all__ = [
    "SessionViewModel",
    "DashboardView",
    "StatsView",
    "SessionListView",
    "DashboardPresenter",
    "StatsPresenter",
    "SessionListPresenter",
    "ChartPresenter",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "#94a3b8"

CHART_BAR_COLOR = "#38BDF8"
CHART_EMPTY_COLOR = "#334155"


def _format_duration(duration_ms: int) -> str:
    """
    Format duration as human-readable string.

    Args:
        duration_ms: Duration in milliseconds.

    Returns:
        String like "45m" or "1h 30m".
    """
    hours, remainder = divmod(duration_ms, MS_PER_HOUR)
    minutes = remainder // MS_PER_MINUTE
    if hours == 0:
        return f"{minutes}m"
    return f"{hours}h {minutes}m"


def _minute_key(now: datetime) -> datetime:
    return now.replace(second=0, microsecond=0)


@dataclass
class SessionViewModel:
    """View model for one row of a session list."""

    session_id: str
    title: str
    category_id: str
    category_name: str
    category_color: str
    duration_ms: int
    started_at: str
    notes: str | None = None

    @property
    def duration_display(self) -> str:
        """
        Format duration as human-readable string.

        Business context: List rows are narrow on phones, so durations
        are shown compactly ("45m", "2h 5m") instead of HH:MM:SS.

        Returns:
            Compact duration string.

        Example:
            >>> SessionViewModel('s1', 'Read', 'study', 'Study', '#34D399',
            ...                  90 * 60000, '2026-10-17T09:00:00Z').duration_display
            '1h 30m'
        """
        return _format_duration(self.duration_ms)

    @property
    def start_time_display(self) -> str:
        """Start time as 'YYYY-MM-DD HH:MM', or the raw value if unparsable."""
        dt = parse_timestamp(self.started_at)
        if dt is None:
            return self.started_at
        return dt.strftime("%Y-%m-%d %H:%M")

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "title": self.title,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "category_color": self.category_color,
            "duration_ms": self.duration_ms,
            "duration_display": self.duration_display,
            "started_at": self.started_at,
            "notes": self.notes,
        }


@dataclass
class DashboardView:
    """Complete view model for the home dashboard."""

    today_ms: int = 0
    yesterday_ms: int = 0
    growth_percent: int = 0
    current_streak: int = 0
    average_minutes: int = 0
    total_sessions: int = 0
    categories: list[CategoryProgress] = field(default_factory=list)
    recent_sessions: list[SessionViewModel] = field(default_factory=list)

    @property
    def today_display(self) -> str:
        return _format_duration(self.today_ms)

    @property
    def growth_display(self) -> str:
        """
        Growth as a signed percentage, capped for display.

        The engine reports growth unclamped; values above the trend ceiling
        are shown as the ceiling so the energy ring caption stays short.
        """
        shown = min(self.growth_percent, Config.TREND_MAX_PERCENT)
        return f"{shown:+d}%"

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": {
                "hours": self.today_ms // MS_PER_HOUR,
                "minutes": (self.today_ms % MS_PER_HOUR) // MS_PER_MINUTE,
                "total_ms": self.today_ms,
            },
            "yesterday_ms": self.yesterday_ms,
            "growth_percent": self.growth_percent,
            "current_streak": self.current_streak,
            "average_minutes": self.average_minutes,
            "total_sessions": self.total_sessions,
            "categories": [
                {
                    "category_id": p.category_id,
                    "name": p.name,
                    "color": p.color,
                    "icon": p.icon,
                    "total_ms": p.total_ms,
                    "hours": round(p.hours, 2),
                    "percent": p.percent,
                }
                for p in self.categories
            ],
            "recent_sessions": [s.to_dict() for s in self.recent_sessions],
        }


@dataclass
class StatsView:
    """View model for the stats screen of one time range."""

    summary: RangeSummary
    breakdown: list[CategoryBreakdown]
    chart: ChartSeries

    def to_dict(self) -> dict[str, Any]:
        s = self.summary
        return {
            "range": s.time_range,
            "total": {"hours": s.total_hours, "minutes": s.total_minutes, "total_ms": s.total_ms},
            "total_sessions": s.total_sessions,
            "average_minutes": s.average_minutes,
            "trend_percent": s.trend_percent,
            "current_streak": s.current_streak,
            "longest_streak": s.longest_streak,
            "last_active": s.last_active,
            "categories": [
                {
                    "category_id": b.category_id,
                    "name": b.name,
                    "color": b.color,
                    "icon": b.icon,
                    "count": b.count,
                    "total_ms": b.total_ms,
                    "percentage": round(b.percentage, 1),
                }
                for b in self.breakdown
            ],
            "chart": self.chart.to_dict(),
        }


@dataclass
class SessionListView:
    """Visible part of the filtered session list."""

    items: list[SessionViewModel]
    total_count: int
    current_page: int
    total_pages: int
    has_more: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "total_count": self.total_count,
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "has_more": self.has_more,
        }


class _SnapshotPresenter:
    """
    Shared snapshot loading and memoization.

    The snapshot is loaded lazily on first use and kept until refresh().
    Memoized results are keyed by the caller-supplied key and cleared
    whenever the snapshot is replaced.
    """

    def __init__(
        self,
        repository: SessionRepository,
        statistics: StatisticsEngine | None = None,
    ) -> None:
        self.repository = repository
        self.statistics = statistics or StatisticsEngine()
        self._sessions: list[Session] | None = None
        self._categories: list[Category] | None = None
        self._cache: dict[tuple[Any, ...], Any] = {}

    @property
    def sessions(self) -> list[Session]:
        if self._sessions is None:
            self._load()
        assert self._sessions is not None
        return self._sessions

    @property
    def categories(self) -> list[Category]:
        if self._categories is None:
            self._load()
        assert self._categories is not None
        return self._categories

    def _load(self) -> None:
        self._sessions = self.repository.list_sessions()
        self._categories = self.repository.list_categories()
        self._cache.clear()
        logger.debug(
            "Loaded snapshot: %d sessions, %d categories",
            len(self._sessions),
            len(self._categories),
        )

    def refresh(self) -> None:
        """Reload the snapshot from the repository and drop memoized results."""
        self._load()

    def _memo(self, key: tuple[Any, ...], compute: Callable[[], T]) -> T:
        if key not in self._cache:
            self._cache[key] = compute()
        result: T = self._cache[key]
        return result

    def _to_view_model(self, session: Session, by_id: dict[str, Category]) -> SessionViewModel:
        category = by_id.get(session.category_id)
        return SessionViewModel(
            session_id=session.id,
            title=session.title,
            category_id=session.category_id,
            category_name=category.name if category else UNKNOWN_CATEGORY_NAME,
            category_color=category.color if category else UNKNOWN_CATEGORY_COLOR,
            duration_ms=session.duration_ms,
            started_at=session.started_at,
            notes=session.notes,
        )

    def _view_models(self, sessions: Sequence[Session]) -> list[SessionViewModel]:
        by_id = {category.id: category for category in self.categories}
        return [self._to_view_model(session, by_id) for session in sessions]


class DashboardPresenter(_SnapshotPresenter):
    """
    Presenter for the home dashboard.

    Combines the day metrics, streak, average and category progress of the
    full snapshot with a short list of the most recent sessions.
    """

    def __init__(
        self,
        repository: SessionRepository,
        statistics: StatisticsEngine | None = None,
        visible_category_ids: Sequence[str] | None = None,
    ) -> None:
        """
        Initialize dashboard presenter with data dependencies.

        Business context: Users pick which categories get a progress card
        on the home screen. The choice is capped at MAX_VISIBLE_CATEGORIES
        so the cards fit on one phone screen.

        Args:
            repository: Snapshot source.
            statistics: Engine for metric calculations. Default: new engine.
            visible_category_ids: Category ids shown as progress cards, in
                display order. Default: Config.DEFAULT_VISIBLE_CATEGORY_IDS.
                Ids beyond MAX_VISIBLE_CATEGORIES are ignored.

        Example:
            >>> presenter = DashboardPresenter(repository, StatisticsEngine(),
            ...                                visible_category_ids=['study'])
        """
        super().__init__(repository, statistics)
        ids = Config.DEFAULT_VISIBLE_CATEGORY_IDS if visible_category_ids is None else visible_category_ids
        self.visible_category_ids: tuple[str, ...] = tuple(dict.fromkeys(ids))[
            : Config.MAX_VISIBLE_CATEGORIES
        ]

    def visible_categories(self) -> list[Category]:
        """Visible categories in preference order; unknown ids are skipped."""
        by_id = {category.id: category for category in self.categories}
        return [by_id[cid] for cid in self.visible_category_ids if cid in by_id]

    def get_dashboard(self, now: datetime) -> DashboardView:
        """
        Build the home dashboard view model.

        Uses the full unfiltered snapshot for every metric, so typing in
        the search bar never changes the cards above the list.

        Business context: The dashboard is the first screen after opening
        the app; it answers "how much did I focus today and am I keeping
        my streak?".

        Args:
            now: Reference instant.

        Returns:
            DashboardView with zeros for an empty snapshot.

        Example:
            >>> view = presenter.get_dashboard(now)
            >>> view.today_display, view.growth_display
            ('1h 30m', '+50%')
        """
        return self._memo(("dashboard", _minute_key(now)), lambda: self._build_dashboard(now))

    def _build_dashboard(self, now: datetime) -> DashboardView:
        sessions = self.sessions
        totals = self.statistics.compute_today_yesterday(sessions, now)
        recent = sort_by_started_desc(sessions)[: Config.RECENT_SESSIONS_LIMIT]
        return DashboardView(
            today_ms=totals.today_ms,
            yesterday_ms=totals.yesterday_ms,
            growth_percent=self.statistics.compute_growth(totals.today_ms, totals.yesterday_ms),
            current_streak=self.statistics.compute_streak(sessions, now),
            average_minutes=self.statistics.compute_average(sessions),
            total_sessions=len(sessions),
            categories=self.statistics.compute_category_progress(
                sessions, self.visible_categories()
            ),
            recent_sessions=self._view_models(recent),
        )

    def get_report(self, time_range: TimeRange, now: datetime) -> str:
        """Plain-text report of today and the given range."""
        sessions = self.sessions
        return self.statistics.generate_summary_report(
            sessions,
            self.categories,
            sessions_in_range(sessions, time_range, now),
            time_range,
            now,
        )


class StatsPresenter(_SnapshotPresenter):
    """Presenter for the stats screen: range summary, breakdown and chart."""

    def range_sessions(self, time_range: TimeRange, now: datetime) -> list[Session]:
        return self._memo(
            ("range", time_range, _minute_key(now)),
            lambda: sessions_in_range(self.sessions, time_range, now),
        )

    def get_stats(self, time_range: TimeRange, now: datetime) -> StatsView:
        """
        Build the stats view model for one range.

        The breakdown's grand total and the range summary cover only the
        sessions of the range; streaks and "last active" cover the full
        history.

        Args:
            time_range: "week", "month" or "year".
            now: Reference instant.

        Returns:
            StatsView with summary, category breakdown and chart series.

        Raises:
            ValueError: If time_range is not supported.
        """
        return self._memo(
            ("stats", time_range, _minute_key(now)),
            lambda: self._build_stats(time_range, now),
        )

    def _build_stats(self, time_range: TimeRange, now: datetime) -> StatsView:
        in_range = self.range_sessions(time_range, now)
        return StatsView(
            summary=self.statistics.compute_range_summary(in_range, self.sessions, time_range, now),
            breakdown=self.statistics.compute_category_breakdown(in_range, self.categories),
            chart=bucket_for_range(self.sessions, time_range, now),
        )


class SessionListPresenter(_SnapshotPresenter):
    """
    Presenter for the filterable, paginated session list.

    The filtered and sorted source is memoized per filter. Setting an equal
    filter again returns the same list object, so the pagination window
    keeps its page; a different filter or a refresh() produces a new list
    and the window goes back to page 0.

    Example:
        >>> presenter = SessionListPresenter(repository)
        >>> presenter.set_filter(SessionFilter(search_query='draft'))
        >>> presenter.load_more()
        True
        >>> presenter.get_page().current_page
        1
    """

    def __init__(
        self,
        repository: SessionRepository,
        statistics: StatisticsEngine | None = None,
        page_size: int | None = None,
    ) -> None:
        super().__init__(repository, statistics)
        self.criteria = SessionFilter()
        self.window: PaginationWindow[Session] = PaginationWindow(page_size=page_size)

    def source(self) -> list[Session]:
        """Filtered sessions, newest first, for the current criteria."""
        return self._memo(
            ("source", self.criteria),
            lambda: sort_by_started_desc(filter_sessions(self.sessions, self.criteria)),
        )

    def _sync(self) -> None:
        self.window.set_source(self.source())

    def set_filter(self, criteria: SessionFilter | None) -> None:
        """Apply new criteria; the window resets when the result changes identity."""
        self.criteria = criteria or SessionFilter()
        self._sync()

    def refresh(self) -> None:
        super().refresh()
        self._sync()

    def load_more(self) -> bool:
        self._sync()
        return self.window.load_more()

    def get_page(self) -> SessionListView:
        """Current window as a view model."""
        self._sync()
        return SessionListView(
            items=self._view_models(self.window.visible()),
            total_count=len(self.window.source),
            current_page=self.window.current_page,
            total_pages=self.window.total_pages,
            has_more=self.window.has_more(),
        )


class ChartPresenter(_SnapshotPresenter):
    """
    Presenter for generating chart images.

    Uses matplotlib for server-side rendering of ChartSeries bar charts.
    Returns PNG images as bytes.
    """

    def get_series(self, time_range: TimeRange, now: datetime) -> ChartSeries:
        return self._memo(
            ("chart", time_range, _minute_key(now)),
            lambda: bucket_for_range(self.sessions, time_range, now),
        )

    def render_range_chart(self, time_range: TimeRange, now: datetime) -> bytes:
        """
        Render tracked hours per bucket as a vertical bar chart PNG.

        Business context: The same chart the stats screen shows, for the
        web dashboard and for embedding in exported reports.

        Args:
            time_range: "week", "month" or "year".
            now: Reference instant.

        Returns:
            PNG image as bytes.

        Raises:
            ImportError: If matplotlib is not installed. Caller should
                catch this and provide a fallback.
            ValueError: If time_range is not supported.

        Example:
            >>> png = presenter.render_range_chart('week', now)
            >>> png[:8] == b'\\x89PNG\\r\\n\\x1a\\n'
            True
        """
        series = self.get_series(time_range, now)

        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        labels = [point.short_label for point in series.points]
        values = [point.value_hours for point in series.points]
        colors = [CHART_BAR_COLOR if value > 0 else CHART_EMPTY_COLOR for value in values]

        width = 8 if time_range == "month" else 6
        fig, ax = plt.subplots(figsize=(width, 3))
        ax.bar(range(len(values)), values, color=colors)
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels, fontsize=7 if time_range == "month" else 9)
        ax.set_ylim(0, series.max_value * 1.1)
        ax.set_ylabel("Hours")
        ax.set_title(f"Focus time this {time_range}")

        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)

        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=100, bbox_inches="tight")
        plt.close(fig)
        buf.seek(0)
        return buf.read()
