"""
Focus Insights.

PURPOSE: Turn a snapshot of tracked focus sessions into filtered lists,
statistics, chart series and paginated views.
AI CONTEXT: The engine modules are pure - they take snapshots and an explicit
`now` and never read the clock, global state or the filesystem.

PACKAGE STRUCTURE:
- models.py: Data models (Session, Category, DateRange, SessionFilter)
- timeutils.py: ISO 8601 parsing and calendar-day helpers
- filters.py: filter_sessions / sessions_in_range - criteria and time-range subsets
- statistics.py: StatisticsEngine - totals, growth, streaks, breakdowns
- charts.py: bucket_for_range - week/month/year chart series
- pagination.py: PaginationWindow - incremental list windowing
- validation.py: Field validation for sessions and categories
- export.py: CSV / JSON export and CSV import
- storage.py: JSON snapshot repository (list_sessions, list_categories)
- presenters.py: View models for dashboard, stats and session list
- web/: FastAPI dashboard and JSON API
- cli.py: Command-line interface

QUICK START:
    from datetime import datetime, UTC
    from focus_insights.statistics import StatisticsEngine

    engine = StatisticsEngine()
    totals = engine.compute_today_yesterday(sessions, datetime.now(UTC))
"""

from focus_insights.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
