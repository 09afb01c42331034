"""
FastAPI routes for the Focus Insights dashboard.

PURPOSE: Thin route handlers that delegate to presenters.
AI CONTEXT: Routes parse query parameters and pick a clock; business logic
lives in presenters and the engine.

ROUTE STRUCTURE:
- / : Home dashboard page (full HTML)
- /partials/sessions : htmx refresh of the recent sessions table
- /charts/{range}.png : Range bar chart images
- /api/* : JSON endpoints for programmatic access

Every route accepts an optional `now` query parameter (ISO 8601). Without
it the server's local time is used.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from html import escape
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, Response

from ..__version__ import __version__
from ..models import DateRange, SessionFilter
from ..presenters import (
    ChartPresenter,
    DashboardPresenter,
    DashboardView,
    SessionListPresenter,
    SessionViewModel,
    StatsPresenter,
)
from ..statistics import StatisticsEngine
from ..storage import SessionRepository
from ..timeutils import parse_timestamp

__all__ = [
    "router",
    "get_repository",
    "get_statistics",
    "get_dashboard_presenter",
    "get_stats_presenter",
    "get_session_list_presenter",
    "get_chart_presenter",
]

router = APIRouter()

RangeParam = Literal["week", "month", "year"]

_DASHBOARD_CSS = """
:root {
    --ink: #e2e8f0;
    --ink-dim: #8b9bb4;
    --page: #0b1220;
    --card: #131c2e;
    --line: #24324a;
    --accent: #38bdf8;
}
html, body { margin: 0; padding: 0; }
body {
    font: 15px/1.5 "Inter", "Segoe UI", Roboto, sans-serif;
    background: var(--page);
    color: var(--ink);
}
main { max-width: 960px; margin: 0 auto; padding: 1.25rem; }
.topbar { display: flex; align-items: baseline; gap: 1rem; margin-bottom: 1.25rem; }
.topbar h1 { font-size: 1.35rem; margin: 0; }
.topbar small { color: var(--ink-dim); }
.cards { display: flex; flex-wrap: wrap; gap: 0.75rem; margin-bottom: 1.25rem; }
.card {
    flex: 1 1 200px;
    background: var(--card);
    border: 1px solid var(--line);
    border-radius: 12px;
    padding: 0.9rem 1rem;
}
.card h2 { font-size: 0.8rem; text-transform: uppercase; letter-spacing: 0.06em; color: var(--ink-dim); margin: 0 0 0.4rem; }
.big { font-size: 1.9rem; font-weight: 700; }
.hint { font-size: 0.8rem; color: var(--ink-dim); }
.ring { border-left: 4px solid var(--accent); }
.streak .big::after { content: " 🔥"; font-size: 1.2rem; }
.bar { height: 6px; background: var(--line); border-radius: 3px; margin-top: 0.5rem; }
.bar > span { display: block; height: 100%; border-radius: 3px; }
.chart { text-align: center; }
.chart img { max-width: 100%; }
.sessions { width: 100%; border-collapse: collapse; font-size: 0.9rem; }
.sessions td, .sessions th { padding: 0.5rem 0.4rem; border-bottom: 1px solid var(--line); text-align: left; }
.sessions th { color: var(--ink-dim); font-weight: 500; }
.dot { display: inline-block; width: 8px; height: 8px; border-radius: 50%; margin-right: 6px; }
.muted-footer { margin-top: 1.5rem; color: var(--ink-dim); font-size: 0.8rem; text-align: center; }
"""

# --- Dependencies ------------------------------------------------------------


def get_repository() -> SessionRepository:
    """
    Create a SessionRepository over the configured data directory.

    A new instance per request so every request reads the current snapshot.
    """
    return SessionRepository()


def get_statistics() -> StatisticsEngine:
    """Create a StatisticsEngine with the default goal and streak window."""
    return StatisticsEngine()


def get_dashboard_presenter() -> DashboardPresenter:
    """
    Create a DashboardPresenter with fresh dependencies.

    Business context: The presenter separates view-model building from
    HTTP handling so the same numbers back the HTML page, the JSON API and
    the CLI report.

    Example:
        >>> view = get_dashboard_presenter().get_dashboard(now)
    """
    return DashboardPresenter(get_repository(), get_statistics())


def get_stats_presenter() -> StatsPresenter:
    return StatsPresenter(get_repository(), get_statistics())


def get_session_list_presenter() -> SessionListPresenter:
    return SessionListPresenter(get_repository(), get_statistics())


def get_chart_presenter() -> ChartPresenter:
    return ChartPresenter(get_repository(), get_statistics())


def _resolve_now(now: str | None) -> datetime:
    """
    Turn the optional `now` query parameter into a reference instant.

    Args:
        now: ISO 8601 timestamp or None.

    Returns:
        Parsed timestamp, or the server's local time (timezone-aware) when
        the parameter is missing.

    Raises:
        HTTPException: 400 if the parameter cannot be parsed.
    """
    if now is None:
        return datetime.now().astimezone()
    parsed = parse_timestamp(now)
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid 'now' timestamp: {now!r}")
    return parsed


def _build_filter(
    category_id: str | None,
    q: str | None,
    start: str | None,
    end: str | None,
) -> SessionFilter:
    date_range = None
    if start is not None or end is not None:
        if start is None or end is None:
            raise HTTPException(status_code=400, detail="'start' and 'end' must be given together")
        for name, value in (("start", start), ("end", end)):
            if parse_timestamp(value) is None:
                raise HTTPException(status_code=400, detail=f"Invalid '{name}' timestamp: {value!r}")
        date_range = DateRange(start=start, end=end)
    return SessionFilter(category_id=category_id or None, date_range=date_range, search_query=q)


# --- Pages -------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    now: str | None = None,
) -> HTMLResponse:
    """
    Render the home dashboard page.

    Business context: A glanceable summary for a second screen; the
    sessions table refreshes itself every 30 seconds through htmx.

    Returns:
        HTMLResponse with today's total, growth, streak, average, category
        progress cards, the weekly chart and the recent sessions table.
    """
    view = presenter.get_dashboard(_resolve_now(now))
    return HTMLResponse(_render_dashboard_html(view))


@router.get("/partials/sessions", response_class=HTMLResponse)
async def sessions_partial(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    now: str | None = None,
) -> HTMLResponse:
    """Render only the recent sessions table for htmx swaps."""
    view = presenter.get_dashboard(_resolve_now(now))
    return HTMLResponse("<h2>Recent Sessions</h2>" + _render_sessions_table(view.recent_sessions))


# --- Charts ------------------------------------------------------------------


@router.get("/charts/{time_range}.png")
async def range_chart(
    time_range: RangeParam,
    presenter: Annotated[ChartPresenter, Depends(get_chart_presenter)],
    now: str | None = None,
) -> Response:
    """
    Hours-per-bucket bar chart for week, month or year.

    Serves PNG bytes, or an SVG notice when matplotlib is missing so the
    <img> tag on the home page never breaks.
    """
    reference = _resolve_now(now)
    try:
        return Response(
            content=presenter.render_range_chart(time_range, reference),
            media_type="image/png",
        )
    except ImportError:
        return Response(
            content=_placeholder_chart_svg(time_range.capitalize()),
            media_type="image/svg+xml",
        )


# --- JSON API ----------------------------------------------------------------


@router.get("/api/dashboard")
async def api_dashboard(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    now: str | None = None,
) -> dict[str, object]:
    """
    Get the home dashboard as JSON.

    Example:
        >>> # GET /api/dashboard?now=2026-10-17T15:00:00Z
        >>> {
        ...     "today": {"hours": 1, "minutes": 30, "total_ms": 5400000},
        ...     "growth_percent": 50,
        ...     "current_streak": 2,
        ...     ...
        ... }
    """
    return presenter.get_dashboard(_resolve_now(now)).to_dict()


@router.get("/api/stats")
async def api_stats(
    presenter: Annotated[StatsPresenter, Depends(get_stats_presenter)],
    time_range: Annotated[RangeParam, Query(alias="range")] = "week",
    now: str | None = None,
) -> dict[str, object]:
    """
    Get the stats screen for one range as JSON.

    Business context: Feeds the week/month/year tabs: headline totals,
    trend, streaks, category shares and chart buckets in one response.
    """
    return presenter.get_stats(time_range, _resolve_now(now)).to_dict()


@router.get("/api/sessions")
async def api_sessions(
    presenter: Annotated[SessionListPresenter, Depends(get_session_list_presenter)],
    category_id: str | None = None,
    q: str | None = None,
    start: str | None = None,
    end: str | None = None,
    pages: Annotated[int, Query(ge=1)] = 1,
) -> dict[str, object]:
    """
    Get the filtered session list, newest first, as JSON.

    Args:
        category_id: Exact category id to keep.
        q: Case-insensitive text matched against title and notes.
        start: Inclusive ISO 8601 lower bound on started_at (needs end).
        end: Inclusive ISO 8601 upper bound on started_at (needs start).
        pages: How many pages of the list to include (>= 1).

    Returns:
        Dict with 'items', 'total_count', 'current_page', 'total_pages'
        and 'has_more'.
    """
    presenter.set_filter(_build_filter(category_id, q, start, end))
    for _ in range(pages - 1):
        if not presenter.load_more():
            break
    return presenter.get_page().to_dict()


@router.get("/api/report")
async def api_report(
    presenter: Annotated[DashboardPresenter, Depends(get_dashboard_presenter)],
    time_range: Annotated[RangeParam, Query(alias="range")] = "week",
    now: str | None = None,
) -> dict[str, str]:
    """Get the CLI text report wrapped in JSON."""
    return {"report": presenter.get_report(time_range, _resolve_now(now))}


# --- HTML fragments ----------------------------------------------------------


def _placeholder_chart_svg(title: str) -> bytes:
    """
    Build a stand-in SVG for when matplotlib is not installed.

    Example:
        >>> b'Week Chart' in _placeholder_chart_svg('Week')
        True
    """
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" width="480" height="160" viewBox="0 0 480 160">'
        '<rect x="0" y="0" width="480" height="160" rx="12" fill="#131c2e"/>'
        '<text x="240" y="86" text-anchor="middle" font-family="sans-serif" '
        f'font-size="15" fill="#8b9bb4">{escape(title)} Chart: matplotlib not installed</text>'
        "</svg>"
    ).encode("utf-8")


def _render_category_cards(view: DashboardView) -> str:
    if not view.categories:
        return '<section class="card"><h2>Categories</h2><p class="hint">No categories selected</p></section>'
    parts = []
    for progress in view.categories:
        color = escape(progress.color)
        parts.append(
            f'<section class="card">'
            f"<h2>{escape(progress.name)}</h2>"
            f'<div class="big">{progress.hours:.1f}h</div>'
            f'<div class="hint">{progress.percent}% of monthly goal</div>'
            f'<div class="bar"><span style="width:{progress.percent}%;background:{color}"></span></div>'
            f"</section>"
        )
    return "\n".join(parts)


def _render_sessions_table(sessions: Sequence[SessionViewModel]) -> str:
    """Sessions as table rows; user-entered text is escaped."""
    if not sessions:
        return '<p class="hint">No sessions yet</p>'
    rows = "\n".join(
        f"<tr><td>{escape(s.start_time_display)}</td>"
        f"<td>{escape(s.title)}</td>"
        f'<td><i class="dot" style="background:{escape(s.category_color)}"></i>'
        f"{escape(s.category_name)}</td>"
        f"<td>{s.duration_display}</td></tr>"
        for s in sessions
    )
    return (
        '<table class="sessions">'
        "<tr><th>Started</th><th>Title</th><th>Category</th><th>Duration</th></tr>"
        f"{rows}</table>"
    )


def _render_dashboard_html(view: DashboardView) -> str:
    """
    Render the home page as a single self-contained HTML document.

    The recent sessions block polls /partials/sessions every 30 seconds.

    Example:
        >>> _render_dashboard_html(DashboardView()).startswith('<!DOCTYPE html>')
        True
    """
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Focus Insights - Dashboard</title>
<script src="https://unpkg.com/htmx.org@1.9.10"></script>
<style>{_DASHBOARD_CSS}</style>
</head>
<body>
<main>
  <div class="topbar">
    <h1>🎯 Focus Insights</h1>
    <small>{view.total_sessions} sessions tracked</small>
  </div>

  <div class="cards">
    <section class="card ring">
      <h2>Today</h2>
      <div class="big">{view.today_display}</div>
      <div class="hint">{view.growth_display} vs yesterday</div>
    </section>
    <section class="card streak">
      <h2>Streak</h2>
      <div class="big">{view.current_streak}</div>
      <div class="hint">days in a row</div>
    </section>
    <section class="card">
      <h2>Average Session</h2>
      <div class="big">{view.average_minutes}m</div>
      <div class="hint">all time</div>
    </section>
  </div>

  <div class="cards">
{_render_category_cards(view)}
  </div>

  <section class="card chart">
    <h2>This Week</h2>
    <img src="/charts/week.png" alt="Hours per day this week">
  </section>

  <section class="card" id="recent" style="margin-top:0.75rem"
           hx-get="/partials/sessions" hx-trigger="every 30s" hx-swap="innerHTML">
    <h2>Recent Sessions</h2>
    {_render_sessions_table(view.recent_sessions)}
  </section>

  <p class="muted-footer">Focus Insights {__version__}</p>
</main>
</body>
</html>"""
