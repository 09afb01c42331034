"""
Web dashboard module for Focus Insights.

PURPOSE: FastAPI-based read-only dashboard and JSON API over a snapshot.
AI CONTEXT: Thin HTTP layer; every number comes from the presenters.

FEATURES:
- Home dashboard page with periodic htmx refresh
- Server-side range charts (matplotlib)
- JSON endpoints for dashboard, stats, session list and text report

USAGE:
    # Via CLI
    focus-insights dashboard

    # Programmatically
    from focus_insights.web import create_app
    app = create_app()
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]
