"""Version information for focus-insights."""

__version__ = "0.3.0"
__version_date__ = "2026-10-17"

__title__ = "focus_insights"
__description__ = "Analytics and windowing engine for tracked focus sessions"
__url__ = "https://github.com/focus-insights/focus-insights"

__author__ = "Focus Insights Contributors"

__license__ = "MIT"
__copyright__ = "Copyright 2026 Focus Insights Contributors"

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
