"""
Configuration for Focus Insights.

PURPOSE: Centralized configuration constants and runtime settings.
AI CONTEXT: All tunable values live here - the engine modules read their
defaults from this class and accept overrides as constructor arguments.

CONFIGURATION CATEGORIES:
- Storage: Snapshot directory and file names
- Analytics: Streak window, monthly goal, trend rules
- List Display: Page size, recent-session limit, dashboard category slots
- Validation: Field length and duration limits

ENVIRONMENT VARIABLES:
- FOCUS_INSIGHTS_DATA_DIR: Directory holding sessions.json / categories.json
  (default: .focus_insights in the current directory)

USAGE:
    from focus_insights.config import Config
    page_size = Config.PAGE_SIZE
    data_dir = Config.get_data_dir()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration container for Focus Insights.

    DESIGN: Frozen dataclass ensures configuration immutability at runtime.
    All values are class-level constants - no instance creation needed.

    STORAGE STRUCTURE:
        .focus_insights/
        ├── sessions.json      # List of session records
        └── categories.json    # List of category records (optional)
    """

    # =========================================================================
    # STORAGE CONFIGURATION
    # =========================================================================
    DATA_DIR: ClassVar[str] = ".focus_insights"
    DATA_DIR_ENV_VAR: ClassVar[str] = "FOCUS_INSIGHTS_DATA_DIR"
    SESSIONS_FILE: ClassVar[str] = "sessions.json"
    CATEGORIES_FILE: ClassVar[str] = "categories.json"

    # =========================================================================
    # ANALYTICS PARAMETERS
    # =========================================================================
    STREAK_MAX_DAYS: ClassVar[int] = 365
    """Upper bound on the backward day walk used for streak detection."""

    MONTHLY_GOAL_HOURS: ClassVar[float] = 40.0
    """
    Hours per category that count as 100% on the home dashboard.
    Progress is clamped to [0, 100] once this goal is exceeded.
    """

    TREND_MIN_SESSIONS: ClassVar[int] = 4
    """Sessions required before the half-split trend is reported."""

    TREND_MIN_PERCENT: ClassVar[int] = -99
    TREND_MAX_PERCENT: ClassVar[int] = 999

    # =========================================================================
    # LIST DISPLAY
    # =========================================================================
    PAGE_SIZE: ClassVar[int] = 20
    RECENT_SESSIONS_LIMIT: ClassVar[int] = 20
    MAX_VISIBLE_CATEGORIES: ClassVar[int] = 3
    DEFAULT_VISIBLE_CATEGORY_IDS: ClassVar[tuple[str, ...]] = ("work", "study")

    CHART_RANGES: ClassVar[tuple[str, ...]] = ("week", "month", "year")

    # =========================================================================
    # SESSION / CATEGORY RULES
    # =========================================================================
    DEFAULT_SESSION_TITLE: ClassVar[str] = "Untitled Session"
    SESSION_TITLE_MAX_LENGTH: ClassVar[int] = 100
    SESSION_NOTES_MAX_LENGTH: ClassVar[int] = 500
    SESSION_MIN_DURATION_MS: ClassVar[int] = 60 * 1000
    SESSION_MAX_DURATION_MS: ClassVar[int] = 24 * 60 * 60 * 1000
    CATEGORY_NAME_MAX_LENGTH: ClassVar[int] = 50

    # =========================================================================
    # ENVIRONMENT-BASED SETTINGS (runtime configurable)
    # =========================================================================
    _data_dir_override: ClassVar[str | None] = None

    @classmethod
    def get_data_dir(cls) -> str:
        """
        Get the directory that holds the session and category snapshots.

        Uses a priority system: test override first, then the
        FOCUS_INSIGHTS_DATA_DIR environment variable, then DATA_DIR
        relative to the current working directory.

        Business context: The mobile client syncs its JSON export into a
        shared folder; pointing the variable at that folder lets the CLI and
        dashboard read the same snapshot without copying files around.

        Returns:
            Directory path as a string. Not guaranteed to exist.

        Example:
            >>> # With env var: FOCUS_INSIGHTS_DATA_DIR=/srv/focus
            >>> Config.get_data_dir()
            '/srv/focus'
        """
        if cls._data_dir_override is not None:
            return cls._data_dir_override
        return os.environ.get(cls.DATA_DIR_ENV_VAR, cls.DATA_DIR)

    @classmethod
    def set_test_overrides(cls, data_dir: str | None = None) -> None:
        """
        Set test overrides for environment-based settings.

        Must be paired with reset_test_overrides() in test teardown.

        Args:
            data_dir: Override for the snapshot directory. None to clear.
        """
        cls._data_dir_override = data_dir

    @classmethod
    def reset_test_overrides(cls) -> None:
        """Clear all test overrides so settings come from the environment again."""
        cls._data_dir_override = None
