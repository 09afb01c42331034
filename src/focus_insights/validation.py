"""
Input validation for sessions and categories.

PURPOSE: Check records before they are saved or imported.
AI CONTEXT: Validation reports problems, it never raises. The analytics
engine does not call these functions; it tolerates invalid snapshots.

USAGE:
    result = validate_session(session, now)
    if not result.is_valid:
        print("; ".join(result.errors))
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

from .config import Config
from .models import Category, Session
from .timeutils import ensure_aware, parse_timestamp

__all__ = [
    "ValidationResult",
    "validate_session",
    "validate_category",
    "sanitize_string",
    "is_valid_duration_format",
    "duration_to_ms",
]

HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
DURATION_PATTERN = re.compile(r"^([0-9]{1,2}):([0-5][0-9]):([0-5][0-9])$")


@dataclass
class ValidationResult:
    """Outcome of a validation call; errors are user-facing messages."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_session(session: Session, now: datetime) -> ValidationResult:
    """
    Check a session against the editing rules of the app.

    Rules:
    - title present and at most SESSION_TITLE_MAX_LENGTH characters
    - duration between SESSION_MIN_DURATION_MS and SESSION_MAX_DURATION_MS
    - started_at parseable and not after `now`
    - ended_at not before started_at
    - category_id present
    - notes at most SESSION_NOTES_MAX_LENGTH characters

    Business context: Manually edited or imported sessions bypass the
    timer, so they are checked before they reach the snapshot.

    Args:
        session: Session to check.
        now: Reference instant for the "not in the future" rule.

    Returns:
        ValidationResult listing every violated rule in the order above.

    Example:
        >>> validate_session(session, now).is_valid
        True
    """
    errors: list[str] = []

    if not session.title.strip():
        errors.append("Session title is required")
    elif len(session.title) > Config.SESSION_TITLE_MAX_LENGTH:
        errors.append(
            f"Session title must be {Config.SESSION_TITLE_MAX_LENGTH} characters or less"
        )

    if session.duration_ms < Config.SESSION_MIN_DURATION_MS:
        errors.append("Session must be at least 1 minute")
    elif session.duration_ms > Config.SESSION_MAX_DURATION_MS:
        errors.append("Session cannot exceed 24 hours")

    started = parse_timestamp(session.started_at)
    if started is None:
        errors.append("Invalid start date")
    elif ensure_aware(started) > ensure_aware(now):
        errors.append("Start date cannot be in the future")

    ended = parse_timestamp(session.ended_at)
    if started is not None and ended is not None and ensure_aware(ended) < ensure_aware(started):
        errors.append("End date must be after start date")

    if not session.category_id.strip():
        errors.append("Category is required")

    if session.notes and len(session.notes) > Config.SESSION_NOTES_MAX_LENGTH:
        errors.append(
            f"Notes must be {Config.SESSION_NOTES_MAX_LENGTH} characters or less"
        )

    return ValidationResult(errors)


def validate_category(category: Category) -> ValidationResult:
    """
    Check a category's name, colour and icon.

    The colour must be a #RGB or #RRGGBB hex string when given; an empty
    colour is accepted and left to the UI default.
    """
    errors: list[str] = []

    if not category.name.strip():
        errors.append("Category name is required")
    elif len(category.name) > Config.CATEGORY_NAME_MAX_LENGTH:
        errors.append(
            f"Category name must be {Config.CATEGORY_NAME_MAX_LENGTH} characters or less"
        )

    if category.color and not HEX_COLOR_PATTERN.match(category.color):
        errors.append("Invalid color format (use hex color like #FF5733)")

    if not category.icon.strip():
        errors.append("Category icon is required")

    return ValidationResult(errors)


def sanitize_string(value: str) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    return " ".join(value.split())


def is_valid_duration_format(value: str) -> bool:
    """True for H:MM:SS or HH:MM:SS strings such as '01:30:00'."""
    return DURATION_PATTERN.match(value) is not None


def duration_to_ms(value: str) -> int:
    """
    Convert an HH:MM:SS duration string to milliseconds.

    Raises:
        ValueError: If the string is not a valid HH:MM:SS duration.

    Example:
        >>> duration_to_ms('01:30:00')
        5400000
    """
    match = DURATION_PATTERN.match(value)
    if match is None:
        raise ValueError(f"Invalid duration format: {value!r}")
    hours, minutes, seconds = (int(part) for part in match.groups())
    return (hours * 3600 + minutes * 60 + seconds) * 1000
