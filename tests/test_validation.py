"""Tests for validation module."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest
from conftest import NOW, make_session

from focus_insights.models import Category, Session
from focus_insights.validation import (
    ValidationResult,
    duration_to_ms,
    is_valid_duration_format,
    sanitize_string,
    validate_category,
    validate_session,
)


@pytest.fixture
def valid_session() -> Session:
    return make_session("v", NOW - timedelta(hours=2), 45, title="Deep work")


class TestValidateSession:
    """Tests for validate_session rules."""

    def test_valid_session(self, valid_session: Session) -> None:
        result = validate_session(valid_session, NOW)
        assert result.is_valid
        assert result.errors == []

    def test_title_too_long(self, valid_session: Session) -> None:
        result = validate_session(replace(valid_session, title="x" * 101), NOW)
        assert result.errors == ["Session title must be 100 characters or less"]

    def test_title_at_limit_ok(self, valid_session: Session) -> None:
        assert validate_session(replace(valid_session, title="x" * 100), NOW).is_valid

    def test_too_short(self, valid_session: Session) -> None:
        result = validate_session(replace(valid_session, duration_ms=59_999), NOW)
        assert result.errors == ["Session must be at least 1 minute"]

    def test_too_long(self, valid_session: Session) -> None:
        result = validate_session(replace(valid_session, duration_ms=24 * 3600 * 1000 + 1), NOW)
        assert result.errors == ["Session cannot exceed 24 hours"]

    def test_invalid_start(self, valid_session: Session) -> None:
        result = validate_session(replace(valid_session, started_at="whenever"), NOW)
        assert result.errors == ["Invalid start date"]

    def test_future_start(self) -> None:
        """Verifies sessions cannot start after the reference instant.

        Business context:
        A manual edit with a wrong date would otherwise inflate
        tomorrow's totals and break today's streak display.
        """
        session = make_session("f", NOW + timedelta(hours=1), 30)
        assert "Start date cannot be in the future" in validate_session(session, NOW).errors

    def test_end_before_start(self, valid_session: Session) -> None:
        bad = replace(valid_session, ended_at=(NOW - timedelta(hours=3)).isoformat())
        assert validate_session(bad, NOW).errors == ["End date must be after start date"]

    def test_missing_category(self, valid_session: Session) -> None:
        assert validate_session(replace(valid_session, category_id=" "), NOW).errors == [
            "Category is required"
        ]

    def test_notes_too_long(self, valid_session: Session) -> None:
        result = validate_session(replace(valid_session, notes="n" * 501), NOW)
        assert result.errors == ["Notes must be 500 characters or less"]

    def test_multiple_errors_in_rule_order(self) -> None:
        """Verifies every violated rule is reported, in a stable order.

        Arrangement:
        Session that is too short, dated in the future, and has no
        category.

        Assertion Strategy:
        Exact list equality checks both content and order.
        """
        session = make_session("m", NOW + timedelta(days=1), 0.5, category_id="")
        assert validate_session(session, NOW).errors == [
            "Session must be at least 1 minute",
            "Start date cannot be in the future",
            "Category is required",
        ]


class TestValidateCategory:
    """Tests for validate_category."""

    def test_valid(self) -> None:
        assert validate_category(Category("c", "Reading", "#FF5733", "book")).is_valid

    def test_short_hex_accepted(self) -> None:
        assert validate_category(Category("c", "Reading", "#abc", "book")).is_valid

    def test_empty_color_accepted(self) -> None:
        assert validate_category(Category("c", "Reading", "", "book")).is_valid

    def test_bad_color(self) -> None:
        result = validate_category(Category("c", "Reading", "red", "book"))
        assert result.errors == ["Invalid color format (use hex color like #FF5733)"]

    def test_name_rules(self) -> None:
        assert validate_category(Category("c", "  ", "#fff", "book")).errors == [
            "Category name is required"
        ]
        assert validate_category(Category("c", "n" * 51, "#fff", "book")).errors == [
            "Category name must be 50 characters or less"
        ]

    def test_icon_required(self) -> None:
        assert validate_category(Category("c", "Reading", "#fff", "")).errors == [
            "Category icon is required"
        ]


class TestStringHelpers:
    """Tests for sanitize_string and duration parsing."""

    def test_sanitize_collapses_whitespace(self) -> None:
        assert sanitize_string("  deep \t  work\n ") == "deep work"

    @pytest.mark.parametrize("value", ["01:30:00", "1:30:00", "23:59:59", "00:00:00"])
    def test_valid_duration_formats(self, value: str) -> None:
        assert is_valid_duration_format(value)

    @pytest.mark.parametrize("value", ["1:3:00", "01:60:00", "100:00:00", "01:30", "abc"])
    def test_invalid_duration_formats(self, value: str) -> None:
        assert not is_valid_duration_format(value)

    def test_duration_to_ms(self) -> None:
        assert duration_to_ms("01:30:00") == 5_400_000
        assert duration_to_ms("0:00:45") == 45_000

    def test_duration_to_ms_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid duration format"):
            duration_to_ms("90 minutes")

    def test_result_defaults_valid(self) -> None:
        assert ValidationResult().is_valid
