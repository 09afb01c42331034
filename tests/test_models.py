"""Tests for models module."""

from __future__ import annotations

import re

import pytest

from focus_insights.models import (
    DEFAULT_CATEGORIES,
    Category,
    DateRange,
    Session,
    SessionFilter,
)


class TestSession:
    """Tests for Session dataclass."""

    def test_create_generates_id(self) -> None:
        """create() generates a hex UUID when no id is given."""
        session = Session.create(
            "Deep work", "work", 60000, "2026-10-17T09:00:00Z", "2026-10-17T09:01:00Z"
        )
        assert re.match(r"^[0-9a-f]{32}$", session.id)

    def test_create_uses_explicit_id(self) -> None:
        session = Session.create(
            "Deep work",
            "work",
            60000,
            "2026-10-17T09:00:00Z",
            "2026-10-17T09:01:00Z",
            session_id="abc",
        )
        assert session.id == "abc"

    def test_create_bookkeeping_defaults_to_end(self) -> None:
        session = Session.create("T", "work", 60000, "2026-10-17T09:00:00Z", "2026-10-17T09:01:00Z")
        assert session.created_at == "2026-10-17T09:01:00Z"
        assert session.updated_at == "2026-10-17T09:01:00Z"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_becomes_untitled(self, title: str) -> None:
        """Verifies a blank title is replaced on construction.

        Business context:
        Sessions saved from the quick timer have no title; lists and exports
        must still show something readable.

        Assertion Strategy:
        Title equals the configured default.
        """
        session = Session("s", title, "work", 1000, "2026-10-17T09:00:00Z", "2026-10-17T09:00:01Z")
        assert session.title == "Untitled Session"

    def test_negative_duration_clamped(self) -> None:
        session = Session("s", "T", "work", -500, "2026-10-17T09:00:00Z", "2026-10-17T09:00:00Z")
        assert session.duration_ms == 0

    def test_is_frozen(self) -> None:
        session = Session("s", "T", "work", 1000, "a", "b")
        with pytest.raises(AttributeError):
            session.title = "changed"  # type: ignore[misc]

    def test_to_dict_round_trip(self) -> None:
        session = Session.create(
            "Read", "study", 120000, "2026-10-17T09:00:00Z", "2026-10-17T09:02:00Z", notes="ch. 3"
        )
        assert Session.from_dict(session.to_dict()) == session

    def test_from_dict_accepts_camel_case(self) -> None:
        """Verifies records from the mobile client load without migration.

        Business context:
        Older client versions export camelCase keys; the snapshot loader
        must read them as-is.

        Arrangement:
        Record using categoryId, durationMs, startedAt and endedAt.

        Action:
        Session.from_dict().

        Assertion Strategy:
        Each camelCase value lands in its snake_case field.
        """
        data = {
            "id": "s1",
            "title": "Read",
            "categoryId": "study",
            "durationMs": 60000,
            "startedAt": "2026-10-17T09:00:00Z",
            "endedAt": "2026-10-17T09:01:00Z",
            "createdAt": "2026-10-17T09:01:00Z",
        }
        session = Session.from_dict(data)
        assert session.category_id == "study"
        assert session.duration_ms == 60000
        assert session.started_at == "2026-10-17T09:00:00Z"
        assert session.created_at == "2026-10-17T09:01:00Z"
        assert session.notes is None

    def test_from_dict_garbage_duration(self) -> None:
        session = Session.from_dict({"id": "s", "title": "T", "duration_ms": "lots"})
        assert session.duration_ms == 0

    def test_from_dict_missing_id_raises(self) -> None:
        with pytest.raises(KeyError):
            Session.from_dict({"title": "No id"})


class TestCategory:
    """Tests for Category dataclass."""

    def test_round_trip(self) -> None:
        category = Category("c", "Reading", "#112233", "book", is_default=False, created_at="x")
        assert Category.from_dict(category.to_dict()) == category

    def test_from_dict_camel_case_flag(self) -> None:
        category = Category.from_dict({"id": "w", "name": "Work", "isDefault": True})
        assert category.is_default is True
        assert category.color == ""

    def test_defaults_ship_five_categories(self) -> None:
        assert [c.id for c in DEFAULT_CATEGORIES] == ["work", "study", "habits", "fitness", "general"]
        assert all(c.is_default for c in DEFAULT_CATEGORIES)


class TestSessionFilter:
    """Tests for SessionFilter and DateRange value objects."""

    def test_empty_by_default(self) -> None:
        assert SessionFilter().is_empty

    def test_blank_search_is_empty(self) -> None:
        assert SessionFilter(search_query="   ").is_empty

    def test_any_criterion_not_empty(self) -> None:
        assert not SessionFilter(category_id="work").is_empty
        assert not SessionFilter(date_range=DateRange("a", "b")).is_empty
        assert not SessionFilter(search_query="x").is_empty

    def test_hashable_for_memo_keys(self) -> None:
        """Equal filters hash equally so presenters can memoize by criteria."""
        first = SessionFilter(category_id="work", date_range=DateRange("a", "b"))
        second = SessionFilter(category_id="work", date_range=DateRange("a", "b"))
        assert hash(first) == hash(second)
        assert {first: 1}[second] == 1

    def test_round_trip(self) -> None:
        criteria = SessionFilter("work", DateRange("2026-10-01T00:00:00Z", "2026-10-31T00:00:00Z"), "plan")
        assert SessionFilter.from_dict(criteria.to_dict()) == criteria

    def test_from_dict_camel_case(self) -> None:
        criteria = SessionFilter.from_dict(
            {"categoryId": "study", "dateRange": {"start": "a", "end": "b"}, "searchQuery": "x"}
        )
        assert criteria == SessionFilter("study", DateRange("a", "b"), "x")

    def test_from_dict_incomplete_range_dropped(self) -> None:
        assert SessionFilter.from_dict({"dateRange": {"start": "a"}}).date_range is None
