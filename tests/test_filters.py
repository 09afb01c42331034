"""Tests for filters module."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from conftest import NOW, make_session

from focus_insights.filters import (
    filter_sessions,
    range_start,
    sessions_in_range,
    sort_by_started_desc,
)
from focus_insights.models import DateRange, Session, SessionFilter


def ids(sessions: list[Session]) -> list[str]:
    return [s.id for s in sessions]


class TestFilterSessions:
    """Tests for filter_sessions criteria composition."""

    def test_no_criteria_returns_copy(self, scenario_sessions: list[Session]) -> None:
        result = filter_sessions(scenario_sessions, None)
        assert result == scenario_sessions
        assert result is not scenario_sessions

    def test_empty_filter_returns_everything(self, scenario_sessions: list[Session]) -> None:
        assert filter_sessions(scenario_sessions, SessionFilter()) == scenario_sessions

    def test_category_exact_match(self, scenario_sessions: list[Session]) -> None:
        result = filter_sessions(scenario_sessions, SessionFilter(category_id="study"))
        assert ids(result) == ["t2", "y1"]

    def test_search_title_or_notes(self, scenario_sessions: list[Session]) -> None:
        """Verifies search matches titles and notes case-insensitively.

        Business context:
        Users search for "draft" to find both sessions named after a draft
        and sessions where "draft" only appears in the notes.

        Arrangement:
        Scenario where t2 has notes "draft notes" and old is titled
        "Planning draft".

        Action:
        Filter with search_query "DRAFT".

        Assertion Strategy:
        Both sessions found, input order preserved.
        """
        result = filter_sessions(scenario_sessions, SessionFilter(search_query="DRAFT"))
        assert ids(result) == ["t2", "old"]

    def test_blank_search_ignored(self, scenario_sessions: list[Session]) -> None:
        result = filter_sessions(scenario_sessions, SessionFilter(search_query="  "))
        assert len(result) == len(scenario_sessions)

    def test_date_range_inclusive(self, scenario_sessions: list[Session]) -> None:
        criteria = SessionFilter(
            date_range=DateRange("2026-10-17T09:00:00Z", "2026-10-17T11:00:00Z"),
        )
        assert ids(filter_sessions(scenario_sessions, criteria)) == ["t1", "t2"]

    def test_date_range_compares_instants_across_offsets(self) -> None:
        session = make_session("tz", datetime(2026, 10, 17, 8, 0, tzinfo=timezone(timedelta(hours=2))), 10)
        criteria = SessionFilter(date_range=DateRange("2026-10-17T06:00:00Z", "2026-10-17T06:00:00Z"))
        assert ids(filter_sessions([session], criteria)) == ["tz"]

    def test_invalid_range_bound_matches_nothing(self, scenario_sessions: list[Session]) -> None:
        criteria = SessionFilter(date_range=DateRange("soon", "2026-10-17T11:00:00Z"))
        assert filter_sessions(scenario_sessions, criteria) == []

    def test_malformed_session_timestamp_excluded_by_range(self) -> None:
        sessions = [make_session("bad", "garbage", 10), make_session("ok", NOW, 10)]
        criteria = SessionFilter(date_range=DateRange("2026-01-01T00:00:00Z", "2026-12-31T00:00:00Z"))
        assert ids(filter_sessions(sessions, criteria)) == ["ok"]

    def test_criteria_combine_with_and(self, scenario_sessions: list[Session]) -> None:
        criteria = SessionFilter(category_id="work", search_query="draft")
        assert ids(filter_sessions(scenario_sessions, criteria)) == ["old"]

    def test_idempotent(self, scenario_sessions: list[Session]) -> None:
        criteria = SessionFilter(category_id="work")
        once = filter_sessions(scenario_sessions, criteria)
        assert filter_sessions(once, criteria) == once

    def test_adding_criterion_only_narrows(self, scenario_sessions: list[Session]) -> None:
        broad = filter_sessions(scenario_sessions, SessionFilter(category_id="work"))
        narrow = filter_sessions(scenario_sessions, SessionFilter(category_id="work", search_query="code"))
        assert set(ids(narrow)) <= set(ids(broad))

    def test_does_not_mutate_input(self, scenario_sessions: list[Session]) -> None:
        before = list(scenario_sessions)
        filter_sessions(scenario_sessions, SessionFilter(category_id="work"))
        assert scenario_sessions == before


class TestTimeRanges:
    """Tests for range_start and sessions_in_range."""

    def test_week_is_rolling_seven_days(self) -> None:
        assert range_start("week", NOW) == NOW - timedelta(days=7)

    def test_month_starts_on_first(self) -> None:
        assert range_start("month", NOW) == datetime(2026, 10, 1, tzinfo=UTC)

    def test_year_starts_on_january_first(self) -> None:
        assert range_start("year", NOW) == datetime(2026, 1, 1, tzinfo=UTC)

    def test_unknown_range_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown time range"):
            range_start("decade", NOW)  # type: ignore[arg-type]

    def test_week_excludes_ten_day_old_session(self, scenario_sessions: list[Session]) -> None:
        result = sessions_in_range(scenario_sessions, "week", NOW)
        assert ids(result) == ["t1", "t2", "t3", "y1", "y2"]

    def test_month_and_year_include_everything(self, scenario_sessions: list[Session]) -> None:
        assert len(sessions_in_range(scenario_sessions, "month", NOW)) == 6
        assert len(sessions_in_range(scenario_sessions, "year", NOW)) == 6

    def test_previous_month_excluded(self) -> None:
        sessions = [
            make_session("sep", datetime(2026, 9, 30, 23, 0, tzinfo=UTC), 10),
            make_session("oct", datetime(2026, 10, 1, 0, 0, tzinfo=UTC), 10),
        ]
        assert ids(sessions_in_range(sessions, "month", NOW)) == ["oct"]

    def test_malformed_dropped(self) -> None:
        assert sessions_in_range([make_session("bad", "nope", 10)], "year", NOW) == []


class TestSortByStartedDesc:
    """Tests for sort_by_started_desc."""

    def test_newest_first(self, scenario_sessions: list[Session]) -> None:
        result = sort_by_started_desc(scenario_sessions)
        assert ids(result) == ["t3", "t2", "t1", "y2", "y1", "old"]

    def test_malformed_sink_to_end(self) -> None:
        sessions = [
            make_session("bad1", "x", 1),
            make_session("a", NOW - timedelta(days=1), 1),
            make_session("bad2", "y", 1),
            make_session("b", NOW, 1),
        ]
        assert ids(sort_by_started_desc(sessions)) == ["b", "a", "bad1", "bad2"]

    def test_mixed_naive_and_aware(self) -> None:
        sessions = [
            make_session("naive", "2026-10-17T12:00:00", 1),
            make_session("aware", NOW, 1),
        ]
        assert ids(sort_by_started_desc(sessions)) == ["aware", "naive"]
