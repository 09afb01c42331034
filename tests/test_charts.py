"""Tests for charts module."""

from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import NOW, make_session

from focus_insights.charts import ChartSeries, bucket_for_range
from focus_insights.models import Session


class TestWeekBuckets:
    """Tests for the seven-day layout."""

    def test_labels_end_on_today(self, scenario_sessions: list[Session]) -> None:
        """Verifies seven buckets ordered oldest to newest, ending on Saturday.

        Business context:
        The rightmost bar is always today so the user sees the current
        day's progress next to the previous six.

        Arrangement:
        NOW is Saturday 2026-10-17.

        Assertion Strategy:
        Labels run Sun..Sat with uppercase short labels.
        """
        series = bucket_for_range(scenario_sessions, "week", NOW)

        assert [p.label for p in series.points] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert series.points[0].short_label == "SUN"

    def test_values_in_hours(self, scenario_sessions: list[Session]) -> None:
        series = bucket_for_range(scenario_sessions, "week", NOW)

        assert series.points[-1].value_hours == pytest.approx(1.5)
        assert series.points[-2].value_hours == pytest.approx(1.0)
        assert sum(p.value_hours for p in series.points[:-2]) == 0
        assert series.max_value == pytest.approx(1.5)

    def test_max_value_floor_is_one(self) -> None:
        series = bucket_for_range([make_session("a", NOW, 15)], "week", NOW)
        assert series.points[-1].value_hours == pytest.approx(0.25)
        assert series.max_value == 1.0


class TestMonthBuckets:
    """Tests for the one-bucket-per-day layout."""

    def test_one_point_per_day(self, scenario_sessions: list[Session]) -> None:
        series = bucket_for_range(scenario_sessions, "month", NOW)

        assert len(series.points) == 31
        assert series.points[0].label == "1"
        assert series.points[-1].label == "31"

    def test_values_by_day(self, scenario_sessions: list[Session]) -> None:
        series = bucket_for_range(scenario_sessions, "month", NOW)
        values = [p.value_hours for p in series.points]

        assert values[16] == pytest.approx(1.5)
        assert values[15] == pytest.approx(1.0)
        assert values[6] == pytest.approx(1.0)
        assert all(v == 0 for v in values[17:])

    def test_future_days_forced_to_zero(self) -> None:
        """Verifies a session dated after today does not show in the month.

        Business context:
        Clock skew on a synced device can produce sessions "tomorrow";
        the bar for a day that has not happened yet must stay empty.
        """
        future = make_session("future", NOW + timedelta(days=3), 120)
        series = bucket_for_range([future], "month", NOW)
        assert all(p.value_hours == 0 for p in series.points)
        assert series.max_value == 1.0

    def test_february_length(self) -> None:
        series = bucket_for_range([], "month", NOW.replace(month=2, day=10))
        assert len(series.points) == 28


class TestYearBuckets:
    """Tests for the twelve-month layout."""

    def test_month_labels(self) -> None:
        series = bucket_for_range([], "year", NOW)
        assert len(series.points) == 12
        assert series.points[0].label == "January"
        assert series.points[0].short_label == "JAN"
        assert series.points[11].short_label == "DEC"

    def test_october_total(self, scenario_sessions: list[Session]) -> None:
        series = bucket_for_range(scenario_sessions, "year", NOW)
        assert series.points[9].value_hours == pytest.approx(3.5)
        assert series.max_value == pytest.approx(3.5)

    def test_other_years_ignored(self) -> None:
        last_year = make_session("ly", NOW - timedelta(days=365), 60)
        series = bucket_for_range([last_year], "year", NOW)
        assert all(p.value_hours == 0 for p in series.points)


class TestBucketErrors:
    """Tests for invalid input handling."""

    def test_unknown_range(self) -> None:
        with pytest.raises(ValueError, match="Unknown time range"):
            bucket_for_range([], "decade", NOW)  # type: ignore[arg-type]

    def test_malformed_sessions_left_out(self) -> None:
        series = bucket_for_range([make_session("bad", "nope", 60)], "week", NOW)
        assert all(p.value_hours == 0 for p in series.points)

    def test_to_dict(self) -> None:
        data = bucket_for_range([], "week", NOW).to_dict()
        assert isinstance(bucket_for_range([], "week", NOW), ChartSeries)
        assert len(data["points"]) == 7
        assert set(data["points"][0]) == {"label", "short_label", "value_hours"}
        assert data["max_value"] == 1.0
