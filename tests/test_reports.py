"""Tests for aggregation and reports."""

from datetime import date
from io import StringIO

import pytest  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]

from flow_tracker.analysis.reports import (
    ReportGenerator,
    date_range,
    format_duration,
    format_live_duration,
    group_by_app,
    group_by_date,
    group_by_space,
)
from flow_tracker.core.models import TimeEntry, TrackingSpace

ENTRIES = [
    TimeEntry("s1", "Code", "2026-10-17", 600),
    TimeEntry("s1", "Terminal", "2026-10-19", 120),
    TimeEntry("s2", "Code", "2026-10-19", 300),
]


class TestFormatting:
    """Test duration formatting."""

    @pytest.mark.parametrize(  # type: ignore[misc]
        "seconds,expected",
        [(0, "0s"), (45, "45s"), (60, "1m"), (754, "12m"), (7500, "2h 5m")],
    )
    def test_format_duration(self, seconds: int, expected: str) -> None:
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize(  # type: ignore[misc]
        "seconds,expected",
        [(0, "0:00"), (65, "1:05"), (3725, "1:02:05")],
    )
    def test_format_live_duration(self, seconds: int, expected: str) -> None:
        assert format_live_duration(seconds) == expected


class TestDateRange:
    """Test named ranges."""

    def test_day(self) -> None:
        assert date_range("day", date(2026, 10, 19)) == ("2026-10-19", "2026-10-19")

    def test_week_is_last_seven_days(self) -> None:
        assert date_range("week", date(2026, 10, 19)) == ("2026-10-13", "2026-10-19")

    def test_month_is_last_thirty_days(self) -> None:
        assert date_range("month", date(2026, 3, 1)) == ("2026-01-31", "2026-03-01")

    def test_unknown_range(self) -> None:
        with pytest.raises(ValueError):
            date_range("year")


class TestGrouping:
    """Test aggregation helpers."""

    def test_group_by_app(self) -> None:
        assert group_by_app(ENTRIES) == [("Code", 900), ("Terminal", 120)]

    def test_group_by_date_fills_gaps(self) -> None:
        assert group_by_date(ENTRIES, "2026-10-17", "2026-10-19") == [
            ("2026-10-17", 600),
            ("2026-10-18", 0),
            ("2026-10-19", 420),
        ]

    def test_group_by_date_ignores_outside_range(self) -> None:
        assert group_by_date(ENTRIES, "2026-10-19", "2026-10-19") == [("2026-10-19", 420)]

    def test_group_by_space_uses_names(self) -> None:
        spaces = [TrackingSpace(name="Work", id="s1")]
        assert group_by_space(ENTRIES, spaces) == [("Work", 720), ("s2", 300)]


class TestReportGenerator:
    """Test rendered reports."""

    def render(self, entries: list[TimeEntry]) -> str:
        output = StringIO()
        generator = ReportGenerator(Console(file=output, width=120, no_color=True))
        generator.summary_report(
            entries, [TrackingSpace(name="Work", id="s1")], "2026-10-17", "2026-10-19", "Week"
        )
        return output.getvalue()

    def test_summary_report(self) -> None:
        text = self.render(ENTRIES)

        assert "Flow - Week" in text
        assert "Time by Space" in text
        assert "Work" in text
        assert "Terminal" in text
        assert "17m" in text

    def test_summary_report_empty(self) -> None:
        assert "No time recorded" in self.render([])
