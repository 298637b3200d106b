"""Tests for date helpers."""

from datetime import date, datetime

import pytest

from utils.date_helpers import (
    add_months,
    clamp_day_to_month,
    format_datetime_display,
    format_display_date,
    friendly_month,
    month_range,
    month_str,
    next_month,
    parse_date,
    parse_display_date,
    parse_month,
    prev_month,
    start_of_next_month,
)


class TestMonths:
    """Test YYYY-MM month arithmetic."""

    def test_month_range_leap_february(self):
        assert month_range("2024-02") == ("2024-02-01", "2024-02-29")

    def test_month_range_rejects_garbage(self):
        with pytest.raises(ValueError):
            month_range("fevereiro")

    def test_prev_and_next_cross_year(self):
        assert prev_month("2024-01") == "2023-12"
        assert next_month("2024-12") == "2025-01"
        assert next_month("2024-05") == "2024-06"

    def test_month_str_and_parse(self):
        assert month_str(3, 2024) == "2024-03"
        assert parse_month("2024-03") == date(2024, 3, 1)
        assert parse_month("") is None

    def test_add_months_clamps_day(self):
        """Test Jan 31 + 1 month lands on the last day of February."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
        assert add_months(date(2024, 3, 10), -3) == date(2023, 12, 10)

    def test_clamp_day_to_month(self):
        assert clamp_day_to_month(2023, 2, 31) == 28
        assert clamp_day_to_month(2024, 4, 31) == 30
        assert clamp_day_to_month(2024, 5, 10) == 10

    def test_start_of_next_month(self):
        assert start_of_next_month(date(2024, 12, 15)) == date(2025, 1, 1)
        assert start_of_next_month(date(2024, 1, 31)) == date(2024, 2, 1)

    def test_friendly_month(self):
        assert friendly_month("2026-02") == "Fevereiro 2026"
        assert friendly_month("bad") == "bad"


class TestParsing:
    """Test parsing and display conversions."""

    def test_parse_date_formats(self):
        assert parse_date("2024-03-05") == date(2024, 3, 5)
        assert parse_date("05/03/2024") == date(2024, 3, 5)
        assert parse_date("2024-03-05 14:30:00") == date(2024, 3, 5)
        assert parse_date(datetime(2024, 3, 5, 9, 0)) == date(2024, 3, 5)

    def test_parse_date_failure_returns_none(self):
        assert parse_date("garbage") is None
        assert parse_date("") is None
        assert parse_date(None) is None

    def test_format_display_date(self):
        assert format_display_date("2024-03-05") == "05/03/2024"
        assert format_display_date("2024-03-05", "YYYY-MM-DD") == "2024-03-05"
        assert format_display_date("2024-03-05", "MM/DD/YYYY") == "03/05/2024"
        assert format_display_date("not a date") == "not a date"

    def test_parse_display_date_falls_back_to_iso(self):
        assert parse_display_date("05/03/2024", "DD/MM/YYYY") == date(2024, 3, 5)
        assert parse_display_date("2024-03-05", "DD/MM/YYYY") == date(2024, 3, 5)
        assert parse_display_date("", "DD/MM/YYYY") is None

    def test_format_datetime_display(self):
        assert format_datetime_display("2024-03-05 14:30:00") == "05/03/2024 14:30"
        assert format_datetime_display("") == ""
