"""Tests for UTC parsing, local-date parsing and day-of-week numbering."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from tzview.core.errors import InvalidDateFormat, InvalidInstantFormat
from tzview.core.time import (
    WEEKDAY_NAMES,
    day_of_week,
    ensure_utc,
    format_offset,
    format_utc_iso8601,
    get_current_utc,
    parse_local_date,
    parse_utc_iso8601,
)


class TestParseUtc:
    def test_zulu_suffix(self):
        dt = parse_utc_iso8601("2024-08-19T23:30:00Z")

        assert dt == datetime(2024, 8, 19, 23, 30, tzinfo=UTC)
        assert dt.tzinfo is UTC

    def test_offset_is_normalized_to_utc(self):
        dt = parse_utc_iso8601("2024-08-19T20:30:00-03:00")

        assert dt == datetime(2024, 8, 19, 23, 30, tzinfo=UTC)
        assert dt.utcoffset() == timedelta(0)

    def test_naive_string_taken_as_utc(self):
        assert parse_utc_iso8601("2024-08-19T23:30:00") == datetime(2024, 8, 19, 23, 30, tzinfo=UTC)

    def test_datetime_passthrough(self):
        aware = datetime(2024, 8, 19, 8, 30, tzinfo=timezone(timedelta(hours=9)))

        assert parse_utc_iso8601(aware) == datetime(2024, 8, 18, 23, 30, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["", "   ", "yesterday", "2024-13-01T00:00:00Z", None, 12])
    def test_invalid(self, value):
        with pytest.raises(InvalidInstantFormat):
            parse_utc_iso8601(value)


class TestParseLocalDate:
    def test_valid(self):
        assert parse_local_date("2024-08-19") == date(2024, 8, 19)

    def test_date_passthrough(self):
        assert parse_local_date(date(2024, 2, 29)) == date(2024, 2, 29)

    @pytest.mark.parametrize(
        "value",
        ["2024/08/19", "19-08-2024", "2024-8-19", "2024-02-30", "2024-08-19T00:00:00", ""],
    )
    def test_invalid(self, value):
        with pytest.raises(InvalidDateFormat):
            parse_local_date(value)

    def test_datetime_rejected(self):
        with pytest.raises(InvalidDateFormat):
            parse_local_date(datetime(2024, 8, 19))


class TestDayOfWeek:
    def test_sunday_is_zero(self):
        assert day_of_week(date(2024, 8, 18)) == 0
        assert WEEKDAY_NAMES[0] == "Sunday"

    def test_monday_and_saturday(self):
        assert day_of_week(date(2024, 8, 19)) == 1
        assert day_of_week(date(2024, 8, 24)) == 6
        assert WEEKDAY_NAMES[day_of_week(date(2024, 8, 24))] == "Saturday"


class TestFormatting:
    def test_format_utc_iso8601(self):
        dt = datetime(2024, 8, 19, 20, 30, tzinfo=timezone(timedelta(hours=-3)))

        assert format_utc_iso8601(dt) == "2024-08-19T23:30:00+00:00"

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(0, "+00:00"), (32400, "+09:00"), (-10800, "-03:00"), (20700, "+05:45"), (-34200, "-09:30")],
    )
    def test_format_offset(self, seconds, expected):
        assert format_offset(seconds) == expected

    def test_ensure_utc_naive(self):
        assert ensure_utc(datetime(2024, 1, 1)).tzinfo is UTC

    def test_current_utc_is_aware(self):
        assert get_current_utc().utcoffset() == timedelta(0)
