"""Time utilities for tzview.

UTC discipline:
- every anchor instant is held as an aware UTC datetime
- ISO-8601 in, ISO-8601 out
- local dates are plain ``YYYY-MM-DD`` calendar dates
- day-of-week numbering is 0=Sunday ... 6=Saturday
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime

from .errors import InvalidDateFormat, InvalidInstantFormat

__all__ = [
    "WEEKDAY_NAMES",
    "day_of_week",
    "ensure_utc",
    "format_offset",
    "format_utc_iso8601",
    "get_current_utc",
    "parse_local_date",
    "parse_utc_iso8601",
]

# Indexed by day_of_week (0=Sunday)
WEEKDAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def get_current_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Convert a datetime to UTC.

    Naive datetimes are assumed to already be UTC.

    Parameters
    ----------
    dt
        Datetime (may be naive)

    Returns
    -------
    datetime
        Aware datetime in UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_utc_iso8601(dt: datetime) -> str:
    """Format datetime as ISO-8601 UTC string.

    Example
    -------
    >>> format_utc_iso8601(datetime(2024, 8, 19, 23, 30, tzinfo=UTC))
    '2024-08-19T23:30:00+00:00'
    """
    return ensure_utc(dt).isoformat()


def parse_utc_iso8601(value: str | datetime) -> datetime:
    """Parse an ISO-8601 string to a UTC datetime.

    Parameters
    ----------
    value
        ISO-8601 string (``Z`` suffix accepted) or a datetime

    Returns
    -------
    datetime
        Aware datetime in UTC

    Raises
    ------
    InvalidInstantFormat
        If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInstantFormat(value)

    iso_string = value.strip()
    # Zulu time
    if iso_string[-1] in "Zz":
        iso_string = iso_string[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(iso_string)
    except ValueError as exc:
        raise InvalidInstantFormat(value) from exc

    return ensure_utc(dt)


def parse_local_date(value: str | date) -> date:
    """Parse a ``YYYY-MM-DD`` local calendar date.

    Raises
    ------
    InvalidDateFormat
        If the value is not a valid date in that exact format
    """
    if isinstance(value, datetime):
        raise InvalidDateFormat(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        raise InvalidDateFormat(value)

    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidDateFormat(value) from exc


def day_of_week(dt: date) -> int:
    """Day of week with 0=Sunday ... 6=Saturday."""
    return dt.isoweekday() % 7


def format_offset(offset_seconds: int) -> str:
    """Format a UTC offset in seconds as ``+HH:MM`` / ``-HH:MM``.

    >>> format_offset(-10800)
    '-03:00'
    >>> format_offset(20700)
    '+05:45'
    """
    sign = "-" if offset_seconds < 0 else "+"
    minutes = abs(offset_seconds) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"
