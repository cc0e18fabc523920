"""Local-day windows in UTC with DST awareness.

A tenant's local calendar day maps to a UTC interval that may be 23, 24 or
25 hours long. Record sources use these windows to fetch "everything on local
date D" from storage that is indexed by UTC instant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pytz

from ..core.errors import InvalidTimezone
from ..core.registry import TimezoneRegistry, get_default_registry
from ..core.time import format_utc_iso8601, parse_local_date

__all__ = [
    "LocalDayWindow",
    "compute_day_boundaries_utc",
    "compute_range_boundaries_utc",
    "local_day_window",
]


@dataclass(frozen=True)
class LocalDayWindow:
    """UTC window [start_utc, end_utc) for a local calendar day.

    Attributes
    ----------
    start_utc : datetime
        Local midnight in UTC (inclusive)
    end_utc : datetime
        Next local midnight in UTC (exclusive)
    local_date : date
        The local calendar day
    timezone : str
        IANA timezone name
    """

    start_utc: datetime
    end_utc: datetime
    local_date: date
    timezone: str

    @property
    def hours(self) -> float:
        return (self.end_utc - self.start_utc).total_seconds() / 3600

    @property
    def has_dst_transition(self) -> bool:
        return self.hours != 24.0

    def contains(self, instant: datetime) -> bool:
        return self.start_utc <= instant < self.end_utc

    def to_dict(self) -> dict[str, object]:
        return {
            "start_utc": format_utc_iso8601(self.start_utc),
            "end_utc": format_utc_iso8601(self.end_utc),
            "local_date": self.local_date.isoformat(),
            "timezone": self.timezone,
            "hours": self.hours,
        }


def _get_tz(timezone_str: str, registry: TimezoneRegistry | None = None) -> pytz.BaseTzInfo:
    # The registry decides which identifiers are valid; pytz only does the arithmetic
    (registry or get_default_registry()).resolve(timezone_str)
    try:
        return pytz.timezone(timezone_str)
    except (pytz.UnknownTimeZoneError, AttributeError, ValueError) as exc:
        raise InvalidTimezone(timezone_str) from exc


def _local_midnight_utc(tz: pytz.BaseTzInfo, day: date) -> datetime:
    """Earliest UTC instant whose local date is ``day``."""
    naive = datetime(day.year, day.month, day.day, 0, 0, 0)
    try:
        local = tz.localize(naive, is_dst=None)
    except pytz.AmbiguousTimeError:
        # Midnight happens twice (e.g. America/Havana fall back); the day starts at the first one
        local = tz.localize(naive, is_dst=True)
    except pytz.NonExistentTimeError:
        # Midnight is skipped (e.g. America/Santiago spring forward); the day starts at the jump
        local = tz.localize(naive, is_dst=False)
    return local.astimezone(pytz.UTC)


def local_day_window(
    local_date: str | date,
    timezone_str: str = "UTC",
    registry: TimezoneRegistry | None = None,
) -> LocalDayWindow:
    """Compute the UTC window for a local day.

    Parameters
    ----------
    local_date
        Local date (``YYYY-MM-DD`` string or date)
    timezone_str
        Timezone name (e.g., "America/New_York")
    registry
        Registry that validates the identifier (default: process-wide)

    Returns
    -------
    LocalDayWindow
        UTC boundaries of that local day

    Raises
    ------
    InvalidDateFormat
        If ``local_date`` is malformed
    InvalidTimezone
        If the timezone is unknown

    Examples
    --------
    >>> # DST spring forward in New York: 23-hour day
    >>> local_day_window("2024-03-10", "America/New_York").hours
    23.0
    """
    day = parse_local_date(local_date)
    tz = _get_tz(timezone_str, registry)

    return LocalDayWindow(
        start_utc=_local_midnight_utc(tz, day),
        end_utc=_local_midnight_utc(tz, day + timedelta(days=1)),
        local_date=day,
        timezone=timezone_str,
    )


def compute_day_boundaries_utc(local_date: str | date, timezone_str: str = "UTC") -> tuple[str, str]:
    """UTC boundaries of a local day as ISO-8601 strings."""
    window = local_day_window(local_date, timezone_str)
    return format_utc_iso8601(window.start_utc), format_utc_iso8601(window.end_utc)


def compute_range_boundaries_utc(
    start_date: str | date,
    end_date: str | date,
    timezone_str: str = "UTC",
) -> tuple[datetime, datetime]:
    """UTC window covering local days ``start_date`` through ``end_date`` inclusive.

    Raises
    ------
    InvalidDateFormat
        If either date is malformed
    ValueError
        If ``end_date`` precedes ``start_date``
    """
    first = local_day_window(start_date, timezone_str)
    last = local_day_window(end_date, timezone_str)
    if last.local_date < first.local_date:
        raise ValueError(
            f"Date range ends before it starts: {first.local_date.isoformat()} > {last.local_date.isoformat()}"
        )
    return first.start_utc, last.end_utc
