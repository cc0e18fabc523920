"""Project UTC instants onto a zone's local calendar."""

from __future__ import annotations

from datetime import datetime

from .models import LocalDecomposition
from .registry import ResolvedZone
from .time import WEEKDAY_NAMES, day_of_week, ensure_utc

__all__ = ["project"]


def project(instant: datetime, zone: ResolvedZone) -> LocalDecomposition:
    """Decompose a UTC instant into local calendar attributes.

    The offset is the zone's rule-derived offset at this exact instant, so the
    same zone yields different offsets on either side of a DST transition.
    ``local_date`` is taken from the local wall clock and may differ from the
    UTC calendar date.

    Parameters
    ----------
    instant
        UTC instant (naive values are taken as UTC)
    zone
        Resolved timezone

    Returns
    -------
    LocalDecomposition
        Local date, hour, day of week (0=Sunday), weekday name and offset

    Example
    -------
    >>> from datetime import UTC
    >>> from tzview.core.registry import TimezoneRegistry
    >>> tokyo = TimezoneRegistry().resolve("Asia/Tokyo")
    >>> project(datetime(2024, 8, 19, 23, 30, tzinfo=UTC), tokyo).local_date.isoformat()
    '2024-08-20'
    """
    local_time = ensure_utc(instant).astimezone(zone.tzinfo)
    offset = local_time.utcoffset()
    dow = day_of_week(local_time.date())

    return LocalDecomposition(
        local_time=local_time,
        local_date=local_time.date(),
        local_hour=local_time.hour,
        local_day_of_week=dow,
        local_weekday=WEEKDAY_NAMES[dow],
        timezone_offset=int(offset.total_seconds()) if offset is not None else 0,
    )
