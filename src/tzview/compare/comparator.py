"""Cross-timezone comparison of a single UTC instant.

Answers "what time is it for each tenant right now?": the full local
projection per tenant plus summary statistics on date boundaries, business
hours and the spread of local hours.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from ..core.classifier import DEFAULT_POLICY, BusinessWindowPolicy, classify
from ..core.errors import EmptyTenantSet
from ..core.models import Classification, LocalDecomposition, Tenant
from ..core.projector import project
from ..core.registry import TimezoneRegistry, get_default_registry
from ..core.time import format_offset, format_utc_iso8601, parse_utc_iso8601
from ..observability.loguru_config import get_logger, timing_context

__all__ = [
    "DEMO_INSTANT",
    "Comparison",
    "ComparisonEntry",
    "ComparisonSummary",
    "CrossTimezoneComparator",
    "DateBoundaryDemo",
    "DemoRow",
    "DemoSummary",
    "hour_difference",
]

log = get_logger("compare")

DEMO_INSTANT = datetime(2024, 8, 19, 0, 0, 0, tzinfo=UTC)


def hour_difference(local_hour: int, utc_hour: int) -> int:
    """Signed wall-clock hour difference normalized into (-12, +12].

    >>> hour_difference(13, 0)
    -11
    >>> hour_difference(0, 12)
    12
    """
    return (local_hour - utc_hour + 11) % 24 - 11


def _date_relation(local: date, utc: date) -> int:
    return (local > utc) - (local < utc)


@dataclass(frozen=True)
class ComparisonEntry:
    tenant: Tenant
    decomposition: LocalDecomposition
    classification: Classification
    hour_difference: int

    @property
    def time_difference(self) -> str:
        return f"{self.hour_difference:+d}h"

    def to_dict(self) -> dict[str, Any]:
        return {
            "merchant_id": self.tenant.tenant_id,
            "merchant_name": self.tenant.name,
            "timezone": self.tenant.timezone,
            "local_time": self.decomposition.local_time.strftime("%Y-%m-%d %H:%M:%S"),
            "local_date": self.decomposition.local_date.isoformat(),
            "hour": self.decomposition.local_hour,
            "local_day_of_week": self.decomposition.local_day_of_week,
            "day_of_week": self.decomposition.local_weekday,
            "timezone_offset": self.decomposition.timezone_offset,
            **self.classification.to_dict(),
            "hour_difference": self.hour_difference,
            "time_difference": self.time_difference,
        }


@dataclass(frozen=True)
class ComparisonSummary:
    """Summary statistics over all compared tenants.

    Attributes
    ----------
    total : int
        Number of tenants compared
    next_day_count, same_day_count, prev_day_count : int
        Tenants whose local date is after / equal to / before the UTC date
    business_hour_count : int
        Tenants currently inside business hours
    weekend_count : int
        Tenants currently on a weekend day
    average_hour : float
        Mean local hour across tenants
    min_hour, max_hour : int
        Local-hour spread
    """

    total: int
    next_day_count: int
    same_day_count: int
    prev_day_count: int
    business_hour_count: int
    weekend_count: int
    average_hour: float
    min_hour: int
    max_hour: int

    @property
    def hour_spread(self) -> int:
        return self.max_hour - self.min_hour

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "next_day_count": self.next_day_count,
            "same_day_count": self.same_day_count,
            "prev_day_count": self.prev_day_count,
            "business_hour_count": self.business_hour_count,
            "weekend_count": self.weekend_count,
            "average_hour": self.average_hour,
            "min_hour": self.min_hour,
            "max_hour": self.max_hour,
            "timezone_spread_hours": self.hour_spread,
        }


@dataclass(frozen=True)
class Comparison:
    utc_time: datetime
    entries: list[ComparisonEntry]
    summary: ComparisonSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "utc_time": format_utc_iso8601(self.utc_time),
            "comparisons": [entry.to_dict() for entry in self.entries],
            "statistics": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class DemoRow:
    tenant: Tenant
    local_time: datetime
    local_date: date
    offset_seconds: int
    is_next_day: bool
    is_prev_day: bool

    @property
    def offset(self) -> str:
        return format_offset(self.offset_seconds)

    def to_dict(self) -> dict[str, Any]:
        return {
            "merchant_id": self.tenant.tenant_id,
            "timezone": self.tenant.timezone,
            "country": self.tenant.country,
            "city": self.tenant.city,
            "local_time": self.local_time.strftime("%Y-%m-%d %H:%M:%S"),
            "local_date": self.local_date.isoformat(),
            "offset": self.offset,
            "is_next_day": self.is_next_day,
            "is_prev_day": self.is_prev_day,
        }


@dataclass(frozen=True)
class DemoSummary:
    total_timezones: int
    total_rows: int
    next_day_count: int
    same_day_count: int
    prev_day_count: int
    min_offset_hours: float
    max_offset_hours: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_timezones": self.total_timezones,
            "total_rows": self.total_rows,
            "next_day_count": self.next_day_count,
            "same_day_count": self.same_day_count,
            "prev_day_count": self.prev_day_count,
            "min_offset_hours": self.min_offset_hours,
            "max_offset_hours": self.max_offset_hours,
        }


@dataclass(frozen=True)
class DateBoundaryDemo:
    utc_time: datetime
    rows: list[DemoRow]
    summary: DemoSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "utc_time": format_utc_iso8601(self.utc_time),
            "description": "The same UTC instant on each tenant's local calendar",
            "timezones": [row.to_dict() for row in self.rows],
            "summary": self.summary.to_dict(),
        }


class CrossTimezoneComparator:
    """Project one instant across a set of tenant timezones.

    Business-hour and weekend flags use the same ``BusinessWindowPolicy`` as
    record classification.
    """

    def __init__(
        self,
        registry: TimezoneRegistry | None = None,
        policy: BusinessWindowPolicy = DEFAULT_POLICY,
    ) -> None:
        self.registry = registry or get_default_registry()
        self.policy = policy

    def compare(self, instant: str | datetime, tenants: Sequence[Tenant]) -> Comparison:
        """Compare ``instant`` across ``tenants``.

        Parameters
        ----------
        instant
            UTC instant (ISO-8601 string or datetime)
        tenants
            Tenants to compare; output keeps their order

        Returns
        -------
        Comparison
            Per-tenant projections and summary

        Raises
        ------
        EmptyTenantSet
            If ``tenants`` is empty
        InvalidInstantFormat
            If ``instant`` cannot be parsed
        InvalidTimezone
            If any tenant's timezone does not resolve
        """
        utc_time = parse_utc_iso8601(instant)
        if not tenants:
            raise EmptyTenantSet()

        with timing_context("compare", component="compare", tenants=len(tenants)):
            entries = []
            for tenant in tenants:
                decomp = project(utc_time, self.registry.resolve(tenant.timezone))
                entries.append(
                    ComparisonEntry(
                        tenant=tenant,
                        decomposition=decomp,
                        classification=classify(decomp, self.policy),
                        hour_difference=hour_difference(decomp.local_hour, utc_time.hour),
                    )
                )

        return Comparison(utc_time=utc_time, entries=entries, summary=self._summarize(utc_time, entries))

    def _summarize(self, utc_time: datetime, entries: list[ComparisonEntry]) -> ComparisonSummary:
        utc_date = utc_time.date()
        relations = [_date_relation(e.decomposition.local_date, utc_date) for e in entries]
        hours = [e.decomposition.local_hour for e in entries]

        return ComparisonSummary(
            total=len(entries),
            next_day_count=relations.count(1),
            same_day_count=relations.count(0),
            prev_day_count=relations.count(-1),
            business_hour_count=sum(1 for e in entries if e.classification.is_business_hour),
            weekend_count=sum(1 for e in entries if e.classification.is_weekend),
            average_hour=sum(hours) / len(hours),
            min_hour=min(hours),
            max_hour=max(hours),
        )

    def demo(self, tenants: Sequence[Tenant], instant: str | datetime | None = None) -> DateBoundaryDemo:
        """Show how one UTC instant lands on each tenant's calendar.

        Rows are sorted by timezone, then tenant id. Defaults to
        2024-08-19T00:00:00Z.

        Raises
        ------
        EmptyTenantSet
            If ``tenants`` is empty
        """
        utc_time = DEMO_INSTANT if instant is None else parse_utc_iso8601(instant)
        if not tenants:
            raise EmptyTenantSet()

        utc_date = utc_time.date()
        rows = []
        for tenant in sorted(tenants, key=lambda t: (t.timezone, t.tenant_id)):
            decomp = project(utc_time, self.registry.resolve(tenant.timezone))
            relation = _date_relation(decomp.local_date, utc_date)
            rows.append(
                DemoRow(
                    tenant=tenant,
                    local_time=decomp.local_time,
                    local_date=decomp.local_date,
                    offset_seconds=decomp.timezone_offset,
                    is_next_day=relation > 0,
                    is_prev_day=relation < 0,
                )
            )

        offsets = [row.offset_seconds / 3600 for row in rows]
        summary = DemoSummary(
            total_timezones=len({row.tenant.timezone for row in rows}),
            total_rows=len(rows),
            next_day_count=sum(1 for row in rows if row.is_next_day),
            same_day_count=sum(1 for row in rows if not row.is_next_day and not row.is_prev_day),
            prev_day_count=sum(1 for row in rows if row.is_prev_day),
            min_offset_hours=min(offsets),
            max_offset_hours=max(offsets),
        )
        log.debug("Built date-boundary demo", utc_time=format_utc_iso8601(utc_time), rows=len(rows))
        return DateBoundaryDemo(utc_time=utc_time, rows=rows, summary=summary)
