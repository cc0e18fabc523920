"""Aggregation of projected records by local-calendar dimensions.

Groups carry count, sum and average of amounts over records whose status is
in an explicitly configured allowed set. Output is sorted by the dimension
tuple so results are reproducible regardless of input order.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from ..core.models import ProjectedRecord, RecordStatus, parse_statuses
from ..core.time import parse_local_date
from ..observability.loguru_config import get_logger, timing_context

__all__ = [
    "AggregationEngine",
    "DailyAnalysis",
    "Dimension",
    "Group",
    "TenantRanking",
    "build_daily_analysis",
    "parse_dimensions",
]

log = get_logger("aggregation")


class Dimension(str, Enum):
    LOCAL_DATE = "local_date"
    LOCAL_HOUR = "local_hour"
    TIMEZONE = "timezone"
    TENANT_ID = "tenant_id"
    DAY_TYPE = "day_type"
    COUNTRY = "country"

    def value_of(self, record: ProjectedRecord) -> Any:
        if self is Dimension.LOCAL_DATE:
            return record.local_date
        if self is Dimension.LOCAL_HOUR:
            return record.local_hour
        if self is Dimension.TIMEZONE:
            return record.timezone
        if self is Dimension.TENANT_ID:
            return record.tenant_id
        if self is Dimension.DAY_TYPE:
            return record.day_type
        return record.tenant.country or ""


def parse_dimensions(values: Iterable[str | Dimension]) -> tuple[Dimension, ...]:
    """Normalize dimension names into an ordered, de-duplicated tuple.

    Raises
    ------
    ValueError
        If a name is not a known dimension
    """
    seen: list[Dimension] = []
    for value in values:
        try:
            dim = value if isinstance(value, Dimension) else Dimension(str(value).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(d.value for d in Dimension)
            raise ValueError(f"Unknown dimension: {value!r} (allowed: {allowed})") from exc
        if dim not in seen:
            seen.append(dim)
    return tuple(seen)


@dataclass
class Group:
    """One aggregation bucket.

    Attributes
    ----------
    key : tuple
        Dimension values, in the order the dimensions were requested
    dimensions : tuple[Dimension, ...]
        Dimensions the key corresponds to
    count : int
        Number of records in the group
    total_amount : Decimal
        Sum of amounts
    processing_count : int
        Records carrying a payment instant
    total_processing_minutes : float
        Sum of payment processing minutes over those records
    """

    key: tuple[Any, ...]
    dimensions: tuple[Dimension, ...]
    count: int = 0
    total_amount: Decimal = Decimal("0")
    processing_count: int = 0
    total_processing_minutes: float = 0.0
    tenant_names: dict[str, str] = field(default_factory=dict)

    def add(self, record: ProjectedRecord) -> None:
        self.count += 1
        self.total_amount += record.amount
        self.tenant_names.setdefault(record.tenant_id, record.tenant.name)
        if record.payment_processing_minutes is not None:
            self.processing_count += 1
            self.total_processing_minutes += record.payment_processing_minutes

    @property
    def avg_amount(self) -> Decimal:
        if not self.count:
            return Decimal("0")
        return self.total_amount / self.count

    @property
    def avg_processing_minutes(self) -> float | None:
        if not self.processing_count:
            return None
        return self.total_processing_minutes / self.processing_count

    def value(self, dimension: Dimension) -> Any:
        return self.key[self.dimensions.index(dimension)]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        values = {
            dim.value: (val.isoformat() if isinstance(val, date) else val)
            for dim, val in zip(self.dimensions, self.key)
        }
        return {
            **values,
            "order_count": self.count,
            "total_amount": float(self.total_amount),
            "avg_amount": float(self.avg_amount),
            "avg_processing_minutes": self.avg_processing_minutes,
        }


@dataclass(frozen=True)
class TenantRanking:
    rank: int
    tenant_id: str
    tenant_name: str
    timezone: str
    order_count: int
    total_amount: Decimal
    avg_amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "merchant_id": self.tenant_id,
            "merchant_name": self.tenant_name,
            "timezone": self.timezone,
            "order_count": self.order_count,
            "total_amount": float(self.total_amount),
            "avg_amount": float(self.avg_amount),
        }


def _sort_key(key: tuple[Any, ...]) -> tuple[Any, ...]:
    # Dimension values are homogeneous per position; None sorts first.
    return tuple((value is not None, value) for value in key)


class AggregationEngine:
    """Group and rank projected records.

    Parameters
    ----------
    allowed_statuses
        Statuses that take part in aggregates (e.g. ``COMPLETED_STATUSES``,
        or ``ALL_STATUSES`` for no filtering). Required: there is no implicit
        default inside the engine.

    Example
    -------
    >>> engine = AggregationEngine(COMPLETED_STATUSES)
    >>> groups = engine.aggregate(projected, ["local_date", "tenant_id"])
    """

    def __init__(self, allowed_statuses: Iterable[str | RecordStatus]) -> None:
        self.allowed_statuses = parse_statuses(allowed_statuses)

    def filter(self, records: Iterable[ProjectedRecord]) -> list[ProjectedRecord]:
        """Records whose status is in the allowed set."""
        return [record for record in records if record.status in self.allowed_statuses]

    def aggregate(
        self,
        records: Sequence[ProjectedRecord],
        dimensions: Iterable[str | Dimension],
    ) -> list[Group]:
        """Group records by the given dimensions.

        Parameters
        ----------
        records
            Projected records
        dimensions
            Ordered dimension names; an empty set yields one overall group

        Returns
        -------
        list[Group]
            Groups sorted ascending by dimension tuple; empty for empty input
        """
        dims = parse_dimensions(dimensions)
        groups: dict[tuple[Any, ...], Group] = {}

        with timing_context(
            "aggregate",
            component="aggregation",
            batch_size=len(records),
            dimensions=[d.value for d in dims],
        ) as ctx:
            for record in self.filter(records):
                key = tuple(dim.value_of(record) for dim in dims)
                group = groups.get(key)
                if group is None:
                    group = groups[key] = Group(key=key, dimensions=dims)
                group.add(record)
            ctx["groups"] = len(groups)

        return [groups[key] for key in sorted(groups, key=_sort_key)]

    def total(self, records: Sequence[ProjectedRecord]) -> Group:
        """Ungrouped totals over the allowed records."""
        overall = Group(key=(), dimensions=())
        for record in self.filter(records):
            overall.add(record)
        return overall

    def top_n(
        self,
        records: Sequence[ProjectedRecord],
        n: int = 10,
        dimension: str | Dimension = Dimension.TENANT_ID,
    ) -> list[Group]:
        """Top ``n`` groups of a single dimension by summed amount.

        Ties on amount are broken by ascending dimension value.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        groups = self.aggregate(records, [dimension])
        ranked = sorted(groups, key=lambda g: (-g.total_amount, _sort_key(g.key)))
        return ranked[:n]

    def rank_tenants(self, records: Sequence[ProjectedRecord], n: int = 10) -> list[TenantRanking]:
        """Top ``n`` tenants by summed amount, ties by ascending tenant id."""
        timezones = {record.tenant_id: record.timezone for record in records}
        rankings = []
        for position, group in enumerate(self.top_n(records, n, Dimension.TENANT_ID), start=1):
            tenant_id = group.key[0]
            rankings.append(
                TenantRanking(
                    rank=position,
                    tenant_id=tenant_id,
                    tenant_name=group.tenant_names.get(tenant_id, ""),
                    timezone=timezones[tenant_id],
                    order_count=group.count,
                    total_amount=group.total_amount,
                    avg_amount=group.avg_amount,
                )
            )
        return rankings


@dataclass
class DailyAnalysis:
    """Per-local-date analysis: totals, hourly breakdown, zone stats, top tenants."""

    local_date: date
    total_orders: int
    total_amount: Decimal
    hourly_breakdown: list[Group]
    timezone_stats: list[Group]
    top_tenants: list[TenantRanking]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.local_date.isoformat(),
            "total_orders": self.total_orders,
            "total_amount": float(self.total_amount),
            "hourly_breakdown": [g.to_dict() for g in self.hourly_breakdown],
            "timezone_stats": [g.to_dict() for g in self.timezone_stats],
            "top_merchants": [r.to_dict() for r in self.top_tenants],
        }


def build_daily_analysis(
    records: Sequence[ProjectedRecord],
    local_date: str | date,
    engine: AggregationEngine,
    top_n: int = 10,
) -> DailyAnalysis:
    """Build the analysis for one local date.

    Only records whose *local* date equals ``local_date`` take part, so a
    tenant in Tokyo and one in Sao Paulo contribute to the same report by
    their own calendars.

    Parameters
    ----------
    records
        Projected records (any dates; filtered here)
    local_date
        ``YYYY-MM-DD`` local date
    engine
        Aggregation engine carrying the statuses that count
    top_n
        Number of tenants in the ranking

    Raises
    ------
    InvalidDateFormat
        If ``local_date`` is malformed
    """
    day = parse_local_date(local_date)
    day_records = [record for record in records if record.local_date == day]

    overall = engine.total(day_records)
    timezone_stats = sorted(
        engine.aggregate(day_records, [Dimension.TIMEZONE, Dimension.COUNTRY]),
        key=lambda g: (-g.total_amount, _sort_key(g.key)),
    )

    log.debug("Built daily analysis", local_date=day.isoformat(), records=len(day_records))

    return DailyAnalysis(
        local_date=day,
        total_orders=overall.count,
        total_amount=overall.total_amount,
        hourly_breakdown=engine.aggregate(day_records, [Dimension.LOCAL_HOUR]),
        timezone_stats=timezone_stats,
        top_tenants=engine.rank_tenants(day_records, top_n),
    )
