"""Domain models: tenants, raw records and their local-calendar projections.

Tenants and raw records are owned by the storage collaborator; the core only
reads them. ``LocalDecomposition``, ``Classification`` and ``ProjectedRecord``
are derived per query and never persisted here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from .errors import InvalidRecord
from .time import ensure_utc, format_utc_iso8601

__all__ = [
    "ALL_STATUSES",
    "COMPLETED_STATUSES",
    "Classification",
    "LocalDecomposition",
    "ProjectedRecord",
    "RawRecord",
    "RecordStatus",
    "Tenant",
    "TenantStatus",
    "parse_statuses",
]

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class TenantStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class RecordStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


ALL_STATUSES: frozenset[RecordStatus] = frozenset(RecordStatus)
COMPLETED_STATUSES: frozenset[RecordStatus] = frozenset(
    {RecordStatus.PAID, RecordStatus.SHIPPED, RecordStatus.DELIVERED}
)


def _coerce_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidRecord(
            f"Invalid {field_name}: {value!r} (allowed: {allowed})",
            field=field_name,
            value=str(value),
        ) from exc


def parse_statuses(values: Any) -> frozenset[RecordStatus]:
    """Normalize an iterable of status names/enums into a frozenset.

    Raises
    ------
    InvalidRecord
        If any value is not a known record status
    """
    if isinstance(values, (str, RecordStatus)):
        values = [values]
    return frozenset(_coerce_enum(RecordStatus, value, "status") for value in values)


@dataclass(frozen=True)
class Tenant:
    """A merchant with exactly one timezone identifier.

    The identifier is only checked for shape here; resolution against the
    zone database happens in ``TimezoneRegistry``.
    """

    tenant_id: str
    name: str
    timezone: str
    status: TenantStatus = TenantStatus.ACTIVE
    code: str | None = None
    country: str = ""
    city: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if self.tenant_id is None or str(self.tenant_id).strip() == "":
            raise InvalidRecord("Tenant id is required", field="tenant_id")
        object.__setattr__(self, "tenant_id", str(self.tenant_id))

        if not isinstance(self.timezone, str) or not self.timezone.strip():
            raise InvalidRecord(
                f"Tenant {self.tenant_id} has no timezone identifier",
                field="timezone",
                tenant_id=self.tenant_id,
            )
        object.__setattr__(self, "timezone", self.timezone.strip())
        object.__setattr__(self, "status", _coerce_enum(TenantStatus, self.status, "tenant status"))

    @property
    def is_active(self) -> bool:
        return self.status is TenantStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tenant_id": self.tenant_id,
            "name": self.name,
            "code": self.code,
            "timezone": self.timezone,
            "status": self.status.value,
            "country": self.country,
            "city": self.city,
            "description": self.description,
        }


@dataclass(frozen=True)
class RawRecord:
    """An order-like event anchored at a UTC instant.

    Attributes
    ----------
    record_id : str
        Record identity
    tenant_id : str
        Owning tenant (must exist, need not be active)
    order_time_utc : datetime
        Anchor instant; the only source of derived local attributes
    amount : Decimal
        Monetary amount, strictly positive
    currency : str
        ISO 4217 style code, three uppercase letters
    status : RecordStatus
        Lifecycle status
    payment_time_utc : datetime | None
        Optional secondary instant (payment completion)
    order_number : str | None
        External order reference
    """

    record_id: str
    tenant_id: str
    order_time_utc: datetime
    amount: Decimal
    currency: str = "USD"
    status: RecordStatus = RecordStatus.PENDING
    payment_time_utc: datetime | None = None
    order_number: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "record_id", str(self.record_id))
        object.__setattr__(self, "tenant_id", str(self.tenant_id))

        if not isinstance(self.order_time_utc, datetime):
            raise InvalidRecord(
                f"Record {self.record_id}: order_time_utc must be a datetime",
                field="order_time_utc",
                record_id=self.record_id,
            )
        object.__setattr__(self, "order_time_utc", ensure_utc(self.order_time_utc))

        if self.payment_time_utc is not None:
            if not isinstance(self.payment_time_utc, datetime):
                raise InvalidRecord(
                    f"Record {self.record_id}: payment_time_utc must be a datetime",
                    field="payment_time_utc",
                    record_id=self.record_id,
                )
            object.__setattr__(self, "payment_time_utc", ensure_utc(self.payment_time_utc))

        try:
            amount = self.amount if isinstance(self.amount, Decimal) else Decimal(str(self.amount))
        except InvalidOperation as exc:
            raise InvalidRecord(
                f"Record {self.record_id}: invalid amount {self.amount!r}",
                field="amount",
                record_id=self.record_id,
            ) from exc
        if not amount.is_finite() or amount <= 0:
            raise InvalidRecord(
                f"Record {self.record_id}: amount must be > 0, got {self.amount!r}",
                field="amount",
                record_id=self.record_id,
            )
        object.__setattr__(self, "amount", amount)

        if not isinstance(self.currency, str) or not _CURRENCY_RE.match(self.currency):
            raise InvalidRecord(
                f"Record {self.record_id}: currency must be 3 uppercase letters, got {self.currency!r}",
                field="currency",
                record_id=self.record_id,
            )

        object.__setattr__(self, "status", _coerce_enum(RecordStatus, self.status, "status"))


@dataclass(frozen=True)
class LocalDecomposition:
    """Local calendar view of one UTC instant in one zone."""

    local_time: datetime
    local_date: date
    local_hour: int
    local_day_of_week: int
    local_weekday: str
    timezone_offset: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_time_local": self.local_time.isoformat(),
            "local_date": self.local_date.isoformat(),
            "local_hour": self.local_hour,
            "local_day_of_week": self.local_day_of_week,
            "local_weekday": self.local_weekday,
            "timezone_offset": self.timezone_offset,
        }


@dataclass(frozen=True)
class Classification:
    is_weekend: bool
    is_business_hour: bool

    @property
    def day_type(self) -> str:
        return "weekend" if self.is_weekend else "weekday"

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_weekend": self.is_weekend,
            "is_business_hour": self.is_business_hour,
            "day_type": self.day_type,
        }


@dataclass(frozen=True)
class ProjectedRecord:
    """RawRecord joined with its tenant, local decomposition and classification."""

    record: RawRecord
    tenant: Tenant
    decomposition: LocalDecomposition
    classification: Classification
    payment_time_local: datetime | None = None
    payment_processing_minutes: float | None = field(default=None)

    @property
    def tenant_id(self) -> str:
        return self.tenant.tenant_id

    @property
    def timezone(self) -> str:
        return self.tenant.timezone

    @property
    def amount(self) -> Decimal:
        return self.record.amount

    @property
    def status(self) -> RecordStatus:
        return self.record.status

    @property
    def local_date(self) -> date:
        return self.decomposition.local_date

    @property
    def local_hour(self) -> int:
        return self.decomposition.local_hour

    @property
    def day_type(self) -> str:
        return self.classification.day_type

    @property
    def crosses_date_boundary(self) -> bool:
        """True when the local date differs from the UTC calendar date."""
        return self.decomposition.local_date != self.record.order_time_utc.date()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        record = self.record
        return {
            "order_id": record.record_id,
            "order_number": record.order_number,
            "amount": float(record.amount),
            "currency": record.currency,
            "status": record.status.value,
            "merchant_id": self.tenant.tenant_id,
            "merchant_name": self.tenant.name,
            "timezone": self.tenant.timezone,
            "country": self.tenant.country,
            "city": self.tenant.city,
            "order_time_utc": format_utc_iso8601(record.order_time_utc),
            **self.decomposition.to_dict(),
            **self.classification.to_dict(),
            "payment_time_utc": (
                format_utc_iso8601(record.payment_time_utc) if record.payment_time_utc else None
            ),
            "payment_time_local": self.payment_time_local.isoformat() if self.payment_time_local else None,
            "payment_processing_minutes": self.payment_processing_minutes,
        }
