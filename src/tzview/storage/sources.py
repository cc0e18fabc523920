"""Tenant and raw-record sources.

The core never talks to storage itself; request handlers fetch tenants and
records through these interfaces and hand plain values to the core. The
in-memory implementations back the CLI and tests, loaded from YAML or JSON
fixture files.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol

import yaml

from ..core.errors import InvalidRecord, UnknownTenant
from ..core.models import RawRecord, RecordStatus, Tenant, parse_statuses
from ..core.time import parse_utc_iso8601
from ..observability.loguru_config import get_logger
from ..rollups.time_windows import local_day_window

__all__ = [
    "DEFAULT_LIMIT",
    "Fixture",
    "InMemoryRecordSource",
    "InMemoryTenantLookup",
    "RawRecordSource",
    "TenantLookup",
    "load_fixture",
    "record_from_dict",
    "tenant_from_dict",
]

log = get_logger("storage")

DEFAULT_LIMIT = 20


class TenantLookup(Protocol):
    def get_tenants(self, tenant_ids: Iterable[str]) -> dict[str, Tenant]:
        """Return tenants for the given ids; unknown ids are simply absent."""
        ...

    def list_tenants(self) -> list[Tenant]:
        ...


class RawRecordSource(Protocol):
    def fetch(
        self,
        start_utc: datetime | None = None,
        end_utc: datetime | None = None,
        tenant_id: str | None = None,
        statuses: Iterable[str | RecordStatus] | None = None,
        limit: int | None = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> list[RawRecord]:
        ...


class InMemoryTenantLookup:
    def __init__(self, tenants: Iterable[Tenant] = ()) -> None:
        self._tenants: dict[str, Tenant] = {}
        for tenant in tenants:
            if tenant.tenant_id in self._tenants:
                raise InvalidRecord(f"Duplicate tenant id: {tenant.tenant_id}", tenant_id=tenant.tenant_id)
            self._tenants[tenant.tenant_id] = tenant

    def get_tenants(self, tenant_ids: Iterable[str]) -> dict[str, Tenant]:
        return {str(tid): self._tenants[str(tid)] for tid in tenant_ids if str(tid) in self._tenants}

    def get(self, tenant_id: str) -> Tenant:
        """Get one tenant.

        Raises
        ------
        UnknownTenant
            If the id is not known
        """
        try:
            return self._tenants[str(tenant_id)]
        except KeyError:
            raise UnknownTenant([str(tenant_id)]) from None

    def list_tenants(self) -> list[Tenant]:
        """All tenants ordered by name, then id."""
        return sorted(self._tenants.values(), key=lambda t: (t.name, t.tenant_id))

    def __len__(self) -> int:
        return len(self._tenants)


class InMemoryRecordSource:
    """Record source over an in-memory list.

    ``fetch`` orders by ``order_time_utc`` descending (ties by record id) and
    paginates; ``limit=None`` returns every match.
    """

    def __init__(self, records: Iterable[RawRecord] = ()) -> None:
        self._records = list(records)

    def fetch(
        self,
        start_utc: datetime | None = None,
        end_utc: datetime | None = None,
        tenant_id: str | None = None,
        statuses: Iterable[str | RecordStatus] | None = None,
        limit: int | None = DEFAULT_LIMIT,
        offset: int = 0,
    ) -> list[RawRecord]:
        """Fetch records matching the filters.

        Parameters
        ----------
        start_utc
            Inclusive lower bound on ``order_time_utc``
        end_utc
            Exclusive upper bound on ``order_time_utc``
        tenant_id
            Restrict to one tenant
        statuses
            Restrict to these statuses
        limit
            Page size; non-positive values fall back to the default
        offset
            Records to skip; negative values are treated as 0

        Returns
        -------
        list[RawRecord]
            Matching records, newest first
        """
        allowed = parse_statuses(statuses) if statuses is not None else None
        start = parse_utc_iso8601(start_utc) if start_utc is not None else None
        end = parse_utc_iso8601(end_utc) if end_utc is not None else None

        matches = [
            record
            for record in self._records
            if (start is None or record.order_time_utc >= start)
            and (end is None or record.order_time_utc < end)
            and (tenant_id is None or record.tenant_id == str(tenant_id))
            and (allowed is None or record.status in allowed)
        ]
        # Two stable sorts: id ascending, then time descending
        matches.sort(key=lambda r: r.record_id)
        matches.sort(key=lambda r: r.order_time_utc, reverse=True)

        offset = max(offset, 0)
        if limit is None:
            return matches[offset:]
        if limit <= 0:
            limit = DEFAULT_LIMIT
        return matches[offset : offset + limit]

    def fetch_local_day(
        self,
        tenant: Tenant,
        local_date: str | date,
        statuses: Iterable[str | RecordStatus] | None = None,
    ) -> list[RawRecord]:
        """Every record of ``tenant`` on its own local calendar day."""
        window = local_day_window(local_date, tenant.timezone)
        return self.fetch(
            start_utc=window.start_utc,
            end_utc=window.end_utc,
            tenant_id=tenant.tenant_id,
            statuses=statuses,
            limit=None,
        )

    def all(self) -> list[RawRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)


def tenant_from_dict(data: Mapping[str, Any]) -> Tenant:
    """Build a tenant from a fixture mapping (``id`` or ``tenant_id`` key)."""
    try:
        return Tenant(
            tenant_id=data.get("tenant_id", data.get("id")),
            name=str(data.get("name", "")),
            timezone=data.get("timezone"),
            status=data.get("status", "active"),
            code=data.get("code"),
            country=str(data.get("country", "") or ""),
            city=str(data.get("city", "") or ""),
            description=str(data.get("description", "") or ""),
        )
    except AttributeError as exc:
        raise InvalidRecord(f"Tenant entry must be a mapping, got {data!r}") from exc


def record_from_dict(data: Mapping[str, Any]) -> RawRecord:
    """Build a raw record from a fixture mapping.

    Raises
    ------
    InvalidRecord
        On missing or malformed fields
    InvalidInstantFormat
        On unparsable timestamps
    """
    if not isinstance(data, Mapping):
        raise InvalidRecord(f"Record entry must be a mapping, got {data!r}")
    missing = [key for key in ("tenant_id", "order_time_utc", "amount") if data.get(key) is None]
    if missing or data.get("id", data.get("record_id")) is None:
        raise InvalidRecord(f"Record is missing required fields: {missing or ['id']}", record=dict(data))

    payment = data.get("payment_time_utc")
    return RawRecord(
        record_id=data.get("record_id", data.get("id")),
        tenant_id=data["tenant_id"],
        order_time_utc=parse_utc_iso8601(data["order_time_utc"]),
        amount=data["amount"],
        currency=data.get("currency", "USD"),
        status=data.get("status", "pending"),
        payment_time_utc=parse_utc_iso8601(payment) if payment is not None else None,
        order_number=data.get("order_number"),
    )


@dataclass
class Fixture:
    tenants: InMemoryTenantLookup
    records: InMemoryRecordSource


def load_fixture(path: str | Path) -> Fixture:
    """Load tenants and records from a YAML or JSON file.

    The file holds two lists, ``tenants`` and ``records``.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    InvalidRecord
        If the content is malformed
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidRecord(f"Cannot parse fixture {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidRecord(f"Fixture {path} must contain a mapping with 'tenants' and 'records'")

    tenants = InMemoryTenantLookup(tenant_from_dict(item) for item in data.get("tenants") or [])
    records = InMemoryRecordSource(record_from_dict(item) for item in data.get("records") or [])

    log.debug("Loaded fixture", path=str(path), tenants=len(tenants), records=len(records))
    return Fixture(tenants=tenants, records=records)
