"""Tenant and record sources feeding the projection core."""

from .sources import (
    DEFAULT_LIMIT,
    Fixture,
    InMemoryRecordSource,
    InMemoryTenantLookup,
    RawRecordSource,
    TenantLookup,
    load_fixture,
    record_from_dict,
    tenant_from_dict,
)

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
