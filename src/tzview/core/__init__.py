"""Core timezone projection: registry, projector, classifier and models."""

from .classifier import DEFAULT_POLICY, BusinessWindowPolicy, classify
from .errors import (
    EmptyTenantSet,
    InvalidDateFormat,
    InvalidInstantFormat,
    InvalidPolicy,
    InvalidRecord,
    InvalidTimezone,
    TzViewError,
    UnknownTenant,
)
from .models import (
    ALL_STATUSES,
    COMPLETED_STATUSES,
    Classification,
    LocalDecomposition,
    ProjectedRecord,
    RawRecord,
    RecordStatus,
    Tenant,
    TenantStatus,
)
from .projector import project
from .registry import ResolvedZone, TimezoneRegistry, ZoneInfoRuleSource, ZoneRuleSource, get_default_registry

__all__ = [
    # Models
    "ALL_STATUSES",
    "COMPLETED_STATUSES",
    "Classification",
    "LocalDecomposition",
    "ProjectedRecord",
    "RawRecord",
    "RecordStatus",
    "Tenant",
    "TenantStatus",
    # Registry
    "ResolvedZone",
    "TimezoneRegistry",
    "ZoneInfoRuleSource",
    "ZoneRuleSource",
    "get_default_registry",
    # Projection and classification
    "project",
    "BusinessWindowPolicy",
    "DEFAULT_POLICY",
    "classify",
    # Errors
    "TzViewError",
    "InvalidTimezone",
    "UnknownTenant",
    "EmptyTenantSet",
    "InvalidDateFormat",
    "InvalidInstantFormat",
    "InvalidRecord",
    "InvalidPolicy",
]
