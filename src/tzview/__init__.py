"""tzview: project UTC event records onto each tenant's local calendar.

Maps (UTC instant, timezone) to local date, hour, weekday and offset,
classifies weekend and business hours under an explicit policy, and
aggregates or compares the projected records.
"""

from loguru import logger

from .compare import CrossTimezoneComparator
from .core import (
    ALL_STATUSES,
    COMPLETED_STATUSES,
    DEFAULT_POLICY,
    BusinessWindowPolicy,
    Classification,
    EmptyTenantSet,
    InvalidDateFormat,
    InvalidInstantFormat,
    InvalidPolicy,
    InvalidRecord,
    InvalidTimezone,
    LocalDecomposition,
    ProjectedRecord,
    RawRecord,
    RecordStatus,
    ResolvedZone,
    Tenant,
    TenantStatus,
    TimezoneRegistry,
    TzViewError,
    UnknownTenant,
    classify,
    project,
)
from .pipelines import RecordProjectionService
from .rollups import AggregationEngine, Dimension, build_daily_analysis

# Silent until the application configures logging
logger.disable("tzview")

__version__ = "0.1.0"

__all__ = [
    "ALL_STATUSES",
    "COMPLETED_STATUSES",
    "DEFAULT_POLICY",
    "AggregationEngine",
    "BusinessWindowPolicy",
    "Classification",
    "CrossTimezoneComparator",
    "Dimension",
    "EmptyTenantSet",
    "InvalidDateFormat",
    "InvalidInstantFormat",
    "InvalidPolicy",
    "InvalidRecord",
    "InvalidTimezone",
    "LocalDecomposition",
    "ProjectedRecord",
    "RawRecord",
    "RecordProjectionService",
    "RecordStatus",
    "ResolvedZone",
    "Tenant",
    "TenantStatus",
    "TimezoneRegistry",
    "TzViewError",
    "UnknownTenant",
    "build_daily_analysis",
    "classify",
    "project",
]
