"""Local-calendar aggregations and DST-aware day windows."""

from .aggregator import (
    AggregationEngine,
    DailyAnalysis,
    Dimension,
    Group,
    TenantRanking,
    build_daily_analysis,
    parse_dimensions,
)
from .time_windows import (
    LocalDayWindow,
    compute_day_boundaries_utc,
    compute_range_boundaries_utc,
    local_day_window,
)

__all__ = [
    # Time windows
    "LocalDayWindow",
    "compute_day_boundaries_utc",
    "compute_range_boundaries_utc",
    "local_day_window",
    # Aggregation
    "AggregationEngine",
    "DailyAnalysis",
    "Dimension",
    "Group",
    "TenantRanking",
    "build_daily_analysis",
    "parse_dimensions",
]
