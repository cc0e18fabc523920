"""Cross-timezone comparison of a single UTC instant."""

from .comparator import (
    DEMO_INSTANT,
    Comparison,
    ComparisonEntry,
    ComparisonSummary,
    CrossTimezoneComparator,
    DateBoundaryDemo,
    DemoRow,
    DemoSummary,
    hour_difference,
)

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
