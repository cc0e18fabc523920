"""Weekend and business-hour classification of local decompositions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .errors import InvalidPolicy
from .models import Classification, LocalDecomposition

__all__ = [
    "BusinessWindowPolicy",
    "DEFAULT_POLICY",
    "classify",
]


@dataclass(frozen=True)
class BusinessWindowPolicy:
    """Business-hour window and weekend set, using 0=Sunday day numbers.

    Attributes
    ----------
    business_days : frozenset[int]
        Days on which business hours apply (default Monday-Friday)
    weekend_days : frozenset[int]
        Days classified as weekend (default Saturday, Sunday)
    start_hour : int
        First business hour, inclusive
    end_hour : int
        Last business hour, inclusive (18 means 18:00-18:59 counts)
    """

    business_days: frozenset[int] = frozenset({1, 2, 3, 4, 5})
    weekend_days: frozenset[int] = frozenset({0, 6})
    start_hour: int = 9
    end_hour: int = 18

    def __post_init__(self) -> None:
        object.__setattr__(self, "business_days", frozenset(self.business_days))
        object.__setattr__(self, "weekend_days", frozenset(self.weekend_days))

        for name in ("business_days", "weekend_days"):
            days = getattr(self, name)
            if any(not isinstance(d, int) or isinstance(d, bool) or not 0 <= d <= 6 for d in days):
                raise InvalidPolicy(f"{name} must contain day numbers 0-6 (0=Sunday), got {sorted(days)}")

        overlap = self.business_days & self.weekend_days
        if overlap:
            raise InvalidPolicy(
                f"Days {sorted(overlap)} cannot be both business days and weekend days",
                overlap=sorted(overlap),
            )

        for name in ("start_hour", "end_hour"):
            hour = getattr(self, name)
            if not isinstance(hour, int) or isinstance(hour, bool) or not 0 <= hour <= 23:
                raise InvalidPolicy(f"{name} must be an hour 0-23, got {hour!r}")
        if self.start_hour > self.end_hour:
            raise InvalidPolicy(f"start_hour ({self.start_hour}) is after end_hour ({self.end_hour})")

    @classmethod
    def from_values(
        cls,
        business_days: Iterable[int] | None = None,
        weekend_days: Iterable[int] | None = None,
        start_hour: int | None = None,
        end_hour: int | None = None,
    ) -> BusinessWindowPolicy:
        """Build a policy, falling back to defaults for omitted parts."""
        kwargs: dict[str, Any] = {}
        if business_days is not None:
            kwargs["business_days"] = frozenset(business_days)
        if weekend_days is not None:
            kwargs["weekend_days"] = frozenset(weekend_days)
        if start_hour is not None:
            kwargs["start_hour"] = start_hour
        if end_hour is not None:
            kwargs["end_hour"] = end_hour
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "business_days": sorted(self.business_days),
            "weekend_days": sorted(self.weekend_days),
            "start_hour": self.start_hour,
            "end_hour": self.end_hour,
        }


DEFAULT_POLICY = BusinessWindowPolicy()


def classify(decomp: LocalDecomposition, policy: BusinessWindowPolicy) -> Classification:
    """Classify a local decomposition under ``policy``.

    Parameters
    ----------
    decomp
        Local calendar decomposition
    policy
        Business window and weekend definition; always passed explicitly

    Returns
    -------
    Classification
        ``is_weekend`` and ``is_business_hour`` flags
    """
    dow = decomp.local_day_of_week
    return Classification(
        is_weekend=dow in policy.weekend_days,
        is_business_hour=(
            dow in policy.business_days and policy.start_hour <= decomp.local_hour <= policy.end_hour
        ),
    )
