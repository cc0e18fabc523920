"""Error taxonomy for tzview.

Every error here is a caller-input problem. Nothing is retried and nothing
falls back silently: an unresolvable timezone is never replaced by UTC.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

__all__ = [
    "TzViewError",
    "InvalidTimezone",
    "UnknownTenant",
    "EmptyTenantSet",
    "InvalidDateFormat",
    "InvalidInstantFormat",
    "InvalidRecord",
    "InvalidPolicy",
]


class TzViewError(Exception):
    """Base class for all tzview errors.

    Attributes
    ----------
    details : dict
        Structured context for the request layer (JSON-safe values)
    """

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error_type": type(self).__name__,
            "message": str(self),
            **self.details,
        }


class InvalidTimezone(TzViewError):
    """Raised when a timezone identifier does not resolve."""

    def __init__(self, identifier: Any) -> None:
        super().__init__(f"Invalid timezone: {identifier!r}", identifier=str(identifier))
        self.identifier = identifier


class UnknownTenant(TzViewError):
    """Raised when records reference tenants missing from the supplied mapping."""

    def __init__(self, tenant_ids: Iterable[str]) -> None:
        missing = sorted(set(tenant_ids))
        super().__init__(f"Unknown tenant(s): {', '.join(missing)}", tenant_ids=missing)
        self.tenant_ids = missing


class EmptyTenantSet(TzViewError):
    """Raised when a comparison is requested for zero tenants."""

    def __init__(self) -> None:
        super().__init__("At least one tenant is required for a timezone comparison")


class InvalidDateFormat(TzViewError):
    """Raised when a local date is not YYYY-MM-DD."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid date format: {value!r} (expected YYYY-MM-DD)", value=str(value))
        self.value = value


class InvalidInstantFormat(TzViewError):
    """Raised when an instant is not a valid ISO-8601 timestamp."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Invalid instant format: {value!r} (expected ISO-8601, e.g. 2024-08-19T23:30:00Z)",
            value=str(value),
        )
        self.value = value


class InvalidRecord(TzViewError):
    """Raised when a tenant or raw record violates a field constraint."""


class InvalidPolicy(TzViewError):
    """Raised when a business-window policy is inconsistent."""
