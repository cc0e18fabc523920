"""Timezone identifier validation and resolution.

The registry never parses zone rules itself. It asks a ``ZoneRuleSource``
(by default the IANA database exposed through ``zoneinfo``) for a tzinfo and
memoizes the answer per identifier.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from ..observability.loguru_config import get_logger
from .errors import InvalidTimezone

__all__ = [
    "ResolvedZone",
    "TimezoneRegistry",
    "ZoneInfoRuleSource",
    "ZoneRuleSource",
    "get_default_registry",
]

log = get_logger("registry")

UTC_IDENTIFIER = "UTC"


class ZoneRuleSource(Protocol):
    """External zone-rule database."""

    def load(self, identifier: str) -> tzinfo:
        """Return the rule set for ``identifier``.

        Raises ``KeyError``, ``ValueError`` or ``OSError`` when unknown.
        """
        ...

    def available(self) -> set[str]:
        """Return every identifier the source knows about."""
        ...


class ZoneInfoRuleSource:
    """``zoneinfo``-backed rule source (system tzdata or the ``tzdata`` package)."""

    def load(self, identifier: str) -> tzinfo:
        return ZoneInfo(identifier)

    def available(self) -> set[str]:
        return set(available_timezones())


@dataclass(frozen=True)
class ResolvedZone:
    """A validated timezone identifier and its rules."""

    identifier: str
    tzinfo: tzinfo

    def __str__(self) -> str:
        return self.identifier


class TimezoneRegistry:
    """Resolve timezone identifiers, caching successful lookups.

    Warm reads are lock-free dict lookups; the lock only serializes inserts.
    Failed lookups are not cached, so a result is identical with or without
    the cache.

    Example
    -------
    >>> registry = TimezoneRegistry()
    >>> registry.resolve("Asia/Tokyo").identifier
    'Asia/Tokyo'
    """

    def __init__(self, source: ZoneRuleSource | None = None) -> None:
        self._source = source or ZoneInfoRuleSource()
        self._cache: dict[str, ResolvedZone] = {}
        self._lock = threading.Lock()

    def resolve(self, identifier: str) -> ResolvedZone:
        """Resolve an identifier.

        Parameters
        ----------
        identifier
            IANA timezone name (e.g. "America/Sao_Paulo") or "UTC"

        Returns
        -------
        ResolvedZone
            Identifier with its tzinfo

        Raises
        ------
        InvalidTimezone
            If the identifier is not a recognized zone name
        """
        cached = self._cache.get(identifier) if isinstance(identifier, str) else None
        if cached is not None:
            return cached

        if not isinstance(identifier, str) or not identifier.strip() or identifier != identifier.strip():
            raise InvalidTimezone(identifier)

        if identifier == UTC_IDENTIFIER:
            zone = ResolvedZone(identifier=UTC_IDENTIFIER, tzinfo=UTC)
        else:
            try:
                rules = self._source.load(identifier)
            except (ZoneInfoNotFoundError, KeyError, ValueError, OSError) as exc:
                raise InvalidTimezone(identifier) from exc
            zone = ResolvedZone(identifier=identifier, tzinfo=rules)

        with self._lock:
            zone = self._cache.setdefault(identifier, zone)

        log.debug("Resolved timezone", identifier=identifier, cache_size=len(self._cache))
        return zone

    def is_valid(self, identifier: str) -> bool:
        try:
            self.resolve(identifier)
        except InvalidTimezone:
            return False
        return True

    def available(self) -> list[str]:
        """Sorted identifiers known to the rule source, UTC included."""
        return sorted(self._source.available() | {UTC_IDENTIFIER})

    def clear_cache(self) -> None:
        with self._lock:
            self._cache = {}


_default_registry: TimezoneRegistry | None = None
_default_lock = threading.Lock()


def get_default_registry() -> TimezoneRegistry:
    """Get the process-wide registry backed by ``zoneinfo``."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = TimezoneRegistry()
    return _default_registry
