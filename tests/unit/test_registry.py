"""Tests for timezone resolution and caching."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, timedelta, timezone

import pytest

from tzview.core.errors import InvalidTimezone
from tzview.core.registry import ResolvedZone, TimezoneRegistry, get_default_registry


class CountingSource:
    """Rule source that only knows fixed-offset zones and counts loads."""

    def __init__(self):
        self.loads = 0

    def load(self, identifier):
        self.loads += 1
        if identifier == "Test/Plus2":
            return timezone(timedelta(hours=2))
        raise KeyError(identifier)

    def available(self):
        return {"Test/Plus2"}


class TestResolve:
    @pytest.mark.parametrize("identifier", ["America/Sao_Paulo", "Asia/Tokyo", "Europe/Berlin", "Asia/Kathmandu"])
    def test_known_zones(self, registry, identifier):
        zone = registry.resolve(identifier)

        assert isinstance(zone, ResolvedZone)
        assert zone.identifier == identifier
        assert str(zone) == identifier

    def test_utc(self, registry):
        zone = registry.resolve("UTC")

        assert zone.tzinfo is UTC

    @pytest.mark.parametrize(
        "identifier",
        ["", " ", "Mars/Olympus", "America/Sao_Paulo ", "GMT+25", "America", "../etc/passwd", None, 42],
    )
    def test_invalid(self, registry, identifier):
        with pytest.raises(InvalidTimezone):
            registry.resolve(identifier)

    def test_invalid_error_details(self, registry):
        with pytest.raises(InvalidTimezone) as exc_info:
            registry.resolve("Invalid/Zone")

        assert exc_info.value.details == {"identifier": "Invalid/Zone"}

    def test_is_valid(self, registry):
        assert registry.is_valid("Asia/Tokyo")
        assert not registry.is_valid("Asia/Atlantis")


class TestCache:
    def test_same_object_returned(self, registry):
        assert registry.resolve("Asia/Tokyo") is registry.resolve("Asia/Tokyo")

    def test_source_consulted_once(self):
        source = CountingSource()
        registry = TimezoneRegistry(source)

        registry.resolve("Test/Plus2")
        registry.resolve("Test/Plus2")

        assert source.loads == 1

    def test_failures_not_cached(self):
        source = CountingSource()
        registry = TimezoneRegistry(source)

        for _ in range(2):
            with pytest.raises(InvalidTimezone):
                registry.resolve("Test/Missing")

        assert source.loads == 2

    def test_clear_cache(self):
        source = CountingSource()
        registry = TimezoneRegistry(source)
        registry.resolve("Test/Plus2")
        registry.clear_cache()
        registry.resolve("Test/Plus2")

        assert source.loads == 2

    def test_concurrent_resolution_is_consistent(self, registry):
        names = ["America/Sao_Paulo", "Asia/Tokyo", "Europe/Berlin"] * 50

        with ThreadPoolExecutor(max_workers=8) as pool:
            zones = list(pool.map(registry.resolve, names))

        for name in set(names):
            resolved = {id(zone) for zone in zones if zone.identifier == name}
            assert len(resolved) == 1


def test_available_includes_utc():
    registry = TimezoneRegistry(CountingSource())

    assert registry.available() == ["Test/Plus2", "UTC"]


def test_default_registry_is_shared():
    assert get_default_registry() is get_default_registry()
    assert "America/Sao_Paulo" in get_default_registry().available()
