"""Tests for weekend and business-hour classification."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from tzview.core.classifier import DEFAULT_POLICY, BusinessWindowPolicy, classify
from tzview.core.errors import InvalidPolicy
from tzview.core.projector import project


@pytest.fixture
def at_utc(registry):
    """Decompose a UTC wall-clock reading (2024-08-19 is a Monday)."""
    zone = registry.resolve("UTC")

    def _at(day: int, hour: int, minute: int = 0):
        return project(datetime(2024, 8, day, hour, minute, tzinfo=UTC), zone)

    return _at


class TestDefaultPolicy:
    def test_defaults(self):
        assert DEFAULT_POLICY.business_days == frozenset({1, 2, 3, 4, 5})
        assert DEFAULT_POLICY.weekend_days == frozenset({0, 6})
        assert (DEFAULT_POLICY.start_hour, DEFAULT_POLICY.end_hour) == (9, 18)

    @pytest.mark.parametrize(
        ("hour", "minute", "expected"),
        [(8, 59, False), (9, 0, True), (12, 0, True), (18, 59, True), (19, 0, False), (0, 0, False)],
    )
    def test_business_hour_bounds(self, at_utc, hour, minute, expected):
        result = classify(at_utc(19, hour, minute), DEFAULT_POLICY)

        assert result.is_business_hour is expected
        assert result.is_weekend is False
        assert result.day_type == "weekday"

    @pytest.mark.parametrize("day", [17, 18])
    def test_weekend_never_business(self, at_utc, day):
        result = classify(at_utc(day, 10), DEFAULT_POLICY)

        assert result.is_weekend is True
        assert result.is_business_hour is False
        assert result.day_type == "weekend"


class TestCustomPolicy:
    def test_friday_saturday_weekend(self, at_utc):
        policy = BusinessWindowPolicy(
            business_days=frozenset({0, 1, 2, 3, 4}),
            weekend_days=frozenset({5, 6}),
            start_hour=8,
            end_hour=16,
        )

        sunday = classify(at_utc(18, 8), policy)
        friday = classify(at_utc(23, 10), policy)

        assert sunday.is_business_hour and not sunday.is_weekend
        assert friday.is_weekend and not friday.is_business_hour

    def test_day_neither_business_nor_weekend(self, at_utc):
        policy = BusinessWindowPolicy(business_days=frozenset({1, 2, 3, 4}))
        friday = classify(at_utc(23, 10), policy)

        assert not friday.is_business_hour
        assert not friday.is_weekend

    def test_from_values_keeps_defaults(self):
        policy = BusinessWindowPolicy.from_values(end_hour=17)

        assert policy.end_hour == 17
        assert policy.start_hour == 9
        assert policy.to_dict()["business_days"] == [1, 2, 3, 4, 5]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"business_days": frozenset({1, 7})},
        {"weekend_days": frozenset({-1})},
        {"business_days": frozenset({1, 2}), "weekend_days": frozenset({2, 6})},
        {"start_hour": 24},
        {"end_hour": -1},
        {"start_hour": 18, "end_hour": 9},
    ],
)
def test_inconsistent_policy_rejected(kwargs):
    with pytest.raises(InvalidPolicy):
        BusinessWindowPolicy(**kwargs)
