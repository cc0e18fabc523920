"""Shared fixtures: tenants spread across offsets and a small record set."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path

import pytest
import yaml
from loguru import logger

from tzview.core.models import RawRecord, Tenant
from tzview.core.registry import TimezoneRegistry


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop any sinks a test (usually a CLI run) configured."""
    yield
    logger.remove()
    logger.disable("tzview")


@pytest.fixture
def registry() -> TimezoneRegistry:
    return TimezoneRegistry()


@pytest.fixture
def sao_paulo() -> Tenant:
    return Tenant("sp", "SP Merchant", "America/Sao_Paulo", country="Brazil", city="Sao Paulo")


@pytest.fixture
def tokyo() -> Tenant:
    return Tenant("tk", "Tokyo Shop", "Asia/Tokyo", country="Japan", city="Tokyo")


@pytest.fixture
def new_york() -> Tenant:
    return Tenant("ny", "NY Store", "America/New_York", country="USA", city="New York")


@pytest.fixture
def tongatapu() -> Tenant:
    return Tenant("to", "Tonga Traders", "Pacific/Tongatapu", country="Tonga", city="Nuku'alofa")


@pytest.fixture
def tenants(sao_paulo, tokyo, new_york) -> dict[str, Tenant]:
    return {t.tenant_id: t for t in (sao_paulo, tokyo, new_york)}


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


@pytest.fixture
def records() -> list[RawRecord]:
    return [
        # 20:30 on 2024-08-19 in Sao Paulo, 08:30 on 2024-08-20 in Tokyo
        RawRecord("1", "sp", utc(2024, 8, 19, 23, 30), Decimal("150.00"), "BRL", "paid"),
        # 23:00 on 2024-08-19 in Sao Paulo
        RawRecord(
            "2",
            "sp",
            utc(2024, 8, 20, 2, 0),
            Decimal("50.00"),
            "BRL",
            "delivered",
            payment_time_utc=utc(2024, 8, 20, 2, 30),
        ),
        RawRecord("3", "tk", utc(2024, 8, 19, 23, 30), Decimal("200.00"), "JPY", "shipped"),
        RawRecord("4", "tk", utc(2024, 8, 19, 1, 0), Decimal("75.00"), "JPY", "cancelled"),
        RawRecord(
            "5",
            "ny",
            utc(2024, 8, 19, 14, 0),
            Decimal("120.00"),
            "USD",
            "paid",
            payment_time_utc=utc(2024, 8, 19, 14, 10),
        ),
        RawRecord("6", "ny", utc(2024, 8, 17, 15, 0), Decimal("30.00"), "USD", "pending"),
    ]


@pytest.fixture
def fixture_file(tmp_path: Path) -> Path:
    """YAML fixture with tenants and records, as the CLI reads it."""
    data = {
        "tenants": [
            {"id": "sp", "name": "SP Merchant", "timezone": "America/Sao_Paulo", "country": "Brazil"},
            {"id": "tk", "name": "Tokyo Shop", "timezone": "Asia/Tokyo", "country": "Japan"},
            {"id": "ny", "name": "NY Store", "timezone": "America/New_York", "country": "USA"},
        ],
        "records": [
            {
                "id": 1,
                "tenant_id": "sp",
                "order_time_utc": "2024-08-19T23:30:00Z",
                "amount": "150.00",
                "currency": "BRL",
                "status": "paid",
            },
            {
                "id": 2,
                "tenant_id": "sp",
                "order_time_utc": "2024-08-20T02:00:00Z",
                "amount": "50.00",
                "currency": "BRL",
                "status": "delivered",
                "payment_time_utc": "2024-08-20T02:30:00Z",
            },
            {
                "id": 3,
                "tenant_id": "tk",
                "order_time_utc": "2024-08-19T23:30:00Z",
                "amount": "200.00",
                "currency": "JPY",
                "status": "shipped",
            },
            {
                "id": 4,
                "tenant_id": "ny",
                "order_time_utc": "2024-08-19T14:00:00Z",
                "amount": "120.00",
                "status": "paid",
            },
            {
                "id": 5,
                "tenant_id": "ny",
                "order_time_utc": "2024-08-17T15:00:00Z",
                "amount": "30.00",
                "status": "pending",
            },
        ],
    }
    path = tmp_path / "orders.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path
