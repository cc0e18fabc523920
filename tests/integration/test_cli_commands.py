"""Integration tests for the tzview CLI.

Tests verify that:
- Commands produce the JSON envelope with --json
- Stable exit codes (0,2,3,4,5,6) are returned
- Local-calendar semantics hold end to end
"""

import json
import os
from pathlib import Path

import pytest
import yaml

from tzview.cli.__main__ import main
from tzview.cli.cli_common import ExitCode

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in [k for k in os.environ if k.startswith("TZVIEW_")]:
        monkeypatch.delenv(var)
    # No stray .env from the working directory
    monkeypatch.chdir(tmp_path)


def run_json(capsys, *args):
    exit_code = main([*args, "--json"])
    out = capsys.readouterr().out
    return exit_code, json.loads(out)


class TestProject:
    def test_all_records(self, capsys, fixture_file: Path):
        exit_code, result = run_json(capsys, "project", "--data", str(fixture_file))

        assert exit_code == ExitCode.SUCCESS
        assert result["status"] == "success"
        assert [r["order_id"] for r in result["data"]] == ["2", "1", "3", "4", "5"]
        assert result["meta"]["count"] == 5

    def test_local_date_range_for_tenant(self, capsys, fixture_file: Path):
        exit_code, result = run_json(
            capsys, "project", "--data", str(fixture_file), "--tenant", "sp", "--from", "2024-08-19"
        )

        assert exit_code == ExitCode.SUCCESS
        rows = result["data"]
        assert [r["order_id"] for r in rows] == ["2", "1"]
        assert {r["local_date"] for r in rows} == {"2024-08-19"}
        assert rows[0]["order_time_local"] == "2024-08-19T23:00:00-03:00"
        assert rows[0]["payment_processing_minutes"] == 30.0

    def test_status_and_pagination(self, capsys, fixture_file: Path):
        _, result = run_json(
            capsys, "project", "--data", str(fixture_file), "--status", "paid", "--limit", "1", "--offset", "1"
        )

        assert [r["order_id"] for r in result["data"]] == ["4"]

    def test_date_range_needs_tenant(self, capsys, fixture_file: Path):
        exit_code = main(["project", "--data", str(fixture_file), "--from", "2024-08-19"])

        assert exit_code == 2
        assert "--tenant" in capsys.readouterr().err

    def test_reversed_date_range(self, capsys, fixture_file: Path):
        exit_code, result = run_json(
            capsys,
            "project", "--data", str(fixture_file), "--tenant", "sp", "--from", "2024-08-21", "--to", "2024-08-19",
        )

        assert exit_code == ExitCode.VALIDATION_ERROR
        assert result["meta"]["error_type"] == "ValueError"
        assert "ends before it starts" in result["error"]

    def test_unknown_tenant(self, capsys, fixture_file: Path):
        exit_code, result = run_json(
            capsys, "project", "--data", str(fixture_file), "--tenant", "ghost", "--from", "2024-08-19"
        )

        assert exit_code == ExitCode.REFERENCE_ERROR
        assert result["status"] == "error"
        assert result["meta"]["error_type"] == "UnknownTenant"
        assert result["meta"]["details"] == {"tenant_ids": ["ghost"]}

    def test_invalid_timezone_in_data(self, capsys, tmp_path: Path):
        path = tmp_path / "broken.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "tenants": [{"id": "m", "name": "Mars", "timezone": "Mars/Olympus"}],
                    "records": [
                        {"id": 1, "tenant_id": "m", "order_time_utc": "2024-08-19T00:00:00Z", "amount": 1}
                    ],
                }
            )
        )

        exit_code, result = run_json(capsys, "project", "--data", str(path))

        assert exit_code == ExitCode.TIMEZONE_ERROR
        assert result["meta"]["details"] == {"identifier": "Mars/Olympus"}


class TestAggregation:
    def test_aggregate_by_tenant(self, capsys, fixture_file: Path):
        exit_code, result = run_json(capsys, "aggregate", "--data", str(fixture_file), "--by", "tenant_id")

        assert exit_code == ExitCode.SUCCESS
        assert [(g["tenant_id"], g["order_count"], g["total_amount"]) for g in result["data"]] == [
            ("ny", 1, 120.0),
            ("sp", 2, 200.0),
            ("tk", 1, 200.0),
        ]

    def test_aggregate_all_statuses(self, capsys, fixture_file: Path):
        _, result = run_json(
            capsys, "aggregate", "--data", str(fixture_file), "--by", "day_type", "--all-statuses"
        )

        assert [(g["day_type"], g["order_count"]) for g in result["data"]] == [("weekday", 4), ("weekend", 1)]

    def test_top_ties_by_id(self, capsys, fixture_file: Path):
        _, result = run_json(capsys, "top", "--data", str(fixture_file), "-n", "2")

        assert [(r["rank"], r["merchant_id"]) for r in result["data"]] == [(1, "sp"), (2, "tk")]

    def test_analyze_local_day(self, capsys, fixture_file: Path):
        exit_code, result = run_json(capsys, "analyze", "--data", str(fixture_file), "--date", "2024-08-19")

        assert exit_code == ExitCode.SUCCESS
        data = result["data"]
        assert data["date"] == "2024-08-19"
        assert data["total_orders"] == 3
        assert data["total_amount"] == 320.0
        assert [h["local_hour"] for h in data["hourly_breakdown"]] == [10, 20, 23]

    def test_analyze_invalid_date(self, capsys, fixture_file: Path):
        exit_code, result = run_json(capsys, "analyze", "--data", str(fixture_file), "--date", "19.08.2024")

        assert exit_code == ExitCode.VALIDATION_ERROR
        assert result["meta"]["error_type"] == "InvalidDateFormat"


class TestCompare:
    def test_compare_all_tenants(self, capsys, fixture_file: Path):
        exit_code, result = run_json(
            capsys, "compare", "--data", str(fixture_file), "--utc-time", "2024-08-19T23:30:00Z"
        )

        assert exit_code == ExitCode.SUCCESS
        entries = {e["merchant_id"]: e for e in result["data"]["comparisons"]}
        assert entries["tk"]["local_date"] == "2024-08-20"
        assert entries["tk"]["time_difference"] == "+9h"
        assert entries["sp"]["hour"] == 20
        assert result["data"]["statistics"]["next_day_count"] == 1

    def test_compare_selected_tenant(self, capsys, fixture_file: Path):
        _, result = run_json(
            capsys, "compare", "--data", str(fixture_file), "--utc-time", "2024-08-19T12:00:00Z", "--tenant", "ny"
        )

        assert [e["merchant_id"] for e in result["data"]["comparisons"]] == ["ny"]

    def test_compare_invalid_instant(self, capsys, fixture_file: Path):
        exit_code, result = run_json(capsys, "compare", "--data", str(fixture_file), "--utc-time", "noon")

        assert exit_code == ExitCode.VALIDATION_ERROR
        assert result["meta"]["error_type"] == "InvalidInstantFormat"

    def test_compare_empty_tenant_set(self, capsys, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("tenants: []\nrecords: []\n")

        exit_code, result = run_json(capsys, "compare", "--data", str(path), "--utc-time", "2024-08-19T00:00:00Z")

        assert exit_code == ExitCode.REFERENCE_ERROR
        assert result["meta"]["error_type"] == "EmptyTenantSet"

    def test_demo(self, capsys, fixture_file: Path):
        exit_code, result = run_json(capsys, "demo", "--data", str(fixture_file))

        assert exit_code == ExitCode.SUCCESS
        assert result["data"]["utc_time"] == "2024-08-19T00:00:00+00:00"
        assert [row["timezone"] for row in result["data"]["timezones"]] == [
            "America/New_York",
            "America/Sao_Paulo",
            "Asia/Tokyo",
        ]
        assert result["data"]["summary"]["prev_day_count"] == 2

    def test_demo_human_output(self, capsys, fixture_file: Path):
        exit_code = main(["demo", "--data", str(fixture_file)])

        out = capsys.readouterr().out
        assert exit_code == ExitCode.SUCCESS
        assert "Asia/Tokyo" in out
        assert "-1 day" in out

    def test_zones(self, capsys):
        exit_code, result = run_json(capsys, "zones", "--prefix", "Asia/")

        assert exit_code == ExitCode.SUCCESS
        assert "Asia/Tokyo" in result["data"]
        assert all(zone.startswith("Asia/") for zone in result["data"])
        assert result["meta"]["count"] == len(result["data"])


class TestConfiguration:
    def test_data_file_from_env(self, capsys, fixture_file: Path, monkeypatch):
        monkeypatch.setenv("TZVIEW_DATA_FILE", str(fixture_file))

        exit_code, result = run_json(capsys, "top")

        assert exit_code == ExitCode.SUCCESS
        assert len(result["data"]) == 3

    def test_missing_data_file(self, capsys):
        exit_code, result = run_json(capsys, "top")

        assert exit_code == ExitCode.CONFIG_ERROR
        assert "TZVIEW_DATA_FILE" in result["error"]

    def test_invalid_env_value(self, capsys, fixture_file: Path, monkeypatch):
        monkeypatch.setenv("TZVIEW_BUSINESS_START_HOUR", "25")

        exit_code, _ = run_json(capsys, "top", "--data", str(fixture_file))

        assert exit_code == ExitCode.CONFIG_ERROR

    def test_nonexistent_data_file(self, capsys, tmp_path: Path):
        exit_code, _ = run_json(capsys, "top", "--data", str(tmp_path / "absent.yaml"))

        assert exit_code == ExitCode.IO_ERROR

    def test_trace_id(self, capsys, fixture_file: Path):
        _, result = run_json(capsys, "top", "--data", str(fixture_file), "--trace-id", "trace-abc")

        assert result["trace_id"] == "trace-abc"
