"""Common CLI utilities: JSON output envelopes, stable exit codes, shared loading."""

from __future__ import annotations

import functools
import json
import traceback
import uuid
from enum import IntEnum
from pathlib import Path
from typing import Any

import click

from ..config.settings import ConfigError, Settings, load_settings
from ..core.errors import (
    EmptyTenantSet,
    InvalidDateFormat,
    InvalidInstantFormat,
    InvalidPolicy,
    InvalidRecord,
    InvalidTimezone,
    UnknownTenant,
)
from ..observability.loguru_config import configure_loguru, get_logger
from ..storage.sources import Fixture, load_fixture

__all__ = [
    "CLIContext",
    "ExitCode",
    "cli_command",
    "handle_cli_error",
    "handle_cli_success",
]

log = get_logger("cli")


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0
    VALIDATION_ERROR = 2  # Malformed date, instant, record or option value
    TIMEZONE_ERROR = 3  # Unresolvable timezone identifier
    REFERENCE_ERROR = 4  # Unknown tenant or empty tenant set
    IO_ERROR = 5
    CONFIG_ERROR = 6
    UNKNOWN_ERROR = 7


class CLIContext:
    """Context for CLI execution: output mode, settings and loaded data."""

    def __init__(
        self,
        json_output: bool = False,
        verbose: bool = False,
        data_file: Path | None = None,
        trace_id: str | None = None,
    ) -> None:
        self.json_output = json_output
        self.verbose = verbose
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"
        self._data_file = data_file
        self._settings: Settings | None = None
        self._fixture: Fixture | None = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = load_settings()
            configure_loguru(
                level="DEBUG" if self.verbose else self._settings.log_level,
                log_dir=self._settings.log_dir,
            )
        return self._settings

    @property
    def fixture(self) -> Fixture:
        """Tenants and records from ``--data`` or ``TZVIEW_DATA_FILE``.

        Raises
        ------
        ConfigError
            If no data file is configured
        """
        if self._fixture is None:
            path = self._data_file or self.settings.data_file
            if path is None:
                raise ConfigError("No data file given. Use --data or set TZVIEW_DATA_FILE.")
            self._fixture = load_fixture(path)
        return self._fixture

    def output(
        self,
        data: Any,
        status: str = "success",
        error: str | None = None,
        meta: dict[str, Any] | None = None,
        lines: list[str] | None = None,
    ) -> None:
        """Output result in appropriate format.

        Args:
            data: Result data
            status: Status ("success", "error")
            error: Error message if status is error
            meta: Additional metadata
            lines: Pre-formatted human-readable lines (ignored in JSON mode)
        """
        if self.json_output:
            result: dict[str, Any] = {"status": status, "trace_id": self.trace_id}

            if error:
                result["error"] = error
            else:
                result["data"] = data

            if meta:
                result["meta"] = meta

            click.echo(json.dumps(result, ensure_ascii=False, indent=2, default=str))
        elif status == "error":
            click.echo(f"❌ {error}", err=True)
        elif lines is not None:
            for line in lines:
                click.echo(line)
        elif isinstance(data, dict):
            for key, value in data.items():
                click.echo(f"{key}: {value}")
        elif isinstance(data, list):
            for item in data:
                click.echo(f"  - {item}")
        else:
            click.echo(data)


def cli_command(func):
    """Decorator adding the common options and injecting a ``CLIContext``.

    Adds:
    - --json: JSON output mode
    - --data: fixture file with tenants and records
    - --trace-id: Trace ID for correlation
    - --verbose: Verbose output
    """

    @click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
    @click.option(
        "--data",
        "data_file",
        type=click.Path(dir_okay=False, path_type=Path),
        help="YAML/JSON file with tenants and records (default: TZVIEW_DATA_FILE)",
    )
    @click.option("--trace-id", type=str, help="Trace ID for correlation")
    @click.option("--verbose", "-v", is_flag=True, help="Verbose output")
    @functools.wraps(func)
    def wrapper(
        json_output: bool,
        data_file: Path | None,
        trace_id: str | None,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        ctx = CLIContext(json_output=json_output, verbose=verbose, data_file=data_file, trace_id=trace_id)
        return func(ctx, *args, **kwargs)

    return wrapper


def exit_code_for(exc: Exception) -> ExitCode:
    """Map an exception to its stable exit code."""
    if isinstance(exc, (InvalidDateFormat, InvalidInstantFormat, InvalidRecord, ValueError)):
        return ExitCode.VALIDATION_ERROR
    if isinstance(exc, InvalidTimezone):
        return ExitCode.TIMEZONE_ERROR
    if isinstance(exc, (UnknownTenant, EmptyTenantSet)):
        return ExitCode.REFERENCE_ERROR
    if isinstance(exc, (ConfigError, InvalidPolicy)):
        return ExitCode.CONFIG_ERROR
    if isinstance(exc, OSError):
        return ExitCode.IO_ERROR
    return ExitCode.UNKNOWN_ERROR


def handle_cli_error(ctx: CLIContext, exc: Exception, cmd: str) -> int:
    """Report an error and return the matching exit code."""
    exit_code = exit_code_for(exc)
    meta: dict[str, Any] = {"exit_code": int(exit_code), "error_type": type(exc).__name__}
    details = getattr(exc, "details", None)
    if details:
        meta["details"] = details

    log.debug("Command failed", command=cmd, error_type=type(exc).__name__, exit_code=int(exit_code))
    ctx.output(None, status="error", error=str(exc), meta=meta)

    if ctx.verbose and not ctx.json_output:
        click.echo("\nTraceback:", err=True)
        click.echo(traceback.format_exc(), err=True)

    return int(exit_code)


def handle_cli_success(
    ctx: CLIContext, data: Any, meta: dict[str, Any] | None = None, lines: list[str] | None = None
) -> int:
    ctx.output(data, status="success", meta=meta, lines=lines)
    return int(ExitCode.SUCCESS)
