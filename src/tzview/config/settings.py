"""Centralized configuration for tzview.

Loads configuration from a .env file and the environment and provides typed
access to settings. Invalid values fail fast with a ``ConfigError`` naming
the offending variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from ..core.classifier import BusinessWindowPolicy
from ..core.errors import InvalidPolicy, InvalidRecord
from ..core.models import COMPLETED_STATUSES, RecordStatus, parse_statuses

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
    "parse_int_list",
]


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class Settings:
    """Settings for the tzview CLI and services.

    Attributes
    ----------
    data_file : Path | None
        YAML/JSON fixture with tenants and records (CLI default)
    business_days : list[int]
        Business days, 0=Sunday
    weekend_days : list[int]
        Weekend days, 0=Sunday
    business_start_hour : int
        First business hour (inclusive)
    business_end_hour : int
        Last business hour (inclusive)
    completed_statuses : frozenset[RecordStatus]
        Statuses counted by aggregations
    top_n : int
        Default ranking size
    max_workers : int
        Projection worker threads (1 = sequential)
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for JSONL logs
    """

    data_file: Path | None = None

    # Business window (0=Sunday convention)
    business_days: list[int] = field(default_factory=lambda: [1, 2, 3, 4, 5])
    weekend_days: list[int] = field(default_factory=lambda: [0, 6])
    business_start_hour: int = 9
    business_end_hour: int = 18

    # Aggregation
    completed_statuses: frozenset[RecordStatus] = COMPLETED_STATUSES
    top_n: int = 10
    max_workers: int = 1

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.data_file and isinstance(self.data_file, str):
            self.data_file = Path(self.data_file)
        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        try:
            self.completed_statuses = parse_statuses(self.completed_statuses)
        except InvalidRecord as exc:
            raise ConfigError(f"TZVIEW_COMPLETED_STATUSES: {exc}") from exc
        if not self.completed_statuses:
            raise ConfigError("TZVIEW_COMPLETED_STATUSES must name at least one status")

        if self.top_n <= 0:
            raise ConfigError(f"TZVIEW_TOP_N must be positive, got {self.top_n}")
        if self.max_workers <= 0:
            raise ConfigError(f"TZVIEW_MAX_WORKERS must be positive, got {self.max_workers}")

        if self.log_level.upper() not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ConfigError(f"TZVIEW_LOG_LEVEL is not a log level: {self.log_level!r}")
        self.log_level = self.log_level.upper()

        # Fails here rather than at first classification
        self.business_policy()

    def business_policy(self) -> BusinessWindowPolicy:
        """Build the business-window policy.

        Raises
        ------
        ConfigError
            If the configured window is inconsistent
        """
        try:
            return BusinessWindowPolicy(
                business_days=frozenset(self.business_days),
                weekend_days=frozenset(self.weekend_days),
                start_hour=self.business_start_hour,
                end_hour=self.business_end_hour,
            )
        except InvalidPolicy as exc:
            raise ConfigError(f"Invalid business window: {exc}") from exc

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, otherwise from os.environ.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)

        Returns
        -------
        Settings
            Loaded settings

        Raises
        ------
        ConfigError
            If settings are invalid
        """
        if env_file is None:
            env_file = Path(".env")

        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            load_env_file(env_file)

        try:
            return cls(
                data_file=Path(os.environ["TZVIEW_DATA_FILE"]) if os.environ.get("TZVIEW_DATA_FILE") else None,
                business_days=parse_int_list(os.environ.get("TZVIEW_BUSINESS_DAYS", "1,2,3,4,5"), strict=True),
                weekend_days=parse_int_list(os.environ.get("TZVIEW_WEEKEND_DAYS", "0,6"), strict=True),
                business_start_hour=int(os.environ.get("TZVIEW_BUSINESS_START_HOUR", "9")),
                business_end_hour=int(os.environ.get("TZVIEW_BUSINESS_END_HOUR", "18")),
                completed_statuses=frozenset(
                    s.strip()
                    for s in os.environ.get("TZVIEW_COMPLETED_STATUSES", "paid,shipped,delivered").split(",")
                    if s.strip()
                ),
                top_n=int(os.environ.get("TZVIEW_TOP_N", "10")),
                max_workers=int(os.environ.get("TZVIEW_MAX_WORKERS", "1")),
                log_level=os.environ.get("TZVIEW_LOG_LEVEL", "INFO"),
                log_dir=Path(os.environ["TZVIEW_LOG_DIR"]) if os.environ.get("TZVIEW_LOG_DIR") else None,
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Parameters
    ----------
    env_file
        Path to .env file
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                # Remove quotes
                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]

                os.environ[key] = value


def parse_int_list(value: str, strict: bool = False) -> list[int]:
    """Parse comma-separated list of integers.

    Parameters
    ----------
    value
        Comma-separated integers
    strict
        Raise ``ValueError`` on bad items instead of returning []

    Returns
    -------
    list[int]
        Parsed integers
    """
    if not value:
        return []

    try:
        return [int(x.strip()) for x in value.split(",") if x.strip()]
    except ValueError:
        if strict:
            raise
        return []


# Global settings instance
_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings from environment and keep them process-wide."""
    global _settings
    _settings = Settings.from_env(env_file)
    return _settings


def get_settings() -> Settings:
    """Get current settings.

    Raises
    ------
    ConfigError
        If settings not loaded
    """
    if _settings is None:
        raise ConfigError("Settings not loaded. Call load_settings() first.")
    return _settings


def generate_example_env(output_path: Path | None = None) -> str:
    """Generate example .env file with all settings.

    Parameters
    ----------
    output_path
        Optional path to write .env file

    Returns
    -------
    str
        Example .env contents
    """
    example = """# tzview configuration
# Copy this to .env and adjust values

# Fixture with tenants and records used by the CLI (optional)
# TZVIEW_DATA_FILE=data/orders.yaml

# ====================
# Business window (0=Sunday ... 6=Saturday)
# ====================

TZVIEW_BUSINESS_DAYS=1,2,3,4,5
TZVIEW_WEEKEND_DAYS=0,6

# Business hours, both inclusive (18 means 18:00-18:59 counts)
TZVIEW_BUSINESS_START_HOUR=9
TZVIEW_BUSINESS_END_HOUR=18

# ====================
# Aggregation
# ====================

# Statuses counted as completed
# Options: pending, paid, shipped, delivered, cancelled, refunded
TZVIEW_COMPLETED_STATUSES=paid,shipped,delivered

# Default ranking size
TZVIEW_TOP_N=10

# Projection worker threads (1 = sequential)
TZVIEW_MAX_WORKERS=1

# ====================
# Logging
# ====================

# Options: DEBUG, INFO, WARNING, ERROR, CRITICAL
TZVIEW_LOG_LEVEL=INFO

# JSONL log directory (optional, console only if not set)
# TZVIEW_LOG_DIR=logs
"""

    if output_path:
        output_path.write_text(example)

    return example
