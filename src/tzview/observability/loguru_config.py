"""Loguru configuration with component-bound loggers and operation timing.

The library stays quiet until ``configure_loguru`` is called: the package
disables its own loggers at import time, as loguru recommends for libraries.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "COMPONENTS",
    "configure_loguru",
    "get_logger",
    "timing_context",
]

COMPONENTS = ("registry", "projection", "aggregation", "compare", "storage", "cli")


def configure_loguru(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "100 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> None:
    """Configure loguru sinks and enable tzview's loggers.

    Parameters
    ----------
    log_dir
        Directory for a serialized JSONL log (no file sink if None)
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    rotation
        Log rotation policy (e.g., "100 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days", "1 week")
    enable_console
        Enable colored stderr output

    Example
    -------
    >>> configure_loguru(level="DEBUG")
    """
    logger.remove()
    logger.configure(extra={"component": "tzview"})
    logger.enable("tzview")

    if enable_console:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<level>{message}</level>",
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "tzview.jsonl",
            format="{message}",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=True,
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    logger.bind(component="tzview").debug("Loguru configured", log_dir=str(log_dir), level=level)


def get_logger(component: str = "tzview") -> Any:
    """Get logger bound to a component.

    Parameters
    ----------
    component
        Component name (registry, projection, aggregation, compare, storage, cli)

    Returns
    -------
    Logger
        Loguru logger bound to component
    """
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "tzview",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Log START/END of an operation with its duration.

    Parameters
    ----------
    operation
        Name of the operation being timed
    component
        Component name for filtering logs
    **metadata
        Additional metadata to log

    Yields
    ------
    dict
        Context dictionary that can be updated with result data

    Example
    -------
    >>> with timing_context("project_all", component="projection", batch_size=3) as ctx:
    ...     ctx["projected"] = 3
    """
    bound = logger.bind(component=component, timing=True, operation=operation)
    context: dict[str, Any] = dict(metadata)
    start_ns = time.perf_counter_ns()

    bound.debug(f"START: {operation}", phase="start", **metadata)
    try:
        yield context
    finally:
        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        bound.debug(f"END: {operation}", phase="end", duration_ms=duration_ms, **context)
