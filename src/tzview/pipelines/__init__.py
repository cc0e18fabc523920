"""Batch pipelines over raw records."""

from .projection import RecordProjectionService, project_all

__all__ = ["RecordProjectionService", "project_all"]
