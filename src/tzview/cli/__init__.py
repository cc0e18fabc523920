"""Command line interface for tzview."""
