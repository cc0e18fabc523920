#!/usr/bin/env python3
"""tzview command line entry point."""

import sys

import click

from .tz_compare import compare_command, demo_command, zones_command
from .tz_records import aggregate_command, analyze_command, project_command, top_command

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
EPILOG = """
Examples:
  tzview demo --data orders.yaml                      # One UTC instant, many local dates
  tzview compare --data orders.yaml --utc-time 2024-08-19T23:30:00Z
  tzview project --data orders.yaml --tenant sp --from 2024-08-19
  tzview aggregate --data orders.yaml --by local_date --by tenant_id
  tzview analyze --data orders.yaml --date 2024-08-19
  tzview top --data orders.yaml -n 5 --json
  tzview zones --prefix America/
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="tzview - per-tenant local-calendar analytics over UTC records",
    epilog=EPILOG,
)
def cli() -> None:
    """Root command."""


cli.add_command(project_command)
cli.add_command(aggregate_command)
cli.add_command(top_command)
cli.add_command(analyze_command)
cli.add_command(compare_command)
cli.add_command(demo_command)
cli.add_command(zones_command)


def main(args: list[str] | None = None) -> int:
    """Run the CLI and return the command's exit code."""
    try:
        normalized_args = list(args) if args is not None else None
        result = cli.main(args=normalized_args, standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except SystemExit as exc:  # pragma: no cover - --help exits through click
        return int(exc.code) if exc.code is not None else 0
    return int(result) if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
