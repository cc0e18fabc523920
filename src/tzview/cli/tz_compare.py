"""CLI commands across tenant timezones: compare, demo, zones."""

from __future__ import annotations

import click

from ..compare.comparator import CrossTimezoneComparator
from ..core.registry import get_default_registry
from ..core.time import format_offset, get_current_utc
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _selected_tenants(ctx: CLIContext, tenant_ids: tuple[str, ...]):
    lookup = ctx.fixture.tenants
    if tenant_ids:
        return [lookup.get(tid) for tid in tenant_ids]
    return lookup.list_tenants()


@click.command("compare", context_settings=CONTEXT_SETTINGS)
@click.option("--utc-time", help="UTC instant, ISO-8601 (default: now)")
@click.option("--tenant", "tenant_ids", multiple=True, help="Tenant id (repeatable, default: all)")
@cli_command
def compare_command(ctx: CLIContext, utc_time: str | None, tenant_ids: tuple[str, ...]) -> int:
    """Show one UTC instant on every tenant's local clock."""
    try:
        comparator = CrossTimezoneComparator(policy=ctx.settings.business_policy())
        comparison = comparator.compare(utc_time or get_current_utc(), _selected_tenants(ctx, tenant_ids))

        summary = comparison.summary
        lines = [f"🕒 UTC {comparison.utc_time:%Y-%m-%d %H:%M:%S}", ""]
        for entry in comparison.entries:
            flags = []
            if entry.classification.is_business_hour:
                flags.append("business")
            if entry.classification.is_weekend:
                flags.append("weekend")
            lines.append(
                f"  {entry.tenant.name:<24} {entry.tenant.timezone:<24} "
                f"{entry.decomposition.local_time:%Y-%m-%d %H:%M} {entry.decomposition.local_weekday:<9} "
                f"{entry.time_difference:>5} {' '.join(flags)}"
            )
        lines += [
            "",
            f"Dates: {summary.next_day_count} next / {summary.same_day_count} same / {summary.prev_day_count} previous",
            f"In business hours: {summary.business_hour_count}, on weekend: {summary.weekend_count}",
            f"Local hours: avg {summary.average_hour:.1f}, range {summary.min_hour}-{summary.max_hour}",
        ]
        return handle_cli_success(ctx, comparison.to_dict(), lines=lines)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "compare")


@click.command("demo", context_settings=CONTEXT_SETTINGS)
@click.option("--utc-time", help="UTC instant, ISO-8601 (default: 2024-08-19T00:00:00Z)")
@cli_command
def demo_command(ctx: CLIContext, utc_time: str | None) -> int:
    """Show how one UTC instant falls on different local dates."""
    try:
        comparator = CrossTimezoneComparator(policy=ctx.settings.business_policy())
        demo = comparator.demo(ctx.fixture.tenants.list_tenants(), utc_time)

        lines = [f"🌍 UTC {demo.utc_time:%Y-%m-%d %H:%M:%S}", ""]
        for row in demo.rows:
            marker = "+1 day" if row.is_next_day else "-1 day" if row.is_prev_day else ""
            lines.append(f"  {row.tenant.timezone:<28} {row.local_time:%Y-%m-%d %H:%M} {row.offset} {marker}")
        s = demo.summary
        lines += [
            "",
            f"{s.total_timezones} timezones: {s.next_day_count} next day, {s.same_day_count} same day, "
            f"{s.prev_day_count} previous day",
            f"Offsets from {format_offset(int(s.min_offset_hours * 3600))} to {format_offset(int(s.max_offset_hours * 3600))}",
        ]
        return handle_cli_success(ctx, demo.to_dict(), lines=lines)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "demo")


@click.command("zones", context_settings=CONTEXT_SETTINGS)
@click.option("--prefix", default="", help="Only identifiers starting with this prefix (e.g. America/)")
@cli_command
def zones_command(ctx: CLIContext, prefix: str) -> int:
    """List known timezone identifiers."""
    try:
        zones = [zone for zone in get_default_registry().available() if zone.startswith(prefix)]
        return handle_cli_success(ctx, zones, meta={"count": len(zones)}, lines=zones)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "zones")
