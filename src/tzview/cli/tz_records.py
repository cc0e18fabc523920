"""CLI commands over tenant records: project, aggregate, top, analyze."""

from __future__ import annotations

import click

from ..core.models import ALL_STATUSES
from ..pipelines.projection import RecordProjectionService
from ..rollups.aggregator import AggregationEngine, Dimension, build_daily_analysis
from ..rollups.time_windows import compute_range_boundaries_utc
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

STATUS_CHOICE = click.Choice([s.value for s in sorted(ALL_STATUSES, key=lambda s: s.value)])
DIMENSION_CHOICE = click.Choice([d.value for d in Dimension])


def _project(ctx: CLIContext, records):
    settings = ctx.settings
    service = RecordProjectionService(policy=settings.business_policy(), max_workers=settings.max_workers)
    tenants = ctx.fixture.tenants.get_tenants({r.tenant_id for r in records})
    return service.project_all(records, tenants)


def _engine(ctx: CLIContext, all_statuses: bool) -> AggregationEngine:
    return AggregationEngine(ALL_STATUSES if all_statuses else ctx.settings.completed_statuses)


@click.command("project", context_settings=CONTEXT_SETTINGS)
@click.option("--tenant", "tenant_id", help="Only records of this tenant")
@click.option("--from", "date_from", help="First local date (YYYY-MM-DD, needs --tenant)")
@click.option("--to", "date_to", help="Last local date (YYYY-MM-DD, needs --tenant)")
@click.option("--status", "statuses", multiple=True, type=STATUS_CHOICE, help="Restrict to status (repeatable)")
@click.option("--limit", type=int, default=20, show_default=True, help="Page size")
@click.option("--offset", type=int, default=0, show_default=True, help="Records to skip")
@cli_command
def project_command(
    ctx: CLIContext,
    tenant_id: str | None,
    date_from: str | None,
    date_to: str | None,
    statuses: tuple[str, ...],
    limit: int,
    offset: int,
) -> int:
    """Project records onto their tenants' local calendars."""
    try:
        fixture = ctx.fixture
        start_utc = end_utc = None
        if date_from or date_to:
            if not tenant_id:
                raise click.UsageError("--from/--to select local dates and need --tenant")
            tenant = fixture.tenants.get(tenant_id)
            start_utc, end_utc = compute_range_boundaries_utc(
                date_from or date_to, date_to or date_from, tenant.timezone
            )

        records = fixture.records.fetch(
            start_utc=start_utc,
            end_utc=end_utc,
            tenant_id=tenant_id,
            statuses=statuses or None,
            limit=limit,
            offset=offset,
        )
        projected = _project(ctx, records)

        lines = [
            f"{p.record.record_id:>6}  {p.tenant.name:<20} {p.decomposition.local_time:%Y-%m-%d %H:%M} "
            f"{p.decomposition.local_weekday:<9} {'weekend' if p.classification.is_weekend else 'weekday':<8} "
            f"{'business' if p.classification.is_business_hour else '-':<8} {p.amount} {p.record.currency}"
            for p in projected
        ]
        return handle_cli_success(
            ctx,
            [p.to_dict() for p in projected],
            meta={"count": len(projected), "limit": limit, "offset": offset},
            lines=lines or ["No records"],
        )
    except click.UsageError:
        raise
    except Exception as exc:
        return handle_cli_error(ctx, exc, "project")


@click.command("aggregate", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--by",
    "dimensions",
    multiple=True,
    type=DIMENSION_CHOICE,
    default=("local_date",),
    show_default=True,
    help="Group by dimension (repeatable, order kept)",
)
@click.option("--all-statuses", is_flag=True, help="Include every status, not only completed ones")
@cli_command
def aggregate_command(ctx: CLIContext, dimensions: tuple[str, ...], all_statuses: bool) -> int:
    """Aggregate records by local-calendar dimensions."""
    try:
        projected = _project(ctx, ctx.fixture.records.all())
        groups = _engine(ctx, all_statuses).aggregate(projected, dimensions)

        lines = []
        for group in groups:
            key = " | ".join(str(v) for v in group.key) or "(all)"
            lines.append(
                f"{key:<40} orders={group.count:<5} total={group.total_amount:.2f} avg={group.avg_amount:.2f}"
            )
        return handle_cli_success(
            ctx,
            [g.to_dict() for g in groups],
            meta={"dimensions": list(dimensions), "groups": len(groups)},
            lines=lines or ["No groups"],
        )
    except Exception as exc:
        return handle_cli_error(ctx, exc, "aggregate")


@click.command("top", context_settings=CONTEXT_SETTINGS)
@click.option("-n", "--limit", "n", type=int, help="Number of tenants (default: TZVIEW_TOP_N)")
@click.option("--date", "local_date", help="Only records on this local date (YYYY-MM-DD)")
@click.option("--all-statuses", is_flag=True, help="Include every status, not only completed ones")
@cli_command
def top_command(ctx: CLIContext, n: int | None, local_date: str | None, all_statuses: bool) -> int:
    """Rank tenants by total amount."""
    try:
        projected = _project(ctx, ctx.fixture.records.all())
        engine = _engine(ctx, all_statuses)
        n = ctx.settings.top_n if n is None else n
        if local_date:
            rankings = build_daily_analysis(projected, local_date, engine, top_n=n).top_tenants
        else:
            rankings = engine.rank_tenants(projected, n)

        lines = [
            f"{r.rank:>3}. {r.tenant_name:<24} {r.timezone:<24} orders={r.order_count:<5} total={r.total_amount:.2f}"
            for r in rankings
        ]
        return handle_cli_success(ctx, [r.to_dict() for r in rankings], lines=lines or ["No tenants"])
    except Exception as exc:
        return handle_cli_error(ctx, exc, "top")


@click.command("analyze", context_settings=CONTEXT_SETTINGS)
@click.option("--date", "local_date", required=True, help="Local date to analyze (YYYY-MM-DD)")
@click.option("--all-statuses", is_flag=True, help="Include every status, not only completed ones")
@cli_command
def analyze_command(ctx: CLIContext, local_date: str, all_statuses: bool) -> int:
    """Daily analysis on each tenant's own local date."""
    try:
        projected = _project(ctx, ctx.fixture.records.all())
        analysis = build_daily_analysis(projected, local_date, _engine(ctx, all_statuses), top_n=ctx.settings.top_n)

        lines = [
            f"📊 {analysis.local_date.isoformat()}: {analysis.total_orders} orders, total {analysis.total_amount:.2f}",
            "",
            "Hourly:",
            *(f"  {g.key[0]:02d}:00  orders={g.count:<5} total={g.total_amount:.2f}" for g in analysis.hourly_breakdown),
            "",
            "Timezones:",
            *(
                f"  {g.key[0]:<28} {g.key[1]:<16} orders={g.count:<5} total={g.total_amount:.2f}"
                for g in analysis.timezone_stats
            ),
            "",
            "Top tenants:",
            *(f"  {r.rank}. {r.tenant_name} ({r.total_amount:.2f})" for r in analysis.top_tenants),
        ]
        return handle_cli_success(ctx, analysis.to_dict(), lines=lines)
    except Exception as exc:
        return handle_cli_error(ctx, exc, "analyze")
