"""Reporting commands."""

from datetime import date

import click

from cantina.cli.date_filters import date_range_options, pop_period_flags, resolve_cli_date_range
from cantina.domain.entities import AccountType
from cantina.domain.reports import ReportService


def _today_range() -> tuple[date, date]:
    today = date.today()
    return today, today


@click.group()
def report_group():
    """Sales and stock reports."""
    pass


@report_group.command("sales")
@date_range_options
@click.pass_context
def sales(ctx, start_date, end_date, **period_flags):
    """Revenue, order count and average ticket (defaults to today)."""
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(period_flags),
        default_range=_today_range(),
    )
    summary = ReportService(ctx.obj["db"]).sales_summary(start, end)
    click.echo(f"Period:         {start or '...'} to {end or '...'}")
    click.echo(f"Revenue:        {summary.total_revenue:.2f}")
    click.echo(f"Orders:         {summary.order_count}")
    click.echo(f"Average ticket: {summary.average_ticket:.2f}")


@report_group.command("accounts")
@date_range_options
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    default=AccountType.ALL.value,
)
@click.option("--with-orders", is_flag=True, help="Hide accounts without orders")
@click.pass_context
def accounts(ctx, start_date, end_date, account_type, with_orders, **period_flags):
    """Orders and spend per account, highest spend first."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(period_flags)
    )
    rows = ReportService(ctx.obj["db"]).account_consumption(
        start, end, AccountType(account_type.upper())
    )
    if with_orders:
        rows = [r for r in rows if r.order_count]
    if not rows:
        click.echo("No accounts found.")
        return
    for row in rows:
        click.echo(f"{row.account_name:28s} {row.order_count:4d} orders {row.total_spent:>10.2f}")


@report_group.command("top-products")
@date_range_options
@click.option("--limit", type=int, default=5, show_default=True)
@click.pass_context
def top_products(ctx, start_date, end_date, limit, **period_flags):
    """Best-selling products by quantity."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(period_flags)
    )
    rows = ReportService(ctx.obj["db"]).top_products(start, end, limit=limit)
    if not rows:
        click.echo("No sales found.")
        return
    for rank, row in enumerate(rows, start=1):
        click.echo(f"{rank:2d}. {row.name:28s} {row.quantity:5d} sold {row.revenue:>10.2f}")


@report_group.command("daily")
@click.option("--days", type=int, default=7, show_default=True)
@click.pass_context
def daily(ctx, days):
    """Revenue per day for the trailing days, today included."""
    for bucket in ReportService(ctx.obj["db"]).daily_revenue(days=days):
        click.echo(f"{bucket.day:%Y-%m-%d} {bucket.order_count:4d} orders {bucket.total:>10.2f}")


@report_group.command("stock")
@click.option("--threshold", type=int, default=10, show_default=True)
@click.pass_context
def stock(ctx, threshold):
    """Products running low or out of stock."""
    service = ReportService(ctx.obj["db"])
    low = service.low_stock_products(threshold)
    out = service.out_of_stock_products()

    click.echo("Out of stock:")
    for p in out:
        click.echo(f"  {p.name}")
    if not out:
        click.echo("  (none)")
    click.echo(f"Low stock (<= {threshold}):")
    for p in low:
        click.echo(f"  {p.name:28s} {p.stock:4d}")
    if not low:
        click.echo("  (none)")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
