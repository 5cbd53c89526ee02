"""Cash drawer commands."""

import click

from cantina.cli.date_filters import date_range_options, pop_period_flags, resolve_cli_date_range
from cantina.cli.error_handling import handle_domain_error
from cantina.domain.cash_drawer import CashDrawerService
from cantina.domain.entities import CashEntryType
from cantina.utils.amount_parser import parse_amount


@click.group()
def cash_group():
    """Record cash drawer supplements and withdrawals."""
    pass


def _record(ctx, type: CashEntryType, amount: str, description: str) -> None:
    service = CashDrawerService(ctx.obj["db"])
    try:
        entry = service.record(type, parse_amount(amount), description)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Recorded cash {entry.type.value} of {entry.amount:.2f}")


@cash_group.command("in")
@click.argument("amount", metavar="AMOUNT")
@click.option("--description", default="Drawer supplement")
@click.pass_context
def cash_in(ctx, amount, description):
    """Put money into the drawer."""
    _record(ctx, CashEntryType.IN, amount, description)


@cash_group.command("out")
@click.argument("amount", metavar="AMOUNT")
@click.option("--description", default="Drawer withdrawal")
@click.pass_context
def cash_out(ctx, amount, description):
    """Take money out of the drawer."""
    _record(ctx, CashEntryType.OUT, amount, description)


@cash_group.command("list")
@date_range_options
@click.pass_context
def list_entries(ctx, start_date, end_date, **period_flags):
    """List drawer movements and their net total."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(period_flags)
    )
    service = CashDrawerService(ctx.obj["db"])
    entries = service.list_entries(start, end)
    if not entries:
        click.echo("No cash movements found.")
        return
    for e in entries:
        click.echo(f"{e.timestamp:%Y-%m-%d %H:%M} | {e.type.value:3s} | {e.value:>9.2f} | {e.description}")
    click.echo(f"Net: {service.drawer_total(start, end):.2f}")


def register_commands(cli):
    """Register cash drawer commands with main CLI."""
    cli.add_command(cash_group, name="cash")
