"""Collections commands."""

import click

from cantina.cli.account_resolution import resolve_account_or_exit
from cantina.cli.date_filters import date_range_options, pop_period_flags, resolve_cli_date_range
from cantina.domain.billing import BillingService
from cantina.domain.entities import AccountType
from cantina.domain.ledger import LedgerService


@click.group()
def billing_group():
    """Follow up on accounts in debt."""
    pass


def _debtors(ctx, start_date, end_date, period_flags, account_type="ALL", search=None):
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(period_flags)
    )
    return BillingService(ctx.obj["db"]).list_debtors(
        start_date=start, end_date=end, account_type=AccountType(account_type.upper()), search=search
    )


@billing_group.command("list")
@date_range_options
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    default=AccountType.ALL.value,
)
@click.option("--search", help="Filter by name or code")
@click.pass_context
def list_debtors(ctx, start_date, end_date, account_type, search, **period_flags):
    """List accounts with a negative balance, most negative first."""
    debtors = _debtors(ctx, start_date, end_date, period_flags, account_type, search)
    if not debtors:
        click.echo("No accounts in debt.")
        return

    for d in debtors:
        contact = d.account.guardian_phone or d.account.guardian_email or "-"
        click.echo(f"ID: {d.account.id:3d} | {d.account.name:24s} | {d.amount_owed:>10.2f} | {contact}")
    click.echo("-" * 60)
    click.echo(f"Total owed: {BillingService.total_debt(debtors):.2f}")


@billing_group.command("message")
@click.argument("account", metavar="ACCOUNT")
@date_range_options
@click.pass_context
def message(ctx, account, start_date, end_date, **period_flags):
    """Print the reminder message for an account in debt."""
    account_id = resolve_account_or_exit(ctx, LedgerService(ctx.obj["db"]), account)
    debtors = _debtors(ctx, start_date, end_date, period_flags)
    summary = next((d for d in debtors if d.account.id == account_id), None)
    if summary is None:
        click.echo(f"Error: Account {account_id} has no debt to collect", err=True)
        ctx.exit(1)
    click.echo(BillingService.compose_reminder(summary, ctx.obj["settings"].school_name))


def register_commands(cli):
    """Register billing commands with main CLI."""
    cli.add_command(billing_group, name="billing")
