"""Transaction journal commands."""

import click

from cantina.cli.account_resolution import resolve_account_or_exit
from cantina.cli.date_filters import date_range_options, pop_period_flags, resolve_cli_date_range
from cantina.cli.error_handling import handle_domain_error
from cantina.domain.journal import JournalService
from cantina.domain.ledger import LedgerService


@click.group()
def transaction_group():
    """Browse and cancel transactions."""
    pass


@transaction_group.command("list")
@date_range_options
@click.option("--account", help="Only transactions linked to this account")
@click.option("--valid-only", is_flag=True, help="Hide cancelled transactions")
@click.pass_context
def list_transactions(ctx, start_date, end_date, account, valid_only, **period_flags):
    """List journaled transactions, oldest first."""
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(period_flags)
    )
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, LedgerService(db), account)

    transactions = JournalService(db, ctx.obj["settings"]).list_transactions(
        start_date=start, end_date=end, account_id=account_id, include_cancelled=not valid_only
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        status = "" if txn.is_valid else "  [CANCELLED]"
        who = txn.account_name or "-"
        click.echo(
            f"#{txn.id:<5d} {txn.timestamp:%Y-%m-%d %H:%M} | {who:20s} | "
            f"{txn.payment_method.value:7s} | {txn.total:>9.2f}{status}"
        )


@transaction_group.command("cancel")
@click.argument("transaction_id", type=int)
@click.option("--reverse", is_flag=True, help="Also refund the account, points and stock")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def cancel_transaction(ctx, transaction_id, reverse, yes):
    """Cancel a transaction.

    Without --reverse the account balance is left as it is.
    """
    service = JournalService(ctx.obj["db"], ctx.obj["settings"])
    try:
        txn = service.require_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Cancel transaction #{txn.id} of {txn.total:.2f}?"):
        click.echo("Cancellation aborted.")
        return

    try:
        service.cancel(transaction_id, reverse_ledger=reverse)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction #{transaction_id} cancelled")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
