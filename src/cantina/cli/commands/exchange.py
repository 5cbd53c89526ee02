"""Product exchange command."""

import click

from cantina.cli.account_resolution import resolve_account_or_exit
from cantina.cli.commands._items import as_line_items, resolve_items
from cantina.cli.error_handling import handle_domain_error
from cantina.domain.catalog import CatalogService
from cantina.domain.errors import ExchangeNotConfirmed
from cantina.domain.exchange import ExchangeService
from cantina.domain.ledger import LedgerService


@click.command("exchange")
@click.option("--return", "returned", multiple=True, required=True, metavar="PRODUCT[:QTY]",
              help="Item coming back (repeatable)")
@click.option("--new", "new", multiple=True, required=True, metavar="PRODUCT[:QTY]",
              help="Item handed out (repeatable)")
@click.option("--account", help="Account that absorbs the price difference")
@click.option("--cash", is_flag=True, help="Settle the difference at the cash drawer")
@click.option("--yes", "confirmed", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def exchange(ctx, returned, new, account, cash, confirmed):
    """Exchange returned items for new ones.

    Examples:
        cantina exchange --return SUCO --new PQ:2 --account A123
        cantina exchange --return SUCO --new SANDUICHE --cash
    """
    db = ctx.obj["db"]
    service = ExchangeService(db, ctx.obj["settings"])
    catalog = CatalogService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, LedgerService(db), account)

    try:
        returned_items = as_line_items(resolve_items(catalog, returned))
        new_items = as_line_items(resolve_items(catalog, new))
        try:
            result = service.exchange(
                returned_items, new_items, account_id=account_id,
                pay_difference_in_cash=cash, confirmed=confirmed,
            )
        except ExchangeNotConfirmed as e:
            if not click.confirm(f"{e}", default=False):
                click.echo("Exchange cancelled.")
                return
            result = service.exchange(
                returned_items, new_items, account_id=account_id,
                pay_difference_in_cash=cash, confirmed=True,
            )
    except ValueError as e:
        handle_domain_error(ctx, e)

    diff = result.price_diff
    click.echo(f"Exchange #{result.transaction.id} recorded")
    if diff > 0:
        click.echo(f"Customer pays {diff:.2f}")
    elif diff < 0:
        click.echo(f"Customer is credited {-diff:.2f}")
    else:
        click.echo("No price difference")
    if result.history_entry is not None:
        click.echo(f"Account balance: {result.history_entry.balance_after:.2f}")


def register_commands(cli):
    """Register exchange command with main CLI."""
    cli.add_command(exchange)
