"""Counter sale command."""

import click

from cantina.cli.account_resolution import resolve_account_or_exit
from cantina.cli.commands._items import resolve_items
from cantina.cli.error_handling import handle_domain_error
from cantina.domain.catalog import CatalogService
from cantina.domain.entities import PaymentMethod
from cantina.domain.ledger import LedgerService
from cantina.domain.settlement import Checkout, SettlementService
from cantina.utils.amount_parser import parse_amount

SALE_METHODS = [m.value for m in PaymentMethod if m is not PaymentMethod.MIXED]


@click.command("sell")
@click.argument("items", metavar="PRODUCT[:QTY]...", nargs=-1, required=True)
@click.option(
    "--method",
    type=click.Choice(SALE_METHODS, case_sensitive=False),
    default=PaymentMethod.MONEY.value,
    show_default=True,
    help="Payment method",
)
@click.option("--account", help="Account to charge or credit with points (ID, code or name)")
@click.option("--tendered", help="Cash handed over (MONEY only, defaults to exact change)")
@click.pass_context
def sell(ctx, items, method, account, tendered):
    """Sell products at the counter.

    PRODUCT can be a product ID or code, optionally followed by :QTY.

    Examples:
        cantina sell PQ:2 SUCO --tendered 20
        cantina sell PQ --method ACCOUNT --account A123
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    checkout = Checkout(SettlementService(db, settings))

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, LedgerService(db), account)

    try:
        for product, quantity in resolve_items(CatalogService(db), items):
            checkout.add(product, quantity)
        checkout.request_payment(PaymentMethod(method.upper()), account_id=account_id)
        amount = parse_amount(tendered) if tendered is not None else None
        result = checkout.settle(amount_tendered=amount)
    except ValueError as e:
        handle_domain_error(ctx, e)

    txn = result.transaction
    click.echo(f"Sale #{txn.id}: {txn.total:.2f} via {txn.payment_method.value}")
    for item in txn.items:
        click.echo(f"  {item.quantity} x {item.name:24s} {item.subtotal:>8.2f}")
    if result.change_due is not None:
        click.echo(f"Change due: {result.change_due:.2f}")
    if txn.balance_snapshot is not None:
        click.echo(f"Account balance: {txn.balance_snapshot:.2f}")


def register_commands(cli):
    """Register sell command with main CLI."""
    cli.add_command(sell)
