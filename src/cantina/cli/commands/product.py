"""Product catalog commands."""

import click

from cantina.cli.error_handling import handle_domain_error
from cantina.domain.catalog import CatalogService
from cantina.utils.amount_parser import parse_amount


@click.group()
def product_group():
    """Manage products sold at the counter."""
    pass


@product_group.command("create")
@click.argument("name", metavar="NAME")
@click.argument("price", metavar="PRICE")
@click.option("--category", help="Category label (e.g., Snacks, Drinks)")
@click.option("--code", help="Short unique code used at the counter")
@click.option("--stock", type=int, help="Known stock count (omit to not track stock)")
@click.pass_context
def create_product(ctx, name, price, category, code, stock):
    """Create a new product.

    Examples:
        cantina product create "Cheese bread" 4.50 --code PQ --stock 40
        cantina product create "Orange juice" "R$ 6,00" --category Drinks
    """
    service = CatalogService(ctx.obj["db"])
    try:
        product_id = service.create_product(
            name=name, price=parse_amount(price), category=category, code=code, stock=stock
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created product '{name}' (ID: {product_id})")


@product_group.command("list")
@click.option("--search", help="Filter by name, code or category")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive products")
@click.pass_context
def list_products(ctx, search, include_inactive):
    """List products."""
    service = CatalogService(ctx.obj["db"])
    products = service.list_products(include_inactive=include_inactive, search=search)
    if not products:
        click.echo("No products found.")
        return

    click.echo("\nProducts:")
    click.echo("-" * 72)
    for p in products:
        stock = "-" if p.stock is None else str(p.stock)
        status = "" if p.is_active else " (inactive)"
        click.echo(
            f"ID: {p.id:3d} | {p.name:24s} | {p.code or '-':6s} | {p.category or '-':10s} | "
            f"{p.price:>8.2f} | stock {stock}{status}"
        )


@product_group.command("stock")
@click.argument("product", metavar="PRODUCT")
@click.argument("stock", metavar="COUNT")
@click.pass_context
def set_stock(ctx, product, stock):
    """Set the stock count of a product.

    PRODUCT can be a product ID or code. Use "none" as COUNT to stop
    tracking stock.
    """
    service = CatalogService(ctx.obj["db"])
    try:
        found = service.find_product(product)
        count = None if stock.lower() == "none" else int(stock)
        service.set_stock(found.id, count)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Stock of '{found.name}' set to {stock}")


@product_group.command("deactivate")
@click.argument("product", metavar="PRODUCT")
@click.pass_context
def deactivate_product(ctx, product):
    """Withdraw a product from sale."""
    service = CatalogService(ctx.obj["db"])
    try:
        found = service.find_product(product)
    except ValueError as e:
        handle_domain_error(ctx, e)
    service.set_active(found.id, False)
    click.echo(f"Deactivated product '{found.name}'")


def register_commands(cli):
    """Register product commands with main CLI."""
    cli.add_command(product_group, name="product")
