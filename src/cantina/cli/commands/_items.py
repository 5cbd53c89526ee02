"""Parsing of item references typed on the command line."""

from cantina.domain.catalog import CatalogService
from cantina.domain.entities import LineItem, Product


def parse_item_ref(ref: str) -> tuple[str, int]:
    """Split "REF" or "REF:QTY" into product reference and quantity."""
    product_ref, sep, quantity = ref.rpartition(":")
    if not sep:
        return ref, 1
    try:
        count = int(quantity)
    except ValueError:
        raise ValueError(f"Invalid quantity in '{ref}'")
    if count < 1:
        raise ValueError(f"Quantity must be at least 1 in '{ref}'")
    return product_ref, count


def resolve_items(catalog: CatalogService, refs) -> list[tuple[Product, int]]:
    items = []
    for ref in refs:
        product_ref, quantity = parse_item_ref(ref)
        items.append((catalog.find_product(product_ref), quantity))
    return items


def as_line_items(items: list[tuple[Product, int]]) -> list[LineItem]:
    return [
        LineItem(product_id=p.id, name=p.name, quantity=qty, unit_price=p.price)
        for p, qty in items
    ]
