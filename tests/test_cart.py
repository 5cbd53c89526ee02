"""Tests for the cart and pricing engine."""

from decimal import Decimal

import pytest

from cantina.domain.cart import Cart
from cantina.domain.errors import InsufficientStock, NotFoundError, ValidationError


def test_add_merges_lines(products):
    cart = Cart()
    cart.add(products["snack"])
    cart.add(products["snack"], 2)
    cart.add(products["juice"])

    assert len(cart) == 2
    assert cart.item_count == 4
    assert cart.total == Decimal("19.50")


def test_price_captured_when_added(products):
    cart = Cart()
    line = cart.add(products["juice"])

    assert line.unit_price == Decimal("6.00")
    assert cart.to_line_items()[0].unit_price == Decimal("6.00")


def test_quantity_must_be_positive(products):
    with pytest.raises(ValidationError, match="at least 1"):
        Cart().add(products["snack"], 0)


def test_inactive_product_rejected(catalog, products):
    catalog.set_active(products["juice"].id, False)
    juice = catalog.get_product(products["juice"].id)

    with pytest.raises(ValidationError, match="not available"):
        Cart().add(juice)


def test_stock_limit_enforced(products):
    cart = Cart(enforce_stock_limit=True)
    cart.add(products["sandwich"], 5)

    with pytest.raises(InsufficientStock) as excinfo:
        cart.add(products["sandwich"])
    assert excinfo.value.stock == 5
    assert cart.item_count == 5


def test_stock_limit_off_allows_overselling(products):
    cart = Cart(enforce_stock_limit=False)
    cart.add(products["sandwich"], 9)

    assert cart.item_count == 9


def test_untracked_stock_is_unlimited(products):
    cart = Cart(enforce_stock_limit=True)
    cart.add(products["juice"], 100)

    assert cart.total == Decimal("600.00")


def test_adjust_quantity_floors_at_one(products):
    cart = Cart()
    cart.add(products["snack"], 2)

    line = cart.adjust_quantity(products["snack"].id, -5)
    assert line.quantity == 1


def test_adjust_quantity_checks_stock(products):
    cart = Cart(enforce_stock_limit=True)
    cart.add(products["sandwich"], 4)

    cart.adjust_quantity(products["sandwich"].id, 1)
    with pytest.raises(InsufficientStock):
        cart.adjust_quantity(products["sandwich"].id, 1)


def test_remove_and_notes(products):
    cart = Cart()
    cart.add(products["snack"])
    cart.add(products["juice"])

    cart.set_note(products["snack"].id, "no salt")
    assert cart.to_line_items()[0].note == "no salt"

    cart.remove(products["juice"].id)
    assert [line.product.id for line in cart.lines] == [products["snack"].id]

    with pytest.raises(NotFoundError):
        cart.remove(products["juice"].id)


def test_clear(products):
    cart = Cart()
    cart.add(products["snack"])
    cart.clear()

    assert cart.is_empty()
    assert cart.total == Decimal("0.00")
