"""Tests for the product catalog service."""

from decimal import Decimal

import pytest

from cantina.domain.errors import ConflictError, InvalidAmount, NotFoundError, ValidationError


def test_create_product(catalog):
    product_id = catalog.create_product("Popcorn", "3.5", category="Snacks", code="POP", stock=12)

    product = catalog.get_product(product_id)
    assert product.price == Decimal("3.50")
    assert product.stock == 12
    assert product.is_active


def test_create_product_validation(catalog, products):
    with pytest.raises(ValidationError):
        catalog.create_product(" ", "1.00")
    with pytest.raises(InvalidAmount):
        catalog.create_product("Free lunch", "-1")
    with pytest.raises(ValidationError, match="Stock"):
        catalog.create_product("Water", "2.00", stock=-1)
    with pytest.raises(ConflictError):
        catalog.create_product("Other", "1.00", code="PQ")


def test_find_product_by_id_or_code(catalog, products):
    assert catalog.find_product(products["juice"].id).name == "Orange juice"
    assert catalog.find_product(str(products["snack"].id)).name == "Cheese bread"
    assert catalog.find_product("SAND").name == "Sandwich"
    with pytest.raises(NotFoundError):
        catalog.find_product("NOPE")


def test_list_products(catalog, products):
    catalog.set_active(products["sandwich"].id, False)

    assert [p.name for p in catalog.list_products()] == ["Cheese bread", "Orange juice"]
    assert len(catalog.list_products(include_inactive=True)) == 3
    assert [p.name for p in catalog.list_products(search="drinks")] == ["Orange juice"]


def test_set_stock_and_price(catalog, products):
    catalog.set_stock(products["juice"].id, 8)
    catalog.set_price(products["juice"].id, "6.5")

    juice = catalog.get_product(products["juice"].id)
    assert juice.stock == 8
    assert juice.price == Decimal("6.50")

    catalog.set_stock(products["juice"].id, None)
    assert catalog.get_product(products["juice"].id).stock is None

    with pytest.raises(ValidationError):
        catalog.set_stock(products["juice"].id, -2)
    with pytest.raises(NotFoundError):
        catalog.set_stock(999, 1)
