"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from cantina.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text,expected",
    [
        ("12.50", Decimal("12.50")),
        ("12,50", Decimal("12.50")),
        ("R$ 15,00", Decimal("15.00")),
        ("$7.25", Decimal("7.25")),
        ("1.234,56", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("20", Decimal("20")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12,50,x"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


@pytest.mark.parametrize("text", ["NaN", "Infinity", "-inf", "sNaN"])
def test_parse_amount_rejects_non_finite(text):
    with pytest.raises(ValueError):
        parse_amount(text)
