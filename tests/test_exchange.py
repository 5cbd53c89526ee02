"""Tests for exchange settlement."""

from datetime import timedelta
from decimal import Decimal

import pytest

from cantina.domain.entities import Direction, LineItem, MovementType, PaymentMethod
from cantina.domain.errors import (
    AccountBlocked,
    ExchangeNotConfirmed,
    IncompleteExchange,
    InsufficientCredit,
)
from cantina.domain.exchange import ExchangeService
from cantina.domain.settings import PosSettings


def test_debit_difference_charged_to_account(exchange_service, ledger, sample_account, products):
    result = exchange_service.exchange(
        [products["juice"]], [products["sandwich"]], account_id=sample_account.id
    )

    assert result.price_diff == Decimal("4.00")
    entry = result.history_entry
    assert entry.type is MovementType.EXCHANGE
    assert entry.direction is Direction.DEBIT
    assert entry.value == Decimal("4.00")
    assert ledger.get_balance(sample_account.id) == Decimal("-4.00")
    assert len(ledger.get_history(sample_account.id)) == 1


def test_credit_difference_returned_to_account(exchange_service, ledger, sample_account, products):
    result = exchange_service.exchange(
        [products["sandwich"]], [products["snack"]], account_id=sample_account.id
    )

    assert result.price_diff == Decimal("-5.50")
    assert result.history_entry.direction is Direction.CREDIT
    assert ledger.get_balance(sample_account.id) == Decimal("5.50")


def test_equal_totals_post_nothing(exchange_service, ledger, sample_account, products):
    juice = products["juice"]
    returned = [LineItem(product_id=juice.id, name=juice.name, quantity=1, unit_price=Decimal("6.00"))]
    new = [LineItem(product_id=products["snack"].id, name="Cheese bread", quantity=1, unit_price=Decimal("6.00"))]

    result = exchange_service.exchange(returned, new, account_id=sample_account.id)

    assert result.price_diff == Decimal("0.00")
    assert result.history_entry is None
    assert ledger.get_history(sample_account.id) == []
    assert result.transaction.total == Decimal("0.00")


def test_net_movement_matches_price_difference(exchange_service, ledger, sample_account, products):
    snack, juice, sandwich = products["snack"], products["juice"], products["sandwich"]
    returned = [LineItem(snack.id, snack.name, 3, snack.price)]
    new = [LineItem(juice.id, juice.name, 2, juice.price), LineItem(sandwich.id, sandwich.name, 1, sandwich.price)]

    result = exchange_service.exchange(returned, new, account_id=sample_account.id)

    expected = Decimal("22.00") - Decimal("13.50")
    assert result.price_diff == expected
    assert ledger.get_balance(sample_account.id) == -expected


def test_transaction_records_both_sides(exchange_service, products):
    result = exchange_service.exchange(
        [products["juice"]], [products["sandwich"]], pay_difference_in_cash=True
    )

    txn = result.transaction
    assert txn.payment_method is PaymentMethod.MIXED
    assert txn.is_exchange
    assert [i.name for i in txn.items] == ["Sandwich"]
    assert [i.name for i in txn.returned_items] == ["Orange juice"]
    assert txn.total == Decimal("4.00")


def test_stock_moves_both_ways(exchange_service, catalog, products):
    exchange_service.exchange(
        [products["snack"]], [products["sandwich"]], pay_difference_in_cash=True
    )

    assert catalog.get_product(products["snack"].id).stock == 21
    assert catalog.get_product(products["sandwich"].id).stock == 4


def test_cash_difference_skips_ledger(exchange_service, ledger, sample_account, products):
    result = exchange_service.exchange(
        [products["juice"]],
        [products["sandwich"]],
        account_id=sample_account.id,
        pay_difference_in_cash=True,
    )

    assert result.history_entry is None
    assert ledger.get_balance(sample_account.id) == Decimal("0.00")


def test_unsettled_difference_needs_confirmation(temp_db, exchange_service, products):
    with pytest.raises(ExchangeNotConfirmed):
        exchange_service.exchange([products["juice"]], [products["sandwich"]])
    assert temp_db.list_transactions() == []

    result = exchange_service.exchange([products["juice"]], [products["sandwich"]], confirmed=True)
    assert result.transaction.account_id is None


def test_credit_without_account_needs_no_confirmation(exchange_service, products):
    result = exchange_service.exchange([products["sandwich"]], [products["juice"]])

    assert result.price_diff == Decimal("-4.00")


@pytest.mark.parametrize("side", ["returned", "new"])
def test_both_sides_required(exchange_service, products, side):
    returned = [] if side == "returned" else [products["juice"]]
    new = [] if side == "new" else [products["juice"]]

    with pytest.raises(IncompleteExchange):
        exchange_service.exchange(returned, new)


def test_debit_difference_respects_credit_policy(temp_db, ledger, sample_account, products, clock):
    service = ExchangeService(temp_db, PosSettings(allow_negative_balance=False), clock=clock)

    with pytest.raises(InsufficientCredit):
        service.exchange([products["juice"]], [products["sandwich"]], account_id=sample_account.id)

    assert ledger.get_balance(sample_account.id) == Decimal("0.00")
    assert temp_db.list_transactions() == []


def test_credit_difference_allowed_for_blocked_account(temp_db, ledger, sample_account, products, clock):
    ledger.apply_movement(
        sample_account.id, MovementType.PURCHASE, "20.00", "Lunch",
        occurred_at=clock() - timedelta(days=40),
    )
    service = ExchangeService(
        temp_db, PosSettings(block_overdue_students=True, max_overdue_days=30), clock=clock
    )

    with pytest.raises(AccountBlocked):
        service.exchange([products["juice"]], [products["sandwich"]], account_id=sample_account.id)

    result = service.exchange([products["sandwich"]], [products["juice"]], account_id=sample_account.id)
    assert ledger.get_balance(sample_account.id) == Decimal("-16.00")
    assert result.history_entry.direction is Direction.CREDIT
