"""Tests for the collections aggregator."""

from datetime import date, timedelta
from decimal import Decimal

from cantina.domain.entities import AccountType, LineItem, MovementType


def _purchase(ledger, account_id, value, name, when=None):
    item = LineItem(product_id=None, name=name, quantity=1, unit_price=Decimal(value))
    return ledger.apply_movement(
        account_id, MovementType.PURCHASE, value, "Purchase - 1 item", items=[item], occurred_at=when
    )


def test_lists_negative_balances_most_negative_first(billing, ledger, sample_account, staff_account):
    other = ledger.create_account(name="Bruno Dias", code="B77")
    _purchase(ledger, sample_account.id, "10.00", "Lunch")
    _purchase(ledger, staff_account.id, "25.00", "Coffee")
    ledger.receive_payment(other, "5.00")

    debtors = billing.list_debtors()

    assert [d.account.name for d in debtors] == ["Carlos Lima", "Ana Souza"]
    assert debtors[0].amount_owed == Decimal("25.00")
    assert billing.total_debt(debtors) == Decimal("35.00")


def test_type_and_search_filters(billing, ledger, sample_account, staff_account):
    _purchase(ledger, sample_account.id, "10.00", "Lunch")
    _purchase(ledger, staff_account.id, "25.00", "Coffee")

    assert [d.account.name for d in billing.list_debtors(account_type=AccountType.STUDENT)] == ["Ana Souza"]
    assert [d.account.name for d in billing.list_debtors(search="s001")] == ["Carlos Lima"]
    assert billing.list_debtors(search="nobody") == []


def test_date_range_requires_activity(billing, ledger, sample_account, staff_account, clock):
    _purchase(ledger, sample_account.id, "10.00", "Lunch", when=clock() - timedelta(days=20))
    _purchase(ledger, staff_account.id, "25.00", "Coffee")

    debtors = billing.list_debtors(start_date=date(2024, 3, 10), end_date=date(2024, 3, 15))

    assert [d.account.name for d in debtors] == ["Carlos Lima"]


def test_recent_entries_limited_to_five(billing, ledger, sample_account):
    for n in range(7):
        _purchase(ledger, sample_account.id, "1.00", f"Item {n}")
    ledger.receive_payment(sample_account.id, "0.50")

    summary = billing.list_debtors()[0]

    assert len(summary.recent_entries) == 5
    assert summary.recent_entries[0].items[0].name == "Item 6"
    assert summary.has_more_entries


def test_range_quotes_all_entries_inside(billing, ledger, sample_account, clock):
    for n in range(7):
        _purchase(ledger, sample_account.id, "1.00", f"Item {n}")
    _purchase(ledger, sample_account.id, "1.00", "Old", when=clock() - timedelta(days=30))

    summary = billing.list_debtors(start_date=date(2024, 3, 15), end_date=date(2024, 3, 15))[0]

    assert len(summary.recent_entries) == 7
    assert not summary.has_more_entries


def test_compose_reminder(billing, ledger, sample_account):
    long_name = "Extra large chocolate milkshake with cream"
    _purchase(ledger, sample_account.id, "12.00", long_name)

    message = billing.compose_reminder(billing.list_debtors()[0], "Sunny Days School")

    assert message.startswith("Hello Maria Souza,")
    assert "outstanding balance of 12.00 at the Sunny Days School" in message
    assert "- 15/03/2024: Extra large chocolate milks... (12.00)" in message
    assert long_name not in message
