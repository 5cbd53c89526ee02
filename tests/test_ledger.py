"""Tests for the account ledger service."""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from cantina.domain.entities import AccountType, Direction, MovementType
from cantina.domain.errors import (
    ConflictError,
    InvalidAmount,
    LedgerIntegrityError,
    NotFoundError,
    ValidationError,
)


def test_create_account(ledger):
    account_id = ledger.create_account(name="  Ana Souza ", grade="5th grade A", code="A123")

    account = ledger.get_account(account_id)
    assert account.name == "Ana Souza"
    assert account.code == "A123"
    assert account.balance == Decimal("0.00")
    assert account.points == 0
    assert account.is_active
    assert not account.is_staff


def test_create_account_empty_name(ledger):
    with pytest.raises(ValidationError, match="must not be empty"):
        ledger.create_account(name="   ")


def test_create_account_duplicate_code(ledger, sample_account):
    with pytest.raises(ConflictError, match="already exists"):
        ledger.create_account(name="Other", code="A123")


def test_opening_balance(ledger):
    account_id = ledger.create_account(name="Bruno", opening_balance="25.5")

    assert ledger.get_balance(account_id) == Decimal("25.50")
    assert ledger.get_history(account_id) == []


def test_payment_after_debt(ledger, sample_account):
    """A payment of 15.00 on a balance of -15.00 brings it back to zero."""
    ledger.apply_movement(sample_account.id, MovementType.PURCHASE, Decimal("15.00"), "Lunch")
    assert ledger.get_balance(sample_account.id) == Decimal("-15.00")

    entry = ledger.receive_payment(sample_account.id, Decimal("15.00"))

    assert entry.type is MovementType.PAYMENT
    assert entry.direction is Direction.CREDIT
    assert entry.balance_after == Decimal("0.00")
    assert ledger.get_balance(sample_account.id) == Decimal("0.00")


def test_balance_matches_history(ledger, sample_account):
    movements = [
        (MovementType.PAYMENT, "50.00", None),
        (MovementType.PURCHASE, "12.35", None),
        (MovementType.ADJUSTMENT, "2.00", Direction.DEBIT),
        (MovementType.REFUND, "4.10", None),
        (MovementType.EXCHANGE, "1.50", Direction.CREDIT),
    ]
    for type, value, direction in movements:
        ledger.apply_movement(sample_account.id, type, value, "movement", direction=direction)

    history = ledger.get_history(sample_account.id)
    running = Decimal("0.00")
    for entry in history:
        running += entry.signed_value
        assert entry.balance_after == running

    assert ledger.get_balance(sample_account.id) == running == Decimal("41.25")
    assert ledger.verify_account(sample_account.id).is_consistent


@pytest.mark.parametrize("value", ["0", "-5", "0.001", "NaN", "Infinity", Decimal("-Infinity")])
def test_invalid_value_rejected(ledger, sample_account, value):
    with pytest.raises(InvalidAmount):
        ledger.apply_movement(sample_account.id, MovementType.PAYMENT, value, "bad")

    assert ledger.get_balance(sample_account.id) == Decimal("0.00")
    assert ledger.get_history(sample_account.id) == []


def test_exchange_requires_direction(ledger, sample_account):
    with pytest.raises(ValidationError, match="explicit direction"):
        ledger.apply_movement(sample_account.id, MovementType.EXCHANGE, "3.00", "swap")


def test_contradicting_direction_rejected(ledger, sample_account):
    with pytest.raises(ValidationError, match="always DEBIT"):
        ledger.apply_movement(
            sample_account.id, MovementType.PURCHASE, "3.00", "x", direction=Direction.CREDIT
        )


def test_movement_on_missing_account(ledger):
    with pytest.raises(NotFoundError, match="Account 99 not found"):
        ledger.apply_movement(99, MovementType.PAYMENT, "10.00", "ghost")


def test_refund_description(ledger, sample_account):
    entry = ledger.refund(sample_account.id, "3.00", "wrong item")

    assert entry.type is MovementType.REFUND
    assert entry.description == "Refund: wrong item"
    assert entry.balance_after == Decimal("3.00")


def test_batch_payment_pays_off_debt(ledger, sample_account, staff_account):
    ledger.apply_movement(sample_account.id, MovementType.PURCHASE, "20.00", "Lunch")
    ledger.apply_movement(staff_account.id, MovementType.PURCHASE, "8.40", "Coffee")
    ledger.receive_payment(staff_account.id, "10.00")

    entries = ledger.batch_payment([sample_account.id, staff_account.id])

    assert len(entries) == 1
    assert entries[0].value == Decimal("20.00")
    assert entries[0].description == "Batch payment"
    assert ledger.get_balance(sample_account.id) == Decimal("0.00")
    assert ledger.get_balance(staff_account.id) == Decimal("1.60")


def test_batch_payment_fixed_amount_payroll(ledger, sample_account, staff_account):
    entries = ledger.batch_payment(
        [sample_account.id, staff_account.id], amount="30", payroll_deduction=True
    )

    assert [e.description for e in entries] == ["Payroll deduction", "Payroll deduction"]
    assert ledger.get_balance(staff_account.id) == Decimal("30.00")


def test_batch_payment_unknown_account_applies_nothing(ledger, sample_account):
    with pytest.raises(NotFoundError):
        ledger.batch_payment([sample_account.id, 999], amount="5")

    assert ledger.get_history(sample_account.id) == []


def test_list_accounts_filters(ledger, sample_account, staff_account):
    ledger.set_active(staff_account.id, False)

    assert [a.name for a in ledger.list_accounts()] == ["Ana Souza"]
    assert len(ledger.list_accounts(include_inactive=True)) == 2
    assert [a.name for a in ledger.list_accounts(include_inactive=True, account_type=AccountType.STAFF)] == [
        "Carlos Lima"
    ]
    assert [a.name for a in ledger.list_accounts(search="a12")] == ["Ana Souza"]
    assert [a.name for a in ledger.list_accounts(search="grade")] == ["Ana Souza"]


def test_update_account_rejects_balance(ledger, sample_account):
    with pytest.raises(ValidationError, match="Cannot update account fields"):
        ledger.update_account(sample_account.id, balance=Decimal("100"))


def test_update_account_code_conflict(ledger, sample_account, staff_account):
    with pytest.raises(ConflictError):
        ledger.update_account(staff_account.id, code="A123")


def test_check_integrity_detects_tampering(temp_db, ledger, sample_account):
    ledger.receive_payment(sample_account.id, "10.00")

    # Move the stored balance behind the ledger's back
    from cantina.database.models import Account

    with temp_db._session_scope() as session:
        row = session.query(Account).filter(Account.id == sample_account.id).one()
        row.balance = Decimal("99.00")
        session.commit()

    report = ledger.check_integrity(sample_account.id)
    assert not report.is_consistent
    assert report.computed_balance == Decimal("10.00")
    with pytest.raises(LedgerIntegrityError):
        ledger.verify_account(sample_account.id)


def test_delete_account(ledger, sample_account):
    ledger.receive_payment(sample_account.id, "5.00")
    ledger.delete_account(sample_account.id)

    assert ledger.get_account(sample_account.id) is None
    with pytest.raises(NotFoundError):
        ledger.get_history(sample_account.id)


def test_concurrent_payments_on_one_account(ledger, sample_account):
    def pay_twenty():
        for _ in range(20):
            ledger.receive_payment(sample_account.id, "1.00")

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [pool.submit(pay_twenty) for _ in range(4)]
        for future in futures:
            future.result()

    history = ledger.get_history(sample_account.id)
    assert ledger.get_balance(sample_account.id) == Decimal("80.00")
    assert [e.balance_after for e in history] == [Decimal(n) for n in range(1, 81)]
    assert ledger.verify_account(sample_account.id).is_consistent
