"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the ledger rules never see ORM
rows and the schema can change without touching the services.
"""

from decimal import Decimal
from typing import Iterable, Optional

from cantina.domain import entities as domain
from cantina.database.models import (
    Account as ORMAccount,
    CashEntry as ORMCashEntry,
    HistoryEntry as ORMHistoryEntry,
    HistoryLine as ORMHistoryLine,
    Product as ORMProduct,
    Transaction as ORMTransaction,
    TransactionLine as ORMTransactionLine,
)


def _money(value) -> Optional[Decimal]:
    return None if value is None else domain.money(value)


def line_to_domain(orm_line) -> domain.LineItem:
    """Convert a TransactionLine or HistoryLine row to a domain LineItem."""
    return domain.LineItem(
        product_id=orm_line.product_id,
        name=orm_line.name,
        quantity=orm_line.quantity,
        unit_price=domain.money(orm_line.unit_price),
        note=orm_line.note,
    )


def history_lines_from_domain(items: Iterable[domain.LineItem]) -> list[ORMHistoryLine]:
    """Build HistoryLine rows for a posting's items."""
    return [
        ORMHistoryLine(
            position=position,
            product_id=item.product_id,
            name=item.name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            note=item.note,
        )
        for position, item in enumerate(items)
    ]


def transaction_lines_from_domain(
    items: Iterable[domain.LineItem], is_return: bool = False, start: int = 0
) -> list[ORMTransactionLine]:
    """Build TransactionLine rows for sold or returned items."""
    return [
        ORMTransactionLine(
            position=start + offset,
            product_id=item.product_id,
            name=item.name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            note=item.note,
            is_return=is_return,
        )
        for offset, item in enumerate(items)
    ]


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        grade=orm_account.grade or "",
        code=orm_account.code,
        balance=domain.money(orm_account.balance),
        opening_balance=domain.money(orm_account.opening_balance),
        points=orm_account.points,
        is_staff=orm_account.is_staff,
        is_active=orm_account.is_active,
        guardian_name=orm_account.guardian_name,
        guardian_email=orm_account.guardian_email,
        guardian_phone=orm_account.guardian_phone,
        notes=orm_account.notes,
        created_at=orm_account.created_at,
    )


def history_entry_to_domain(orm_entry: ORMHistoryEntry) -> domain.HistoryEntry:
    """Convert SQLAlchemy HistoryEntry model to domain HistoryEntry entity."""
    return domain.HistoryEntry(
        id=orm_entry.id,
        account_id=orm_entry.account_id,
        timestamp=orm_entry.timestamp,
        type=domain.MovementType(orm_entry.type),
        direction=domain.Direction(orm_entry.direction),
        value=domain.money(orm_entry.value),
        description=orm_entry.description,
        balance_after=domain.money(orm_entry.balance_after),
        items=tuple(line_to_domain(line) for line in orm_entry.lines),
    )


def product_to_domain(orm_product: ORMProduct) -> domain.Product:
    """Convert SQLAlchemy Product model to domain Product entity."""
    return domain.Product(
        id=orm_product.id,
        name=orm_product.name,
        price=domain.money(orm_product.price),
        category=orm_product.category,
        code=orm_product.code,
        stock=orm_product.stock,
        is_active=orm_product.is_active,
        created_at=orm_product.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    sold = tuple(line_to_domain(l) for l in orm_transaction.lines if not l.is_return)
    returned = tuple(line_to_domain(l) for l in orm_transaction.lines if l.is_return)
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        account_name=orm_transaction.account_name,
        items=sold,
        total=domain.money(orm_transaction.total),
        timestamp=orm_transaction.timestamp,
        payment_method=domain.PaymentMethod(orm_transaction.payment_method),
        status=domain.TransactionStatus(orm_transaction.status),
        balance_snapshot=_money(orm_transaction.balance_snapshot),
        returned_items=returned,
        amount_tendered=_money(orm_transaction.amount_tendered),
        change_due=_money(orm_transaction.change_due),
        points_awarded=orm_transaction.points_awarded or 0,
    )


def cash_entry_to_domain(orm_entry: ORMCashEntry) -> domain.CashEntry:
    """Convert SQLAlchemy CashEntry model to domain CashEntry entity."""
    return domain.CashEntry(
        id=orm_entry.id,
        timestamp=orm_entry.timestamp,
        type=domain.CashEntryType(orm_entry.type),
        amount=domain.money(orm_entry.amount),
        description=orm_entry.description,
    )
