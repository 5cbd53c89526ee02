"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidStateError(DomainError):
    """Operation not allowed in the current checkout state."""


class LedgerIntegrityError(DomainError):
    """Stored balance disagrees with the account history."""


class InvalidAmount(ValidationError):
    """Movement or cash value is not a strictly positive, finite amount."""


class InsufficientStock(ValidationError):
    """Cart quantity would exceed the product's known stock."""

    def __init__(self, product_name: str, stock: int):
        self.product_name = product_name
        self.stock = stock
        super().__init__(f"Insufficient stock for '{product_name}' (available: {stock})")


class EmptyCart(ValidationError):
    """Settlement attempted with no items."""


class NoAccountSelected(ValidationError):
    """Account payment attempted without an account."""


class AccountBlocked(ValidationError):
    """Account is overdue and blocked from account charges."""

    def __init__(self, account_name: str, days_overdue: int, max_overdue_days: int):
        self.account_name = account_name
        self.days_overdue = days_overdue
        self.max_overdue_days = max_overdue_days
        super().__init__(
            f"Account '{account_name}' is blocked: overdue for {days_overdue} days "
            f"(maximum allowed: {max_overdue_days})"
        )


class InsufficientCredit(ValidationError):
    """Charge would take the balance below zero while that is not allowed."""

    def __init__(self, account_name: str, balance: Decimal, total: Decimal):
        self.account_name = account_name
        self.balance = balance
        self.total = total
        super().__init__(
            f"Insufficient credit for '{account_name}': balance {balance:.2f}, "
            f"charge {total:.2f} and negative balances are not allowed"
        )


class InsufficientCash(ValidationError):
    """Cash tendered does not cover the total."""

    def __init__(self, tendered: Decimal, total: Decimal):
        self.tendered = tendered
        self.total = total
        super().__init__(f"Cash tendered {tendered:.2f} is less than total {total:.2f}")


class IncompleteExchange(ValidationError):
    """Exchange needs both returned and new items."""


class ExchangeNotConfirmed(ValidationError):
    """Unsettled price difference needs explicit confirmation."""


class PaymentMethodDisabled(ValidationError):
    """Payment method is switched off in the settings."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def product_not_found(product_ref) -> str:
    """Return message for missing product."""
    return f"Product {product_ref} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def duplicate_code(kind: str, code: str) -> str:
    """Return message for a duplicate account or product code."""
    return f"{kind} with code '{code}' already exists"
