"""Domain model entities for cantina.

These are pure data classes representing business concepts, independent of
database schema. Services hand them out and take them back in; the database
layer maps its ORM rows onto them.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Optional

from cantina.domain.errors import InvalidAmount

CENT = Decimal("0.01")


def money(value) -> Decimal:
    """Coerce a number to a two-place Decimal.

    Raises:
        InvalidAmount: If the value is not a finite number
    """
    try:
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        if not value.is_finite():
            raise InvalidOperation
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Not a valid amount: '{value}'") from None


class MovementType(str, Enum):
    """Kind of balance movement recorded in an account history."""

    PURCHASE = "PURCHASE"
    PAYMENT = "PAYMENT"
    ADJUSTMENT = "ADJUSTMENT"
    REFUND = "REFUND"
    EXCHANGE = "EXCHANGE"


class Direction(str, Enum):
    """Whether a movement takes from (DEBIT) or adds to (CREDIT) a balance."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


# EXCHANGE and ADJUSTMENT can go either way and must state a direction.
IMPLIED_DIRECTIONS = {
    MovementType.PURCHASE: Direction.DEBIT,
    MovementType.PAYMENT: Direction.CREDIT,
    MovementType.REFUND: Direction.CREDIT,
}


class PaymentMethod(str, Enum):
    MONEY = "MONEY"
    ACCOUNT = "ACCOUNT"
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    PIX = "PIX"
    MIXED = "MIXED"


class TransactionStatus(str, Enum):
    VALID = "VALID"
    CANCELLED = "CANCELLED"


class CashEntryType(str, Enum):
    IN = "IN"
    OUT = "OUT"


class AccountType(str, Enum):
    """Account classification filter used by listings and reports."""

    ALL = "ALL"
    STUDENT = "STUDENT"
    STAFF = "STAFF"

    def matches(self, is_staff: bool) -> bool:
        if self is AccountType.STUDENT:
            return not is_staff
        if self is AccountType.STAFF:
            return is_staff
        return True


@dataclass(frozen=True)
class LineItem:
    """A priced product line captured at sale time."""

    product_id: Optional[int]
    name: str
    quantity: int
    unit_price: Decimal
    note: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return money(self.unit_price * self.quantity)


@dataclass(frozen=True)
class Account:
    """Student or staff ledger subject."""

    id: int
    name: str
    grade: str
    code: Optional[str]
    balance: Decimal
    opening_balance: Decimal
    points: int
    is_staff: bool
    is_active: bool
    guardian_name: Optional[str]
    guardian_email: Optional[str]
    guardian_phone: Optional[str]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class HistoryEntry:
    """One applied movement in an account history."""

    id: int
    account_id: int
    timestamp: datetime
    type: MovementType
    direction: Direction
    value: Decimal
    description: str
    balance_after: Decimal
    items: tuple[LineItem, ...] = ()

    @property
    def signed_value(self) -> Decimal:
        return -self.value if self.direction is Direction.DEBIT else self.value


@dataclass(frozen=True)
class LedgerPosting:
    """A movement that has passed validation and is ready to be applied."""

    account_id: int
    type: MovementType
    direction: Direction
    value: Decimal
    description: str
    timestamp: datetime
    items: tuple[LineItem, ...] = ()

    @property
    def signed_value(self) -> Decimal:
        return -self.value if self.direction is Direction.DEBIT else self.value


@dataclass(frozen=True)
class Product:
    """Catalog product as seen by the point of sale."""

    id: int
    name: str
    price: Decimal
    category: Optional[str]
    code: Optional[str]
    stock: Optional[int]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class TransactionDraft:
    """Journal record before it is assigned an ID and a balance snapshot."""

    account_id: Optional[int]
    account_name: Optional[str]
    items: tuple[LineItem, ...]
    total: Decimal
    timestamp: datetime
    payment_method: PaymentMethod
    returned_items: tuple[LineItem, ...] = ()
    amount_tendered: Optional[Decimal] = None
    change_due: Optional[Decimal] = None


@dataclass(frozen=True)
class Transaction:
    """Journal record of one checkout or exchange."""

    id: int
    account_id: Optional[int]
    account_name: Optional[str]
    items: tuple[LineItem, ...]
    total: Decimal
    timestamp: datetime
    payment_method: PaymentMethod
    status: TransactionStatus
    balance_snapshot: Optional[Decimal]
    returned_items: tuple[LineItem, ...] = ()
    amount_tendered: Optional[Decimal] = None
    change_due: Optional[Decimal] = None
    points_awarded: int = 0

    @property
    def is_valid(self) -> bool:
        return self.status is TransactionStatus.VALID

    @property
    def is_exchange(self) -> bool:
        return len(self.returned_items) > 0


@dataclass(frozen=True)
class CashEntry:
    """Manual cash drawer movement (supplement or withdrawal)."""

    id: int
    timestamp: datetime
    type: CashEntryType
    amount: Decimal
    description: str

    @property
    def value(self) -> Decimal:
        return self.amount if self.type is CashEntryType.IN else -self.amount


@dataclass(frozen=True)
class OverdueStatus:
    is_overdue: bool
    days_overdue: int = 0


@dataclass(frozen=True)
class SettlementResult:
    transaction: Transaction
    history_entry: Optional[HistoryEntry]
    change_due: Optional[Decimal]


@dataclass(frozen=True)
class ExchangeResult:
    transaction: Transaction
    history_entry: Optional[HistoryEntry]
    price_diff: Decimal


@dataclass(frozen=True)
class DebtorSummary:
    """Account in debt plus the entries to quote in a collection message."""

    account: Account
    amount_owed: Decimal
    recent_entries: tuple[HistoryEntry, ...] = ()
    has_more_entries: bool = False


@dataclass(frozen=True)
class SalesSummary:
    start_date: Optional[date]
    end_date: Optional[date]
    total_revenue: Decimal
    order_count: int
    average_ticket: Decimal


@dataclass(frozen=True)
class AccountConsumption:
    account_id: int
    account_name: str
    is_staff: bool
    order_count: int
    total_spent: Decimal


@dataclass(frozen=True)
class ProductSales:
    product_id: Optional[int]
    name: str
    quantity: int
    revenue: Decimal


@dataclass(frozen=True)
class DailyRevenue:
    day: date
    total: Decimal
    order_count: int = 0


@dataclass(frozen=True)
class IntegrityReport:
    """Result of recomputing an account balance from its history."""

    account_id: int
    stored_balance: Decimal
    computed_balance: Decimal
    mismatched_entry_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_consistent(self) -> bool:
        return (
            self.stored_balance == self.computed_balance
            and not self.mismatched_entry_ids
        )
