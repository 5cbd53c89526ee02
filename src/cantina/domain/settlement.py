"""Transaction settlement: turns a cart into a journal transaction."""

import logging
import math
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Optional

from cantina.database.base import Database
from cantina.domain.cart import Cart
from cantina.domain.entities import (
    Account,
    LineItem,
    MovementType,
    PaymentMethod,
    Product,
    SettlementResult,
    TransactionDraft,
    money,
)
from cantina.domain.errors import (
    AccountBlocked,
    EmptyCart,
    InsufficientCash,
    InsufficientCredit,
    InvalidStateError,
    NoAccountSelected,
    NotFoundError,
    PaymentMethodDisabled,
    ValidationError,
    account_not_found,
)
from cantina.domain.ledger import build_posting
from cantina.domain.overdue import OverduePolicy
from cantina.domain.settings import PosSettings

logger = logging.getLogger(__name__)


def loyalty_points(total: Decimal, settings: PosSettings) -> int:
    """Points earned by an account-linked sale: one per whole currency unit."""
    if not settings.enable_loyalty_system or total <= 0:
        return 0
    return math.floor(total)


def stock_movements(items: Iterable[LineItem], sign: int = -1) -> dict[int, int]:
    """Sum item quantities per product, signed (-1 consumes, +1 restocks)."""
    deltas: dict[int, int] = defaultdict(int)
    for item in items:
        if item.product_id is not None:
            deltas[item.product_id] += sign * item.quantity
    return dict(deltas)


class SettlementService:
    """Service that settles carts against payment methods and accounts."""

    def __init__(
        self,
        db: Database,
        settings: PosSettings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize settlement service.

        Args:
            db: Database instance
            settings: Feature flags in effect
            clock: Returns the current local time
        """
        self.db = db
        self.settings = settings
        self.clock = clock
        self.overdue = OverduePolicy(db, settings, clock)

    def require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def check_account_charge(self, account: Account, amount: Decimal) -> None:
        """Run the policy gates for charging an amount to an account.

        Raises:
            AccountBlocked: If the account is overdue and blocking is on
            InsufficientCredit: If the charge would go below zero while
                negative balances are not allowed
        """
        status = self.overdue.status_for(account)
        if status.is_overdue:
            logger.warning(
                "Blocked charge to overdue account %s (%d days)", account.id, status.days_overdue
            )
            raise AccountBlocked(account.name, status.days_overdue, self.settings.max_overdue_days)

        if not self.settings.allow_negative_balance and account.balance - amount < 0:
            logger.warning("Rejected charge of %s to account %s: insufficient credit", amount, account.id)
            raise InsufficientCredit(account.name, account.balance, amount)

    def settle(
        self,
        cart: Cart,
        payment_method: PaymentMethod,
        account_id: Optional[int] = None,
        amount_tendered=None,
    ) -> SettlementResult:
        """Settle a cart.

        ACCOUNT payments charge the account ledger; MONEY, CREDIT, DEBIT and
        PIX are settled outside the ledger. Either way one VALID transaction
        is journaled and the cart is cleared. On failure nothing changes.

        Args:
            cart: Cart to settle
            payment_method: How the customer pays
            account_id: Linked account (required for ACCOUNT)
            amount_tendered: Cash handed over for MONEY (defaults to exact change)

        Returns:
            SettlementResult with the transaction, the PURCHASE entry (ACCOUNT
            only) and the change due (MONEY only)

        Raises:
            EmptyCart, PaymentMethodDisabled, NoAccountSelected, AccountBlocked,
            InsufficientCredit, InsufficientCash, NotFoundError, ValidationError
        """
        if cart.is_empty():
            raise EmptyCart("Cannot settle an empty cart")
        if payment_method is PaymentMethod.MIXED:
            raise ValidationError("MIXED payments are only used for exchanges")
        if not self.settings.payment_methods.is_enabled(payment_method):
            raise PaymentMethodDisabled(f"Payment method {payment_method.value} is disabled")
        if payment_method is PaymentMethod.ACCOUNT and account_id is None:
            raise NoAccountSelected("Select an account to charge")

        total = cart.total
        items = cart.to_line_items()

        tendered = None
        change_due = None
        if payment_method is PaymentMethod.MONEY:
            tendered = total if amount_tendered is None else money(amount_tendered)
            if tendered < total:
                raise InsufficientCash(tendered, total)
            change_due = tendered - total

        if account_id is None:
            result = self._commit(None, payment_method, total, items, tendered, change_due)
        else:
            with self.db.account_lock(account_id):
                account = self.require_account(account_id)
                result = self._commit(account, payment_method, total, items, tendered, change_due)

        cart.clear()
        logger.info(
            "Settled transaction %s: %s via %s",
            result.transaction.id,
            total,
            payment_method.value,
        )
        return result

    def _commit(
        self,
        account: Optional[Account],
        payment_method: PaymentMethod,
        total: Decimal,
        items: tuple[LineItem, ...],
        tendered: Optional[Decimal],
        change_due: Optional[Decimal],
    ) -> SettlementResult:
        now = self.clock()
        posting = None
        points = 0
        if account is not None:
            if payment_method is PaymentMethod.ACCOUNT:
                self.check_account_charge(account, total)
                posting = build_posting(
                    account.id,
                    MovementType.PURCHASE,
                    total,
                    f"Purchase - {len(items)} item{'s' if len(items) != 1 else ''}",
                    now,
                    items=items,
                )
            points = loyalty_points(total, self.settings)

        draft = TransactionDraft(
            account_id=account.id if account is not None else None,
            account_name=account.name if account is not None else None,
            items=items,
            total=total,
            timestamp=now,
            payment_method=payment_method,
            amount_tendered=tendered,
            change_due=change_due,
        )
        transaction, entry = self.db.record_transaction(
            draft,
            posting=posting,
            points_delta=points,
            stock_deltas=stock_movements(items),
        )
        return SettlementResult(transaction=transaction, history_entry=entry, change_due=change_due)


class CheckoutState(str, Enum):
    BUILDING = "BUILDING"
    AWAITING_PAYMENT_INPUT = "AWAITING_PAYMENT_INPUT"
    SETTLED = "SETTLED"
    ABORTED = "ABORTED"


class Checkout:
    """State machine for one checkout at the counter.

    BUILDING -> AWAITING_PAYMENT_INPUT -> SETTLED, or ABORTED from any
    non-terminal state. Nothing is written before settle() commits, so an
    abort has no side effects.
    """

    def __init__(self, service: SettlementService, cart: Optional[Cart] = None):
        self.service = service
        self.cart = cart if cart is not None else Cart(service.settings.enforce_stock_limit)
        self.state = CheckoutState.BUILDING
        self.account_id: Optional[int] = None
        self.payment_method: Optional[PaymentMethod] = None
        self.result: Optional[SettlementResult] = None

    def _expect(self, *states: CheckoutState) -> None:
        if self.state not in states:
            raise InvalidStateError(f"Checkout is {self.state.value}")

    def add(self, product: Product, quantity: int = 1) -> None:
        self._expect(CheckoutState.BUILDING)
        self.cart.add(product, quantity)

    def select_account(self, account_id: Optional[int]) -> None:
        self._expect(CheckoutState.BUILDING)
        self.account_id = account_id

    def request_payment(self, payment_method: PaymentMethod, account_id: Optional[int] = None) -> None:
        """Freeze the cart and wait for payment input."""
        self._expect(CheckoutState.BUILDING)
        if self.cart.is_empty():
            raise EmptyCart("Cannot check out an empty cart")
        if account_id is not None:
            self.account_id = account_id
        self.payment_method = payment_method
        self.state = CheckoutState.AWAITING_PAYMENT_INPUT

    def back_to_cart(self) -> None:
        self._expect(CheckoutState.AWAITING_PAYMENT_INPUT)
        self.payment_method = None
        self.state = CheckoutState.BUILDING

    def settle(self, amount_tendered=None) -> SettlementResult:
        """Commit the checkout. A failure keeps it awaiting payment input."""
        self._expect(CheckoutState.AWAITING_PAYMENT_INPUT)
        self.result = self.service.settle(
            self.cart,
            self.payment_method,
            account_id=self.account_id,
            amount_tendered=amount_tendered,
        )
        self.account_id = None
        self.state = CheckoutState.SETTLED
        return self.result

    def abort(self) -> None:
        self._expect(CheckoutState.BUILDING, CheckoutState.AWAITING_PAYMENT_INPUT)
        self.state = CheckoutState.ABORTED
