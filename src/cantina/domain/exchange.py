"""Exchange settlement: returned items traded for new ones."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Union

from cantina.database.base import Database
from cantina.domain.entities import (
    Direction,
    ExchangeResult,
    LineItem,
    MovementType,
    PaymentMethod,
    Product,
    TransactionDraft,
    money,
)
from cantina.domain.errors import ExchangeNotConfirmed, IncompleteExchange
from cantina.domain.ledger import build_posting
from cantina.domain.settings import PosSettings
from cantina.domain.settlement import SettlementService, stock_movements

logger = logging.getLogger(__name__)

ExchangeItem = Union[LineItem, Product]


def as_line_item(item: ExchangeItem) -> LineItem:
    """Accept a catalog product as a single-unit line at its current price."""
    if isinstance(item, Product):
        return LineItem(product_id=item.id, name=item.name, quantity=1, unit_price=item.price)
    return item


def items_total(items: Iterable[LineItem]) -> Decimal:
    return money(sum((item.subtotal for item in items), Decimal("0")))


class ExchangeService:
    """Service for product exchanges."""

    def __init__(
        self,
        db: Database,
        settings: PosSettings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize exchange service.

        Args:
            db: Database instance
            settings: Feature flags in effect
            clock: Returns the current local time
        """
        self.db = db
        self.settings = settings
        self.clock = clock
        self.settlement = SettlementService(db, settings, clock)

    def exchange(
        self,
        returned_items: Iterable[ExchangeItem],
        new_items: Iterable[ExchangeItem],
        account_id: Optional[int] = None,
        pay_difference_in_cash: bool = False,
        confirmed: bool = False,
    ) -> ExchangeResult:
        """Trade returned items for new ones.

        The price difference (new minus returned) goes to the linked account
        as a single EXCHANGE entry, debit when positive and credit when
        negative, unless it is paid in cash. Returned items are restocked and
        new items consumed. One MIXED transaction is always journaled, with
        the price difference as its total.

        Args:
            returned_items: Items coming back into stock
            new_items: Items handed to the customer
            account_id: Account that absorbs the difference
            pay_difference_in_cash: Settle the difference at the cash drawer
            confirmed: Caller confirmed an unsettled positive difference
                (no account and no cash)

        Returns:
            ExchangeResult with the transaction, the EXCHANGE entry if any and
            the price difference

        Raises:
            IncompleteExchange: If either item list is empty
            ExchangeNotConfirmed: If a positive difference has no settlement
                and was not confirmed
            AccountBlocked, InsufficientCredit: If debiting the account is
                not allowed
            NotFoundError: If the account does not exist
        """
        returned = tuple(as_line_item(i) for i in returned_items)
        new = tuple(as_line_item(i) for i in new_items)
        if not returned or not new:
            raise IncompleteExchange("An exchange needs both returned and new items")

        price_diff = items_total(new) - items_total(returned)

        if price_diff > 0 and account_id is None and not pay_difference_in_cash and not confirmed:
            raise ExchangeNotConfirmed(
                f"No account selected: the difference of {price_diff:.2f} must be "
                "settled at the cash drawer. Confirm to proceed."
            )

        stock_deltas = stock_movements(returned, sign=1)
        for product_id, delta in stock_movements(new).items():
            stock_deltas[product_id] = stock_deltas.get(product_id, 0) + delta

        if account_id is None:
            result = self._commit(None, returned, new, price_diff, pay_difference_in_cash, stock_deltas)
        else:
            with self.db.account_lock(account_id):
                account = self.settlement.require_account(account_id)
                result = self._commit(account, returned, new, price_diff, pay_difference_in_cash, stock_deltas)

        logger.info("Recorded exchange %s with difference %s", result.transaction.id, price_diff)
        return result

    def _commit(self, account, returned, new, price_diff, pay_in_cash, stock_deltas) -> ExchangeResult:
        now = self.clock()
        posting = None
        if account is not None and price_diff != 0 and not pay_in_cash:
            if price_diff > 0:
                self.settlement.check_account_charge(account, price_diff)
            posting = build_posting(
                account.id,
                MovementType.EXCHANGE,
                abs(price_diff),
                f"Exchange - {len(returned)} returned, {len(new)} new",
                now,
                items=new,
                direction=Direction.DEBIT if price_diff > 0 else Direction.CREDIT,
            )

        draft = TransactionDraft(
            account_id=account.id if account is not None else None,
            account_name=account.name if account is not None else None,
            items=new,
            total=price_diff,
            timestamp=now,
            payment_method=PaymentMethod.MIXED,
            returned_items=returned,
        )
        transaction, entry = self.db.record_transaction(
            draft, posting=posting, stock_deltas=stock_deltas
        )
        return ExchangeResult(transaction=transaction, history_entry=entry, price_diff=price_diff)
