"""Transaction journal domain service."""

import logging
from contextlib import nullcontext
from datetime import date, datetime
from typing import Callable, Optional

from cantina.database.base import Database
from cantina.domain.entities import MovementType, PaymentMethod, Transaction
from cantina.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    transaction_not_found,
)
from cantina.domain.ledger import build_posting
from cantina.domain.settings import PosSettings
from cantina.domain.settlement import stock_movements

logger = logging.getLogger(__name__)


class JournalService:
    """Service for reading and cancelling journaled transactions."""

    def __init__(
        self,
        db: Database,
        settings: PosSettings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize journal service.

        Args:
            db: Database instance
            settings: Feature flags in effect
            clock: Returns the current local time
        """
        self.db = db
        self.settings = settings
        self.clock = clock

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        include_cancelled: bool = True,
    ) -> list[Transaction]:
        """List transactions with filters.

        Args:
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            account_id: Optional linked account filter
            include_cancelled: If False, only VALID transactions are returned

        Returns:
            List of transaction entities, oldest first
        """
        transactions = self.db.list_transactions(
            start_date=start_date, end_date=end_date, account_id=account_id
        )
        if not include_cancelled:
            transactions = [t for t in transactions if t.is_valid]
        return transactions

    def cancel(self, transaction_id: int, reverse_ledger: bool = False) -> Transaction:
        """Cancel a transaction.

        By default this only flips the status to CANCELLED: amounts already
        charged to an account stay charged, points and stock stay as they
        are. With reverse_ledger the same commit also refunds an account sale,
        takes back the loyalty points recorded on it and restocks its items.

        Args:
            transaction_id: Transaction to cancel
            reverse_ledger: Post compensating movements as well

        Returns:
            The cancelled transaction

        Raises:
            NotFoundError: If the transaction does not exist
            ConflictError: If it is already cancelled
            ValidationError: If reversal is requested for an exchange
        """
        txn = self.require_transaction(transaction_id)
        if not txn.is_valid:
            raise ConflictError(f"Transaction {transaction_id} is already cancelled")

        if not reverse_ledger:
            cancelled, _ = self.db.cancel_transaction(transaction_id)
            logger.info("Cancelled transaction %s (ledger untouched)", transaction_id)
            return cancelled

        if txn.is_exchange:
            raise ValidationError("Exchanges cannot be reversed; record a new exchange instead")

        lock = (
            self.db.account_lock(txn.account_id)
            if txn.account_id is not None
            else nullcontext()
        )
        with lock:
            posting = None
            points = 0
            if txn.account_id is not None and self.db.get_account(txn.account_id) is not None:
                if txn.payment_method is PaymentMethod.ACCOUNT and txn.total > 0:
                    posting = build_posting(
                        txn.account_id,
                        MovementType.REFUND,
                        txn.total,
                        f"Reversal of sale #{txn.id}",
                        self.clock(),
                    )
                points = -txn.points_awarded

            cancelled, _ = self.db.cancel_transaction(
                transaction_id,
                posting=posting,
                points_delta=points,
                stock_deltas=stock_movements(txn.items, sign=1),
            )
        logger.info("Cancelled and reversed transaction %s", transaction_id)
        return cancelled
