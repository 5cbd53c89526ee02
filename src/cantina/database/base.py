"""Abstract database interface."""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from cantina.domain.entities import (
    Account,
    CashEntry,
    CashEntryType,
    HistoryEntry,
    LedgerPosting,
    Product,
    Transaction,
    TransactionDraft,
)


class Database(ABC):
    """Abstract database interface for cantina.

    Every write method commits exactly once, or rolls back and re-raises, so
    a failed call never leaves partial state behind.
    """

    def __init__(self) -> None:
        self._locks_guard = threading.Lock()
        self._account_locks: dict[int, threading.RLock] = {}

    @contextmanager
    def account_lock(self, account_id: int) -> Iterator[None]:
        """Serialize read-check-write sequences against one account."""
        with self._locks_guard:
            lock = self._account_locks.setdefault(account_id, threading.RLock())
        with lock:
            yield

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        grade: str = "",
        code: Optional[str] = None,
        opening_balance: Decimal = Decimal("0.00"),
        is_staff: bool = False,
        guardian_name: Optional[str] = None,
        guardian_email: Optional[str] = None,
        guardian_phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by its short code."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts ordered by name."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, **fields) -> None:
        """Update profile fields of an account (never balance, points or history)."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account and its history. Journal rows are kept."""
        pass

    # Ledger operations
    @abstractmethod
    def post_movement(self, posting: LedgerPosting, points_delta: int = 0) -> HistoryEntry:
        """Append a history entry and update the balance in one commit."""
        pass

    @abstractmethod
    def list_history(self, account_id: int) -> list[HistoryEntry]:
        """List an account's history, oldest first."""
        pass

    # Product operations
    @abstractmethod
    def create_product(
        self,
        name: str,
        price: Decimal,
        category: Optional[str] = None,
        code: Optional[str] = None,
        stock: Optional[int] = None,
    ) -> int:
        """Create a product. Returns product ID."""
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        """Get product by ID."""
        pass

    @abstractmethod
    def get_product_by_code(self, code: str) -> Optional[Product]:
        """Get product by code."""
        pass

    @abstractmethod
    def list_products(self) -> list[Product]:
        """List all products ordered by name."""
        pass

    @abstractmethod
    def update_product(self, product_id: int, **fields) -> None:
        """Update product fields (stock, is_active, price, ...)."""
        pass

    # Transaction operations
    @abstractmethod
    def record_transaction(
        self,
        draft: TransactionDraft,
        posting: Optional[LedgerPosting] = None,
        points_delta: int = 0,
        stock_deltas: Optional[dict[int, int]] = None,
    ) -> tuple[Transaction, Optional[HistoryEntry]]:
        """Append a VALID transaction, with its optional ledger effects, in one commit.

        The balance snapshot is read after the posting is applied.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions, oldest first, within an inclusive local-day range."""
        pass

    @abstractmethod
    def cancel_transaction(
        self,
        transaction_id: int,
        posting: Optional[LedgerPosting] = None,
        points_delta: int = 0,
        stock_deltas: Optional[dict[int, int]] = None,
    ) -> tuple[Transaction, Optional[HistoryEntry]]:
        """Mark a transaction CANCELLED, with optional compensating effects, in one commit."""
        pass

    # Cash drawer operations
    @abstractmethod
    def create_cash_entry(
        self, type: CashEntryType, amount: Decimal, description: str, timestamp: datetime
    ) -> CashEntry:
        """Record a cash drawer movement."""
        pass

    @abstractmethod
    def list_cash_entries(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[CashEntry]:
        """List cash drawer movements, oldest first."""
        pass
