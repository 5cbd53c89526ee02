"""Account ledger domain service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from cantina.database.base import Database
from cantina.domain.entities import (
    Account,
    AccountType,
    Direction,
    HistoryEntry,
    IMPLIED_DIRECTIONS,
    IntegrityReport,
    LedgerPosting,
    LineItem,
    MovementType,
    money,
)
from cantina.domain.errors import (
    ConflictError,
    InvalidAmount,
    LedgerIntegrityError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_code,
)

logger = logging.getLogger(__name__)


def resolve_direction(type: MovementType, direction: Optional[Direction]) -> Direction:
    """Return the direction a movement applies in.

    Raises:
        ValidationError: If the direction is missing for EXCHANGE/ADJUSTMENT
            or contradicts the movement type
    """
    implied = IMPLIED_DIRECTIONS.get(type)
    if implied is None:
        if direction is None:
            raise ValidationError(f"{type.value} movements need an explicit direction")
        return direction
    if direction is not None and direction is not implied:
        raise ValidationError(f"{type.value} movements are always {implied.value}")
    return implied


def build_posting(
    account_id: int,
    type: MovementType,
    value,
    description: str,
    timestamp: datetime,
    items: Iterable[LineItem] = (),
    direction: Optional[Direction] = None,
) -> LedgerPosting:
    """Validate a movement request and turn it into a posting.

    Raises:
        InvalidAmount: If value is not strictly positive
        ValidationError: If the direction is missing or inconsistent
    """
    amount = money(value)
    if amount <= 0:
        raise InvalidAmount(f"Movement value must be greater than zero (got {amount})")
    return LedgerPosting(
        account_id=account_id,
        type=type,
        direction=resolve_direction(type, direction),
        value=amount,
        description=description,
        timestamp=timestamp,
        items=tuple(items),
    )


class LedgerService:
    """Service owning account balances and their histories."""

    def __init__(self, db: Database, clock: Callable[[], datetime] = datetime.now):
        """Initialize ledger service.

        Args:
            db: Database instance
            clock: Returns the current local time
        """
        self.db = db
        self.clock = clock

    def create_account(
        self,
        name: str,
        grade: str = "",
        code: Optional[str] = None,
        is_staff: bool = False,
        opening_balance=Decimal("0.00"),
        guardian_name: Optional[str] = None,
        guardian_email: Optional[str] = None,
        guardian_phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a new account.

        Args:
            name: Display name
            grade: Class or role label (e.g., "3rd grade B", "Coordinator")
            code: Optional short code, unique when given
            is_staff: Whether the account belongs to a staff member
            opening_balance: Balance the history starts from
            guardian_name: Guardian contact name
            guardian_email: Guardian contact email
            guardian_phone: Guardian contact phone
            notes: Advisory notes such as allergies

        Returns:
            Account ID

        Raises:
            ValidationError: If name is empty
            ConflictError: If the code is already taken
        """
        if not name or not name.strip():
            raise ValidationError("Account name must not be empty")
        if code:
            if self.db.get_account_by_code(code) is not None:
                raise ConflictError(duplicate_code("Account", code))

        account_id = self.db.create_account(
            name=name.strip(),
            grade=grade,
            code=code or None,
            opening_balance=money(opening_balance),
            is_staff=is_staff,
            guardian_name=guardian_name,
            guardian_email=guardian_email,
            guardian_phone=guardian_phone,
            notes=notes,
        )
        logger.info("Created account %s (%s)", account_id, name)
        return account_id

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> Account:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(
        self,
        search: Optional[str] = None,
        include_inactive: bool = False,
        account_type: AccountType = AccountType.ALL,
    ) -> list[Account]:
        """List accounts.

        Args:
            search: Case-insensitive match on name, code or grade
            include_inactive: Include deactivated accounts
            account_type: Restrict to students or staff

        Returns:
            List of account entities ordered by name
        """
        query = search.strip().lower() if search else None
        result = []
        for account in self.db.list_accounts():
            if not include_inactive and not account.is_active:
                continue
            if not account_type.matches(account.is_staff):
                continue
            if query:
                haystacks = (account.name, account.code or "", account.grade)
                if not any(query in h.lower() for h in haystacks):
                    continue
            result.append(account)
        return result

    def update_account(self, account_id: int, **fields) -> None:
        """Update profile fields of an account.

        Balance, points and history are only changed through movements.

        Raises:
            NotFoundError: If the account does not exist
            ConflictError: If a new code is already taken
            ValidationError: If a field cannot be updated
        """
        self.require_account(account_id)
        code = fields.get("code")
        if code:
            existing = self.db.get_account_by_code(code)
            if existing is not None and existing.id != account_id:
                raise ConflictError(duplicate_code("Account", code))
        self.db.update_account(account_id, **fields)

    def set_active(self, account_id: int, is_active: bool) -> None:
        """Activate or deactivate an account. History is kept either way."""
        self.update_account(account_id, is_active=is_active)
        logger.info("Account %s %s", account_id, "activated" if is_active else "deactivated")

    def delete_account(self, account_id: int) -> None:
        """Delete an account and its history.

        Journal transactions keep their weak reference to the account.
        """
        self.require_account(account_id)
        with self.db.account_lock(account_id):
            self.db.delete_account(account_id)
        logger.info("Deleted account %s", account_id)

    def apply_movement(
        self,
        account_id: int,
        type: MovementType,
        value,
        description: str,
        items: Iterable[LineItem] = (),
        direction: Optional[Direction] = None,
        occurred_at: Optional[datetime] = None,
    ) -> HistoryEntry:
        """Apply a balance movement to an account.

        The history entry is appended and the balance updated together;
        balance_after is the balance right after this entry.

        Args:
            account_id: Account ID
            type: Movement type
            value: Unsigned magnitude, must be greater than zero
            description: Human-readable label
            items: Line items for PURCHASE or EXCHANGE entries
            direction: Required for EXCHANGE and ADJUSTMENT
            occurred_at: Timestamp to record (defaults to now)

        Returns:
            The created history entry

        Raises:
            InvalidAmount: If value is not greater than zero
            ValidationError: If the direction is missing or inconsistent
            NotFoundError: If the account does not exist
        """
        posting = build_posting(
            account_id,
            type,
            value,
            description,
            occurred_at or self.clock(),
            items=items,
            direction=direction,
        )
        with self.db.account_lock(account_id):
            self.require_account(account_id)
            entry = self.db.post_movement(posting)
        logger.info(
            "Applied %s %s %s to account %s (balance %s)",
            entry.type.value,
            entry.direction.value,
            entry.value,
            account_id,
            entry.balance_after,
        )
        return entry

    def get_balance(self, account_id: int) -> Decimal:
        """Get the current balance of an account."""
        return self.require_account(account_id).balance

    def get_history(self, account_id: int) -> list[HistoryEntry]:
        """Get an account's history in chronological order."""
        self.require_account(account_id)
        return self.db.list_history(account_id)

    def receive_payment(
        self, account_id: int, amount, description: str = "Payment received"
    ) -> HistoryEntry:
        """Credit a payment to an account."""
        return self.apply_movement(account_id, MovementType.PAYMENT, amount, description)

    def refund(self, account_id: int, amount, reason: str) -> HistoryEntry:
        """Credit a refund to an account."""
        return self.apply_movement(account_id, MovementType.REFUND, amount, f"Refund: {reason}")

    def batch_payment(
        self,
        account_ids: Iterable[int],
        amount=None,
        payroll_deduction: bool = False,
    ) -> list[HistoryEntry]:
        """Receive payments for several accounts at once.

        Args:
            account_ids: Accounts to credit
            amount: Fixed amount per account; None pays off each account's debt
            payroll_deduction: Label entries as payroll deductions

        Returns:
            Created history entries (accounts with nothing to pay are skipped)

        Raises:
            InvalidAmount: If a fixed amount is not greater than zero
            NotFoundError: If an account does not exist (nothing is applied)
        """
        description = "Payroll deduction" if payroll_deduction else "Batch payment"
        fixed = None
        if amount is not None:
            fixed = money(amount)
            if fixed <= 0:
                raise InvalidAmount(f"Batch payment amount must be greater than zero (got {fixed})")

        accounts = [self.require_account(account_id) for account_id in account_ids]

        entries = []
        for account in accounts:
            with self.db.account_lock(account.id):
                if fixed is None:
                    balance = self.require_account(account.id).balance
                    if balance >= 0:
                        continue
                    to_pay = -balance
                else:
                    to_pay = fixed
                entries.append(
                    self.apply_movement(account.id, MovementType.PAYMENT, to_pay, description)
                )
        logger.info("Batch payment credited %d accounts", len(entries))
        return entries

    def check_integrity(self, account_id: int) -> IntegrityReport:
        """Recompute an account balance from its opening balance and history."""
        account = self.require_account(account_id)
        running = account.opening_balance
        mismatched = []
        for entry in self.db.list_history(account_id):
            running += entry.signed_value
            if entry.balance_after != running:
                mismatched.append(entry.id)
        return IntegrityReport(
            account_id=account_id,
            stored_balance=account.balance,
            computed_balance=running,
            mismatched_entry_ids=tuple(mismatched),
        )

    def verify_account(self, account_id: int) -> IntegrityReport:
        """Check the balance invariant of an account.

        Raises:
            LedgerIntegrityError: If balance or any balance_after disagrees
                with the history
        """
        report = self.check_integrity(account_id)
        if not report.is_consistent:
            logger.error("Ledger mismatch on account %s: %s", account_id, report)
            raise LedgerIntegrityError(
                f"Account {account_id} balance {report.stored_balance} does not match "
                f"history total {report.computed_balance}"
            )
        return report
