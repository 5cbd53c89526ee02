"""Cash drawer supplements and withdrawals."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from cantina.database.base import Database
from cantina.domain.entities import CashEntry, CashEntryType, money
from cantina.domain.errors import InvalidAmount

logger = logging.getLogger(__name__)


class CashDrawerService:
    """Manual cash movements, kept apart from account ledgers."""

    def __init__(self, db: Database, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock

    def record(self, type: CashEntryType, amount, description: str = "") -> CashEntry:
        """Record a drawer movement.

        Args:
            type: IN for a supplement, OUT for a withdrawal
            amount: Positive amount of money
            description: Reason for the movement

        Returns:
            Created cash entry

        Raises:
            InvalidAmount: If amount is not positive
        """
        value = money(amount)
        if value <= 0:
            raise InvalidAmount("Cash amount must be positive")

        entry = self.db.create_cash_entry(type, value, description.strip(), self.clock())
        logger.info("Cash %s of %s recorded", type.value, value)
        return entry

    def supplement(self, amount, description: str = "Drawer supplement") -> CashEntry:
        return self.record(CashEntryType.IN, amount, description)

    def withdraw(self, amount, description: str = "Drawer withdrawal") -> CashEntry:
        return self.record(CashEntryType.OUT, amount, description)

    def list_entries(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[CashEntry]:
        return self.db.list_cash_entries(start_date=start_date, end_date=end_date)

    def drawer_total(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Decimal:
        """Net of supplements minus withdrawals in the range."""
        entries = self.list_entries(start_date, end_date)
        return money(sum((e.value for e in entries), Decimal("0")))
