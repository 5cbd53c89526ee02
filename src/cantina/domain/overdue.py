"""Overdue policy: decides whether an account in debt may still be charged."""

import math
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from cantina.database.base import Database
from cantina.domain.entities import Account, HistoryEntry, OverdueStatus
from cantina.domain.settings import PosSettings

NOT_OVERDUE = OverdueStatus(is_overdue=False, days_overdue=0)

_DAY_SECONDS = timedelta(days=1).total_seconds()


def debt_start(history: Sequence[HistoryEntry]) -> Optional[datetime]:
    """Return when the current unbroken run of negative balances began.

    Any entry leaving the balance at or above zero resets the run.
    """
    start = None
    for entry in sorted(history, key=lambda e: (e.timestamp, e.id)):
        if entry.balance_after < 0:
            if start is None:
                start = entry.timestamp
        else:
            start = None
    return start


def days_between(start: datetime, now: datetime) -> int:
    """Whole days between two instants, rounding partial days up."""
    seconds = abs((now - start).total_seconds())
    return math.ceil(seconds / _DAY_SECONDS)


def evaluate_overdue(
    account: Account,
    history: Sequence[HistoryEntry],
    settings: PosSettings,
    now: datetime,
) -> OverdueStatus:
    """Decide whether new account charges are blocked for an account.

    A negative balance with no negative entry in the history (for example a
    negative opening balance) is reported as not overdue.
    """
    if not settings.block_overdue_students or account.balance >= 0:
        return NOT_OVERDUE

    start = debt_start(history)
    if start is None:
        return NOT_OVERDUE

    days = days_between(start, now)
    if days > settings.max_overdue_days:
        return OverdueStatus(is_overdue=True, days_overdue=days)
    return NOT_OVERDUE


class OverduePolicy:
    """Evaluates the overdue policy for stored accounts."""

    def __init__(
        self,
        db: Database,
        settings: PosSettings,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.settings = settings
        self.clock = clock

    def status_for(self, account: Account) -> OverdueStatus:
        if not self.settings.block_overdue_students or account.balance >= 0:
            return NOT_OVERDUE
        history = self.db.list_history(account.id)
        return evaluate_overdue(account, history, self.settings, self.clock())

    def overdue_accounts(self, accounts: Sequence[Account]) -> list[tuple[Account, OverdueStatus]]:
        """Return the accounts currently blocked, with their status."""
        flagged = []
        for account in accounts:
            status = self.status_for(account)
            if status.is_overdue:
                flagged.append((account, status))
        return flagged
