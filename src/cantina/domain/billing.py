"""Collections: which accounts owe money and what to tell their guardians."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from cantina.database.base import Database
from cantina.domain.entities import (
    Account,
    AccountType,
    DebtorSummary,
    HistoryEntry,
    MovementType,
    money,
)

RECENT_ENTRY_LIMIT = 5
ITEM_TEXT_WIDTH = 30

BILLED_TYPES = (MovementType.PURCHASE, MovementType.REFUND)


def in_range(entry: HistoryEntry, start_date: Optional[date], end_date: Optional[date]) -> bool:
    day = entry.timestamp.date()
    if start_date is not None and day < start_date:
        return False
    if end_date is not None and day > end_date:
        return False
    return True


def shorten(text: str, width: int = ITEM_TEXT_WIDTH) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def describe_entry(entry: HistoryEntry) -> str:
    """One statement line: date, what was bought and the value."""
    if entry.items:
        what = ", ".join(item.name for item in entry.items)
    else:
        what = entry.description
    return f"- {entry.timestamp:%d/%m/%Y}: {shorten(what)} ({entry.value:.2f})"


class BillingService:
    """Read-only aggregation of accounts in debt."""

    def __init__(self, db: Database):
        self.db = db

    def list_debtors(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_type: AccountType = AccountType.ALL,
        search: Optional[str] = None,
    ) -> list[DebtorSummary]:
        """List accounts with a negative balance, most negative first.

        When a date range is given only accounts with at least one history
        entry inside it are listed, and the quoted entries are all billed
        entries inside the range. Without a range the quoted entries are
        the most recent five.

        Args:
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)
            account_type: Restrict to students or staff
            search: Case-insensitive match on name or code

        Returns:
            List of DebtorSummary sorted by balance ascending
        """
        query = search.strip().lower() if search else None
        ranged = start_date is not None or end_date is not None

        summaries = []
        for account in self.db.list_accounts():
            if account.balance >= 0 or not account_type.matches(account.is_staff):
                continue
            if query and not self._matches(account, query):
                continue

            history = self.db.list_history(account.id)
            if ranged and not any(in_range(e, start_date, end_date) for e in history):
                continue

            summaries.append(self._summarize(account, history, start_date, end_date, ranged))

        summaries.sort(key=lambda s: (s.account.balance, s.account.name))
        return summaries

    @staticmethod
    def _matches(account: Account, query: str) -> bool:
        return query in account.name.lower() or query in (account.code or "").lower()

    @staticmethod
    def _summarize(account, history, start_date, end_date, ranged) -> DebtorSummary:
        billed = [e for e in reversed(history) if e.type in BILLED_TYPES]
        if ranged:
            quoted = [e for e in billed if in_range(e, start_date, end_date)]
            more = False
        else:
            quoted = billed[:RECENT_ENTRY_LIMIT]
            more = len(billed) > RECENT_ENTRY_LIMIT
        return DebtorSummary(
            account=account,
            amount_owed=money(-account.balance),
            recent_entries=tuple(quoted),
            has_more_entries=more,
        )

    @staticmethod
    def total_debt(debtors: Iterable[DebtorSummary]) -> Decimal:
        return money(sum((d.amount_owed for d in debtors), Decimal("0")))

    @staticmethod
    def compose_reminder(summary: DebtorSummary, school_name: str) -> str:
        """Render the plain-text collection message for a guardian."""
        account = summary.account
        guardian = account.guardian_name or "Guardian"
        lines = [
            f"Hello {guardian},",
            "",
            f"This is about {account.name}.",
            f"Our records show an outstanding balance of {summary.amount_owed:.2f} "
            f"at the {school_name}.",
        ]
        if summary.recent_entries:
            lines += ["", "Recent statement:"]
            lines += [describe_entry(e) for e in summary.recent_entries]
            if summary.has_more_entries:
                lines.append("...more at the counter.")
        lines += ["", "Please settle the balance. Thank you!"]
        return "\n".join(lines)
