"""Reporting aggregation over the transaction journal."""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

from cantina.database.base import Database
from cantina.domain.entities import (
    AccountConsumption,
    AccountType,
    DailyRevenue,
    Product,
    ProductSales,
    SalesSummary,
    Transaction,
    money,
)

ZERO = Decimal("0.00")


class ReportService:
    """Service building sales, consumption and dashboard reports.

    Only VALID transactions count; cancelled ones contribute nothing.
    Exchanges add their price difference to revenue but are not orders,
    and their returned items are netted out of product sales.
    """

    def __init__(self, db: Database, today: Callable[[], date] = date.today):
        """Initialize report service.

        Args:
            db: Database instance
            today: Returns the current local date
        """
        self.db = db
        self.today = today

    def valid_transactions(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Transaction]:
        """Get non-cancelled transactions within an inclusive day range."""
        return [
            t
            for t in self.db.list_transactions(start_date=start_date, end_date=end_date)
            if t.is_valid
        ]

    def sales_summary(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> SalesSummary:
        """Total revenue, order count and average ticket for a range."""
        transactions = self.valid_transactions(start_date, end_date)
        revenue = money(sum((t.total for t in transactions), ZERO))
        orders = [t for t in transactions if not t.is_exchange]
        count = len(orders)
        average = money(sum((t.total for t in orders), ZERO) / count) if count else ZERO
        return SalesSummary(
            start_date=start_date,
            end_date=end_date,
            total_revenue=revenue,
            order_count=count,
            average_ticket=average,
        )

    def account_consumption(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_type: AccountType = AccountType.ALL,
    ) -> list[AccountConsumption]:
        """Orders and spend per account, highest spend first.

        Every account of the requested type is listed, including those with
        no orders in the range.
        """
        totals: dict[int, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[int, int] = defaultdict(int)
        for txn in self.valid_transactions(start_date, end_date):
            if txn.account_id is None:
                continue
            totals[txn.account_id] += txn.total
            if not txn.is_exchange:
                counts[txn.account_id] += 1

        rows = [
            AccountConsumption(
                account_id=account.id,
                account_name=account.name,
                is_staff=account.is_staff,
                order_count=counts.get(account.id, 0),
                total_spent=money(totals.get(account.id, ZERO)),
            )
            for account in self.db.list_accounts()
            if account_type.matches(account.is_staff)
        ]
        rows.sort(key=lambda r: (-r.total_spent, r.account_name))
        return rows

    def top_products(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 5,
    ) -> list[ProductSales]:
        """Best-selling products by net quantity sold."""
        quantities: dict[object, int] = defaultdict(int)
        revenue: dict[object, Decimal] = defaultdict(lambda: ZERO)
        names: dict[object, str] = {}
        product_ids: dict[object, Optional[int]] = {}

        for txn in self.valid_transactions(start_date, end_date):
            lines = [(item, 1) for item in txn.items] + [(item, -1) for item in txn.returned_items]
            for item, sign in lines:
                key = item.product_id if item.product_id is not None else item.name
                quantities[key] += sign * item.quantity
                revenue[key] += sign * item.subtotal
                names.setdefault(key, item.name)
                product_ids[key] = item.product_id

        sold = [k for k in quantities if quantities[k] > 0]
        ranked = sorted(sold, key=lambda k: (-quantities[k], names[k]))
        return [
            ProductSales(
                product_id=product_ids[key],
                name=names[key],
                quantity=quantities[key],
                revenue=money(revenue[key]),
            )
            for key in ranked[:limit]
        ]

    def daily_revenue(self, today: Optional[date] = None, days: int = 7) -> list[DailyRevenue]:
        """Revenue per calendar day for the trailing days, oldest first.

        Days without valid transactions are reported as zero.
        """
        end = today or self.today()
        start = end - timedelta(days=days - 1)
        totals: dict[date, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[date, int] = defaultdict(int)
        for txn in self.valid_transactions(start, end):
            day = txn.timestamp.date()
            totals[day] += txn.total
            if not txn.is_exchange:
                counts[day] += 1

        return [
            DailyRevenue(
                day=start + timedelta(days=offset),
                total=money(totals.get(start + timedelta(days=offset), ZERO)),
                order_count=counts.get(start + timedelta(days=offset), 0),
            )
            for offset in range(days)
        ]

    def low_stock_products(self, threshold: int = 10) -> list[Product]:
        """Active products with a known stock between 1 and threshold."""
        return [
            p
            for p in self.db.list_products()
            if p.is_active and p.stock is not None and 0 < p.stock <= threshold
        ]

    def out_of_stock_products(self) -> list[Product]:
        """Active products whose known stock is zero."""
        return [p for p in self.db.list_products() if p.is_active and p.stock == 0]
