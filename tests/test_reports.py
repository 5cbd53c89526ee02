"""Tests for report aggregation."""

from datetime import date
from decimal import Decimal

from cantina.domain.cart import Cart
from cantina.domain.entities import AccountType, PaymentMethod


def _sell(settlement, *lines, method=PaymentMethod.MONEY, account_id=None):
    cart = Cart()
    for product, quantity in lines:
        cart.add(product, quantity)
    return settlement.settle(cart, method, account_id=account_id).transaction


def test_sales_summary_ignores_cancelled(reports, settlement, journal, products, clock):
    _sell(settlement, (products["snack"], 2))  # 9.00
    _sell(settlement, (products["juice"], 1))  # 6.00
    cancelled = _sell(settlement, (products["sandwich"], 1))
    journal.cancel(cancelled.id)

    summary = reports.sales_summary(clock().date(), clock().date())

    assert summary.total_revenue == Decimal("15.00")
    assert summary.order_count == 2
    assert summary.average_ticket == Decimal("7.50")


def test_sales_summary_range_is_inclusive(reports, settlement, products, clock):
    _sell(settlement, (products["snack"], 1))
    clock.advance(days=2)
    _sell(settlement, (products["juice"], 1))

    assert reports.sales_summary(date(2024, 3, 15), date(2024, 3, 15)).total_revenue == Decimal("4.50")
    assert reports.sales_summary(date(2024, 3, 16), date(2024, 3, 17)).total_revenue == Decimal("6.00")
    assert reports.sales_summary().order_count == 2


def test_empty_summary(reports):
    summary = reports.sales_summary()

    assert summary.total_revenue == Decimal("0.00")
    assert summary.order_count == 0
    assert summary.average_ticket == Decimal("0.00")


def test_account_consumption(reports, settlement, journal, sample_account, staff_account, products):
    _sell(settlement, (products["snack"], 2), method=PaymentMethod.ACCOUNT, account_id=sample_account.id)
    _sell(settlement, (products["juice"], 1), account_id=sample_account.id)
    _sell(settlement, (products["sandwich"], 2), method=PaymentMethod.ACCOUNT, account_id=staff_account.id)
    cancelled = _sell(settlement, (products["snack"], 1), account_id=sample_account.id)
    journal.cancel(cancelled.id)

    rows = reports.account_consumption()

    assert [(r.account_name, r.order_count, r.total_spent) for r in rows] == [
        ("Carlos Lima", 1, Decimal("20.00")),
        ("Ana Souza", 2, Decimal("15.00")),
    ]
    students = reports.account_consumption(account_type=AccountType.STUDENT)
    assert [r.account_name for r in students] == ["Ana Souza"]


def test_account_consumption_lists_idle_accounts(reports, sample_account):
    rows = reports.account_consumption()

    assert rows[0].account_name == "Ana Souza"
    assert rows[0].order_count == 0
    assert rows[0].total_spent == Decimal("0.00")


def test_top_products(reports, settlement, products):
    _sell(settlement, (products["snack"], 3), (products["juice"], 1))
    _sell(settlement, (products["juice"], 1), (products["sandwich"], 1))
    _sell(settlement, (products["snack"], 1))

    top = reports.top_products(limit=2)

    assert [(p.name, p.quantity) for p in top] == [("Cheese bread", 4), ("Orange juice", 2)]
    assert top[0].revenue == Decimal("18.00")


def test_exchanges_are_not_orders(reports, settlement, exchange_service, products):
    _sell(settlement, (products["snack"], 3), (products["juice"], 1))  # 19.50
    _sell(settlement, (products["juice"], 1))  # 6.00
    exchange_service.exchange([products["juice"]], [products["sandwich"]], pay_difference_in_cash=True)
    exchange_service.exchange([products["sandwich"]], [products["snack"]], pay_difference_in_cash=True)

    summary = reports.sales_summary()
    assert summary.total_revenue == Decimal("24.00")
    assert summary.order_count == 2
    assert summary.average_ticket == Decimal("12.75")

    top = reports.top_products()
    assert [(p.name, p.quantity, p.revenue) for p in top] == [
        ("Cheese bread", 4, Decimal("18.00")),
        ("Orange juice", 1, Decimal("6.00")),
    ]


def test_daily_revenue_zero_fills(reports, settlement, products, clock):
    _sell(settlement, (products["snack"], 1))
    clock.advance(days=2)
    _sell(settlement, (products["juice"], 2))

    buckets = reports.daily_revenue()

    assert len(buckets) == 7
    assert buckets[0].day == date(2024, 3, 11)
    assert buckets[-1].day == date(2024, 3, 17)
    totals = {b.day: b.total for b in buckets}
    assert totals[date(2024, 3, 15)] == Decimal("4.50")
    assert totals[date(2024, 3, 16)] == Decimal("0.00")
    assert totals[date(2024, 3, 17)] == Decimal("12.00")


def test_stock_reports(reports, catalog, products):
    catalog.set_stock(products["snack"].id, 0)
    catalog.create_product("Water", "3.00", stock=10)
    catalog.create_product("Gum", "1.00", stock=11)

    assert [p.name for p in reports.out_of_stock_products()] == ["Cheese bread"]
    assert [p.name for p in reports.low_stock_products()] == ["Sandwich", "Water"]
