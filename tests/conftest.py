"""Shared pytest fixtures for cantina tests."""

import os
import tempfile
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from cantina.database.factories import create_sqlite_database
from cantina.domain.billing import BillingService
from cantina.domain.cash_drawer import CashDrawerService
from cantina.domain.catalog import CatalogService
from cantina.domain.exchange import ExchangeService
from cantina.domain.journal import JournalService
from cantina.domain.ledger import LedgerService
from cantina.domain.reports import ReportService
from cantina.domain.settings import PosSettings
from cantina.domain.settlement import SettlementService


class FakeClock:
    """Clock returning a fixed time that tests can move forward."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 12, 0))


@pytest.fixture
def settings():
    """Default feature flags."""
    return PosSettings()


@pytest.fixture
def ledger(temp_db, clock):
    return LedgerService(temp_db, clock=clock)


@pytest.fixture
def catalog(temp_db):
    return CatalogService(temp_db)


@pytest.fixture
def settlement(temp_db, settings, clock):
    return SettlementService(temp_db, settings, clock=clock)


@pytest.fixture
def exchange_service(temp_db, settings, clock):
    return ExchangeService(temp_db, settings, clock=clock)


@pytest.fixture
def journal(temp_db, settings, clock):
    return JournalService(temp_db, settings, clock=clock)


@pytest.fixture
def reports(temp_db, clock):
    return ReportService(temp_db, today=lambda: clock().date())


@pytest.fixture
def billing(temp_db):
    return BillingService(temp_db)


@pytest.fixture
def cash_drawer(temp_db, clock):
    return CashDrawerService(temp_db, clock=clock)


@pytest.fixture
def sample_account(ledger):
    """A student account with a zero balance."""
    account_id = ledger.create_account(
        name="Ana Souza",
        grade="5th grade A",
        code="A123",
        guardian_name="Maria Souza",
        guardian_phone="11 99999-0000",
    )
    return ledger.get_account(account_id)


@pytest.fixture
def staff_account(ledger):
    account_id = ledger.create_account(name="Carlos Lima", grade="Coordinator", code="S001", is_staff=True)
    return ledger.get_account(account_id)


@pytest.fixture
def products(catalog):
    """Catalog with a stocked snack, an untracked juice and a sandwich."""
    snack = catalog.create_product("Cheese bread", Decimal("4.50"), category="Snacks", code="PQ", stock=20)
    juice = catalog.create_product("Orange juice", Decimal("6.00"), category="Drinks", code="SUCO")
    sandwich = catalog.create_product("Sandwich", Decimal("10.00"), category="Snacks", code="SAND", stock=5)
    return {
        "snack": catalog.get_product(snack),
        "juice": catalog.get_product(juice),
        "sandwich": catalog.get_product(sandwich),
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
