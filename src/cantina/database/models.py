"""SQLAlchemy models for cantina database."""

from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Student or staff account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    grade = Column(String, nullable=False, default="")
    code = Column(String, unique=True, nullable=True)
    balance = Column(Numeric(10, 2), nullable=False, default=0)
    opening_balance = Column(Numeric(10, 2), nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)
    is_staff = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    guardian_name = Column(String, nullable=True)
    guardian_email = Column(String, nullable=True)
    guardian_phone = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    # Relationships
    history = relationship(
        "HistoryEntry",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="HistoryEntry.id",
    )


class HistoryEntry(Base):
    """Applied balance movement model."""

    __tablename__ = "history_entries"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    timestamp = Column(DateTime, nullable=False)
    type = Column(String, nullable=False)
    direction = Column(String, nullable=False)
    value = Column(Numeric(10, 2), nullable=False)
    description = Column(String, nullable=False)
    balance_after = Column(Numeric(10, 2), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="history")
    lines = relationship(
        "HistoryLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="HistoryLine.position",
    )


class Product(Base):
    """Catalog product model."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=True)
    code = Column(String, unique=True, nullable=True)
    stock = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)


class Transaction(Base):
    """Journal transaction model.

    account_id is a plain column rather than a foreign key so that accounts
    can be removed without rewriting the journal.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, nullable=True, index=True)
    account_name = Column(String, nullable=True)
    total = Column(Numeric(10, 2), nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
    payment_method = Column(String, nullable=False)
    status = Column(String, nullable=False, default="VALID")
    balance_snapshot = Column(Numeric(10, 2), nullable=True)
    amount_tendered = Column(Numeric(10, 2), nullable=True)
    change_due = Column(Numeric(10, 2), nullable=True)
    points_awarded = Column(Integer, nullable=False, default=0)

    # Relationships
    lines = relationship(
        "TransactionLine",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionLine.position",
    )


class _LineColumns:
    """Columns shared by journal and history line items."""

    id = Column(Integer, primary_key=True)
    position = Column(Integer, nullable=False)
    product_id = Column(Integer, nullable=True)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    note = Column(String, nullable=True)


class TransactionLine(_LineColumns, Base):
    """Line item of a journal transaction (sold or returned)."""

    __tablename__ = "transaction_lines"

    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    is_return = Column(Boolean, default=False, nullable=False)

    transaction = relationship("Transaction", back_populates="lines")


class HistoryLine(_LineColumns, Base):
    """Line item attached to a PURCHASE or EXCHANGE history entry."""

    __tablename__ = "history_lines"

    entry_id = Column(Integer, ForeignKey("history_entries.id"), nullable=False, index=True)

    entry = relationship("HistoryEntry", back_populates="lines")


class CashEntry(Base):
    """Cash drawer movement model."""

    __tablename__ = "cash_entries"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(String, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
