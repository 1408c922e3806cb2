"""SQLAlchemy models for the ledgerkit database.

The tables themselves are created and evolved by ``ledgerkit.migrations``;
these classes only describe the current shape for querying.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    Date,
    Numeric,
    Boolean,
    CheckConstraint,
    Index,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class AccountType(Base):
    """Account type model."""

    __tablename__ = "account_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    label = Column(String, nullable=False)

    accounts = relationship("Account", back_populates="account_type")


class Account(Base):
    """Account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    institution = Column(String, nullable=True)
    starting_balance = Column(Numeric(12, 2), nullable=False, default=0)
    account_type_id = Column(Integer, ForeignKey("account_types.id"), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)

    # At most one default account; added by migration 2
    __table_args__ = (
        Index(
            "uq_accounts_single_default",
            "is_default",
            unique=True,
            sqlite_where=text("is_default = 1"),
        ),
    )

    account_type = relationship("AccountType", back_populates="accounts")
    transactions = relationship("Transaction", back_populates="account")


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, unique=True, nullable=False)
    color_code = Column(String, nullable=False, default="#6366f1")
    icon = Column(String, nullable=False, default="pi-tag")

    transactions = relationship("Transaction", back_populates="category")


class LedgerYear(Base):
    """Ledger year model. The year number is the whole identity."""

    __tablename__ = "ledger_years"

    year = Column(Integer, primary_key=True, autoincrement=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    type = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('income', 'expense')", name="ck_transactions_type"),
        CheckConstraint("amount >= 0", name="ck_transactions_amount"),
        Index("idx_transactions_category", "category_id"),
        Index("idx_transactions_account", "account_id"),
        Index("idx_transactions_date", "date"),
    )

    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


def create_sqlite_engine(database_url: str) -> Engine:
    """Create an engine with foreign keys on and transactional DDL.

    pysqlite issues its own implicit BEGIN only before DML, which would let
    CREATE/ALTER statements autocommit in the middle of a migration. The
    driver's transaction handling is turned off and BEGIN is emitted by
    SQLAlchemy instead, so DDL and ``PRAGMA user_version`` roll back with
    everything else.
    """
    engine = create_engine(database_url, echo=False)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory bound to an engine."""
    return sessionmaker(bind=engine)
