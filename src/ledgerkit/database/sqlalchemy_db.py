"""Generic SQLAlchemy database implementation."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import case, desc, func, or_
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from ledgerkit.database.base import Database
from ledgerkit.database.models import (
    Account,
    AccountType,
    Category,
    LedgerYear,
    Transaction,
    create_session_factory,
    create_sqlite_engine,
)
from ledgerkit.database.mappers import (
    account_to_domain,
    account_type_to_domain,
    category_to_domain,
    transaction_to_domain,
)
from ledgerkit.domain.entities import (
    Account as DomainAccount,
    AccountType as DomainAccountType,
    Category as DomainCategory,
    CategoryBreakdown,
    PeriodSummary,
    Transaction as DomainTransaction,
    TransactionSearch,
    TransactionType,
)
from ledgerkit.domain.errors import (
    NotFoundError,
    account_not_found,
    category_not_found,
)
from ledgerkit.logging_setup import get_logger
from ledgerkit.utils.amount_parser import to_money

logger = get_logger(__name__)

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#6b7280"
UNCATEGORIZED_ICON = "pi-question"


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Nothing is opened until ``connect()`` (or entering a ``with`` block).

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self._engine: Optional[Engine] = None
        self.session_factory: Optional[sessionmaker[Session]] = None
        self._session: Optional[Session] = None
        self._transaction_depth = 0

    @property
    def database_path(self) -> Optional[str]:
        """Filesystem path of the database file, or None for in-memory stores."""
        database = make_url(self.database_url).database
        if not database or database == ":memory:":
            return None
        return database

    @property
    def engine(self) -> Engine:
        """The connected engine."""
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self.session_factory is None:
            raise RuntimeError("Database is not connected; call connect() first")
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def _commit(self) -> None:
        """Commit now, or only flush when inside a transaction() scope."""
        session = self._get_session()
        if self._transaction_depth > 0:
            session.flush()
        else:
            session.commit()

    def connect(self) -> None:
        """Open the engine. Calling it twice is harmless."""
        if self._engine is not None:
            return
        self._engine = create_sqlite_engine(self.database_url)
        self.session_factory = create_session_factory(self._engine)
        logger.debug("Connected to %s", self.database_url)

    def disconnect(self) -> None:
        """Close the session and dispose of the engine."""
        self.release_session()
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self.session_factory = None
        self._transaction_depth = 0

    def release_session(self) -> None:
        """Close the current session so it holds no open transaction or lock."""
        if self._session is not None:
            self._session.close()
            self._session = None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit everything written inside the scope at once, or nothing."""
        session = self._get_session()
        self._transaction_depth += 1
        try:
            yield
        except BaseException:
            self._transaction_depth -= 1
            if self._transaction_depth == 0:
                session.rollback()
            raise
        else:
            self._transaction_depth -= 1
            if self._transaction_depth == 0:
                session.commit()

    # Account type operations
    def create_account_type(self, label: str) -> int:
        """Create an account type. Returns account type ID."""
        session = self._get_session()
        account_type = AccountType(label=label)
        session.add(account_type)
        self._commit()
        return account_type.id

    def get_account_type(self, account_type_id: int) -> Optional[DomainAccountType]:
        """Get account type by ID."""
        session = self._get_session()
        account_type = session.get(AccountType, account_type_id)
        if account_type is None:
            return None
        return account_type_to_domain(account_type)

    def get_account_type_by_label(self, label: str) -> Optional[DomainAccountType]:
        """Get the first account type with the given label."""
        session = self._get_session()
        account_type = (
            session.query(AccountType).filter(AccountType.label == label).order_by(AccountType.id).first()
        )
        if account_type is None:
            return None
        return account_type_to_domain(account_type)

    def list_account_types(self) -> list[DomainAccountType]:
        """List all account types ordered by label."""
        session = self._get_session()
        account_types = session.query(AccountType).order_by(AccountType.label, AccountType.id).all()
        return [account_type_to_domain(t) for t in account_types]

    # Account operations
    def create_account(
        self,
        name: str,
        institution: Optional[str],
        starting_balance: Decimal,
        account_type_id: int,
        is_default: bool = False,
    ) -> int:
        """Create an account. Returns account ID."""
        session = self._get_session()
        account = Account(
            name=name,
            institution=institution,
            starting_balance=starting_balance,
            account_type_id=account_type_id,
            is_default=is_default,
        )
        session.add(account)
        self._commit()
        return account.id

    def get_account(self, account_id: int) -> Optional[DomainAccount]:
        """Get account by ID."""
        session = self._get_session()
        account = session.get(Account, account_id)
        if account is None:
            return None
        return account_to_domain(account)

    def get_account_by_natural_key(
        self, name: str, institution: Optional[str]
    ) -> Optional[DomainAccount]:
        """Get account by (name, institution)."""
        session = self._get_session()
        query = session.query(Account).filter(Account.name == name)
        if institution is None:
            query = query.filter(Account.institution.is_(None))
        else:
            query = query.filter(Account.institution == institution)
        account = query.order_by(Account.id).first()
        if account is None:
            return None
        return account_to_domain(account)

    def get_default_account(self) -> Optional[DomainAccount]:
        """Get the account flagged as default."""
        session = self._get_session()
        account = (
            session.query(Account).filter(Account.is_default.is_(True)).order_by(Account.id).first()
        )
        if account is None:
            return None
        return account_to_domain(account)

    def list_accounts(self) -> list[DomainAccount]:
        """List all accounts."""
        session = self._get_session()
        accounts = session.query(Account).order_by(Account.name, Account.id).all()
        return [account_to_domain(acc) for acc in accounts]

    def clear_default_account(self) -> None:
        """Unset the default flag on every account."""
        session = self._get_session()
        session.query(Account).filter(Account.is_default.is_(True)).update(
            {Account.is_default: False}, synchronize_session="fetch"
        )
        self._commit()

    def set_account_default(self, account_id: int) -> None:
        """Set the default flag on one account."""
        session = self._get_session()
        account = session.get(Account, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        account.is_default = True
        self._commit()

    def get_account_transaction_count(self, account_id: int) -> int:
        """Get count of transactions associated with an account."""
        session = self._get_session()
        return session.query(Transaction).filter(Transaction.account_id == account_id).count()

    def update_account(
        self,
        account_id: int,
        name: str,
        institution: Optional[str],
        starting_balance: Decimal,
        account_type_id: int,
        is_default: bool,
    ) -> None:
        """Overwrite every field of an account."""
        session = self._get_session()
        account = session.get(Account, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        account.name = name
        account.institution = institution
        account.starting_balance = starting_balance
        account.account_type_id = account_type_id
        account.is_default = is_default
        self._commit()

    def reassign_account_transactions(self, from_account_id: int, to_account_id: int) -> int:
        """Move every transaction of one account to another."""
        session = self._get_session()
        moved = (
            session.query(Transaction)
            .filter(Transaction.account_id == from_account_id)
            .update({Transaction.account_id: to_account_id}, synchronize_session="fetch")
        )
        self._commit()
        return moved

    def delete_account_transactions(self, account_id: int) -> int:
        """Delete every transaction of an account."""
        session = self._get_session()
        deleted = (
            session.query(Transaction)
            .filter(Transaction.account_id == account_id)
            .delete(synchronize_session="fetch")
        )
        self._commit()
        return deleted

    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        session = self._get_session()
        account = session.get(Account, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        # Reload the transactions collection after bulk moves or deletes
        session.expire(account)
        session.delete(account)
        self._commit()

    # Category operations
    def create_category(self, name: str, color_code: str, icon: str) -> int:
        """Create a category. Returns category ID."""
        session = self._get_session()
        category = Category(name=name, color_code=color_code, icon=icon)
        session.add(category)
        self._commit()
        return category.id

    def get_category(self, category_id: int) -> Optional[DomainCategory]:
        """Get category by ID."""
        session = self._get_session()
        cat = session.get(Category, category_id)
        if cat is None:
            return None
        return category_to_domain(cat)

    def get_category_by_name(self, name: str) -> Optional[DomainCategory]:
        """Get category by its unique name."""
        session = self._get_session()
        cat = session.query(Category).filter(Category.name == name).first()
        if cat is None:
            return None
        return category_to_domain(cat)

    def list_categories(self) -> list[DomainCategory]:
        """List all categories ordered by name."""
        session = self._get_session()
        categories = session.query(Category).order_by(Category.name).all()
        return [category_to_domain(cat) for cat in categories]

    def update_category(self, category_id: int, name: str, color_code: str, icon: str) -> None:
        """Update a category."""
        session = self._get_session()
        cat = session.get(Category, category_id)
        if cat is None:
            raise NotFoundError(category_not_found(category_id))
        cat.name = name
        cat.color_code = color_code
        cat.icon = icon
        self._commit()

    def get_category_transaction_count(self, category_id: int) -> int:
        """Get count of transactions filed under a category."""
        session = self._get_session()
        return session.query(Transaction).filter(Transaction.category_id == category_id).count()

    def delete_category(self, category_id: int) -> int:
        """Delete a category, uncategorizing its transactions."""
        session = self._get_session()
        cat = session.get(Category, category_id)
        if cat is None:
            raise NotFoundError(category_not_found(category_id))
        uncategorized = (
            session.query(Transaction)
            .filter(Transaction.category_id == category_id)
            .update({Transaction.category_id: None}, synchronize_session="fetch")
        )
        session.expire(cat)
        session.delete(cat)
        self._commit()
        return uncategorized

    # Ledger year operations
    def add_ledger_year(self, year: int) -> bool:
        """Add a ledger year. Returns False if it already existed."""
        session = self._get_session()
        if session.get(LedgerYear, year) is not None:
            return False
        session.add(LedgerYear(year=year))
        self._commit()
        return True

    def ledger_year_exists(self, year: int) -> bool:
        """Check whether a ledger year exists."""
        session = self._get_session()
        return session.get(LedgerYear, year) is not None

    def list_ledger_years(self) -> list[int]:
        """List ledger years, most recent first."""
        session = self._get_session()
        rows = session.query(LedgerYear.year).order_by(LedgerYear.year.desc()).all()
        return [row.year for row in rows]

    def delete_ledger_year(self, year: int) -> bool:
        """Delete a ledger year row. Returns False if it did not exist."""
        session = self._get_session()
        ledger_year = session.get(LedgerYear, year)
        if ledger_year is None:
            return False
        session.delete(ledger_year)
        self._commit()
        return True

    # Transaction operations
    def create_transaction(
        self,
        title: str,
        amount: Decimal,
        date: date,
        type: TransactionType,
        account_id: int,
        notes: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        session = self._get_session()
        transaction = Transaction(
            title=title,
            amount=amount,
            date=date,
            type=TransactionType(type).value,
            account_id=account_id,
            notes=notes,
            category_id=category_id,
        )
        session.add(transaction)
        self._commit()
        return transaction.id

    def get_transaction(self, transaction_id: int) -> Optional[DomainTransaction]:
        """Get transaction by ID."""
        session = self._get_session()
        txn = session.get(Transaction, transaction_id)
        if txn is None:
            return None
        return transaction_to_domain(txn)

    def transaction_exists(self, title: str, amount: Decimal, date: date) -> bool:
        """Check if a transaction with this (title, amount, date) exists."""
        session = self._get_session()
        count = (
            session.query(Transaction)
            .filter(
                Transaction.title == title,
                Transaction.amount == amount,
                Transaction.date == date,
            )
            .count()
        )
        return count > 0

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> list[DomainTransaction]:
        """List transactions with optional filters."""
        session = self._get_session()
        query = session.query(Transaction)

        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)
        if account_id is not None:
            query = query.filter(Transaction.account_id == account_id)
        if category_id is not None:
            query = query.filter(Transaction.category_id == category_id)

        transactions = query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()
        return [transaction_to_domain(txn) for txn in transactions]

    def update_transaction(
        self,
        transaction_id: int,
        title: str,
        amount: Decimal,
        date: date,
        type: TransactionType,
        account_id: int,
        notes: Optional[str],
        category_id: Optional[int],
    ) -> None:
        """Overwrite every field of a transaction."""
        session = self._get_session()
        transaction = session.get(Transaction, transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        transaction.title = title
        transaction.amount = amount
        transaction.date = date
        transaction.type = TransactionType(type).value
        transaction.account_id = account_id
        transaction.notes = notes
        transaction.category_id = category_id
        self._commit()

    def search_transactions(self, search: TransactionSearch, limit: int) -> list[DomainTransaction]:
        """Find transactions matching every given criterion, newest first."""
        session = self._get_session()
        query = session.query(Transaction).outerjoin(Category, Transaction.category_id == Category.id)

        if search.type is not None:
            query = query.filter(Transaction.type == TransactionType(search.type).value)
        if search.account_ids:
            query = query.filter(Transaction.account_id.in_(search.account_ids))
        if search.category_ids:
            query = query.filter(Transaction.category_id.in_(search.category_ids))
        query = self._apply_date_range(query, search.from_date, search.to_date)
        if search.min_amount is not None:
            query = query.filter(Transaction.amount >= search.min_amount)
        if search.max_amount is not None:
            query = query.filter(Transaction.amount <= search.max_amount)

        text = search.text.strip()
        if text:
            query = query.filter(
                or_(
                    Transaction.title.icontains(text, autoescape=True),
                    func.coalesce(Transaction.notes, "").icontains(text, autoescape=True),
                    func.coalesce(Category.name, "").icontains(text, autoescape=True),
                )
            )

        transactions = (
            query.order_by(Transaction.date.desc(), Transaction.id.desc()).limit(limit).all()
        )
        return [transaction_to_domain(txn) for txn in transactions]

    def count_transactions(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> int:
        """Count transactions within an optional date range."""
        session = self._get_session()
        return self._apply_date_range(session.query(Transaction), start_date, end_date).count()

    def delete_transactions_between(self, start_date: date, end_date: date) -> int:
        """Delete transactions dated within the inclusive range."""
        session = self._get_session()
        deleted = self._apply_date_range(session.query(Transaction), start_date, end_date).delete(
            synchronize_session="fetch"
        )
        self._commit()
        return deleted

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        session = self._get_session()
        transaction = session.get(Transaction, transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        session.delete(transaction)
        self._commit()

    # Reporting
    def _apply_date_range(self, query, start_date: Optional[date], end_date: Optional[date]):
        if start_date is not None:
            query = query.filter(Transaction.date >= start_date)
        if end_date is not None:
            query = query.filter(Transaction.date <= end_date)
        return query

    def get_period_summary(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> PeriodSummary:
        """Sum income and expenses within an optional date range."""
        session = self._get_session()
        income = func.coalesce(
            func.sum(case((Transaction.type == TransactionType.INCOME.value, Transaction.amount), else_=0)),
            0,
        )
        expenses = func.coalesce(
            func.sum(case((Transaction.type == TransactionType.EXPENSE.value, Transaction.amount), else_=0)),
            0,
        )
        query = session.query(income, expenses, func.count(Transaction.id))
        total_income, total_expenses, count = self._apply_date_range(query, start_date, end_date).one()
        return PeriodSummary(
            total_income=to_money(total_income),
            total_expenses=to_money(total_expenses),
            transaction_count=count,
        )

    def get_category_breakdown(
        self,
        type: TransactionType,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CategoryBreakdown]:
        """Group totals of one transaction type by category, largest first."""
        session = self._get_session()
        total = func.sum(Transaction.amount).label("total")
        query = (
            session.query(
                Transaction.category_id,
                Category.name,
                Category.color_code,
                Category.icon,
                total,
                func.count(Transaction.id),
            )
            .outerjoin(Category, Transaction.category_id == Category.id)
            .filter(Transaction.type == TransactionType(type).value)
        )
        query = self._apply_date_range(query, start_date, end_date)
        rows = (
            query.group_by(Transaction.category_id, Category.name, Category.color_code, Category.icon)
            .order_by(desc("total"))
            .all()
        )
        return [
            CategoryBreakdown(
                category_id=category_id,
                category_name=name or UNCATEGORIZED_NAME,
                category_color=color_code or UNCATEGORIZED_COLOR,
                category_icon=icon or UNCATEGORIZED_ICON,
                total=to_money(row_total),
                count=count,
            )
            for category_id, name, color_code, icon, row_total, count in rows
        ]

    # Bulk operations
    def delete_all_data(self) -> None:
        """Delete every row from every entity table, children first."""
        session = self._get_session()
        session.flush()
        for model in (Transaction, Account, AccountType, Category, LedgerYear):
            session.query(model).delete(synchronize_session=False)
        # Loaded instances no longer have rows behind them
        session.expunge_all()
        self._commit()

    def count_rows(self) -> dict[str, int]:
        """Return row counts keyed by bundle collection name."""
        session = self._get_session()
        return {
            "accountTypes": session.query(AccountType).count(),
            "accounts": session.query(Account).count(),
            "categories": session.query(Category).count(),
            "ledgerYears": session.query(LedgerYear).count(),
            "transactions": session.query(Transaction).count(),
        }
