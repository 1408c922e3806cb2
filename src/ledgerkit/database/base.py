"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional

# Import entities directly; domain/__init__.py stays import-free
from ledgerkit.domain.entities import (
    Account,
    AccountType,
    Category,
    CategoryBreakdown,
    PeriodSummary,
    Transaction,
    TransactionSearch,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for ledgerkit.

    Every create operation returns the store-assigned id. Outside a
    ``transaction()`` scope each write commits on its own; inside one, writes
    are flushed and committed (or rolled back) together when the outermost
    scope exits.
    """

    @abstractmethod
    def connect(self) -> None:
        """Open the database connection."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the database connection and release its resources."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Return a scope committing all writes made inside it atomically.

        Nested scopes join the outermost one.
        """
        pass

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    # Account type operations
    @abstractmethod
    def create_account_type(self, label: str) -> int:
        """Create an account type. Returns account type ID."""
        pass

    @abstractmethod
    def get_account_type(self, account_type_id: int) -> Optional[AccountType]:
        """Get account type by ID."""
        pass

    @abstractmethod
    def get_account_type_by_label(self, label: str) -> Optional[AccountType]:
        """Get the first account type with the given label."""
        pass

    @abstractmethod
    def list_account_types(self) -> list[AccountType]:
        """List all account types ordered by label."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        institution: Optional[str],
        starting_balance: Decimal,
        account_type_id: int,
        is_default: bool = False,
    ) -> int:
        """Create an account. Returns account ID.

        Does not touch other accounts' default flag; callers clear the old
        default first.
        """
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_natural_key(self, name: str, institution: Optional[str]) -> Optional[Account]:
        """Get account by (name, institution); a None institution matches NULL."""
        pass

    @abstractmethod
    def get_default_account(self) -> Optional[Account]:
        """Get the account flagged as default."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts ordered by name."""
        pass

    @abstractmethod
    def clear_default_account(self) -> None:
        """Unset the default flag on every account."""
        pass

    @abstractmethod
    def set_account_default(self, account_id: int) -> None:
        """Set the default flag on one account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Get count of transactions associated with an account."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: int,
        name: str,
        institution: Optional[str],
        starting_balance: Decimal,
        account_type_id: int,
        is_default: bool,
    ) -> None:
        """Overwrite every field of an account.

        Like ``create_account`` this does not touch other accounts' default flag.
        """
        pass

    @abstractmethod
    def reassign_account_transactions(self, from_account_id: int, to_account_id: int) -> int:
        """Move every transaction of one account to another. Returns the count moved."""
        pass

    @abstractmethod
    def delete_account_transactions(self, account_id: int) -> int:
        """Delete every transaction of an account. Returns the count deleted."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, color_code: str, icon: str) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by its unique name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories ordered by name."""
        pass

    @abstractmethod
    def update_category(self, category_id: int, name: str, color_code: str, icon: str) -> None:
        """Update a category."""
        pass

    @abstractmethod
    def get_category_transaction_count(self, category_id: int) -> int:
        """Get count of transactions filed under a category."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> int:
        """Delete a category, uncategorizing its transactions. Returns the count uncategorized."""
        pass

    # Ledger year operations
    @abstractmethod
    def add_ledger_year(self, year: int) -> bool:
        """Add a ledger year. Returns False if it already existed."""
        pass

    @abstractmethod
    def ledger_year_exists(self, year: int) -> bool:
        """Check whether a ledger year exists."""
        pass

    @abstractmethod
    def list_ledger_years(self) -> list[int]:
        """List ledger years, most recent first."""
        pass

    @abstractmethod
    def delete_ledger_year(self, year: int) -> bool:
        """Delete a ledger year row. Returns False if it did not exist."""
        pass

    # Transaction operations
    @abstractmethod
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
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def transaction_exists(self, title: str, amount: Decimal, date: date) -> bool:
        """Check if a transaction with this (title, amount, date) exists."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions, newest first, with optional filters."""
        pass

    @abstractmethod
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
        pass

    @abstractmethod
    def search_transactions(self, search: TransactionSearch, limit: int) -> list[Transaction]:
        """Find transactions matching every given criterion, newest first."""
        pass

    @abstractmethod
    def count_transactions(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> int:
        """Count transactions within an optional date range."""
        pass

    @abstractmethod
    def delete_transactions_between(self, start_date: date, end_date: date) -> int:
        """Delete transactions dated within the inclusive range. Returns the count deleted."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Reporting
    @abstractmethod
    def get_period_summary(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> PeriodSummary:
        """Sum income and expenses within an optional date range."""
        pass

    @abstractmethod
    def get_category_breakdown(
        self,
        type: TransactionType,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[CategoryBreakdown]:
        """Group totals of one transaction type by category, largest first."""
        pass

    # Bulk operations
    @abstractmethod
    def delete_all_data(self) -> None:
        """Delete every row from every entity table."""
        pass

    @abstractmethod
    def count_rows(self) -> dict[str, int]:
        """Return row counts keyed by bundle collection name."""
        pass
