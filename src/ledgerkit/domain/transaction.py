"""Transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    Transaction as TransactionEntity,
    TransactionSearch,
    TransactionType,
)
from ledgerkit.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
)
from ledgerkit.domain.validation import amount_in_range, is_valid_transaction_type
from ledgerkit.utils.amount_parser import to_money
from ledgerkit.utils.date_parser import period_range


DEFAULT_SEARCH_LIMIT = 50


def _validate_title(title: Optional[str]) -> str:
    title = title.strip() if title else ""
    if not title:
        raise ValidationError("Transaction title cannot be empty")
    return title


def _validate_type(type: TransactionType | str) -> TransactionType:
    if not is_valid_transaction_type(type):
        raise ValidationError(f"Transaction type must be 'income' or 'expense', got {type!r}")
    return TransactionType(type)


def _validate_amount(amount: Decimal | int | float | str) -> Decimal:
    try:
        amount = to_money(amount)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if amount < 0:
        raise ValidationError(
            f"Amount {amount} is negative; use the transaction type for direction"
        )
    if not amount_in_range(amount):
        raise ValidationError(f"Amount {amount} is out of range")
    return amount


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        title: str,
        amount: Decimal | int | float | str,
        date: date,
        type: TransactionType | str,
        account_id: Optional[int] = None,
        notes: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> int:
        """Create a transaction and make sure its ledger year exists.

        Args:
            title: Short description
            amount: Non-negative magnitude; direction comes from ``type``
            date: Transaction date
            type: "income" or "expense"
            account_id: Account ID; the default account when None
            notes: Optional notes
            category_id: Optional category ID

        Returns:
            Transaction ID

        Raises:
            ValidationError: If title, amount or type are invalid
            NotFoundError: If account or category doesn't exist
        """
        title = _validate_title(title)
        type = _validate_type(type)
        amount = _validate_amount(amount)

        if account_id is None:
            default = self.db.get_default_account()
            if default is None:
                raise NotFoundError("No default account exists")
            account_id = default.id
        elif self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        with self.db.transaction():
            self.db.add_ledger_year(date.year)
            return self.db.create_transaction(
                title=title,
                amount=amount,
                date=date,
                type=TransactionType(type),
                account_id=account_id,
                notes=notes or None,
                category_id=category_id,
            )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def transaction_exists(self, title: str, amount: Decimal, date: date) -> bool:
        """Check for a transaction with the same (title, amount, date)."""
        return self.db.transaction_exists(title, to_money(amount), date)

    def list_transactions(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
    ) -> list[TransactionEntity]:
        """List transactions for a ledger year or month, newest first.

        Raises:
            ValidationError: If month is given without a year or is out of range
        """
        start_date = end_date = None
        if year is not None:
            try:
                start_date, end_date = period_range(year, month)
            except ValueError as e:
                raise ValidationError(str(e)) from e
        elif month is not None:
            raise ValidationError("A month filter requires a year")

        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
        )

    def update_transaction(
        self,
        transaction_id: int,
        title: Optional[str] = None,
        amount: Optional[Decimal | int | float | str] = None,
        date: Optional[date] = None,
        type: Optional[TransactionType | str] = None,
        account_id: Optional[int] = None,
        notes: Optional[str] = None,
        category_id: Optional[int] = None,
        clear_category: bool = False,
    ) -> None:
        """Update transaction fields. Fields left as None keep their value.

        Args:
            transaction_id: Transaction ID to update
            title: New title
            amount: New non-negative magnitude
            date: New date; its ledger year is created if needed
            type: New type, "income" or "expense"
            account_id: New account ID
            notes: New notes; an empty string clears them
            category_id: New category ID
            clear_category: If True, clear the category (category_id must be None)

        Raises:
            NotFoundError: If the transaction, account or category doesn't exist
            ValidationError: If a value is invalid
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        if clear_category and category_id is not None:
            raise ValidationError("Cannot set both category_id and clear_category")
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        if clear_category:
            new_category_id = None
        elif category_id is not None:
            new_category_id = category_id
        else:
            new_category_id = txn.category_id
        new_date = date if date is not None else txn.date

        with self.db.transaction():
            self.db.add_ledger_year(new_date.year)
            self.db.update_transaction(
                transaction_id,
                title=_validate_title(title) if title is not None else txn.title,
                amount=_validate_amount(amount) if amount is not None else txn.amount,
                date=new_date,
                type=_validate_type(type) if type is not None else txn.type,
                account_id=account_id if account_id is not None else txn.account_id,
                notes=(notes or None) if notes is not None else txn.notes,
                category_id=new_category_id,
            )

    def search_transactions(
        self, search: TransactionSearch, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[TransactionEntity]:
        """Search transactions, newest first.

        Raises:
            ValidationError: If the criteria contradict each other or the limit is not positive
        """
        if limit < 1:
            raise ValidationError(f"Search limit must be positive, got {limit}")
        if search.type is not None and not is_valid_transaction_type(search.type):
            raise ValidationError(
                f"Transaction type must be 'income' or 'expense', got {search.type!r}"
            )
        if search.from_date and search.to_date and search.from_date > search.to_date:
            raise ValidationError("The start date is after the end date")
        if (
            search.min_amount is not None
            and search.max_amount is not None
            and search.min_amount > search.max_amount
        ):
            raise ValidationError("The minimum amount is larger than the maximum amount")
        return self.db.search_transactions(search, limit)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        self.db.delete_transaction(transaction_id)
