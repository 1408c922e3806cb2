"""Account domain service."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Account as AccountEntity, AccountType as AccountTypeEntity
from ledgerkit.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    account_type_not_found,
)
from ledgerkit.domain.validation import amount_in_range
from ledgerkit.utils.amount_parser import to_money


class AccountDeleteStrategy(str, Enum):
    """What happens to the transactions of a deleted account."""

    TRANSFER = "transfer"
    DELETE = "delete"


def _starting_balance(value: Decimal | int | float | str) -> Decimal:
    try:
        balance = to_money(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if not amount_in_range(balance):
        raise ValidationError(f"Starting balance {balance} is out of range")
    return balance


def normalize_institution(institution: Optional[str]) -> Optional[str]:
    """Treat blank institution names as absent."""
    if institution is None:
        return None
    institution = institution.strip()
    return institution or None


class AccountService:
    """Service for managing accounts and account types.

    Exactly one account is the default. Changing the default clears the old
    flag and sets the new one inside a single store transaction.
    """

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    # Account types
    def create_account_type(self, label: str) -> int:
        """Create an account type.

        Raises:
            ValidationError: If label is blank
        """
        label = label.strip() if label else ""
        if not label:
            raise ValidationError("Account type label cannot be empty")
        return self.db.create_account_type(label)

    def get_account_type(self, account_type_id: int) -> Optional[AccountTypeEntity]:
        return self.db.get_account_type(account_type_id)

    def get_account_type_by_label(self, label: str) -> Optional[AccountTypeEntity]:
        return self.db.get_account_type_by_label(label)

    def list_account_types(self) -> list[AccountTypeEntity]:
        return self.db.list_account_types()

    # Accounts
    def create_account(
        self,
        name: str,
        account_type_id: int,
        institution: Optional[str] = None,
        starting_balance: Decimal | int | float | str = Decimal("0"),
        is_default: bool = False,
    ) -> int:
        """Create a new account.

        A new default account takes the flag from the previous default. If
        the store has no default afterwards, the new account becomes it.

        Args:
            name: Account name
            account_type_id: ID of an existing account type
            institution: Optional institution (bank) name
            starting_balance: Opening balance
            is_default: Make this the default account

        Returns:
            Account ID

        Raises:
            ValidationError: If name is blank or the balance is not a number
            NotFoundError: If the account type does not exist
        """
        name = name.strip() if name else ""
        if not name:
            raise ValidationError("Account name cannot be empty")
        if self.db.get_account_type(account_type_id) is None:
            raise NotFoundError(account_type_not_found(account_type_id))
        balance = _starting_balance(starting_balance)

        with self.db.transaction():
            if is_default:
                self.db.clear_default_account()
            account_id = self.db.create_account(
                name=name,
                institution=normalize_institution(institution),
                starting_balance=balance,
                account_type_id=account_type_id,
                is_default=is_default,
            )
            self.ensure_default()
        return account_id

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID."""
        return self.db.get_account(account_id)

    def get_account_by_natural_key(
        self, name: str, institution: Optional[str] = None
    ) -> Optional[AccountEntity]:
        """Get account by (name, institution)."""
        return self.db.get_account_by_natural_key(name, normalize_institution(institution))

    def get_default_account(self) -> Optional[AccountEntity]:
        return self.db.get_default_account()

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts."""
        return self.db.list_accounts()

    def set_default(self, account_id: int) -> None:
        """Make an account the default, clearing the previous default.

        Raises:
            NotFoundError: If account not found
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        with self.db.transaction():
            self.db.clear_default_account()
            self.db.set_account_default(account_id)

    def ensure_default(self) -> Optional[int]:
        """Promote the lowest-id account if no account is the default.

        Returns:
            The default account ID, or None when there are no accounts
        """
        default = self.db.get_default_account()
        if default is not None:
            return default.id
        accounts = sorted(self.db.list_accounts(), key=lambda a: a.id)
        if not accounts:
            return None
        self.db.set_account_default(accounts[0].id)
        return accounts[0].id

    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        institution: Optional[str] = None,
        starting_balance: Optional[Decimal | int | float | str] = None,
        account_type_id: Optional[int] = None,
        is_default: Optional[bool] = None,
    ) -> None:
        """Update account fields. Fields left as None keep their value.

        Args:
            account_id: Account ID to update
            name: New name
            institution: New institution; an empty string clears it
            starting_balance: New opening balance
            account_type_id: ID of an existing account type
            is_default: True makes this the default account. False is only
                accepted for an account that is not the default

        Raises:
            NotFoundError: If the account or account type does not exist
            ValidationError: If a value is invalid, or the default flag would
                be cleared from the default account
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name cannot be empty")
        if account_type_id is not None and self.db.get_account_type(account_type_id) is None:
            raise NotFoundError(account_type_not_found(account_type_id))
        if is_default is False and account.is_default:
            raise ValidationError(
                f"Account {account_id} is the default account; make another account the default instead"
            )

        make_default = bool(is_default) and not account.is_default
        with self.db.transaction():
            if make_default:
                self.db.clear_default_account()
            self.db.update_account(
                account_id,
                name=name if name is not None else account.name,
                institution=(
                    normalize_institution(institution) if institution is not None else account.institution
                ),
                starting_balance=(
                    _starting_balance(starting_balance)
                    if starting_balance is not None
                    else account.starting_balance
                ),
                account_type_id=account_type_id if account_type_id is not None else account.account_type_id,
                is_default=account.is_default or make_default,
            )

    def delete_account(
        self,
        account_id: int,
        strategy: Optional[AccountDeleteStrategy | str] = None,
        transfer_to: Optional[int] = None,
    ) -> int:
        """Delete an account, deciding what happens to its transactions.

        The last remaining account can never be deleted. If the deleted
        account was the default, the transfer target (or else the lowest-id
        remaining account) becomes the default.

        Args:
            account_id: Account ID to delete
            strategy: None blocks deletion while the account has
                transactions; TRANSFER moves them to ``transfer_to``; DELETE
                deletes them
            transfer_to: Target account ID for TRANSFER

        Returns:
            Number of transactions moved or deleted

        Raises:
            NotFoundError: If the account or transfer target does not exist
            ValidationError: If the transfer target is missing or the same account
            DependencyError: If it is the only account, or it has transactions
                and no strategy was given
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if len(self.db.list_accounts()) <= 1:
            raise DependencyError("Cannot delete the only remaining account")

        if strategy is not None:
            strategy = AccountDeleteStrategy(strategy)
        if strategy is AccountDeleteStrategy.TRANSFER:
            if transfer_to is None:
                raise ValidationError("A transfer target account is required")
            if transfer_to == account_id:
                raise ValidationError("Cannot transfer transactions to the account being deleted")
            if self.db.get_account(transfer_to) is None:
                raise NotFoundError(account_not_found(transfer_to))

        transaction_count = self.db.get_account_transaction_count(account_id)
        if strategy is None and transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        affected = 0
        with self.db.transaction():
            if strategy is AccountDeleteStrategy.TRANSFER:
                affected = self.db.reassign_account_transactions(account_id, transfer_to)
            elif strategy is AccountDeleteStrategy.DELETE:
                affected = self.db.delete_account_transactions(account_id)
            self.db.delete_account(account_id)
            if account.is_default:
                if strategy is AccountDeleteStrategy.TRANSFER:
                    self.db.set_account_default(transfer_to)
                else:
                    self.ensure_default()
        return affected
