"""Mapper functions to convert between SQLAlchemy models and domain entities."""

from decimal import Decimal

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    Account as ORMAccount,
    AccountType as ORMAccountType,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)
from ledgerkit.utils.amount_parser import to_money


def _money(value) -> Decimal:
    return to_money(value if value is not None else 0)


def account_type_to_domain(orm_account_type: ORMAccountType) -> domain.AccountType:
    """Convert SQLAlchemy AccountType model to domain AccountType entity."""
    return domain.AccountType(id=orm_account_type.id, label=orm_account_type.label)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        institution=orm_account.institution,
        starting_balance=_money(orm_account.starting_balance),
        account_type_id=orm_account.account_type_id,
        is_default=bool(orm_account.is_default),
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        color_code=orm_category.color_code,
        icon=orm_category.icon,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        title=orm_transaction.title,
        amount=_money(orm_transaction.amount),
        date=orm_transaction.date,
        type=domain.TransactionType(orm_transaction.type),
        account_id=orm_transaction.account_id,
        notes=orm_transaction.notes,
        category_id=orm_transaction.category_id,
    )
