"""Domain model entities for ledgerkit.

These are pure data classes representing business concepts, independent of
the database schema. The same shapes travel through the storage layer, the
migration seed step and the import/export bundle.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction. Amounts are always stored as magnitudes."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class AccountType:
    """Account type domain entity (e.g. Cash, Chequing)."""

    id: int
    label: str


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: int
    name: str
    institution: Optional[str]
    starting_balance: Decimal
    account_type_id: int
    is_default: bool = False

    @property
    def natural_key(self) -> tuple[str, Optional[str]]:
        return (self.name, self.institution)


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    name: str
    color_code: str
    icon: str


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    title: str
    amount: Decimal
    date: date
    type: TransactionType
    account_id: int
    notes: Optional[str] = None
    category_id: Optional[int] = None

    @property
    def natural_key(self) -> tuple[str, Decimal, date]:
        return (self.title, self.amount, self.date)


@dataclass(frozen=True)
class TransactionSearch:
    """Criteria for searching transactions. Unset criteria match everything.

    ``text`` matches title, notes or category name, ignoring case. Date and
    amount bounds are inclusive. Empty id lists do not filter.
    """

    text: str = ""
    type: Optional[TransactionType] = None
    account_ids: tuple[int, ...] = ()
    category_ids: tuple[int, ...] = ()
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class PeriodSummary:
    """Income/expense totals for a ledger period."""

    total_income: Decimal
    total_expenses: Decimal
    transaction_count: int

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expenses


@dataclass(frozen=True)
class CategoryBreakdown:
    """Total of one transaction type grouped under a category."""

    category_id: Optional[int]
    category_name: str
    category_color: str
    category_icon: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class Bundle:
    """The five-collection interchange document used by export and import.

    Ids inside a bundle are origin ids: meaningful only within the bundle.
    """

    account_types: list[AccountType] = field(default_factory=list)
    accounts: list[Account] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    ledger_years: list[int] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
