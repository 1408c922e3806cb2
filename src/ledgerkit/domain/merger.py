"""Merge a verified bundle into the live store.

Kinds are merged parents first: account types, accounts, categories, ledger
years, then transactions. Every record is matched against local data by its
natural key; a match is reused, anything else is inserted through the normal
service creation path with its foreign keys rewritten to local ids.

The whole merge runs inside one store transaction, so a failure part way
through leaves nothing behind.
"""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ledgerkit.database.base import Database
from ledgerkit.domain.account import AccountService, normalize_institution
from ledgerkit.domain.bundle import (
    ACCOUNT_TYPES,
    ACCOUNTS,
    BUNDLE_COLLECTIONS,
    CATEGORIES,
    LEDGER_YEARS,
    TRANSACTIONS,
)
from ledgerkit.domain.category import CategoryService
from ledgerkit.domain.entities import Bundle
from ledgerkit.domain.errors import DomainError, MergeError, UnresolvedReferenceError
from ledgerkit.domain.ledger import LedgerService
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)


class RemapTable:
    """Origin id -> local id for one entity kind, filled during a merge."""

    def __init__(self, kind: str):
        self.kind = kind
        self._local_ids: dict[int, int] = {}

    def record(self, origin_id: int, local_id: int) -> None:
        self._local_ids[origin_id] = local_id

    def resolve(self, origin_id: int, referenced_by: str) -> int:
        """Return the local id for an origin id.

        Raises:
            UnresolvedReferenceError: If the origin id was never recorded
        """
        try:
            return self._local_ids[origin_id]
        except KeyError:
            raise UnresolvedReferenceError(self.kind, origin_id, referenced_by) from None

    def get(self, origin_id: int) -> Optional[int]:
        return self._local_ids.get(origin_id)

    def __contains__(self, origin_id: object) -> bool:
        return origin_id in self._local_ids

    def __len__(self) -> int:
        return len(self._local_ids)


@dataclass
class MergeReport:
    """Records inserted and skipped (matched locally) per bundle collection."""

    inserted: dict[str, int] = field(default_factory=lambda: dict.fromkeys(BUNDLE_COLLECTIONS, 0))
    skipped: dict[str, int] = field(default_factory=lambda: dict.fromkeys(BUNDLE_COLLECTIONS, 0))

    @property
    def total_inserted(self) -> int:
        return sum(self.inserted.values())

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())


class BundleMerger:
    """Folds a bundle into the store without duplicating reference data."""

    def __init__(self, db: Database):
        """Initialize the merger.

        Args:
            db: Database instance
        """
        self.db = db
        self.account_service = AccountService(db)
        self.category_service = CategoryService(db)
        self.ledger_service = LedgerService(db)
        self.transaction_service = TransactionService(db)

    def import_bundle(self, bundle: Bundle, skip_duplicates: bool = False) -> bool:
        """Merge a bundle, reporting failure instead of raising.

        Returns:
            True if every record was merged, False if the import was rolled back
        """
        try:
            self.merge(bundle, skip_duplicates=skip_duplicates)
        except MergeError as e:
            logger.error("Import failed and was rolled back: %s", e)
            return False
        return True

    def merge(self, bundle: Bundle, skip_duplicates: bool = False) -> MergeReport:
        """Merge a bundle in one store transaction.

        Args:
            bundle: Verified bundle
            skip_duplicates: Skip transactions whose (title, amount, date)
                already exists locally. Reference data is always de-duplicated.

        Returns:
            Counts of inserted and skipped records

        Raises:
            MergeError: If any record could not be merged; nothing is kept
        """
        try:
            with self.db.transaction():
                report = self._merge(bundle, skip_duplicates)
        except MergeError:
            raise
        except (DomainError, SQLAlchemyError) as e:
            raise MergeError(str(e)) from e

        logger.info(
            "Merged bundle: %d inserted, %d matched existing records",
            report.total_inserted,
            report.total_skipped,
        )
        return report

    def _merge(self, bundle: Bundle, skip_duplicates: bool) -> MergeReport:
        report = MergeReport()
        account_types = RemapTable("account type")
        accounts = RemapTable("account")
        categories = RemapTable("category")

        for account_type in bundle.account_types:
            label = account_type.label.strip()
            existing = self.db.get_account_type_by_label(label)
            if existing is not None:
                account_types.record(account_type.id, existing.id)
                report.skipped[ACCOUNT_TYPES] += 1
                continue
            local_id = self.account_service.create_account_type(label)
            account_types.record(account_type.id, local_id)
            report.inserted[ACCOUNT_TYPES] += 1

        for account in bundle.accounts:
            name = account.name.strip()
            existing = self.db.get_account_by_natural_key(
                name, normalize_institution(account.institution)
            )
            if existing is not None:
                accounts.record(account.id, existing.id)
                report.skipped[ACCOUNTS] += 1
                continue
            local_id = self.account_service.create_account(
                name=name,
                account_type_id=account_types.resolve(
                    account.account_type_id, f"Account {account.id}"
                ),
                institution=account.institution,
                starting_balance=account.starting_balance,
                is_default=account.is_default,
            )
            accounts.record(account.id, local_id)
            report.inserted[ACCOUNTS] += 1

        for category in bundle.categories:
            name = category.name.strip()
            existing = self.db.get_category_by_name(name)
            if existing is not None:
                categories.record(category.id, existing.id)
                report.skipped[CATEGORIES] += 1
                continue
            local_id = self.category_service.create_category(
                name, color_code=category.color_code, icon=category.icon
            )
            categories.record(category.id, local_id)
            report.inserted[CATEGORIES] += 1

        for year in bundle.ledger_years:
            if self.db.ledger_year_exists(year):
                report.skipped[LEDGER_YEARS] += 1
                continue
            self.ledger_service.add_year(year)
            report.inserted[LEDGER_YEARS] += 1

        for txn in bundle.transactions:
            title = txn.title.strip()
            if skip_duplicates and self.db.transaction_exists(title, txn.amount, txn.date):
                report.skipped[TRANSACTIONS] += 1
                continue
            referenced_by = f"Transaction {txn.id}"
            category_id = None
            if txn.category_id is not None:
                category_id = categories.resolve(txn.category_id, referenced_by)
            self.transaction_service.create_transaction(
                title=title,
                amount=txn.amount,
                date=txn.date,
                type=txn.type,
                account_id=accounts.resolve(txn.account_id, referenced_by),
                notes=txn.notes,
                category_id=category_id,
            )
            report.inserted[TRANSACTIONS] += 1

        self.account_service.ensure_default()
        return report
