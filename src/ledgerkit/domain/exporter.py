"""Export the whole store as a bundle."""

from pathlib import Path
from typing import Any

from ledgerkit.database.base import Database
from ledgerkit.domain.bundle import bundle_to_dict, dump_bundle_file
from ledgerkit.domain.entities import Bundle
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)


class BundleExporter:
    """Reads every entity collection; local ids become the bundle's origin ids."""

    def __init__(self, db: Database):
        self.db = db

    def export_bundle(self) -> Bundle:
        """Snapshot the store. Never writes."""
        return Bundle(
            account_types=sorted(self.db.list_account_types(), key=lambda t: t.id),
            accounts=sorted(self.db.list_accounts(), key=lambda a: a.id),
            categories=sorted(self.db.list_categories(), key=lambda c: c.id),
            ledger_years=sorted(self.db.list_ledger_years()),
            transactions=sorted(self.db.list_transactions(), key=lambda t: t.id),
        )

    def export_data(self) -> dict[str, list[Any]]:
        """Snapshot the store in its JSON wire form."""
        return bundle_to_dict(self.export_bundle())

    def export_file(self, path: str | Path) -> Bundle:
        """Write the store to a JSON bundle file.

        Returns:
            The exported bundle
        """
        bundle = self.export_bundle()
        dump_bundle_file(bundle_to_dict(bundle), path)
        logger.info(
            "Exported %d accounts, %d categories and %d transactions to %s",
            len(bundle.accounts),
            len(bundle.categories),
            len(bundle.transactions),
            path,
        )
        return bundle
