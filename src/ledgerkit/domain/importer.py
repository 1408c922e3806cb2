"""Import orchestration: verify a bundle, then replace or merge."""

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ledgerkit.database.base import Database
from ledgerkit.domain.bundle import bundle_from_dict, load_bundle_file
from ledgerkit.domain.errors import MergeError, VerificationError
from ledgerkit.domain.merger import BundleMerger, MergeReport
from ledgerkit.domain.verifier import find_bundle_problems
from ledgerkit.logging_setup import get_logger

logger = get_logger(__name__)


class ImportMode(str, Enum):
    """REPLACE wipes the store first; MERGE folds the bundle into existing data."""

    REPLACE = "replace"
    MERGE = "merge"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a successful import."""

    mode: ImportMode
    report: MergeReport
    counts_before: dict[str, int]
    counts_after: dict[str, int]


class ImportService:
    """Service for importing bundles into the store."""

    def __init__(self, db: Database):
        """Initialize import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.merger = BundleMerger(db)

    def import_data(
        self,
        data: Any,
        mode: ImportMode | str = ImportMode.MERGE,
        skip_duplicates: bool = False,
    ) -> ImportResult:
        """Verify and import a decoded bundle document.

        In replace mode the wipe and the merge share one store transaction,
        and transactions are never skipped as duplicates.

        Raises:
            VerificationError: If the bundle is rejected; the store is untouched
            MergeError: If the merge failed; the store is rolled back
        """
        mode = ImportMode(mode)
        problems = find_bundle_problems(data)
        if problems:
            for problem in problems:
                logger.warning("Bundle rejected: %s", problem)
            raise VerificationError(problems)

        try:
            bundle = bundle_from_dict(data)
        except (KeyError, ValueError) as e:
            raise VerificationError([f"bundle could not be read: {e}"]) from e

        counts_before = self.db.count_rows()
        if mode is ImportMode.REPLACE:
            skip_duplicates = False

        try:
            with self.db.transaction():
                if mode is ImportMode.REPLACE:
                    logger.info("Replace import: deleting all existing data")
                    self.db.delete_all_data()
                report = self.merger.merge(bundle, skip_duplicates=skip_duplicates)
        except SQLAlchemyError as e:
            raise MergeError(str(e)) from e

        return ImportResult(
            mode=mode,
            report=report,
            counts_before=counts_before,
            counts_after=self.db.count_rows(),
        )

    def import_file(
        self,
        path: str | Path,
        mode: ImportMode | str = ImportMode.MERGE,
        skip_duplicates: bool = False,
    ) -> ImportResult:
        """Read a JSON bundle file and import it.

        Raises:
            OSError: If the file cannot be read
            VerificationError: If the file is not JSON or not a valid bundle
            MergeError: If the merge failed; the store is rolled back
        """
        try:
            data = load_bundle_file(path)
        except json.JSONDecodeError as e:
            raise VerificationError([f"file is not valid JSON: {e}"]) from e
        logger.info("Importing %s (%s mode)", path, ImportMode(mode).value)
        return self.import_data(data, mode=mode, skip_duplicates=skip_duplicates)
