"""Ledger year domain service."""

from ledgerkit.database.base import Database
from ledgerkit.domain.errors import DependencyError, NotFoundError, ValidationError
from ledgerkit.domain.validation import MAX_YEAR, MIN_YEAR, is_valid_year
from ledgerkit.utils.date_parser import month_name, period_range


class LedgerService:
    """Service for ledger years and their months."""

    def __init__(self, db: Database):
        self.db = db

    def list_years(self) -> list[int]:
        """List ledger years, most recent first."""
        return self.db.list_ledger_years()

    def add_year(self, year: int) -> bool:
        """Add a ledger year.

        Returns:
            False if the year already existed

        Raises:
            ValidationError: If year is outside the supported range
        """
        if not is_valid_year(year):
            raise ValidationError(f"Year must be an integer between {MIN_YEAR} and {MAX_YEAR}, got {year!r}")
        return self.db.add_ledger_year(year)

    def year_exists(self, year: int) -> bool:
        return self.db.ledger_year_exists(year)

    def delete_year(self, year: int, delete_transactions: bool = False) -> int:
        """Delete a ledger year.

        Every transaction must fall in a ledger year, so a year that still
        holds transactions is only deleted together with them.

        Returns:
            Number of transactions deleted

        Raises:
            NotFoundError: If the year is not a ledger year
            DependencyError: If the year has transactions and
                ``delete_transactions`` is False
        """
        if not self.db.ledger_year_exists(year):
            raise NotFoundError(f"Ledger year {year} not found")
        start_date, end_date = period_range(year)
        count = self.db.count_transactions(start_date, end_date)
        if count and not delete_transactions:
            raise DependencyError(
                f"Cannot delete ledger year {year}: it has "
                f"{count} transaction{'s' if count != 1 else ''}. "
                "Delete them together with the year."
            )

        deleted = 0
        with self.db.transaction():
            if count:
                deleted = self.db.delete_transactions_between(start_date, end_date)
            self.db.delete_ledger_year(year)
        return deleted

    def months(self) -> list[tuple[int, str]]:
        """Every ledger year holds the same twelve months."""
        return [(month, month_name(month)) for month in range(1, 13)]
