"""Read-only period summaries and category breakdowns."""

from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain.entities import CategoryBreakdown, PeriodSummary, TransactionType
from ledgerkit.domain.errors import ValidationError
from ledgerkit.utils.date_parser import period_range


class SummaryService:
    """Service for dashboard projections over a ledger year or month."""

    def __init__(self, db: Database):
        """Initialize summary service.

        Args:
            db: Database instance
        """
        self.db = db

    def _range(self, year: Optional[int], month: Optional[int]):
        if year is None:
            if month is not None:
                raise ValidationError("A month filter requires a year")
            return None, None
        try:
            return period_range(year, month)
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def period_summary(self, year: Optional[int] = None, month: Optional[int] = None) -> PeriodSummary:
        """Total income, expenses and count for a year, a month, or all time."""
        start_date, end_date = self._range(year, month)
        return self.db.get_period_summary(start_date=start_date, end_date=end_date)

    def category_breakdown(
        self,
        type: TransactionType | str = TransactionType.EXPENSE,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> list[CategoryBreakdown]:
        """Totals of one transaction type per category, largest first."""
        start_date, end_date = self._range(year, month)
        return self.db.get_category_breakdown(
            type=TransactionType(type), start_date=start_date, end_date=end_date
        )
