"""Tests for period summaries and category breakdowns."""

from decimal import Decimal

import pytest

from ledgerkit.domain.errors import ValidationError


class TestSummaryService:
    def test_year_summary(self, summary_service, sample_transactions):
        summary = summary_service.period_summary(year=2024)

        assert summary.total_income == Decimal("3000.00")
        assert summary.total_expenses == Decimal("70.70")
        assert summary.balance == Decimal("2929.30")
        assert summary.transaction_count == 4

    def test_month_summary(self, summary_service, sample_transactions):
        summary = summary_service.period_summary(year=2024, month=6)

        assert summary.total_income == Decimal("0.00")
        assert summary.total_expenses == Decimal("16.50")
        assert summary.transaction_count == 2

    def test_all_time_summary(self, summary_service, sample_transactions):
        assert summary_service.period_summary().transaction_count == 5

    def test_empty_period(self, summary_service):
        summary = summary_service.period_summary(year=2030)
        assert summary.total_income == summary.total_expenses == Decimal("0")
        assert summary.transaction_count == 0

    def test_invalid_month(self, summary_service):
        with pytest.raises(ValidationError):
            summary_service.period_summary(year=2024, month=13)

    def test_expense_breakdown(self, summary_service, sample_transactions):
        breakdown = summary_service.category_breakdown(year=2024)

        assert [(row.category_name, row.total, row.count) for row in breakdown] == [
            ("Food & Dining", Decimal("58.70"), 2),
            ("Uncategorized", Decimal("12.00"), 1),
        ]
        assert breakdown[1].category_id is None

    def test_income_breakdown(self, summary_service, sample_transactions):
        breakdown = summary_service.category_breakdown(type="income", year=2024, month=5)

        assert len(breakdown) == 1
        assert breakdown[0].category_name == "Salary"
        assert breakdown[0].total == Decimal("3000.00")


class TestSummaryCommand:
    def test_summary(self, run_cli, sample_transactions):
        result = run_cli("summary", "--year", "2024")

        assert result.exit_code == 0
        assert "Summary: 2024" in result.output
        assert "3,000.00" in result.output
        assert "2,929.30" in result.output
        assert "Food & Dining" in result.output

    def test_month_summary_title(self, run_cli, sample_transactions):
        result = run_cli("summary", "--year", "2024", "--month", "6")

        assert result.exit_code == 0
        assert "Summary: June 2024" in result.output
