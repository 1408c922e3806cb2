"""Utility functions for ledgerkit."""

from ledgerkit.utils.date_parser import parse_date, period_range
from ledgerkit.utils.amount_parser import parse_amount, to_money

__all__ = ["parse_date", "period_range", "parse_amount", "to_money"]
