"""Validation predicates shared by seeding, services and import verification."""

import re
from decimal import Decimal
from typing import Any

from ledgerkit.domain.entities import TransactionType
from ledgerkit.utils.amount_parser import MAX_AMOUNT, to_money

HEX_COLOR_PATTERN = re.compile(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")

MIN_YEAR = 1900
MAX_YEAR = 9999


def is_valid_hex_color(value: Any) -> bool:
    """Return True for ``#RGB`` or ``#RRGGBB`` strings."""
    return isinstance(value, str) and HEX_COLOR_PATTERN.fullmatch(value) is not None


def is_valid_transaction_type(value: Any) -> bool:
    """Return True for ``income`` or ``expense``."""
    if isinstance(value, TransactionType):
        return True
    return isinstance(value, str) and value in {t.value for t in TransactionType}


def is_blank(value: Any) -> bool:
    """Return True for None or a string with nothing but whitespace."""
    return value is None or (isinstance(value, str) and not value.strip())


def amount_in_range(amount: Decimal) -> bool:
    """Return True if the amount fits the stored NUMERIC(12, 2) columns."""
    return -MAX_AMOUNT <= amount <= MAX_AMOUNT


def is_valid_money(value: Any) -> bool:
    """Return True for a finite number (bool excluded) within the stored range."""
    try:
        amount = to_money(value)
    except ValueError:
        return False
    return amount_in_range(amount)


def is_valid_amount(value: Any) -> bool:
    """Return True for a non-negative number within the stored range."""
    return is_valid_money(value) and to_money(value) >= 0


def is_valid_year(value: Any) -> bool:
    """Return True for an integer calendar year in the supported range."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_YEAR <= value <= MAX_YEAR
