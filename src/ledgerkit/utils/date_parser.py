"""Date parsing utilities."""

import calendar
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports ISO dates ("2024-01-15"), other absolute formats understood by
    dateutil ("January 15, 2024") and the relative words "today",
    "yesterday" and "tomorrow".

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_iso_date(value: str) -> date:
    """Parse an ISO 8601 date or datetime string, as written in export bundles."""
    if not isinstance(value, str):
        raise ValueError(f"Could not parse date {value!r}: expected an ISO 8601 string")
    try:
        return date_parser.isoparse(value).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date {value!r}: {e}")


def period_range(year: int, month: Optional[int] = None) -> tuple[date, date]:
    """Return the first and last day of a ledger year or one of its months.

    Raises:
        ValueError: If month is outside 1..12
    """
    if month is None:
        return (date(year, 1, 1), date(year, 12, 31))
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return (date(year, month, 1), date(year, month, last_day))


def month_name(month: int) -> str:
    """Return the English month name for 1..12, or an empty string."""
    if 1 <= month <= 12:
        return calendar.month_name[month]
    return ""
