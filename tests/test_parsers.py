"""Tests for date and amount parsing."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from ledgerkit.utils.amount_parser import parse_amount, to_money
from ledgerkit.utils.date_parser import month_name, parse_date, parse_iso_date, period_range


def test_parse_absolute_date():
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_relative_dates():
    today = date.today()
    assert parse_date("today") == today
    assert parse_date(" Yesterday ") == today - timedelta(days=1)
    assert parse_date("tomorrow") == today + timedelta(days=1)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("not a date")


def test_parse_iso_date():
    assert parse_iso_date("2023-05-01") == date(2023, 5, 1)
    assert parse_iso_date("2023-05-01T13:45:00Z") == date(2023, 5, 1)
    with pytest.raises(ValueError):
        parse_iso_date("May 1 2023")
    with pytest.raises(ValueError):
        parse_iso_date(20230501)


def test_period_range():
    assert period_range(2024) == (date(2024, 1, 1), date(2024, 12, 31))
    assert period_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(ValueError):
        period_range(2024, 13)


def test_month_name():
    assert month_name(6) == "June"
    assert month_name(0) == ""


@pytest.mark.parametrize(
    "text, expected",
    [("123.45", "123.45"), ("$1,234.5", "1234.50"), ("€7", "7.00"), ("0.005", "0.01")],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == Decimal(expected)


@pytest.mark.parametrize("text", ["", "  ", "abc", "-5"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_to_money():
    assert to_money(4.5) == Decimal("4.50")
    assert to_money(0.1 + 0.2) == Decimal("0.30")
    for value in (True, None, "nan", float("inf"), 1e30, "1e40"):
        with pytest.raises(ValueError):
            to_money(value)
