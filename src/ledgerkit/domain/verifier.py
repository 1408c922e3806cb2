"""Structural and referential checks for import bundles.

Verification is pure: it reads the decoded JSON document only and never
touches the store. A bundle that fails verification must not be merged.
"""

from collections.abc import Mapping
from typing import Any

from ledgerkit.domain.bundle import (
    ACCOUNT_NAME_KEYS,
    ACCOUNT_TYPE_LABEL_KEYS,
    ACCOUNT_TYPES,
    ACCOUNTS,
    BUNDLE_COLLECTIONS,
    CATEGORIES,
    LEDGER_YEARS,
    TRANSACTIONS,
    field_value,
)
from ledgerkit.domain.validation import (
    is_blank,
    is_valid_amount,
    is_valid_hex_color,
    is_valid_money,
    is_valid_transaction_type,
    is_valid_year,
)
from ledgerkit.utils.date_parser import parse_iso_date


def _missing(record: Mapping[str, Any], *fields: str) -> list[str]:
    return [f for f in fields if is_blank(record.get(f))]


def _is_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _ids(records: list[Mapping[str, Any]]) -> set[int]:
    return {r["id"] for r in records if _is_id(r.get("id"))}


def _bad_ids(where: str, record: Mapping[str, Any], *fields: str) -> list[str]:
    return [
        f"{where}: {f} {record[f]!r} is not an integer id"
        for f in fields
        if record.get(f) is not None and not _is_id(record[f])
    ]


def _check_account_type(index: int, record: Mapping[str, Any]) -> list[str]:
    where = f"accountTypes[{index}]"
    problems = []
    if record.get("id") is None:
        problems.append(f"{where}: missing id")
    if is_blank(field_value(record, *ACCOUNT_TYPE_LABEL_KEYS)):
        problems.append(f"{where}: missing type")
    problems.extend(_bad_ids(where, record, "id"))
    return problems


def _check_account(index: int, record: Mapping[str, Any], account_type_ids: set[Any]) -> list[str]:
    where = f"accounts[{index}]"
    problems = [
        f"{where}: missing {f}"
        for f in _missing(record, "id", "startingBalance", "accountTypeId", "isDefault")
    ]
    problems.extend(_bad_ids(where, record, "id", "accountTypeId"))
    if is_blank(field_value(record, *ACCOUNT_NAME_KEYS)):
        problems.append(f"{where}: missing name")
    balance = record.get("startingBalance")
    if not is_blank(balance) and not is_valid_money(balance):
        problems.append(f"{where}: startingBalance {balance!r} is not a number in the supported range")
    type_id = record.get("accountTypeId")
    if _is_id(type_id) and type_id not in account_type_ids:
        problems.append(f"{where}: accountTypeId {type_id!r} has no account type in the bundle")
    return problems


def _check_category(index: int, record: Mapping[str, Any]) -> list[str]:
    where = f"categories[{index}]"
    problems = [f"{where}: missing {f}" for f in _missing(record, "id", "name", "colorCode", "icon")]
    problems.extend(_bad_ids(where, record, "id"))
    color = record.get("colorCode")
    if not is_blank(color) and not is_valid_hex_color(color):
        problems.append(f"{where}: invalid colorCode {color!r}")
    return problems


def _check_transaction(
    index: int,
    record: Mapping[str, Any],
    account_ids: set[Any],
    category_ids: set[Any],
) -> list[str]:
    where = f"transactions[{index}]"
    problems = [
        f"{where}: missing {f}"
        for f in _missing(record, "id", "title", "amount", "date", "type", "accountId")
    ]
    problems.extend(_bad_ids(where, record, "id", "accountId", "categoryId"))

    if not is_blank(record.get("type")) and not is_valid_transaction_type(record["type"]):
        problems.append(f"{where}: type {record['type']!r} is not 'income' or 'expense'")
    amount = record.get("amount")
    if not is_blank(amount) and not is_valid_amount(amount):
        problems.append(f"{where}: amount {amount!r} is not a non-negative number in the supported range")
    if not is_blank(record.get("date")):
        try:
            parse_iso_date(record["date"])
        except ValueError:
            problems.append(f"{where}: date {record['date']!r} is not a YYYY-MM-DD date")

    account_id = record.get("accountId")
    if _is_id(account_id) and account_id not in account_ids:
        problems.append(f"{where}: accountId {account_id!r} has no account in the bundle")

    category_id = record.get("categoryId")
    if category_id is not None:
        for f in _missing(record, "categoryName", "categoryColor", "categoryIcon"):
            problems.append(f"{where}: categoryId is set but {f} is missing")
        color = record.get("categoryColor")
        if not is_blank(color) and not is_valid_hex_color(color):
            problems.append(f"{where}: invalid categoryColor {color!r}")
        if _is_id(category_id) and category_id not in category_ids:
            problems.append(f"{where}: categoryId {category_id!r} has no category in the bundle")
    return problems


def find_bundle_problems(data: Any) -> list[str]:
    """Return every reason the document is not an importable bundle.

    An empty list means the bundle is valid.
    """
    if not isinstance(data, Mapping):
        return ["bundle is not a JSON object"]

    problems = []
    for key in BUNDLE_COLLECTIONS:
        if key not in data:
            problems.append(f"missing collection {key!r}")
        elif not isinstance(data[key], list):
            problems.append(f"collection {key!r} is not a list")
    if problems:
        return problems

    for key in (ACCOUNT_TYPES, ACCOUNTS, CATEGORIES, TRANSACTIONS):
        for index, record in enumerate(data[key]):
            if not isinstance(record, Mapping):
                problems.append(f"{key}[{index}]: record is not an object")
    if problems:
        return problems

    account_type_ids = _ids(data[ACCOUNT_TYPES])
    account_ids = _ids(data[ACCOUNTS])
    category_ids = _ids(data[CATEGORIES])

    for index, record in enumerate(data[ACCOUNT_TYPES]):
        problems.extend(_check_account_type(index, record))
    for index, record in enumerate(data[ACCOUNTS]):
        problems.extend(_check_account(index, record, account_type_ids))
    for index, record in enumerate(data[CATEGORIES]):
        problems.extend(_check_category(index, record))
    for index, year in enumerate(data[LEDGER_YEARS]):
        if not is_valid_year(year):
            problems.append(f"ledgerYears[{index}]: {year!r} is not a valid year")
    for index, record in enumerate(data[TRANSACTIONS]):
        problems.extend(_check_transaction(index, record, account_ids, category_ids))

    return problems


def verify_bundle(data: Any) -> bool:
    """Return True if the document is a structurally valid, self-consistent bundle."""
    return not find_bundle_problems(data)
