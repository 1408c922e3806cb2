"""Export/import bundle: the interchange document and its JSON form.

A bundle is a JSON object with exactly five arrays::

    {
      "accountTypes": [{"id": 1, "type": "Chequing"}],
      "accounts": [{"id": 1, "name": "Main", "institution": null,
                    "startingBalance": 0, "accountTypeId": 1, "isDefault": true}],
      "categories": [{"id": 1, "name": "Food", "colorCode": "#f97316", "icon": "pi-tag"}],
      "ledgerYears": [2024],
      "transactions": [{"id": 1, "title": "Coffee", "amount": 4.5, "date": "2024-05-01",
                        "type": "expense", "notes": null, "accountId": 1, "categoryId": 1,
                        "categoryName": "Food", "categoryColor": "#f97316",
                        "categoryIcon": "pi-tag"}]
    }

Ids are only meaningful inside the bundle. Older exports name some fields
differently (``accountName``, ``institutionName``, ``label``); those are
accepted on the way in. Names, labels, titles and icons are stripped of
surrounding whitespace when read, the same way the services store them.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from ledgerkit.domain.entities import (
    Account,
    AccountType,
    Bundle,
    Category,
    Transaction,
    TransactionType,
)
from ledgerkit.utils.amount_parser import to_money
from ledgerkit.utils.date_parser import parse_iso_date

ACCOUNT_TYPES = "accountTypes"
ACCOUNTS = "accounts"
CATEGORIES = "categories"
LEDGER_YEARS = "ledgerYears"
TRANSACTIONS = "transactions"

BUNDLE_COLLECTIONS = (ACCOUNT_TYPES, ACCOUNTS, CATEGORIES, LEDGER_YEARS, TRANSACTIONS)

ACCOUNT_TYPE_LABEL_KEYS = ("type", "label")
ACCOUNT_NAME_KEYS = ("name", "accountName")
ACCOUNT_INSTITUTION_KEYS = ("institution", "institutionName")

__all__ = [
    "Bundle",
    "BUNDLE_COLLECTIONS",
    "bundle_from_dict",
    "bundle_to_dict",
    "dump_bundle_file",
    "field_value",
    "load_bundle_file",
]


def field_value(record: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among ``keys``, or None."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    return str(value).strip()


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def account_type_from_dict(record: Mapping[str, Any]) -> AccountType:
    return AccountType(id=record["id"], label=_text(field_value(record, *ACCOUNT_TYPE_LABEL_KEYS)))


def account_from_dict(record: Mapping[str, Any]) -> Account:
    return Account(
        id=record["id"],
        name=_text(field_value(record, *ACCOUNT_NAME_KEYS)),
        institution=_optional_str(field_value(record, *ACCOUNT_INSTITUTION_KEYS)),
        starting_balance=to_money(record["startingBalance"]),
        account_type_id=record["accountTypeId"],
        is_default=bool(record["isDefault"]),
    )


def category_from_dict(record: Mapping[str, Any]) -> Category:
    return Category(
        id=record["id"],
        name=_text(record["name"]),
        color_code=record["colorCode"],
        icon=_text(record["icon"]),
    )


def transaction_from_dict(record: Mapping[str, Any]) -> Transaction:
    return Transaction(
        id=record["id"],
        title=_text(record["title"]),
        amount=to_money(record["amount"]),
        date=parse_iso_date(record["date"]),
        type=TransactionType(record["type"]),
        account_id=record["accountId"],
        notes=_optional_str(record.get("notes")),
        category_id=record.get("categoryId"),
    )


def bundle_from_dict(data: Mapping[str, Any]) -> Bundle:
    """Build a typed bundle from its wire form.

    Expects data that already passed ``verify_bundle``.

    Raises:
        KeyError, ValueError: If the data is malformed
    """
    return Bundle(
        account_types=[account_type_from_dict(r) for r in data[ACCOUNT_TYPES]],
        accounts=[account_from_dict(r) for r in data[ACCOUNTS]],
        categories=[category_from_dict(r) for r in data[CATEGORIES]],
        ledger_years=[int(year) for year in data[LEDGER_YEARS]],
        transactions=[transaction_from_dict(r) for r in data[TRANSACTIONS]],
    )


def bundle_to_dict(bundle: Bundle) -> dict[str, list[Any]]:
    """Serialize a bundle to its wire form.

    Transactions with a category carry the category's display fields.
    """
    categories = {c.id: c for c in bundle.categories}

    transactions = []
    for txn in bundle.transactions:
        record: dict[str, Any] = {
            "id": txn.id,
            "title": txn.title,
            "amount": float(txn.amount),
            "date": txn.date.isoformat(),
            "type": TransactionType(txn.type).value,
            "notes": txn.notes,
            "accountId": txn.account_id,
            "categoryId": txn.category_id,
        }
        category = categories.get(txn.category_id) if txn.category_id is not None else None
        if category is not None:
            record["categoryName"] = category.name
            record["categoryColor"] = category.color_code
            record["categoryIcon"] = category.icon
        transactions.append(record)

    return {
        ACCOUNT_TYPES: [{"id": t.id, "type": t.label} for t in bundle.account_types],
        ACCOUNTS: [
            {
                "id": a.id,
                "name": a.name,
                "institution": a.institution,
                "startingBalance": float(a.starting_balance),
                "accountTypeId": a.account_type_id,
                "isDefault": a.is_default,
            }
            for a in bundle.accounts
        ],
        CATEGORIES: [
            {"id": c.id, "name": c.name, "colorCode": c.color_code, "icon": c.icon}
            for c in bundle.categories
        ],
        LEDGER_YEARS: list(bundle.ledger_years),
        TRANSACTIONS: transactions,
    }


def load_bundle_file(path: str | Path) -> Any:
    """Read a bundle file and return the decoded JSON document.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def dump_bundle_file(data: Mapping[str, Any], path: str | Path) -> None:
    """Write a bundle's wire form as indented JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
