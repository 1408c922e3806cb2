"""Shared pytest fixtures for ledgerkit tests."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.category import CategoryService
from ledgerkit.domain.errors import ValidationError
from ledgerkit.domain.ledger import LedgerService
from ledgerkit.domain.summary import SummaryService
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.migrations.runner import run_schema_migrations


@pytest.fixture
def db_path(tmp_path):
    """Path of a database file that does not exist yet."""
    return str(tmp_path / "ledgerkit.db")


@pytest.fixture
def temp_db(db_path):
    """Create a migrated temporary database for testing."""
    db = create_sqlite_database(database_path=db_path)
    db.connect()
    run_schema_migrations(db)

    yield db

    db.disconnect()


@pytest.fixture
def empty_db(temp_db):
    """A migrated database with the seeded starter rows removed."""
    temp_db.delete_all_data()
    return temp_db


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService with a temporary database."""
    return SummaryService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a non-default savings account."""
    savings = account_service.get_account_type_by_label("Savings")
    account_id = account_service.create_account(
        name="Rainy Day",
        account_type_id=savings.id,
        institution="First Bank",
        starting_balance=Decimal("250.00"),
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_transactions(transaction_service, category_service):
    """Add a few transactions across two months of 2024 and one of 2023."""
    food = category_service.get_category_by_name("Food & Dining")
    salary = category_service.get_category_by_name("Salary")
    rows = [
        ("Paycheck", Decimal("3000.00"), date(2024, 5, 31), "income", salary.id),
        ("Groceries", Decimal("54.20"), date(2024, 5, 3), "expense", food.id),
        ("Coffee", Decimal("4.50"), date(2024, 6, 1), "expense", food.id),
        ("Parking", Decimal("12.00"), date(2024, 6, 2), "expense", None),
        ("Old coffee", Decimal("3.75"), date(2023, 12, 30), "expense", food.id),
    ]
    return [
        transaction_service.create_transaction(
            title=title, amount=amount, date=txn_date, type=txn_type, category_id=category_id
        )
        for title, amount, txn_date, txn_type, category_id in rows
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def run_cli(cli_runner, temp_db, db_path):
    """Invoke the CLI against the temporary database file.

    The fixture's session is released first so it holds no SQLite lock while
    the command writes.
    """
    from ledgerkit.cli.main import cli

    def invoke(*args, input=None):
        temp_db.release_session()
        return cli_runner.invoke(cli, ["--db-path", db_path, *args], input=input)

    return invoke


@pytest.fixture
def rejected_insert(monkeypatch):
    """Make the store refuse the transaction titled "Cash withdrawal".

    The bundle still verifies, so the failure happens part way through a merge.
    """
    create_transaction = TransactionService.create_transaction

    def refuse(self, *args, **kwargs):
        if kwargs.get("title") == "Cash withdrawal":
            raise ValidationError("Transaction refused by the store")
        return create_transaction(self, *args, **kwargs)

    monkeypatch.setattr(TransactionService, "create_transaction", refuse)


@pytest.fixture
def bundle_data():
    """A small valid bundle in wire form, with ids unrelated to any local rows."""
    return {
        "accountTypes": [{"id": 100, "type": "Checking"}, {"id": 101, "type": "Savings"}],
        "accounts": [
            {
                "id": 50,
                "name": "Imported",
                "institution": "Credit Union",
                "startingBalance": 100.0,
                "accountTypeId": 100,
                "isDefault": True,
            },
            {
                "id": 51,
                "name": "Stash",
                "institution": None,
                "startingBalance": 0,
                "accountTypeId": 101,
                "isDefault": False,
            },
        ],
        "categories": [
            {"id": 7, "name": "Coffee Shops", "colorCode": "#7c2d12", "icon": "pi-star"},
            {"id": 8, "name": "Salary", "colorCode": "#22c55e", "icon": "pi-wallet"},
        ],
        "ledgerYears": [2022, 2023],
        "transactions": [
            {
                "id": 9,
                "title": "Coffee",
                "amount": 4.5,
                "date": "2023-05-01",
                "type": "expense",
                "notes": None,
                "accountId": 50,
                "categoryId": 7,
                "categoryName": "Coffee Shops",
                "categoryColor": "#7c2d12",
                "categoryIcon": "pi-star",
            },
            {
                "id": 10,
                "title": "Paycheck",
                "amount": 2500,
                "date": "2023-05-31",
                "type": "income",
                "notes": "May",
                "accountId": 51,
                "categoryId": 8,
                "categoryName": "Salary",
                "categoryColor": "#22c55e",
                "categoryIcon": "pi-wallet",
            },
            {
                "id": 11,
                "title": "Cash withdrawal",
                "amount": 40,
                "date": "2023-06-02",
                "type": "expense",
                "notes": None,
                "accountId": 50,
                "categoryId": None,
            },
        ],
    }
