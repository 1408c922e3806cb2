"""Tests for the SQLAlchemy store: domain models, transactions and bulk operations."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain import entities
from ledgerkit.domain.entities import TransactionType


class TestDatabaseInterface:
    def test_returns_domain_models(self, temp_db):
        assert all(isinstance(a, entities.Account) for a in temp_db.list_accounts())
        assert all(isinstance(c, entities.Category) for c in temp_db.list_categories())
        assert all(isinstance(t, entities.AccountType) for t in temp_db.list_account_types())

    def test_transaction_scope_commits_together(self, temp_db, db_path):
        with temp_db.transaction():
            temp_db.add_ledger_year(2030)
            temp_db.create_category("Scoped", "#000000", "pi-tag")

        with create_sqlite_database(db_path) as other:
            assert other.ledger_year_exists(2030)
            assert other.get_category_by_name("Scoped") is not None

    def test_transaction_scope_rolls_back(self, temp_db):
        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                temp_db.add_ledger_year(2030)
                with temp_db.transaction():
                    temp_db.create_category("Scoped", "#000000", "pi-tag")
                raise RuntimeError("abort")

        assert not temp_db.ledger_year_exists(2030)
        assert temp_db.get_category_by_name("Scoped") is None

    def test_foreign_keys_enforced(self, temp_db):
        from sqlalchemy.exc import IntegrityError

        with pytest.raises(IntegrityError):
            with temp_db.transaction():
                temp_db.create_transaction(
                    "Orphan", Decimal("1.00"), date(2024, 1, 1), TransactionType.EXPENSE, account_id=999
                )

    def test_delete_all_data(self, temp_db, sample_transactions):
        temp_db.delete_all_data()

        assert temp_db.count_rows() == {
            "accountTypes": 0,
            "accounts": 0,
            "categories": 0,
            "ledgerYears": 0,
            "transactions": 0,
        }

    def test_reassign_and_delete_account_transactions(self, temp_db, sample_account, sample_transactions):
        default = temp_db.get_default_account()

        assert temp_db.reassign_account_transactions(default.id, sample_account.id) == 5
        assert temp_db.get_account_transaction_count(sample_account.id) == 5
        assert temp_db.delete_account_transactions(sample_account.id) == 5
        assert temp_db.list_transactions() == []

    def test_delete_category_uncategorizes(self, temp_db, sample_transactions):
        food = temp_db.get_category_by_name("Food & Dining")
        assert temp_db.get_category_transaction_count(food.id) == 3

        assert temp_db.delete_category(food.id) == 3

        assert temp_db.get_category(food.id) is None
        assert all(t.category_id is None for t in temp_db.list_transactions() if t.title != "Paycheck")

    def test_transactions_between(self, temp_db, sample_transactions):
        assert temp_db.count_transactions() == 5
        assert temp_db.count_transactions(date(2024, 6, 1), date(2024, 6, 30)) == 2

        assert temp_db.delete_transactions_between(date(2024, 1, 1), date(2024, 12, 31)) == 4

        assert [t.title for t in temp_db.list_transactions()] == ["Old coffee"]
        assert temp_db.delete_ledger_year(2024)
        assert not temp_db.delete_ledger_year(2024)

    def test_update_transaction(self, temp_db, sample_transactions):
        temp_db.update_transaction(
            sample_transactions[3],
            title="Garage",
            amount=Decimal("15.00"),
            date=date(2024, 6, 3),
            type=TransactionType.EXPENSE,
            account_id=temp_db.get_default_account().id,
            notes="Monthly",
            category_id=None,
        )

        txn = temp_db.get_transaction(sample_transactions[3])
        assert (txn.title, txn.amount, txn.date, txn.notes) == ("Garage", Decimal("15.00"), date(2024, 6, 3), "Monthly")

    def test_search_escapes_like_wildcards(self, temp_db, sample_transactions):
        account_id = temp_db.get_default_account().id
        temp_db.create_transaction(
            "100% refund", Decimal("5.00"), date(2024, 6, 5), TransactionType.INCOME, account_id=account_id
        )

        found = temp_db.search_transactions(entities.TransactionSearch(text="0%"), limit=10)

        assert [t.title for t in found] == ["100% refund"]

    def test_count_rows_after_seed(self, temp_db):
        counts = temp_db.count_rows()
        assert counts["accountTypes"] == 3
        assert counts["accounts"] == 1
        assert counts["categories"] == 8

    def test_memory_database_has_no_path(self):
        db = create_sqlite_database(":memory:")
        assert db.database_path is None
        assert not db.is_connected
        with pytest.raises(RuntimeError):
            db.engine
