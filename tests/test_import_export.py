"""Tests for exporting bundles and the import service."""

import json
from datetime import date
from decimal import Decimal

import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.bundle import bundle_from_dict, bundle_to_dict, dump_bundle_file, load_bundle_file
from ledgerkit.domain.errors import MergeError, VerificationError
from ledgerkit.domain.exporter import BundleExporter
from ledgerkit.domain.importer import ImportMode, ImportService
from ledgerkit.domain.summary import SummaryService
from ledgerkit.domain.verifier import verify_bundle
from ledgerkit.migrations.runner import run_schema_migrations


@pytest.fixture
def other_db(tmp_path):
    """A second migrated database to import into."""
    db = create_sqlite_database(database_path=str(tmp_path / "other.db"))
    db.connect()
    run_schema_migrations(db)
    yield db
    db.disconnect()


def _natural_keys(db):
    return {
        "accountTypes": sorted(t.label for t in db.list_account_types()),
        "accounts": sorted((a.name, a.institution or "") for a in db.list_accounts()),
        "categories": sorted(c.name for c in db.list_categories()),
        "ledgerYears": sorted(db.list_ledger_years()),
        "transactions": sorted(t.natural_key for t in db.list_transactions()),
    }


class TestExporter:
    def test_export_contains_every_collection(self, temp_db, sample_account, sample_transactions):
        data = BundleExporter(temp_db).export_data()

        assert list(data) == ["accountTypes", "accounts", "categories", "ledgerYears", "transactions"]
        assert len(data["accounts"]) == 2
        assert data["ledgerYears"] == [2023, 2024]
        assert len(data["transactions"]) == len(sample_transactions)
        assert verify_bundle(data)

    def test_export_preserves_local_ids(self, temp_db, sample_account):
        data = BundleExporter(temp_db).export_data()

        exported = next(a for a in data["accounts"] if a["name"] == "Rainy Day")
        assert exported["id"] == sample_account.id
        assert exported["institution"] == "First Bank"
        assert exported["startingBalance"] == 250.0
        assert exported["isDefault"] is False

    def test_transactions_carry_category_display_fields(self, temp_db, sample_transactions):
        data = BundleExporter(temp_db).export_data()
        food = temp_db.get_category_by_name("Food & Dining")

        groceries = next(t for t in data["transactions"] if t["title"] == "Groceries")
        assert groceries["categoryId"] == food.id
        assert groceries["categoryName"] == "Food & Dining"
        assert groceries["categoryColor"] == food.color_code
        assert groceries["categoryIcon"] == food.icon
        assert groceries["date"] == "2024-05-03"
        assert groceries["amount"] == 54.2

        parking = next(t for t in data["transactions"] if t["title"] == "Parking")
        assert parking["categoryId"] is None
        assert "categoryName" not in parking

    def test_export_file_writes_json(self, temp_db, sample_transactions, tmp_path):
        path = tmp_path / "export.json"

        BundleExporter(temp_db).export_file(path)

        data = json.loads(path.read_text())
        assert verify_bundle(data)

    def test_export_does_not_write(self, temp_db, sample_transactions):
        before = temp_db.count_rows()
        BundleExporter(temp_db).export_bundle()
        assert temp_db.count_rows() == before


class TestBundleConversion:
    def test_wire_form_round_trip(self, bundle_data):
        bundle = bundle_from_dict(bundle_data)
        assert bundle.transactions[0].amount == Decimal("4.50")
        assert bundle.transactions[0].date == date(2023, 5, 1)
        assert bundle_from_dict(bundle_to_dict(bundle)) == bundle

    def test_aliases_and_blank_institution(self, bundle_data):
        account = bundle_data["accounts"][0]
        account["accountName"] = account.pop("name")
        account["institutionName"] = "  "
        del account["institution"]

        parsed = bundle_from_dict(bundle_data).accounts[0]
        assert parsed.name == "Imported"
        assert parsed.institution is None

    def test_file_helpers(self, bundle_data, tmp_path):
        path = tmp_path / "bundle.json"
        dump_bundle_file(bundle_data, path)
        assert load_bundle_file(path) == bundle_data


class TestImportService:
    def test_replace_round_trip(self, temp_db, other_db, sample_account, sample_transactions, tmp_path):
        path = tmp_path / "export.json"
        BundleExporter(temp_db).export_file(path)
        other_db.create_category("Only Here", "#000000", "pi-tag")

        result = ImportService(other_db).import_file(path, mode=ImportMode.REPLACE)

        assert result.mode is ImportMode.REPLACE
        assert _natural_keys(other_db) == _natural_keys(temp_db)
        assert other_db.get_category_by_name("Only Here") is None
        source = SummaryService(temp_db).period_summary()
        target = SummaryService(other_db).period_summary()
        assert target == source
        assert result.counts_after == temp_db.count_rows()

    def test_replace_keeps_a_single_default(self, temp_db, other_db, sample_account):
        data = BundleExporter(temp_db).export_data()

        ImportService(other_db).import_data(data, mode="replace")

        defaults = [a for a in other_db.list_accounts() if a.is_default]
        assert [a.name for a in defaults] == ["Main Account"]

    def test_merge_mode_keeps_existing_data(self, other_db, bundle_data):
        other_db.create_category("Only Here", "#000000", "pi-tag")

        result = ImportService(other_db).import_data(bundle_data, mode=ImportMode.MERGE)

        assert other_db.get_category_by_name("Only Here") is not None
        assert result.counts_after["transactions"] == result.counts_before["transactions"] + 3

    def test_invalid_bundle_is_rejected_without_changes(self, temp_db, bundle_data, sample_transactions):
        bundle_data["transactions"][0]["categoryId"] = 404
        before = temp_db.count_rows()

        with pytest.raises(VerificationError) as exc_info:
            ImportService(temp_db).import_data(bundle_data, mode=ImportMode.REPLACE)

        assert "categoryId 404" in exc_info.value.problems[0]
        assert temp_db.count_rows() == before

    def test_non_json_file_is_rejected(self, temp_db, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(VerificationError, match="not valid JSON"):
            ImportService(temp_db).import_file(path)

    def test_failed_replace_restores_wiped_data(
        self, temp_db, bundle_data, sample_transactions, rejected_insert
    ):
        before = temp_db.count_rows()

        with pytest.raises(MergeError):
            ImportService(temp_db).import_data(bundle_data, mode=ImportMode.REPLACE)

        assert temp_db.count_rows() == before
        assert len(temp_db.list_transactions()) == len(sample_transactions)

    def test_skip_duplicates_ignored_in_replace_mode(self, temp_db, bundle_data):
        bundle_data["transactions"].append(dict(bundle_data["transactions"][0], id=12))

        result = ImportService(temp_db).import_data(
            bundle_data, mode=ImportMode.REPLACE, skip_duplicates=True
        )

        assert result.report.inserted["transactions"] == 4

    @pytest.mark.parametrize(
        "collection, index, field", [("transactions", 1, "amount"), ("accounts", 0, "startingBalance")]
    )
    def test_huge_amount_is_rejected_without_changes(self, temp_db, bundle_data, collection, index, field):
        bundle_data[collection][index][field] = 1e30
        before = temp_db.count_rows()

        with pytest.raises(VerificationError) as exc_info:
            ImportService(temp_db).import_data(bundle_data)

        assert f"{collection}[{index}]: {field}" in exc_info.value.problems[0]
        assert temp_db.count_rows() == before

    def test_padded_names_merge_into_existing_rows(self, temp_db, bundle_data):
        bundle_data["categories"][1]["name"] = "Salary "
        bundle_data["accountTypes"][1]["type"] = " Savings"
        before = temp_db.count_rows()

        result = ImportService(temp_db).import_data(bundle_data, mode=ImportMode.MERGE)

        assert result.counts_after["categories"] == before["categories"] + 1
        assert result.counts_after["accountTypes"] == before["accountTypes"] + 1
