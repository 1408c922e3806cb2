"""Tests for the CLI group and the migrate, export and import commands."""

import json
import os

from ledgerkit.cli.main import cli
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.migrations.runner import backup_path_for


def test_help_does_not_create_database(cli_runner, tmp_path):
    db_path = tmp_path / "never.db"

    result = cli_runner.invoke(cli, ["--db-path", str(db_path), "--help"])

    assert result.exit_code == 0
    assert "export" in result.output
    assert not db_path.exists()


def test_commands_migrate_a_new_database(cli_runner, tmp_path):
    db_path = str(tmp_path / "new.db")

    result = cli_runner.invoke(cli, ["--db-path", db_path, "account", "list"])

    assert result.exit_code == 0
    assert "Main Account" in result.output


def test_db_path_from_environment(cli_runner, tmp_path, monkeypatch):
    db_path = tmp_path / "env.db"
    monkeypatch.setenv("LEDGERKIT_DB_PATH", str(db_path))

    result = cli_runner.invoke(cli, ["year", "list"])

    assert result.exit_code == 0
    assert db_path.exists()


class TestMigrateCommand:
    def test_status_on_new_database(self, cli_runner, tmp_path):
        db_path = str(tmp_path / "new.db")

        result = cli_runner.invoke(cli, ["--db-path", db_path, "migrate", "--status"])

        assert result.exit_code == 0
        assert "Current version: 0" in result.output
        assert "Pending: 1, 2" in result.output

    def test_migrate_new_database(self, cli_runner, tmp_path):
        db_path = str(tmp_path / "new.db")

        result = cli_runner.invoke(cli, ["--db-path", db_path, "migrate"])

        assert result.exit_code == 0
        assert "Upgraded database from version 0 to 2." in result.output

    def test_migrate_up_to_date(self, run_cli):
        result = run_cli("migrate")

        assert result.exit_code == 0
        assert "Database is up to date (version 2)." in result.output

    def test_backup_failure_is_reported(self, cli_runner, tmp_path):
        db_path = tmp_path / "new.db"
        db_path.touch()
        os.mkdir(backup_path_for(str(db_path)))

        result = cli_runner.invoke(cli, ["--db-path", str(db_path), "account", "list"])

        assert result.exit_code == 1
        assert "Could not back up database" in result.output
        assert "No changes were made" in result.output


class TestExportImportCommands:
    def test_export(self, run_cli, sample_transactions, tmp_path):
        path = tmp_path / "export.json"

        result = run_cli("export", str(path))

        assert result.exit_code == 0
        assert "Transactions:  5" in result.output
        assert len(json.loads(path.read_text())["transactions"]) == 5

    def test_import_merge(self, run_cli, temp_db, bundle_data, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text(json.dumps(bundle_data))

        result = run_cli("import", str(path), "--skip-duplicates")

        assert result.exit_code == 0
        assert "Transactions:   3 added" in result.output
        assert "Categories:     1 added, 1 already present" in result.output
        assert temp_db.get_category_by_name("Coffee Shops") is not None

    def test_import_replace_requires_confirmation(self, run_cli, temp_db, bundle_data, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text(json.dumps(bundle_data))

        result = run_cli("import", str(path), "--mode", "replace", input="n\n")

        assert result.exit_code == 0
        assert "Import cancelled." in result.output
        assert temp_db.get_category_by_name("Food & Dining") is not None

    def test_import_replace(self, run_cli, temp_db, bundle_data, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text(json.dumps(bundle_data))

        result = run_cli("import", str(path), "--mode", "replace", "--yes")

        assert result.exit_code == 0
        assert sorted(c.name for c in temp_db.list_categories()) == ["Coffee Shops", "Salary"]
        assert temp_db.get_default_account().name == "Imported"

    def test_import_rejects_invalid_bundle(self, run_cli, temp_db, bundle_data, tmp_path):
        bundle_data["categories"][0]["colorCode"] = "notacolor"
        path = tmp_path / "bundle.json"
        path.write_text(json.dumps(bundle_data))
        before = temp_db.count_rows()

        result = run_cli("import", str(path))

        assert result.exit_code == 1
        assert "is not a valid export file; nothing was imported" in result.output
        assert "invalid colorCode 'notacolor'" in result.output
        assert temp_db.count_rows() == before

    def test_import_failure_is_rolled_back(self, run_cli, temp_db, bundle_data, tmp_path, rejected_insert):
        path = tmp_path / "bundle.json"
        path.write_text(json.dumps(bundle_data))
        before = temp_db.count_rows()

        result = run_cli("import", str(path))

        assert result.exit_code == 1
        assert "Import failed and was rolled back" in result.output
        assert temp_db.count_rows() == before


def test_full_workflow(cli_runner, tmp_path):
    """Record transactions, export them, and import them into a second database."""
    source = str(tmp_path / "source.db")
    target = str(tmp_path / "target.db")

    def run(db_path, *args):
        result = cli_runner.invoke(cli, ["--db-path", db_path, *args])
        assert result.exit_code == 0, result.output
        return result

    run(source, "account", "create", "Everyday", "--institution", "First Bank", "--default")
    run(source, "category", "create", "Pets", "--color", "#a855f7")
    run(source, "add", "Vet", "--amount", "120", "--date", "2024-02-10", "--category", "Pets")
    run(source, "add", "Salary", "--amount", "3000", "--type", "income", "--date", "2024-02-28")
    run(source, "export", str(tmp_path / "export.json"))

    run(target, "import", str(tmp_path / "export.json"), "--skip-duplicates")
    # Importing the same file again adds no transactions
    result = run(target, "import", str(tmp_path / "export.json"), "--skip-duplicates")
    assert "Transactions:   0 added, 2 already present" in result.output

    result = run(target, "summary", "--year", "2024")
    assert "3,000.00" in result.output
    assert "2,880.00" in result.output

    with create_sqlite_database(target) as db:
        assert db.get_default_account().name == "Everyday"
        assert db.get_category_by_name("Pets").color_code == "#a855f7"
