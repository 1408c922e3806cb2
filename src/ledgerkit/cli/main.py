"""Main CLI entry point."""

import click

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.errors import MigrationError
from ledgerkit.cli.error_handling import handle_migration_error
from ledgerkit.logging_setup import configure_logging
from ledgerkit.migrations.runner import run_schema_migrations

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    account,
    add,
    category,
    export_cmd,
    import_cmd,
    migrate,
    summary,
    transaction,
    year,
)

# Commands that manage migrations themselves
_SELF_MIGRATING_COMMANDS = {"migrate"}


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--log-level",
    help="Log level name or number (overrides LEDGERKIT_LOG_LEVEL, default WARNING)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Ledgerkit - Personal finance ledger.

    Track income and expenses per ledger year, and move your data between
    databases with export and import.
    """
    ctx.ensure_object(dict)
    configure_logging(log_level)

    # Open the database only when actually running a command
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db

        if ctx.invoked_subcommand not in _SELF_MIGRATING_COMMANDS:
            try:
                run_schema_migrations(db)
            except MigrationError as e:
                handle_migration_error(ctx, e)


# Register all commands
migrate.register_commands(cli)
export_cmd.register_commands(cli)
import_cmd.register_commands(cli)
account.register_commands(cli)
category.register_commands(cli)
year.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
