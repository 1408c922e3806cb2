"""Schema migration command."""

import click

from ledgerkit.cli.error_handling import handle_migration_error
from ledgerkit.domain.errors import MigrationError
from ledgerkit.migrations.runner import MigrationRunner


@click.command("migrate")
@click.option("--status", "show_status", is_flag=True, help="Show schema versions without upgrading")
@click.pass_context
def migrate(ctx, show_status: bool):
    """Upgrade the database schema to the latest version.

    Every other command does this automatically before it runs. A copy of
    the database is written to <database>.bak before any change.

    Examples:
        ledgerkit migrate --status
        ledgerkit migrate
    """
    db = ctx.obj["db"]
    runner = MigrationRunner(db)

    if show_status:
        status = runner.status()
        click.echo(f"Current version: {status.current_version}")
        click.echo(f"Latest version:  {status.latest_version}")
        if status.is_up_to_date:
            click.echo("Database is up to date.")
        else:
            pending = ", ".join(str(v) for v in status.pending_versions)
            click.echo(f"Pending: {pending}")
        return

    try:
        before = runner.current_version()
        version = runner.run()
    except MigrationError as e:
        handle_migration_error(ctx, e)
        return

    if version == before:
        click.echo(f"Database is up to date (version {version}).")
    else:
        click.echo(f"Upgraded database from version {before} to {version}.")
        if runner.backup_path is not None and runner.backup_path.exists():
            click.echo(f"Backup written to {runner.backup_path}")


def register_commands(cli):
    """Register migrate command with main CLI."""
    cli.add_command(migrate)
