"""CLI error handling helpers."""

import click

from ledgerkit.domain.errors import (
    BackupError,
    DomainError,
    MigrationApplyError,
    MigrationError,
)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def handle_migration_error(ctx: click.Context, error: MigrationError) -> None:
    """Explain a failed migration, including how to restore the backup."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, BackupError):
        click.echo("No changes were made to the database.", err=True)
    elif isinstance(error, MigrationApplyError):
        click.echo("All schema changes from this run were rolled back.", err=True)
        if error.backup_path:
            click.echo(
                f"A copy of the database from before the upgrade is at {error.backup_path}; "
                "restore it if the database appears damaged.",
                err=True,
            )
    ctx.exit(1)
