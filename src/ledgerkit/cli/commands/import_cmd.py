"""Import command."""

import click

from ledgerkit.domain.bundle import BUNDLE_COLLECTIONS
from ledgerkit.domain.errors import MergeError, VerificationError
from ledgerkit.domain.importer import ImportMode, ImportService

_LABELS = {
    "accountTypes": "Account types",
    "accounts": "Accounts",
    "categories": "Categories",
    "ledgerYears": "Ledger years",
    "transactions": "Transactions",
}


@click.command("import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ImportMode], case_sensitive=False),
    default=ImportMode.MERGE.value,
    show_default=True,
    help="replace: delete all existing data first; merge: add to existing data",
)
@click.option(
    "--skip-duplicates",
    is_flag=True,
    help="In merge mode, skip transactions with the same title, amount and date",
)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation in replace mode")
@click.pass_context
def import_data(ctx, file_path: str, mode: str, skip_duplicates: bool, yes: bool):
    """Import a JSON bundle file produced by 'export'.

    The file is checked completely before anything is written. If the import
    fails part way through, every change it made is rolled back.

    Examples:
        ledgerkit import backup.json
        ledgerkit import backup.json --skip-duplicates
        ledgerkit import backup.json --mode replace --yes
    """
    db = ctx.obj["db"]
    service = ImportService(db)
    mode = ImportMode(mode.lower())

    if mode is ImportMode.REPLACE and not yes:
        if not click.confirm("Replace mode deletes ALL existing data. Continue?"):
            click.echo("Import cancelled.")
            return
    if mode is ImportMode.REPLACE and skip_duplicates:
        click.echo("Note: --skip-duplicates has no effect in replace mode.")

    try:
        result = service.import_file(file_path, mode=mode, skip_duplicates=skip_duplicates)
    except VerificationError as e:
        click.echo(f"Error: {file_path} is not a valid export file; nothing was imported.", err=True)
        for problem in e.problems:
            click.echo(f"  - {problem}", err=True)
        ctx.exit(1)
    except MergeError as e:
        click.echo(f"Error: Import failed and was rolled back: {e}", err=True)
        ctx.exit(1)
    except OSError as e:
        click.echo(f"Error: Could not read {file_path}: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Imported {file_path} ({result.mode.value} mode)")
    for key in BUNDLE_COLLECTIONS:
        inserted = result.report.inserted[key]
        skipped = result.report.skipped[key]
        line = f"  {_LABELS[key] + ':':15s} {inserted} added"
        if skipped:
            line += f", {skipped} already present"
        click.echo(line)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_data)
