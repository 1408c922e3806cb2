"""Export command."""

import click

from ledgerkit.domain.exporter import BundleExporter


@click.command("export")
@click.argument("file_path", type=click.Path(dir_okay=False, writable=True))
@click.pass_context
def export_data(ctx, file_path: str):
    """Export all data to a JSON bundle file.

    Examples:
        ledgerkit export backup.json
    """
    db = ctx.obj["db"]
    exporter = BundleExporter(db)

    try:
        bundle = exporter.export_file(file_path)
    except OSError as e:
        click.echo(f"Error: Could not write {file_path}: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Exported to {file_path}")
    click.echo(f"  Account types: {len(bundle.account_types)}")
    click.echo(f"  Accounts:      {len(bundle.accounts)}")
    click.echo(f"  Categories:    {len(bundle.categories)}")
    click.echo(f"  Ledger years:  {len(bundle.ledger_years)}")
    click.echo(f"  Transactions:  {len(bundle.transactions)}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_data)
