"""Ledger year commands."""

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.ledger import LedgerService


@click.group()
def year_group():
    """Manage ledger years."""
    pass


@year_group.command("list")
@click.pass_context
def list_years(ctx):
    """List ledger years, most recent first."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    years = service.list_years()
    if not years:
        click.echo("No ledger years yet. Add one with 'year add' or by adding a transaction.")
        return
    for ledger_year in years:
        click.echo(str(ledger_year))


@year_group.command("add")
@click.argument("ledger_year", type=int)
@click.pass_context
def add_year(ctx, ledger_year: int):
    """Add a ledger year."""
    db = ctx.obj["db"]
    service = LedgerService(db)

    try:
        added = service.add_year(ledger_year)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if added:
        click.echo(f"Added ledger year {ledger_year}")
    else:
        click.echo(f"Ledger year {ledger_year} already exists")


@year_group.command("delete")
@click.argument("ledger_year", type=int)
@click.option("--delete-transactions", is_flag=True, help="Also delete the transactions dated in the year")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_year(ctx, ledger_year: int, delete_transactions: bool, yes: bool):
    """Delete a ledger year.

    A year with transactions is only deleted with --delete-transactions.
    """
    db = ctx.obj["db"]
    service = LedgerService(db)

    prompt = f"Delete ledger year {ledger_year}"
    if delete_transactions:
        prompt += " and all of its transactions"
    if not yes and not click.confirm(f"{prompt}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        deleted = service.delete_year(ledger_year, delete_transactions=delete_transactions)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted ledger year {ledger_year}")
    if deleted:
        click.echo(f"  Deleted {deleted} transaction(s)")


def register_commands(cli):
    """Register ledger year commands with main CLI."""
    cli.add_command(year_group, name="year")
