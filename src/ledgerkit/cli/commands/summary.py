"""Summary command."""

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.entities import TransactionType
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.summary import SummaryService
from ledgerkit.utils.date_parser import month_name


@click.command("summary")
@click.option("--year", type=int, help="Ledger year (all time if omitted)")
@click.option("--month", type=click.IntRange(1, 12), help="Month of the ledger year (1-12)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default=TransactionType.EXPENSE.value,
    show_default=True,
    help="Transaction type for the category breakdown",
)
@click.pass_context
def summary(ctx, year: int | None, month: int | None, txn_type: str):
    """Show income, expenses and balance with a per-category breakdown.

    Examples:
        ledgerkit summary --year 2024
        ledgerkit summary --year 2024 --month 5 --type income
    """
    db = ctx.obj["db"]
    service = SummaryService(db)

    try:
        period = service.period_summary(year=year, month=month)
        breakdown = service.category_breakdown(type=txn_type.lower(), year=year, month=month)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if year is None:
        title = "All time"
    elif month is None:
        title = str(year)
    else:
        title = f"{month_name(month)} {year}"

    click.echo(f"\nSummary: {title}")
    click.echo("-" * 40)
    click.echo(f"{'Income':25s} {period.total_income:>14,.2f}")
    click.echo(f"{'Expenses':25s} {period.total_expenses:>14,.2f}")
    click.echo(f"{'Balance':25s} {period.balance:>14,.2f}")
    click.echo(f"{'Transactions':25s} {period.transaction_count:>14d}")

    if not breakdown:
        return
    click.echo(f"\n{txn_type.capitalize()} by category:")
    for row in breakdown:
        click.echo(f"  {row.category_name:23s} {row.total:>14,.2f}  ({row.count})")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
