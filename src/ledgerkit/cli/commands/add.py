"""Add transaction command."""

import click

from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.category import CategoryService
from ledgerkit.domain.entities import TransactionType
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date


@click.command("add")
@click.argument("title")
@click.option("--amount", required=True, help="Amount as a positive number (e.g., 123.45)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default=TransactionType.EXPENSE.value,
    show_default=True,
    help="Transaction type",
)
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--account", help="Account name or ID (defaults to the default account)")
@click.option("--category", help="Category name")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    title: str,
    amount: str,
    txn_type: str,
    date: str,
    account: str | None,
    category: str | None,
    notes: str | None,
):
    """Add a transaction.

    The ledger year of the date is created if it does not exist yet.

    Examples:
        ledgerkit add "Groceries" --amount 54.20 --category Food
        ledgerkit add "Salary" --amount 3200 --type income --date 2024-05-31
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    category_id = None
    if category:
        category_obj = category_service.get_category_by_name(category)
        if category_obj is None:
            click.echo(f"Error: Category '{category}' not found", err=True)
            ctx.exit(1)
        category_id = category_obj.id

    try:
        transaction_id = transaction_service.create_transaction(
            title=title,
            amount=txn_amount,
            date=txn_date,
            type=txn_type.lower(),
            account_id=account_id,
            notes=notes,
            category_id=category_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    txn = transaction_service.get_transaction(transaction_id)
    account_obj = account_service.get_account(txn.account_id)
    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Account: {account_obj.name}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: ${txn.amount:,.2f} ({txn.type.value})")
    if category:
        click.echo(f"  Category: {category}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
