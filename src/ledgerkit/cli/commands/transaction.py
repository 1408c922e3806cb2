"""Transaction listing, editing, search and removal commands."""

import click

from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.category import CategoryService
from ledgerkit.domain.entities import TransactionSearch, TransactionType
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.transaction import DEFAULT_SEARCH_LIMIT, TransactionService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date


def _print_transactions(transactions, category_names: dict[int, str]) -> None:
    click.echo(f"{'ID':>5s}  {'Date':10s}  {'Title':30s}  {'Category':18s}  {'Amount':>12s}")
    click.echo("-" * 83)
    for txn in transactions:
        sign = "+" if txn.type == TransactionType.INCOME else "-"
        category_name = category_names.get(txn.category_id, "") if txn.category_id else ""
        click.echo(
            f"{txn.id:5d}  {txn.date.isoformat():10s}  {txn.title[:30]:30s}  "
            f"{category_name[:18]:18s}  {sign}{txn.amount:>11,.2f}"
        )


def _category_id_or_exit(ctx, category_service: CategoryService, name: str) -> int:
    category_obj = category_service.get_category_by_name(name)
    if category_obj is None:
        click.echo(f"Error: Category '{name}' not found", err=True)
        ctx.exit(1)
    return category_obj.id


@click.command("list")
@click.option("--year", type=int, help="Ledger year")
@click.option("--month", type=click.IntRange(1, 12), help="Month of the ledger year (1-12)")
@click.option("--account", help="Account name or ID")
@click.option("--category", help="Category name")
@click.pass_context
def list_transactions(ctx, year: int | None, month: int | None, account: str | None, category: str | None):
    """List transactions, newest first.

    Examples:
        ledgerkit list --year 2024
        ledgerkit list --year 2024 --month 5 --account Everyday
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    category_id = None
    if category is not None:
        category_id = _category_id_or_exit(ctx, category_service, category)

    try:
        transactions = service.list_transactions(
            year=year, month=month, account_id=account_id, category_id=category_id
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    categories = {c.id: c.name for c in category_service.list_categories()}
    _print_transactions(transactions, categories)


@click.command("edit")
@click.argument("transaction_id", type=int)
@click.option("--title", help="New title")
@click.option("--amount", help="New amount")
@click.option("--type", "txn_type", type=click.Choice(["income", "expense"], case_sensitive=False), help="New type")
@click.option("--date", help="New date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--account", help="New account name or ID")
@click.option("--category", help="New category name; an empty string clears it")
@click.option("--notes", help="New notes; an empty string clears them")
@click.pass_context
def edit_transaction(
    ctx,
    transaction_id: int,
    title: str | None,
    amount: str | None,
    txn_type: str | None,
    date: str | None,
    account: str | None,
    category: str | None,
    notes: str | None,
):
    """Edit a transaction. Only the given fields change.

    Examples:
        ledgerkit edit 12 --amount 60.15 --category Food
        ledgerkit edit 12 --category ""
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    if service.get_transaction(transaction_id) is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, account_service, account)

    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    category_id = None
    clear_category = category is not None and not category.strip()
    if category is not None and not clear_category:
        category_id = _category_id_or_exit(ctx, category_service, category)

    try:
        service.update_transaction(
            transaction_id,
            title=title,
            amount=txn_amount,
            date=txn_date,
            type=txn_type.lower() if txn_type else None,
            account_id=account_id,
            notes=notes,
            category_id=category_id,
            clear_category=clear_category,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@click.command("search")
@click.argument("text", required=False, default="")
@click.option("--type", "txn_type", type=click.Choice(["income", "expense"], case_sensitive=False), help="Only this type")
@click.option("--account", "accounts", multiple=True, help="Account name or ID (repeatable)")
@click.option("--category", "categories", multiple=True, help="Category name (repeatable)")
@click.option("--from", "from_date", help="Earliest date, inclusive")
@click.option("--to", "to_date", help="Latest date, inclusive")
@click.option("--min", "min_amount", help="Smallest amount, inclusive")
@click.option("--max", "max_amount", help="Largest amount, inclusive")
@click.option("--limit", type=int, default=DEFAULT_SEARCH_LIMIT, show_default=True, help="Maximum results")
@click.pass_context
def search_transactions(
    ctx,
    text: str,
    txn_type: str | None,
    accounts: tuple[str, ...],
    categories: tuple[str, ...],
    from_date: str | None,
    to_date: str | None,
    min_amount: str | None,
    max_amount: str | None,
    limit: int,
):
    """Search transactions by text and filters, newest first.

    TEXT matches the title, notes or category name, ignoring case.

    Examples:
        ledgerkit search coffee
        ledgerkit search --category Food --from 2024-01-01 --min 20
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_ids = tuple(resolve_account_or_exit(ctx, account_service, a) for a in accounts)
    category_ids = tuple(_category_id_or_exit(ctx, category_service, c) for c in categories)

    dates = {}
    for label, value in (("from", from_date), ("to", to_date)):
        if value is None:
            dates[label] = None
            continue
        try:
            dates[label] = parse_date(value)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    amounts = {}
    for label, value in (("min", min_amount), ("max", max_amount)):
        if value is None:
            amounts[label] = None
            continue
        try:
            amounts[label] = parse_amount(value)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    search = TransactionSearch(
        text=text.strip(),
        type=TransactionType(txn_type.lower()) if txn_type else None,
        account_ids=account_ids,
        category_ids=category_ids,
        from_date=dates["from"],
        to_date=dates["to"],
        min_amount=amounts["min"],
        max_amount=amounts["max"],
    )
    try:
        transactions = service.search_transactions(search, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No matching transactions.")
        return

    category_names = {c.id: c.name for c in category_service.list_categories()}
    _print_transactions(transactions, category_names)
    if len(transactions) == limit:
        click.echo(f"\nShowing the first {limit} matches; raise --limit to see more.")


@click.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Delete transaction {transaction_id} '{txn.title}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(list_transactions)
    cli.add_command(edit_transaction)
    cli.add_command(search_transactions)
    cli.add_command(delete_transaction)
