"""Account management commands."""

import click

from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountDeleteStrategy, AccountService
from ledgerkit.domain.errors import DomainError
from ledgerkit.utils.amount_parser import to_money


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    types = {t.id: t.label for t in service.list_account_types()}
    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in accounts:
        marker = "*" if acc.is_default else " "
        institution = acc.institution or "-"
        click.echo(
            f"{marker} ID: {acc.id:3d} | {acc.name:20s} | {institution:15s} | "
            f"{types.get(acc.account_type_id, '?'):10s} | {acc.starting_balance:>12,.2f}"
        )
    click.echo("\n* default account")


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "type_label", default="Chequing", show_default=True, help="Account type label")
@click.option("--institution", help="Institution (bank) name")
@click.option("--balance", default="0", show_default=True, help="Starting balance")
@click.option("--default", "is_default", is_flag=True, help="Make this the default account")
@click.pass_context
def create_account(
    ctx, name: str, type_label: str, institution: str | None, balance: str, is_default: bool
):
    """Create a new account.

    Examples:
        ledgerkit account create "Everyday" --institution "First Bank"
        ledgerkit account create "Rainy Day" --type Savings --balance 500
        ledgerkit account create "Wallet" --type Cash --default
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    account_type = service.get_account_type_by_label(type_label)
    if account_type is None:
        labels = ", ".join(t.label for t in service.list_account_types())
        click.echo(f"Error: Unknown account type '{type_label}'. Available: {labels}", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(
            name=name,
            account_type_id=account_type.id,
            institution=institution,
            starting_balance=to_money(balance),
            is_default=is_default,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created account '{name}' (ID: {account_id})")
    if is_default:
        click.echo("It is now the default account.")


@account_group.command("set-default")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def set_default(ctx, account: str):
    """Make an account the default for new transactions.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.set_default(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Account {account_id} is now the default account.")


@account_group.command("edit")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "type_label", help="New account type label")
@click.option("--institution", help="New institution; an empty string clears it")
@click.option("--balance", help="New starting balance")
@click.option("--default", "is_default", is_flag=True, help="Make this the default account")
@click.pass_context
def edit_account(
    ctx,
    account: str,
    name: str | None,
    type_label: str | None,
    institution: str | None,
    balance: str | None,
    is_default: bool,
):
    """Edit an account. Only the given fields change.

    ACCOUNT can be an account name or ID.

    Examples:
        ledgerkit account edit "Rainy Day" --name "Emergency Fund"
        ledgerkit account edit 2 --institution "" --default
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    account_id = resolve_account_or_exit(ctx, service, account)

    account_type_id = None
    if type_label is not None:
        account_type = service.get_account_type_by_label(type_label)
        if account_type is None:
            labels = ", ".join(t.label for t in service.list_account_types())
            click.echo(f"Error: Unknown account type '{type_label}'. Available: {labels}", err=True)
            ctx.exit(1)
        account_type_id = account_type.id

    try:
        service.update_account(
            account_id,
            name=name,
            institution=institution,
            starting_balance=balance,
            account_type_id=account_type_id,
            is_default=True if is_default else None,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account {account_id}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--transfer-to", help="Move the account's transactions to this account (name or ID)")
@click.option("--delete-transactions", is_flag=True, help="Delete the account's transactions")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, transfer_to: str | None, delete_transactions: bool, yes: bool):
    """Delete an account.

    An account with transactions needs --transfer-to or --delete-transactions.

    Examples:
        ledgerkit account delete "Old Card" --transfer-to "Everyday"
        ledgerkit account delete 3 --delete-transactions --yes
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    if transfer_to is not None and delete_transactions:
        click.echo("Error: Use either --transfer-to or --delete-transactions, not both", err=True)
        ctx.exit(1)

    account_id = resolve_account_or_exit(ctx, service, account)
    strategy = None
    transfer_id = None
    if transfer_to is not None:
        strategy = AccountDeleteStrategy.TRANSFER
        transfer_id = resolve_account_or_exit(ctx, service, transfer_to)
    elif delete_transactions:
        strategy = AccountDeleteStrategy.DELETE

    account_obj = service.get_account(account_id)
    prompt = f"Delete account {account_id} '{account_obj.name}'"
    if strategy is AccountDeleteStrategy.DELETE:
        prompt += " and all of its transactions"
    if not yes and not click.confirm(f"{prompt}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        affected = service.delete_account(account_id, strategy=strategy, transfer_to=transfer_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Deleted account {account_id}")
    if strategy is AccountDeleteStrategy.TRANSFER:
        click.echo(f"  Moved {affected} transaction(s) to account {transfer_id}")
    elif strategy is AccountDeleteStrategy.DELETE:
        click.echo(f"  Deleted {affected} transaction(s)")


@account_group.command("types")
@click.pass_context
def list_account_types(ctx):
    """List account types."""
    db = ctx.obj["db"]
    service = AccountService(db)

    for account_type in service.list_account_types():
        click.echo(f"ID: {account_type.id:3d} | {account_type.label}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
