"""Category management commands."""

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.category import DEFAULT_COLOR, DEFAULT_ICON, CategoryService
from ledgerkit.domain.errors import DomainError


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"ID: {cat.id:3d} | {cat.name:25s} | {cat.color_code:7s} | {cat.icon}")


@category_group.command("create")
@click.argument("name")
@click.option("--color", default=DEFAULT_COLOR, show_default=True, help="Color as #RGB or #RRGGBB")
@click.option("--icon", default=DEFAULT_ICON, show_default=True, help="Icon name")
@click.pass_context
def create_category(ctx, name: str, color: str, icon: str):
    """Create a new category.

    Examples:
        ledgerkit category create "Pets" --color "#a855f7" --icon pi-heart
    """
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(name=name, color_code=color, icon=icon)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{name.strip()}' (ID: {category_id})")


@category_group.command("delete")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_category(ctx, name: str, yes: bool):
    """Delete a category. Its transactions become uncategorized."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    category = service.get_category_by_name(name)
    if category is None:
        click.echo(f"Error: Category '{name}' not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Delete category '{category.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        uncategorized = service.delete_category(category.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category '{category.name}'")
    if uncategorized:
        click.echo(f"  {uncategorized} transaction(s) are now uncategorized")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
