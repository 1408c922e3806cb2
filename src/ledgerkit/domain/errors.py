"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class VerificationError(DomainError):
    """An import bundle was rejected before any data was touched."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        summary = problems[0] if problems else "unknown problem"
        more = f" (and {len(problems) - 1} more)" if len(problems) > 1 else ""
        super().__init__(f"Import bundle failed verification: {summary}{more}")


class MergeError(DomainError):
    """Merging a verified bundle into the store failed."""


class UnresolvedReferenceError(MergeError):
    """A bundle record references an origin id with no local mapping."""

    def __init__(self, kind: str, origin_id: int, referenced_by: str):
        self.kind = kind
        self.origin_id = origin_id
        super().__init__(
            f"{referenced_by} references {kind} {origin_id}, which was not merged"
        )


class MigrationError(Exception):
    """Base class for schema migration failures."""


class BackupError(MigrationError):
    """The pre-migration backup could not be written; nothing was changed."""


class MigrationApplyError(MigrationError):
    """A migration unit failed; the whole run was rolled back."""

    def __init__(self, version: int, cause: BaseException, backup_path: Optional[str] = None):
        self.version = version
        self.backup_path = backup_path
        super().__init__(f"Migration to version {version} failed: {cause}")


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_type_not_found(account_type_id: int) -> str:
    """Return message for missing account type."""
    return f"Account type {account_type_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def duplicate_category_name(name: str) -> str:
    """Return message for duplicate category name."""
    return f"Category with name '{name}' already exists"


def invalid_color_code(color_code: str) -> str:
    """Return message for a color that is not #RGB or #RRGGBB."""
    return f"Invalid color code '{color_code}': expected #RGB or #RRGGBB"


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please move or delete them first."
    )
