"""Utility for resolving account names to IDs."""

from ledgerkit.domain.account import AccountService


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        ValueError: If no account, or more than one account, matches
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise ValueError(f"Account ID {account} not found")
        return account

    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None
    if account_id is not None:
        if account_service.get_account(account_id) is None:
            raise ValueError(f"Account ID {account_id} not found")
        return account_id

    # Names are only unique together with the institution
    matches = [acc for acc in account_service.list_accounts() if acc.name == account]
    if not matches:
        raise ValueError(f"Account '{account}' not found")
    if len(matches) > 1:
        ids = ", ".join(str(acc.id) for acc in matches)
        raise ValueError(f"Account name '{account}' is ambiguous; use one of IDs {ids}")
    return matches[0].id
