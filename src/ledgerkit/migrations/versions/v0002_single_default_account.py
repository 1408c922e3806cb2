"""Guarantee a single default account.

Repairs existing data (several defaults keep the lowest id; no default
promotes the lowest id) and adds a partial unique index so that at most one
account can carry the flag.

Version: 2
"""

from sqlalchemy import text
from sqlalchemy.engine import Connection

version: int = 2
name: str = "single_default_account"


def upgrade(conn: Connection) -> None:
    conn.execute(
        text(
            """
            UPDATE accounts SET is_default = 0
            WHERE is_default = 1
              AND id <> (SELECT MIN(id) FROM accounts WHERE is_default = 1)
            """
        )
    )
    conn.execute(
        text(
            """
            UPDATE accounts SET is_default = 1
            WHERE id = (SELECT MIN(id) FROM accounts)
              AND NOT EXISTS (SELECT 1 FROM accounts WHERE is_default = 1)
            """
        )
    )
    conn.execute(
        text(
            "CREATE UNIQUE INDEX IF NOT EXISTS uq_accounts_single_default "
            "ON accounts(is_default) WHERE is_default = 1"
        )
    )
