"""Initial ledger schema and starter reference data.

Version: 1
"""

from sqlalchemy import text
from sqlalchemy.engine import Connection

from ledgerkit.domain.validation import is_valid_hex_color

version: int = 1
name: str = "initial_schema"

DEFAULT_CATEGORIES = (
    ("Salary", "#22c55e", "pi-wallet"),
    ("Food & Dining", "#f97316", "pi-shopping-cart"),
    ("Transportation", "#3b82f6", "pi-car"),
    ("Entertainment", "#a855f7", "pi-ticket"),
    ("Shopping", "#ec4899", "pi-shopping-bag"),
    ("Bills & Utilities", "#eab308", "pi-bolt"),
    ("Healthcare", "#14b8a6", "pi-heart"),
    ("Other", "#6b7280", "pi-ellipsis-h"),
)

DEFAULT_ACCOUNT_TYPES = ("Cash", "Chequing", "Savings")

DEFAULT_ACCOUNT_NAME = "Main Account"
DEFAULT_ACCOUNT_TYPE = "Chequing"

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS ledger_years (
        year INTEGER PRIMARY KEY
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        color_code TEXT NOT NULL DEFAULT '#6366f1',
        icon TEXT NOT NULL DEFAULT 'pi-tag'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS account_types (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        label TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        institution TEXT,
        starting_balance NUMERIC(12, 2) NOT NULL DEFAULT 0,
        account_type_id INTEGER NOT NULL,
        is_default BOOLEAN NOT NULL DEFAULT 0,
        FOREIGN KEY (account_type_id) REFERENCES account_types(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        amount NUMERIC(12, 2) NOT NULL,
        date DATE NOT NULL,
        type TEXT NOT NULL,
        notes TEXT,
        category_id INTEGER,
        account_id INTEGER NOT NULL,
        CONSTRAINT ck_transactions_type CHECK (type IN ('income', 'expense')),
        CONSTRAINT ck_transactions_amount CHECK (amount >= 0),
        FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE SET NULL,
        FOREIGN KEY (account_id) REFERENCES accounts(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_transactions_category ON transactions(category_id)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_account ON transactions(account_id)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_date ON transactions(date)",
)


def _count(conn: Connection, table: str) -> int:
    return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()


def seed_default_categories(conn: Connection) -> int:
    """Insert the starter categories when the table is empty. Returns rows added."""
    if _count(conn, "categories") > 0:
        return 0
    for category_name, color_code, icon in DEFAULT_CATEGORIES:
        if not is_valid_hex_color(color_code):
            raise ValueError(f"Seed category '{category_name}' has invalid color {color_code}")
        conn.execute(
            text("INSERT INTO categories (name, color_code, icon) VALUES (:name, :color_code, :icon)"),
            {"name": category_name, "color_code": color_code, "icon": icon},
        )
    return len(DEFAULT_CATEGORIES)


def seed_default_account_data(conn: Connection) -> int:
    """Insert starter account types and the default account where missing.

    Returns rows added.
    """
    added = 0
    if _count(conn, "account_types") == 0:
        for label in DEFAULT_ACCOUNT_TYPES:
            conn.execute(text("INSERT INTO account_types (label) VALUES (:label)"), {"label": label})
            added += 1

    if _count(conn, "accounts") == 0:
        account_type_id = conn.execute(
            text("SELECT id FROM account_types WHERE label = :label ORDER BY id LIMIT 1"),
            {"label": DEFAULT_ACCOUNT_TYPE},
        ).scalar()
        if account_type_id is None:
            account_type_id = conn.execute(text("SELECT MIN(id) FROM account_types")).scalar()
        conn.execute(
            text(
                "INSERT INTO accounts (name, institution, starting_balance, account_type_id, is_default) "
                "VALUES (:name, NULL, 0, :account_type_id, 1)"
            ),
            {"name": DEFAULT_ACCOUNT_NAME, "account_type_id": account_type_id},
        )
        added += 1
    return added


def upgrade(conn: Connection) -> None:
    for statement in SCHEMA:
        conn.execute(text(statement))
    seed_default_categories(conn)
    seed_default_account_data(conn)
