"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ledgerkit.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV_VAR = "LEDGERKIT_DB_PATH"


def default_database_path() -> str:
    """Return ``LEDGERKIT_DB_PATH`` or ``~/.ledgerkit/ledgerkit.db``."""
    database_path = os.environ.get(DB_PATH_ENV_VAR)
    if database_path:
        return database_path

    db_dir = Path.home() / ".ledgerkit"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "ledgerkit.db")


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    The returned handle is not connected; use it as a context manager or
    call ``connect()``.

    Args:
        database_path: Path to SQLite database file, or ":memory:". If None,
            checks LEDGERKIT_DB_PATH, then defaults to ~/.ledgerkit/ledgerkit.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = default_database_path()

    if database_path == ":memory:":
        return SQLAlchemyDatabase("sqlite://")
    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
