"""Read and write the store-level schema version marker (PRAGMA user_version)."""

from sqlalchemy.engine import Connection


def read_schema_version(conn: Connection) -> int:
    """Return the persisted schema version (0 for a new database)."""
    return int(conn.exec_driver_sql("PRAGMA user_version").scalar() or 0)


def write_schema_version(conn: Connection, version: int) -> None:
    """Persist the schema version. Transactional when run inside BEGIN."""
    # PRAGMA does not accept bound parameters
    conn.exec_driver_sql(f"PRAGMA user_version = {int(version)}")
