"""One-shot adapter for databases that tracked their version in a table.

An earlier scheme stored the schema version as an ordinary row in a table
named ``version`` instead of in ``PRAGMA user_version``. This module moves
that value into the marker and drops the table. Delete it once no supported
installation predates the marker.
"""

import math
from typing import Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ledgerkit.domain.errors import MigrationError
from ledgerkit.logging_setup import get_logger
from ledgerkit.migrations.marker import write_schema_version

logger = get_logger(__name__)

LEGACY_VERSION_TABLE = "version"


def convert_legacy_version_table(engine: Engine) -> Optional[int]:
    """Move a legacy version row into the schema marker and drop the table.

    Runs in a single transaction. The table is gone afterwards, so later
    calls are no-ops.

    Returns:
        The converted (floored) version, or None when there was nothing to
        convert

    Raises:
        MigrationError: If the legacy table exists but cannot be converted
    """
    try:
        with engine.begin() as conn:
            if not inspect(conn).has_table(LEGACY_VERSION_TABLE):
                return None

            logger.info("Found legacy '%s' table; moving it to PRAGMA user_version", LEGACY_VERSION_TABLE)
            row = conn.execute(text(f"SELECT version FROM {LEGACY_VERSION_TABLE} LIMIT 1")).first()

            converted = None
            if row is not None and row[0] is not None:
                converted = math.floor(float(row[0]))
                write_schema_version(conn, converted)
                logger.info("Set schema version to %d", converted)

            conn.execute(text(f"DROP TABLE {LEGACY_VERSION_TABLE}"))
            logger.info("Dropped legacy '%s' table", LEGACY_VERSION_TABLE)
            return converted
    except (SQLAlchemyError, ValueError, TypeError) as e:
        raise MigrationError(f"Could not convert legacy version table: {e}") from e
