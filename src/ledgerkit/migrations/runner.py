"""Schema migration runner.

On every startup the runner converts a legacy version table if one exists,
compares ``PRAGMA user_version`` against the registry, backs the database
file up, and applies all pending units inside one transaction together with
the new version marker.
"""

import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ledgerkit.database.sqlalchemy_db import SQLAlchemyDatabase
from ledgerkit.domain.errors import BackupError, MigrationApplyError
from ledgerkit.logging_setup import get_logger
from ledgerkit.migrations.legacy import convert_legacy_version_table
from ledgerkit.migrations.marker import read_schema_version, write_schema_version
from ledgerkit.migrations.registry import MIGRATIONS, Migration, build_registry, latest_version

logger = get_logger(__name__)

BACKUP_SUFFIX = ".bak"


@dataclass(frozen=True)
class MigrationStatus:
    """Where a database stands relative to the registry."""

    current_version: int
    latest_version: int
    pending_versions: tuple[int, ...]

    @property
    def is_up_to_date(self) -> bool:
        return not self.pending_versions


def backup_path_for(database_path: str) -> Path:
    """Return the sibling backup path for a database file."""
    path = Path(database_path)
    return path.with_name(path.name + BACKUP_SUFFIX)


class MigrationRunner:
    """Brings a database schema up to the latest registered version."""

    def __init__(self, db: SQLAlchemyDatabase, migrations: Sequence[Migration] = MIGRATIONS):
        """Initialize migration runner.

        Args:
            db: Connected database handle
            migrations: Migration units; they are sorted by version

        Raises:
            ValueError: On a duplicate or non-positive version
        """
        self.db = db
        self.migrations = build_registry(migrations)

    @property
    def backup_path(self) -> Optional[Path]:
        """Backup location, or None for in-memory databases."""
        if self.db.database_path is None:
            return None
        return backup_path_for(self.db.database_path)

    def current_version(self) -> int:
        """Read the persisted schema version."""
        with self.db.engine.connect() as conn:
            return read_schema_version(conn)

    def pending_migrations(self, current_version: Optional[int] = None) -> list[Migration]:
        """Return migrations newer than the given (or persisted) version."""
        if current_version is None:
            current_version = self.current_version()
        return [m for m in self.migrations if m.version > current_version]

    def status(self) -> MigrationStatus:
        """Report current, latest and pending versions without changing anything."""
        current = self.current_version()
        return MigrationStatus(
            current_version=current,
            latest_version=latest_version(self.migrations),
            pending_versions=tuple(m.version for m in self.pending_migrations(current)),
        )

    def backup_database(self) -> Optional[Path]:
        """Copy the database file to its sibling backup path.

        Returns:
            The backup path, or None if there is no file to copy

        Raises:
            BackupError: If the copy fails
        """
        backup_path = self.backup_path
        if backup_path is None:
            logger.info("In-memory database; skipping backup")
            return None

        database_path = Path(self.db.database_path)
        if not database_path.exists():
            logger.info("Database file %s does not exist yet; skipping backup", database_path)
            return None

        try:
            shutil.copyfile(database_path, backup_path)
        except OSError as e:
            logger.error("Backup to %s failed; aborting migration", backup_path)
            raise BackupError(f"Could not back up database to {backup_path}: {e}") from e

        logger.info("Database backed up to %s", backup_path)
        return backup_path

    def run(self) -> int:
        """Apply all pending migrations.

        Returns:
            The schema version after the run

        Raises:
            BackupError: If the backup could not be written (nothing changed)
            MigrationApplyError: If a unit failed (everything rolled back)
            MigrationError: If a legacy version table could not be converted
        """
        # The session must not hold a read transaction while the schema changes
        self.db.release_session()
        engine = self.db.engine

        convert_legacy_version_table(engine)

        current = self.current_version()
        pending = self.pending_migrations(current)
        if not pending:
            logger.info("Database is up to date (version %d)", current)
            return current

        logger.info(
            "Found %d pending migration%s: %s",
            len(pending),
            "s" if len(pending) != 1 else "",
            ", ".join(str(m.version) for m in pending),
        )

        backup_path = self.backup_database()

        applying = pending[0]
        try:
            with engine.begin() as conn:
                for migration in pending:
                    applying = migration
                    logger.info("Applying version %d (%s)", migration.version, migration.name)
                    migration.apply(conn)
                final_version = pending[-1].version
                write_schema_version(conn, final_version)
        except Exception as e:
            logger.error("Migration to version %d failed; rolled back", applying.version, exc_info=True)
            raise MigrationApplyError(
                applying.version, e, str(backup_path) if backup_path else None
            ) from e

        logger.info("Database upgraded to version %d", final_version)
        return final_version


def run_schema_migrations(
    db: SQLAlchemyDatabase, migrations: Sequence[Migration] = MIGRATIONS
) -> int:
    """Bring the schema to the latest version. Safe to call on every startup.

    Returns:
        The schema version after the run
    """
    return MigrationRunner(db, migrations).run()
