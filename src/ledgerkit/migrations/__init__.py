"""Schema migrations for ledgerkit."""

from ledgerkit.migrations.registry import MIGRATIONS, Migration, build_registry, latest_version
from ledgerkit.migrations.runner import MigrationRunner, MigrationStatus, run_schema_migrations

__all__ = [
    "MIGRATIONS",
    "Migration",
    "MigrationRunner",
    "MigrationStatus",
    "build_registry",
    "latest_version",
    "run_schema_migrations",
]
