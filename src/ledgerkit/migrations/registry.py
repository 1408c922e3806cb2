"""Ordered registry of schema migration units."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from types import ModuleType

from sqlalchemy.engine import Connection

from ledgerkit.migrations.versions import (
    v0001_initial_schema,
    v0002_single_default_account,
)


@dataclass(frozen=True)
class Migration:
    """One versioned schema change."""

    version: int
    name: str
    apply: Callable[[Connection], None]

    @classmethod
    def from_module(cls, module: ModuleType) -> "Migration":
        """Build a migration from a module defining version, name and upgrade()."""
        return cls(version=module.version, name=module.name, apply=module.upgrade)


def build_registry(migrations: Iterable[Migration]) -> tuple[Migration, ...]:
    """Sort migrations by version, rejecting duplicates and versions below 1.

    Versions do not have to be contiguous.

    Raises:
        ValueError: On a duplicate or non-positive version
    """
    ordered = tuple(sorted(migrations, key=lambda m: m.version))
    seen: set[int] = set()
    for migration in ordered:
        if migration.version < 1:
            raise ValueError(f"Migration '{migration.name}' has invalid version {migration.version}")
        if migration.version in seen:
            raise ValueError(f"Duplicate migration version {migration.version}")
        seen.add(migration.version)
    return ordered


MIGRATIONS: tuple[Migration, ...] = build_registry(
    Migration.from_module(module)
    for module in (
        v0001_initial_schema,
        v0002_single_default_account,
    )
)


def latest_version(migrations: Iterable[Migration] = MIGRATIONS) -> int:
    """Return the highest registered version, or 0 when there are none."""
    return max((m.version for m in migrations), default=0)
