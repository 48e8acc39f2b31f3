"""
Migration Registry for linkstash

Discovers and registers the available document migrations.

Features:
- Auto-discovery of migrations from the versions package
- Chain validation (no gaps, no duplicates)
- Ordered migration path between two versions
"""

import importlib
import inspect
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .errors import BrokenMigrationChain
from .migration_base import MigrationBase
from .schema import MIN_VERSION

logger = logging.getLogger(__name__)


class MigrationRegistry:
    """
    Migration Registry - Discovers and manages available migrations

    Pattern: Auto-discovery from versions package, indexed by source version
    Lifetime: Created on-demand for migration operations

    Features:
    - Discovers migrations from linkstash.migrations.versions
    - Validates the chain (starts at MIN_VERSION, no gaps or duplicates)
    - Resolves the ordered steps between two versions
    - Supports manual registration for testing

    Example:
        registry = MigrationRegistry()
        for migration in registry.get_path(1, 4):
            print(f"Apply {migration}")
    """

    def __init__(self,
                 versions_package: Optional[str] = "linkstash.migrations.versions",
                 min_version: int = MIN_VERSION):
        """
        Initialize Migration Registry.

        Args:
            versions_package: Python package containing migration modules, or
                              None for a registry filled only by register()
            min_version: Oldest source version the chain must start at
        """
        self.versions_package = versions_package
        self.min_version = min_version
        self._migrations: Dict[int, MigrationBase] = {}
        self._discovered = versions_package is None

    def discover(self) -> None:
        """
        Discover and register all migrations from the versions package.

        Scans the package for modules, imports them, and registers every
        MigrationBase subclass defined there.

        Raises:
            BrokenMigrationChain: If a migration cannot be instantiated, two
                                  share a version, or the chain has a gap
        """
        if self._discovered:
            return

        try:
            package = importlib.import_module(self.versions_package)
        except ImportError:
            # Package doesn't exist (no migrations shipped)
            logger.warning("Migration package %s not found", self.versions_package)
            self._discovered = True
            return

        package_path = Path(package.__file__).parent

        for module_file in sorted(package_path.glob("*.py")):
            if module_file.name.startswith("_"):
                continue

            module_name = f"{self.versions_package}.{module_file.stem}"
            module = importlib.import_module(module_name)

            for name, obj in inspect.getmembers(module, inspect.isclass):
                if (issubclass(obj, MigrationBase) and
                    obj is not MigrationBase and
                    obj.__module__ == module_name):
                    try:
                        migration = obj()
                    except (TypeError, ValueError) as e:
                        raise BrokenMigrationChain(
                            f"Failed to instantiate migration {name} in {module_name}: {e}"
                        ) from e
                    self.register(migration)

        self._validate_sequence()
        self._discovered = True
        logger.debug("Discovered %d migrations in %s",
                     len(self._migrations), self.versions_package)

    def register(self, migration: MigrationBase) -> None:
        """
        Manually register a migration.

        Args:
            migration: Migration instance to register

        Raises:
            BrokenMigrationChain: If the source version is already registered
        """
        if migration.version in self._migrations:
            existing = self._migrations[migration.version]
            raise BrokenMigrationChain(
                f"Duplicate migration version {migration.version}: "
                f"{migration} conflicts with {existing}",
                current_version=migration.version
            )

        self._migrations[migration.version] = migration

    def _validate_sequence(self) -> None:
        """
        Validate the migration chain.

        Source versions must start at min_version and be consecutive.

        Raises:
            BrokenMigrationChain: If the sequence is invalid
        """
        if not self._migrations:
            return

        versions = sorted(self._migrations.keys())

        if versions[0] != self.min_version:
            raise BrokenMigrationChain(
                f"Migration versions must start at {self.min_version}, found {versions[0]}"
            )

        for expected, version in enumerate(versions, start=self.min_version):
            if version != expected:
                raise BrokenMigrationChain(
                    f"Migration version gap detected: expected {expected}, found {version}",
                    current_version=expected
                )

    def validate_chain(self, target_version: int) -> None:
        """
        Check that the chain is unbroken and ends exactly at `target_version`.

        Every version from min_version up to target_version - 1 must have
        exactly one step, and no step may start at or beyond target_version.

        Raises:
            BrokenMigrationChain: If the chain has a gap or ends elsewhere
        """
        if not self._discovered:
            self.discover()

        self._validate_sequence()

        latest = self.get_latest_version()
        if latest != target_version:
            raise BrokenMigrationChain(
                f"Migration chain ends at v{latest}, expected v{target_version}",
                target_version=target_version
            )

    def get_path(self, from_version: int, to_version: int) -> List[MigrationBase]:
        """
        Get the ordered steps that take a document from one version to another.

        Args:
            from_version: Version the document is at
            to_version: Version to reach (>= from_version)

        Returns:
            One migration per intermediate version, in order to apply; empty
            when the versions are equal

        Raises:
            BrokenMigrationChain: If any intermediate step is missing
        """
        if not self._discovered:
            self.discover()

        path = []
        for version in range(from_version, to_version):
            migration = self._migrations.get(version)
            if migration is None:
                raise BrokenMigrationChain(
                    f"No migration path from v{version} to v{version + 1}",
                    current_version=from_version,
                    target_version=to_version
                )
            path.append(migration)
        return path

    def get_latest_version(self) -> int:
        """
        Get the version produced by the last registered step.

        Returns:
            Latest reachable version, or 0 if no migrations
        """
        if not self._discovered:
            self.discover()

        if not self._migrations:
            return 0

        return max(self._migrations.keys()) + 1

    def __repr__(self) -> str:
        """String representation for debugging."""
        count = len(self._migrations)
        latest = max(self._migrations.keys()) + 1 if self._migrations else 0
        return f"<MigrationRegistry: {count} migrations, latest v{latest}>"
