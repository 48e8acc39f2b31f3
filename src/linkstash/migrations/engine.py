"""
Migration Engine for linkstash

Brings the persisted article document up to the schema version this build
expects, before anything else opens it.

Flow of migrate():
1. No file -> NOT_FOUND (nothing to do on a fresh install)
2. Parse; malformed content -> MalformedDocument
3. version == target -> UP_TO_DATE, no write
4. version > target -> UnsupportedFutureVersion
5. Apply one step per version until target (BrokenMigrationChain on a gap)
6. Back up (optional) and replace the file once with the migrated document

Storage is either left exactly as found or rewritten once with the fully
migrated document. Intermediate versions are never persisted.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .backup import BackupInfo, BackupManager
from .document import Document, read_document, write_document
from .errors import (
    BrokenMigrationChain,
    MalformedDocument,
    MigrationError,
    UnsupportedFutureVersion,
)
from .migration_base import MigrationBase
from .registry import MigrationRegistry
from .schema import CURRENT_VERSION, dump_records, parse_records

logger = logging.getLogger(__name__)


class MigrationOutcome(str, Enum):
    """Successful outcomes of a migration run."""
    NOT_FOUND = "not_found"
    UP_TO_DATE = "up_to_date"
    MIGRATED = "migrated"


@dataclass
class MigrationResult:
    """Result of MigrationEngine.migrate()."""
    outcome: MigrationOutcome
    location: Path
    from_version: Optional[int] = None
    to_version: Optional[int] = None
    applied: List[str] = field(default_factory=list)
    written: bool = False
    duration_ms: int = 0
    backup: Optional[BackupInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "outcome": self.outcome.value,
            "location": str(self.location),
            "from_version": self.from_version,
            "to_version": self.to_version,
            "applied": list(self.applied),
            "written": self.written,
            "duration_ms": self.duration_ms,
            "backup": str(self.backup.path) if self.backup else None
        }


class MigrationEngine:
    """
    Migration Engine - Upgrades a document file to the current schema

    Pattern: Registry of steps keyed by source version, applied in memory,
             single atomic write at the end
    Lifetime: Stateless between calls; one instance can serve many files

    Example:
        engine = MigrationEngine()
        result = engine.migrate(Path("~/.linkstash/articles.json").expanduser())
        if result.outcome is MigrationOutcome.MIGRATED:
            print(f"v{result.from_version} -> v{result.to_version}")
    """

    def __init__(self,
                 registry: Optional[MigrationRegistry] = None,
                 target_version: int = CURRENT_VERSION,
                 backup: bool = False,
                 backup_dir: Optional[Path] = None,
                 keep_backups: Optional[int] = None):
        """
        Initialize Migration Engine.

        Args:
            registry: Step registry (default: discover linkstash.migrations.versions)
            target_version: Schema version documents are migrated to
            backup: Copy the original file before rewriting it
            backup_dir: Where backups go (default: {document dir}/backups)
            keep_backups: If set, prune backups beyond this many after each backup
        """
        self.registry = registry if registry is not None else MigrationRegistry()
        self.target_version = target_version
        self.backup = backup
        self.backup_dir = Path(backup_dir) if backup_dir is not None else None
        self.keep_backups = keep_backups

    def _load(self, location: Path) -> Optional[Document]:
        try:
            return read_document(location)
        except MalformedDocument as e:
            e.target_version = self.target_version
            logger.error("Cannot migrate %s: %s", location, e)
            raise

    def _plan(self, document: Document, location: Path) -> List[MigrationBase]:
        """Resolve the steps for `document`, raising on future versions or gaps."""
        version = document.version

        if version == self.target_version:
            return []

        if version > self.target_version:
            error = UnsupportedFutureVersion(
                f"Document version {version} is newer than this build supports",
                location, version, self.target_version
            )
            logger.error("Cannot migrate %s: %s", location, error)
            raise error

        try:
            self.registry.validate_chain(self.target_version)
            return self.registry.get_path(version, self.target_version)
        except BrokenMigrationChain as e:
            e.location = location
            logger.error("Cannot migrate %s: %s", location, e)
            raise

    def plan(self, location: Union[str, Path]) -> List[MigrationBase]:
        """
        List the steps migrate() would apply to the document at `location`.

        Storage is not modified.

        Returns:
            Steps in order; empty if the file is missing or already current

        Raises:
            MalformedDocument, UnsupportedFutureVersion, BrokenMigrationChain
        """
        location = Path(location)
        document = self._load(location)
        if document is None:
            return []
        return self._plan(document, location)

    def current_version(self, location: Union[str, Path]) -> Optional[int]:
        """Return the version of the document at `location`, or None if absent."""
        location = Path(location)
        document = self._load(location)
        return document.version if document is not None else None

    def _apply(self,
               document: Document,
               steps: List[MigrationBase],
               location: Path) -> Document:
        """Run `steps` over the records of `document` and return the migrated copy."""
        version = document.version

        try:
            records = parse_records(version, document.records)
        except KeyError:
            error = BrokenMigrationChain(
                f"No record shape defined for v{version}",
                location, version, self.target_version
            )
            logger.error("Cannot migrate %s: %s", location, error)
            raise error from None
        except ValueError as e:
            error = MalformedDocument(
                f"Records do not match the v{version} shape: {e}",
                location, version, self.target_version
            )
            logger.error("Cannot migrate %s: %s", location, error)
            raise error from e

        for step in steps:
            if step.version != version:
                raise BrokenMigrationChain(
                    f"Expected a step from v{version}, got {step!r}",
                    location, version, self.target_version
                )
            logger.info("Migrating %s: v%d -> v%d (%s)",
                        location, step.version, step.target_version, step.description)
            records = step.up(records)
            version = step.target_version

        return Document(
            version=version,
            records=dump_records(records),
            payload=dict(document.payload)
        )

    def migrate(self, location: Union[str, Path], dry_run: bool = False) -> MigrationResult:
        """
        Migrate the document at `location` to the target version.

        Args:
            location: Path of the JSON document
            dry_run: Run every step in memory but do not write anything

        Returns:
            MigrationResult describing the outcome

        Raises:
            MalformedDocument: If the file cannot be parsed or its records do
                               not match the declared version
            UnsupportedFutureVersion: If the document is newer than the target
            BrokenMigrationChain: If a step is missing for some version
            OSError: If the backup or the final write fails (file left intact)
        """
        location = Path(location)
        start = time.time()

        document = self._load(location)
        if document is None:
            logger.debug("No document at %s, nothing to migrate", location)
            return MigrationResult(outcome=MigrationOutcome.NOT_FOUND, location=location)

        steps = self._plan(document, location)
        if not steps:
            logger.debug("Document %s already at v%d", location, document.version)
            return MigrationResult(
                outcome=MigrationOutcome.UP_TO_DATE,
                location=location,
                from_version=document.version,
                to_version=document.version
            )

        migrated = self._apply(document, steps, location)

        backup_info = None
        if not dry_run:
            if self.backup:
                manager = BackupManager(location, self.backup_dir)
                backup_info = manager.create_backup(metadata={
                    "from_version": document.version,
                    "to_version": migrated.version
                })
                if self.keep_backups is not None:
                    manager.cleanup_old_backups(self.keep_backups)
            write_document(location, migrated)
            logger.info("Migrated %s from v%d to v%d",
                        location, document.version, migrated.version)
        else:
            logger.info("Dry run: %s would be migrated from v%d to v%d",
                        location, document.version, migrated.version)

        return MigrationResult(
            outcome=MigrationOutcome.MIGRATED,
            location=location,
            from_version=document.version,
            to_version=migrated.version,
            applied=[step.description for step in steps],
            written=not dry_run,
            duration_ms=int((time.time() - start) * 1000),
            backup=backup_info
        )


class DataMigrator(ABC):
    """Something that prepares stored data before the application loads it."""

    @abstractmethod
    def migrate(self) -> MigrationResult:
        pass


class JsonDataMigrator(DataMigrator):
    """Migrates one JSON document file with a MigrationEngine."""

    APPLICATION_VERSION = CURRENT_VERSION

    def __init__(self, json_file_path: Union[str, Path],
                 engine: Optional[MigrationEngine] = None):
        self.json_file_path = Path(json_file_path)
        self.engine = engine if engine is not None else MigrationEngine(
            target_version=self.APPLICATION_VERSION
        )

    def migrate(self) -> MigrationResult:
        return self.engine.migrate(self.json_file_path)


class NoOpDataMigrator(DataMigrator):
    """Does nothing; used when there is no document to manage."""

    def __init__(self, location: Optional[Union[str, Path]] = None):
        self.location = Path(location) if location is not None else Path()

    def migrate(self) -> MigrationResult:
        logger.debug("No-op migrator, skipping migration")
        return MigrationResult(outcome=MigrationOutcome.NOT_FOUND, location=self.location)


__all__ = [
    "MigrationOutcome",
    "MigrationResult",
    "MigrationEngine",
    "DataMigrator",
    "JsonDataMigrator",
    "NoOpDataMigrator",
    "MigrationError",
]
