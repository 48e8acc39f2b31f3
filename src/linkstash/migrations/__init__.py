"""
linkstash Migration System

Upgrades the persisted article document between schema versions with
optional backup, before the application loads it.

Key Features:
- Schema version tracked in the document's top-level "version" field
- One step per version, discovered from the versions package
- Single atomic write, never an intermediate version on disk
- Optional backup before rewriting
- Dry-run support
"""

from .backup import BackupInfo, BackupManager
from .document import Document, read_document, write_document
from .engine import (
    DataMigrator,
    JsonDataMigrator,
    MigrationEngine,
    MigrationOutcome,
    MigrationResult,
    NoOpDataMigrator,
)
from .errors import (
    BrokenMigrationChain,
    MalformedDocument,
    MigrationError,
    UnsupportedFutureVersion,
)
from .migration_base import MigrationBase
from .registry import MigrationRegistry
from .schema import CURRENT_VERSION, MIN_VERSION

__all__ = [
    "BackupInfo",
    "BackupManager",
    "BrokenMigrationChain",
    "CURRENT_VERSION",
    "DataMigrator",
    "Document",
    "JsonDataMigrator",
    "MalformedDocument",
    "MIN_VERSION",
    "MigrationBase",
    "MigrationEngine",
    "MigrationError",
    "MigrationOutcome",
    "MigrationRegistry",
    "MigrationResult",
    "NoOpDataMigrator",
    "UnsupportedFutureVersion",
    "read_document",
    "write_document",
]
