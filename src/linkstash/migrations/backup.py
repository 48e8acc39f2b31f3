"""
Backup Manager for the article document

Keeps copies of the document file taken before a migration rewrites it.

Features:
- Timestamped backups with metadata sidecar
- Restore with atomic replace
- Old backup cleanup
- Backup verification
"""

import json
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .document import Document, atomic_write_bytes
from .errors import MigrationError

logger = logging.getLogger(__name__)


@dataclass
class BackupInfo:
    """Information about a document backup."""
    path: Path
    original_document: Path
    created_at: datetime
    size_bytes: int
    schema_version: int
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "path": str(self.path),
            "original_document": str(self.original_document),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "size_bytes": self.size_bytes,
            "schema_version": self.schema_version,
            "metadata": self.metadata or {}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BackupInfo':
        """Create BackupInfo from dictionary."""
        return cls(
            path=Path(data["path"]),
            original_document=Path(data["original_document"]),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else None,
            size_bytes=data["size_bytes"],
            schema_version=data["schema_version"],
            metadata=data.get("metadata")
        )


class BackupManager:
    """
    Backup Manager - Copies of the document taken before migrations

    Pattern: Timestamped copies with JSON metadata sidecars
    Lifetime: Backups persist until cleaned up

    Example:
        manager = BackupManager(document_path)
        backup_info = manager.create_backup()
        # ... migrate ...
        manager.restore_backup(backup_info.path)
    """

    # Backup filename pattern: {stem}_backup_{timestamp}{suffix}
    BACKUP_SUFFIX = "_backup_"
    METADATA_SUFFIX = ".meta.json"

    def __init__(self, document_path: Path, backup_dir: Optional[Path] = None):
        """
        Initialize Backup Manager.

        Args:
            document_path: Path to the document file to back up
            backup_dir: Directory to store backups (default: {document_path.parent}/backups)
        """
        self.document_path = Path(document_path)

        if backup_dir is None:
            self.backup_dir = self.document_path.parent / "backups"
        else:
            self.backup_dir = Path(backup_dir)

    def _backup_pattern(self) -> str:
        return f"{self.document_path.stem}{self.BACKUP_SUFFIX}*{self.document_path.suffix}"

    def _metadata_path(self, backup_path: Path) -> Path:
        return backup_path.with_suffix(backup_path.suffix + self.METADATA_SUFFIX)

    def create_backup(self, metadata: Optional[Dict[str, Any]] = None) -> BackupInfo:
        """
        Create a timestamped copy of the document.

        Args:
            metadata: Optional metadata to store with backup

        Returns:
            BackupInfo object with backup details

        Raises:
            FileNotFoundError: If the document does not exist
            OSError: If backup file cannot be created
        """
        if not self.document_path.exists():
            raise FileNotFoundError(f"Document file not found: {self.document_path}")

        self.backup_dir.mkdir(parents=True, exist_ok=True)

        created_at = datetime.now()
        timestamp = created_at.strftime("%Y%m%d_%H%M%S_%f")
        backup_name = (
            f"{self.document_path.stem}{self.BACKUP_SUFFIX}{timestamp}"
            f"{self.document_path.suffix}"
        )
        backup_path = self.backup_dir / backup_name

        shutil.copy2(self.document_path, backup_path)

        backup_info = BackupInfo(
            path=backup_path,
            original_document=self.document_path,
            created_at=created_at,
            size_bytes=backup_path.stat().st_size,
            schema_version=self._read_schema_version(backup_path),
            metadata=metadata
        )

        self._save_metadata(backup_info)
        logger.info("Backed up %s to %s", self.document_path, backup_path)

        return backup_info

    def _read_schema_version(self, path: Path) -> int:
        """
        Read the document version stored in `path`.

        Returns:
            The version, or -1 if the file is not a readable document
        """
        try:
            return Document.from_json(path.read_bytes(), path).version
        except (OSError, MigrationError):
            return -1

    def _save_metadata(self, backup_info: BackupInfo) -> None:
        """Save backup metadata to sidecar JSON file."""
        with open(self._metadata_path(backup_info.path), 'w', encoding='utf-8') as f:
            json.dump(backup_info.to_dict(), f, indent=2)

    def _load_metadata(self, backup_path: Path) -> Optional[BackupInfo]:
        """
        Load backup metadata from sidecar JSON file.

        Returns:
            BackupInfo if metadata exists and is readable, None otherwise
        """
        metadata_path = self._metadata_path(backup_path)

        if not metadata_path.exists():
            return None

        try:
            with open(metadata_path, 'r', encoding='utf-8') as f:
                return BackupInfo.from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.warning("Ignoring unreadable backup metadata %s", metadata_path)
            return None

    def _info_from_file(self, backup_path: Path) -> BackupInfo:
        stat = backup_path.stat()
        return BackupInfo(
            path=backup_path,
            original_document=self.document_path,
            created_at=datetime.fromtimestamp(stat.st_mtime),
            size_bytes=stat.st_size,
            schema_version=self._read_schema_version(backup_path),
            metadata=None
        )

    def restore_backup(self, backup_path: Path) -> None:
        """
        Restore the document from a backup.

        WARNING: This overwrites the current document.

        Args:
            backup_path: Path to backup file to restore

        Raises:
            FileNotFoundError: If backup file doesn't exist
            OSError: If restore fails
        """
        backup_path = Path(backup_path)

        if not backup_path.exists():
            raise FileNotFoundError(f"Backup file not found: {backup_path}")

        atomic_write_bytes(self.document_path, backup_path.read_bytes())
        logger.info("Restored %s from %s", self.document_path, backup_path)

    def list_backups(self) -> List[BackupInfo]:
        """
        List all available backups for this document.

        Returns:
            List of BackupInfo objects, ordered by creation time (newest first)
        """
        if not self.backup_dir.exists():
            return []

        backups = []
        for backup_file in self.backup_dir.glob(self._backup_pattern()):
            if backup_file.name.endswith(self.METADATA_SUFFIX):
                continue
            backup_info = self._load_metadata(backup_file)
            if backup_info is None:
                backup_info = self._info_from_file(backup_file)
            backups.append(backup_info)

        backups.sort(key=lambda b: b.created_at, reverse=True)

        return backups

    def get_latest_backup(self) -> Optional[BackupInfo]:
        """
        Get the most recent backup.

        Returns:
            BackupInfo for latest backup, or None if no backups exist
        """
        backups = self.list_backups()
        return backups[0] if backups else None

    def cleanup_old_backups(self, keep_count: int = 5) -> int:
        """
        Remove old backups, keeping only the most recent N backups.

        Args:
            keep_count: Number of recent backups to keep (default: 5)

        Returns:
            Number of backups deleted
        """
        if keep_count < 1:
            raise ValueError(f"keep_count must be >= 1, got {keep_count}")

        to_delete = self.list_backups()[keep_count:]

        deleted_count = 0
        for backup_info in to_delete:
            try:
                backup_info.path.unlink()
                self._metadata_path(backup_info.path).unlink(missing_ok=True)
                deleted_count += 1
            except OSError as e:
                # Best effort cleanup
                logger.warning("Could not delete backup %s: %s", backup_info.path, e)

        return deleted_count

    def verify_backup(self, backup_path: Path) -> bool:
        """
        Verify that a backup file holds a readable document.

        Args:
            backup_path: Path to backup file to verify

        Returns:
            True if backup is valid, False otherwise
        """
        backup_path = Path(backup_path)

        if not backup_path.exists():
            return False

        return self._read_schema_version(backup_path) >= 0

    def get_backup_info(self, backup_path: Path) -> Optional[BackupInfo]:
        """
        Get information about a specific backup.

        Args:
            backup_path: Path to backup file

        Returns:
            BackupInfo if backup exists, None otherwise
        """
        backup_path = Path(backup_path)

        if not backup_path.exists():
            return None

        backup_info = self._load_metadata(backup_path)
        if backup_info is None:
            backup_info = self._info_from_file(backup_path)

        return backup_info
