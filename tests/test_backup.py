"""
Unit tests for BackupManager

Tests cover:
- Backup creation with metadata
- Restore operations
- Backup listing and cleanup
- Verification and error handling
"""

import json
import shutil
import tempfile
import time
import unittest
from pathlib import Path

from linkstash.migrations.backup import BackupInfo, BackupManager


class TestBackupManager(unittest.TestCase):
    """Test suite for BackupManager."""

    def setUp(self):
        """Set up test document."""
        self.temp_dir = tempfile.mkdtemp()
        self.document_path = Path(self.temp_dir) / "articles.json"
        self.document_path.write_text(
            json.dumps({"version": 2, "articles": []}), encoding="utf-8"
        )
        self.manager = BackupManager(self.document_path)

    def tearDown(self):
        """Clean up test files."""
        if Path(self.temp_dir).exists():
            shutil.rmtree(self.temp_dir, ignore_errors=True)

    # ==================== Creation ====================

    def test_default_backup_dir(self):
        """Backups default to a sibling 'backups' directory."""
        self.assertEqual(self.manager.backup_dir, self.document_path.parent / "backups")
        # Created lazily
        self.assertFalse(self.manager.backup_dir.exists())

    def test_create_backup(self):
        """Test creating a backup copies the document."""
        info = self.manager.create_backup()

        self.assertTrue(info.path.exists())
        self.assertEqual(info.path.read_bytes(), self.document_path.read_bytes())
        self.assertEqual(info.schema_version, 2)
        self.assertEqual(info.original_document, self.document_path)
        self.assertEqual(info.size_bytes, self.document_path.stat().st_size)
        self.assertTrue(info.path.name.startswith("articles_backup_"))
        self.assertEqual(info.path.suffix, ".json")

    def test_create_backup_with_metadata(self):
        """Metadata is stored in a sidecar file."""
        info = self.manager.create_backup(metadata={"from_version": 2, "to_version": 4})

        sidecar = info.path.with_suffix(info.path.suffix + BackupManager.METADATA_SUFFIX)
        self.assertTrue(sidecar.exists())
        loaded = self.manager.get_backup_info(info.path)
        self.assertEqual(loaded.metadata, {"from_version": 2, "to_version": 4})

    def test_create_backup_missing_document(self):
        """Backing up a missing document raises FileNotFoundError."""
        self.document_path.unlink()
        with self.assertRaises(FileNotFoundError):
            self.manager.create_backup()

    def test_backup_of_malformed_document(self):
        """Unreadable documents get schema_version -1."""
        self.document_path.write_text("not json", encoding="utf-8")
        info = self.manager.create_backup()
        self.assertEqual(info.schema_version, -1)

    # ==================== Listing ====================

    def test_list_backups_empty(self):
        self.assertEqual(self.manager.list_backups(), [])
        self.assertIsNone(self.manager.get_latest_backup())

    def test_list_backups_newest_first(self):
        first = self.manager.create_backup()
        time.sleep(0.01)
        second = self.manager.create_backup()

        backups = self.manager.list_backups()
        self.assertEqual([b.path for b in backups], [second.path, first.path])
        self.assertEqual(self.manager.get_latest_backup().path, second.path)

    def test_list_without_metadata(self):
        """Backups without sidecars are still listed."""
        info = self.manager.create_backup()
        info.path.with_suffix(info.path.suffix + BackupManager.METADATA_SUFFIX).unlink()

        backups = self.manager.list_backups()
        self.assertEqual(len(backups), 1)
        self.assertEqual(backups[0].schema_version, 2)
        self.assertIsNone(backups[0].metadata)

    # ==================== Restore ====================

    def test_restore_backup(self):
        original = self.document_path.read_bytes()
        info = self.manager.create_backup()
        self.document_path.write_text('{"version": 4, "articles": {"list": []}}', encoding="utf-8")

        self.manager.restore_backup(info.path)

        self.assertEqual(self.document_path.read_bytes(), original)

    def test_restore_keeps_exact_bytes(self):
        original = b'{"version":1,\r\n"articles":[]}'
        self.document_path.write_bytes(original)
        info = self.manager.create_backup()
        self.document_path.write_bytes(b'{"version":4,"articles":{"list":[]}}')

        self.manager.restore_backup(info.path)

        self.assertEqual(self.document_path.read_bytes(), original)

    def test_restore_missing_backup(self):
        with self.assertRaises(FileNotFoundError):
            self.manager.restore_backup(Path(self.temp_dir) / "nope.json")

    # ==================== Cleanup ====================

    def test_cleanup_old_backups(self):
        for _ in range(4):
            self.manager.create_backup()
            time.sleep(0.01)

        deleted = self.manager.cleanup_old_backups(keep_count=2)

        self.assertEqual(deleted, 2)
        self.assertEqual(len(self.manager.list_backups()), 2)
        # Sidecars removed with their backups
        sidecars = list(self.manager.backup_dir.glob("*" + BackupManager.METADATA_SUFFIX))
        self.assertEqual(len(sidecars), 2)

    def test_cleanup_invalid_keep_count(self):
        with self.assertRaises(ValueError) as context:
            self.manager.cleanup_old_backups(keep_count=0)
        self.assertIn("must be >= 1", str(context.exception))

    # ==================== Verification ====================

    def test_verify_backup(self):
        info = self.manager.create_backup()
        self.assertTrue(self.manager.verify_backup(info.path))

    def test_verify_invalid_backup(self):
        bogus = Path(self.temp_dir) / "bogus.json"
        bogus.write_text("garbage", encoding="utf-8")
        self.assertFalse(self.manager.verify_backup(bogus))
        self.assertFalse(self.manager.verify_backup(Path(self.temp_dir) / "missing.json"))

    def test_get_backup_info_missing(self):
        self.assertIsNone(self.manager.get_backup_info(Path(self.temp_dir) / "missing.json"))


class TestBackupInfo(unittest.TestCase):

    def test_round_trip(self):
        info = BackupInfo(
            path=Path("/tmp/a_backup_1.json"),
            original_document=Path("/tmp/a.json"),
            created_at=None,
            size_bytes=10,
            schema_version=3,
            metadata={"k": "v"}
        )
        restored = BackupInfo.from_dict(info.to_dict())
        self.assertEqual(restored, info)


if __name__ == '__main__':
    unittest.main()
