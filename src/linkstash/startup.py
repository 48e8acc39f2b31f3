"""Startup hook: migrate stored data before anything else opens it."""
import logging
from typing import Optional

from .config import Settings, load_settings
from .migrations import MigrationEngine, MigrationResult

logger = logging.getLogger(__name__)


def build_engine(settings: Settings, backup: Optional[bool] = None) -> MigrationEngine:
    """Create a MigrationEngine configured from `settings`.

    Args:
        settings: Resolved settings
        backup: Override settings.backup.enabled when not None
    """
    enabled = settings.backup.enabled if backup is None else backup
    return MigrationEngine(
        backup=enabled,
        backup_dir=settings.backup.dir,
        keep_backups=settings.backup.keep if enabled else None
    )


def prepare_storage(settings: Optional[Settings] = None) -> MigrationResult:
    """Run the document migration once at application startup.

    Must be called before any other component opens the data file. Any
    MigrationError propagates so the caller can abort startup.
    """
    if settings is None:
        settings = load_settings()

    result = build_engine(settings).migrate(settings.data_file)
    logger.info("Storage ready: %s (%s)", settings.data_file, result.outcome.value)
    return result
