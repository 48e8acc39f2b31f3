"""linkstash CLI - Backup Commands"""
import sys
from pathlib import Path

import click

from linkstash.migrations import BackupManager

# Local CLI imports
from .common import (
    VERBOSITY_NORMAL,
    echo_error,
    echo_normal,
    echo_quiet,
    format_version,
    get_settings,
)


def _manager(ctx) -> BackupManager:
    settings = get_settings(ctx)
    return BackupManager(settings.data_file, settings.backup.dir)


@click.group()
@click.pass_context
def backups_group(ctx):
    """Manage document backups taken before migrations."""
    ctx.ensure_object(dict)


@backups_group.command('list')
@click.pass_context
def backups_list(ctx) -> None:
    """List backups, newest first."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    backups = _manager(ctx).list_backups()

    if not backups:
        echo_normal("No backups found", verbosity)
        return

    for info in backups:
        created = info.created_at.strftime("%Y-%m-%d %H:%M:%S") if info.created_at else "?"
        version = format_version(info.schema_version if info.schema_version >= 0 else None)
        echo_quiet(f"{created}  {version:>4}  {info.size_bytes:>8} B  {info.path}", verbosity)


@backups_group.command('restore')
@click.argument('backup_path', type=click.Path(path_type=Path))
@click.option('--yes', is_flag=True, default=False, help='Do not ask for confirmation')
@click.pass_context
def backups_restore(ctx, backup_path: Path, yes: bool) -> None:
    """Overwrite the document with BACKUP_PATH."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    manager = _manager(ctx)

    if not manager.verify_backup(backup_path):
        echo_error(f"Not a valid backup: {backup_path}")
        sys.exit(1)

    if not yes:
        click.confirm(f"Overwrite {manager.document_path} with {backup_path}?", abort=True)

    manager.restore_backup(backup_path)
    echo_normal(click.style(f"✓ Restored {manager.document_path}", fg="green"), verbosity)


@backups_group.command('cleanup')
@click.option('--keep', type=click.IntRange(min=1), default=None,
              help='Number of backups to keep (default: backup.keep from config)')
@click.pass_context
def backups_cleanup(ctx, keep) -> None:
    """Delete old backups."""
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    settings = get_settings(ctx)
    manager = _manager(ctx)

    deleted = manager.cleanup_old_backups(keep if keep is not None else settings.backup.keep)
    echo_normal(f"Deleted {deleted} backup(s)", verbosity)
