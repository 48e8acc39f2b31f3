"""linkstash CLI - Migration Commands

Run and inspect document migrations.
"""
import sys

import click

from linkstash.migrations import (
    CURRENT_VERSION,
    MigrationEngine,
    MigrationError,
    MigrationOutcome,
)
from linkstash.startup import build_engine

# Local CLI imports
from .common import (
    VERBOSITY_NORMAL,
    echo_error,
    echo_normal,
    echo_quiet,
    echo_verbose,
    format_version,
    get_settings,
)


@click.group()
@click.pass_context
def migrate_group(ctx):
    """Migration commands."""
    ctx.ensure_object(dict)


@migrate_group.command()
@click.option('--dry-run', is_flag=True, default=False,
              help='Run all steps in memory without writing the file')
@click.option('--no-backup', is_flag=True, default=False,
              help='Do not back up the document before rewriting it')
@click.pass_context
def migrate(ctx, dry_run: bool, no_backup: bool) -> None:
    """Upgrade the article document to the current schema version.

    \b
    Examples:
        linkstash migrate
        linkstash migrate --dry-run
        linkstash --data-file ./articles.json migrate --no-backup
    """
    settings = get_settings(ctx)
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    engine = build_engine(settings, backup=False if no_backup else None)

    echo_verbose(f"Document: {settings.data_file}", verbosity)

    try:
        result = engine.migrate(settings.data_file, dry_run=dry_run)
    except (MigrationError, OSError) as e:
        echo_error(str(e))
        sys.exit(1)

    if result.outcome is MigrationOutcome.NOT_FOUND:
        echo_normal(f"No document at {settings.data_file}, nothing to migrate", verbosity)
        return

    if result.outcome is MigrationOutcome.UP_TO_DATE:
        echo_normal(f"Document is up to date ({format_version(result.to_version)})", verbosity)
        return

    for description in result.applied:
        echo_verbose(f"  - {description}", verbosity)

    span = f"{format_version(result.from_version)} -> {format_version(result.to_version)}"
    if dry_run:
        echo_quiet(click.style(f"Dry run: would migrate {span}", fg="yellow"), verbosity)
    else:
        echo_quiet(click.style(f"✓ Migrated {span}", fg="green"), verbosity)
        if result.backup is not None:
            echo_normal(f"Backup: {result.backup.path}", verbosity)


@migrate_group.command()
@click.pass_context
def status(ctx) -> None:
    """Show the document version and pending migration steps."""
    settings = get_settings(ctx)
    verbosity = ctx.obj.get('verbosity', VERBOSITY_NORMAL)
    engine = MigrationEngine()

    echo_normal(click.style("linkstash Status", fg="cyan", bold=True), verbosity)
    echo_normal("=" * 40, verbosity)
    echo_quiet(f"Document: {settings.data_file}", verbosity)

    try:
        version = engine.current_version(settings.data_file)
        pending = engine.plan(settings.data_file)
    except (MigrationError, OSError) as e:
        echo_error(str(e))
        sys.exit(1)

    echo_quiet(f"Document version: {format_version(version)}", verbosity)
    echo_quiet(f"Current version: {format_version(CURRENT_VERSION)}", verbosity)

    if version is None:
        echo_normal("No document yet", verbosity)
    elif not pending:
        echo_normal(click.style("✓ Up to date", fg="green"), verbosity)
    else:
        echo_normal(click.style(f"{len(pending)} pending migration(s):", fg="yellow"), verbosity)
        for step in pending:
            echo_normal(f"  v{step.version} -> v{step.target_version}: {step.description}", verbosity)
