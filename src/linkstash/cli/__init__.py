"""linkstash CLI

Command line entry point for managing the stored article document:
- migrate.py: migrate, status
- backups.py: backups list, restore, cleanup
- common.py: shared utilities
"""
import click

from linkstash import __version__

# Local imports
from .backups import backups_group
from .common import VERBOSITY_NORMAL, VERBOSITY_QUIET, VERBOSITY_VERBOSE
from .migrate import migrate_group


@click.group()
@click.version_option(version=__version__, prog_name="linkstash")
@click.option('--config', 'config_path', type=click.Path(), default=None,
              envvar='LINKSTASH_CONFIG',
              help='Config file (default: ~/.linkstash/config.yaml)')
@click.option('--data-file', type=click.Path(), default=None,
              envvar='LINKSTASH_DATA_FILE',
              help='Article document (default: data_file from config)')
@click.option('--verbose', '-v', is_flag=True, default=False,
              help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, default=False,
              help='Suppress non-essential output')
@click.pass_context
def cli(ctx, config_path, data_file, verbose, quiet):
    """linkstash - saved articles store

    \b
    Key Commands:
        migrate           Upgrade the document to the current schema
        status            Show document and schema versions
        backups           List, restore or clean up backups

    \b
    Examples:
        linkstash status
        linkstash migrate --dry-run
        linkstash backups list
    """
    ctx.ensure_object(dict)

    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")

    if quiet:
        ctx.obj['verbosity'] = VERBOSITY_QUIET
    elif verbose:
        ctx.obj['verbosity'] = VERBOSITY_VERBOSE
    else:
        ctx.obj['verbosity'] = VERBOSITY_NORMAL

    ctx.obj['config'] = config_path
    ctx.obj['data_file'] = data_file


# Register migration commands (migrate, status)
cli.add_command(migrate_group.commands['migrate'])
cli.add_command(migrate_group.commands['status'])

# Register backups command group (backups list, restore, cleanup)
cli.add_command(backups_group, name='backups')


def main():
    """Entry point for the linkstash CLI."""
    cli(obj={})


__all__ = ["cli", "main"]
