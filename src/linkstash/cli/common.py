"""Shared utilities for linkstash CLI commands."""
import logging
import sys
from typing import Optional

import click

from linkstash.config import ConfigError, Settings, load_settings

# Verbosity levels
VERBOSITY_QUIET = 0
VERBOSITY_NORMAL = 1
VERBOSITY_VERBOSE = 2


def should_print(verbosity: int, message_level: int) -> bool:
    """Determine if a message should be printed based on verbosity settings.

    Args:
        verbosity: Current verbosity level (0=quiet, 1=normal, 2=verbose).
        message_level: Minimum verbosity level required for this message.
    """
    return verbosity >= message_level


def echo_verbose(message: str, verbosity: int) -> None:
    """Print a message only in verbose mode."""
    if should_print(verbosity, VERBOSITY_VERBOSE):
        click.echo(message, err=False)


def echo_normal(message: str, verbosity: int) -> None:
    """Print a message in normal and verbose modes."""
    if should_print(verbosity, VERBOSITY_NORMAL):
        click.echo(message, err=False)


def echo_quiet(message: str, verbosity: int) -> None:
    """Print a critical message that should always be shown (even in quiet mode)."""
    click.echo(message, err=False)


def echo_error(message: str) -> None:
    """Print an error in red on stderr."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)


def configure_logging(verbosity: int, log_level: str) -> None:
    """Configure root logging from CLI verbosity and the configured level.

    --verbose forces DEBUG, --quiet forces ERROR.
    """
    if verbosity >= VERBOSITY_VERBOSE:
        level = logging.DEBUG
    elif verbosity <= VERBOSITY_QUIET:
        level = logging.ERROR
    else:
        level = getattr(logging, log_level.upper(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True
    )


def get_settings(ctx: click.Context) -> Settings:
    """Load settings for the current invocation, exiting on config errors."""
    obj = ctx.ensure_object(dict)
    if obj.get('settings') is not None:
        return obj['settings']

    try:
        settings = load_settings(obj.get('config'), obj.get('data_file'))
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)

    configure_logging(obj.get('verbosity', VERBOSITY_NORMAL), settings.log_level)
    obj['settings'] = settings
    return settings


def format_version(version: Optional[int]) -> str:
    """Render a schema version for display."""
    return "-" if version is None else f"v{version}"
