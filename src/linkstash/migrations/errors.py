"""Migration errors.

Every fatal outcome of a migration run is raised as a subclass of
MigrationError. A missing document is not an error (see MigrationOutcome).
"""

from pathlib import Path
from typing import Optional, Union


class MigrationError(Exception):
    """Base exception for migration failures.

    Carries enough context (location, document version, target version) to
    diagnose the failure without re-reading the file.
    """

    def __init__(self,
                 message: str,
                 location: Optional[Union[str, Path]] = None,
                 current_version: Optional[int] = None,
                 target_version: Optional[int] = None):
        self.location = Path(location) if location is not None else None
        self.current_version = current_version
        self.target_version = target_version
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        context = []
        if self.location is not None:
            context.append(f"location={self.location}")
        if self.current_version is not None:
            context.append(f"version={self.current_version}")
        if self.target_version is not None:
            context.append(f"target={self.target_version}")
        if context:
            return f"{message} ({', '.join(context)})"
        return message


class MalformedDocument(MigrationError):
    """Raised when the document cannot be parsed or does not match its declared shape"""
    pass


class UnsupportedFutureVersion(MigrationError):
    """Raised when the document was written by a newer release"""
    pass


class BrokenMigrationChain(MigrationError):
    """Raised when no step (or more than one) is registered for a version"""
    pass
