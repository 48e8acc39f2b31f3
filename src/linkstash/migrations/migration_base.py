"""
Migration Base Class

Abstract base class for document migrations. Every step inherits from this
class and implements up().

Pattern:
- Each step is identified by its source version `version`
- up() turns records at `version` into records at `version + 1`
- Steps are pure: no I/O, no state, no failure on well-formed input
- Steps are applied in version order
"""

from abc import ABC, abstractmethod

from .schema import Records


class MigrationBase(ABC):
    """
    Abstract base class for document migrations.

    All migrations must inherit from this class and define:
    - version: Source schema version (the step produces version + 1)
    - description: Human-readable description of the step
    - up(): Transform the typed records area to the next shape

    Example:
        class AddRating(MigrationBase):
            version = 4
            description = "Add rating to every article"

            def up(self, records: ArticleCollectionV4) -> ArticleCollectionV5:
                ...
    """

    # Subclasses must define these
    version: int
    description: str

    def __init__(self):
        """Initialize migration and validate required attributes."""
        if not hasattr(self, 'version') or not isinstance(self.version, int):
            raise ValueError(
                f"{self.__class__.__name__} must define 'version' as an integer"
            )
        if not hasattr(self, 'description') or not isinstance(self.description, str):
            raise ValueError(
                f"{self.__class__.__name__} must define 'description' as a string"
            )
        if self.version < 1:
            raise ValueError(
                f"Migration version must be >= 1, got {self.version}"
            )

    @property
    def target_version(self) -> int:
        """Version of the records returned by up()."""
        return self.version + 1

    @abstractmethod
    def up(self, records: Records) -> Records:
        """
        Transform records from `version` to `version + 1`.

        Args:
            records: Records area parsed into the shape of `version`

        Returns:
            Records in the shape of `version + 1`
        """
        pass

    def __repr__(self) -> str:
        """String representation for logging."""
        return f"<Migration v{self.version}->v{self.target_version}: {self.description}>"

    def __eq__(self, other) -> bool:
        """Compare migrations by version."""
        if not isinstance(other, MigrationBase):
            return False
        return self.version == other.version

    def __lt__(self, other) -> bool:
        """Order migrations by version."""
        if not isinstance(other, MigrationBase):
            return NotImplemented
        return self.version < other.version

    def __hash__(self) -> int:
        """Hash by version for use in sets/dicts."""
        return hash(self.version)
