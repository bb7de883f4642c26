"""
Exceptions raised by the migration library, dood!
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .interface import MigrationInterface
    from .types import Direction


class MigrationError(Exception):
    """Base class for all migration errors, dood!"""

    pass


class StoreIOError(MigrationError):
    """Completion store could not be read or written."""

    pass


class ParseError(MigrationError):
    """Completion store content is not a valid record."""

    pass


class UnknownTargetError(MigrationError):
    """
    Target migration name does not match any migration in the catalog.

    This one is fatal: it is never delivered to a completion callback,
    the top-level caller decides whether to terminate.
    """

    def __init__(self, targetName: str):
        super().__init__(f"Could not find migration: {targetName}")
        self.targetName = targetName


class MigrationActionError(MigrationError):
    """An up or down action of a migration failed."""

    def __init__(self, migration: "MigrationInterface", direction: "Direction", cause: Optional[BaseException] = None):
        message = f"Migration {migration.title} failed while running {direction}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.migration = migration
        self.direction = direction


class MigrationLoadError(MigrationError):
    """A migration module could not be discovered or imported."""

    pass
