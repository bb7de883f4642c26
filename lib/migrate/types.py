"""Type definitions for the migration library."""

from enum import StrEnum
from typing import List

from typing_extensions import NotRequired, TypedDict


class Direction(StrEnum):
    """Direction of a migration run."""

    UP = "up"
    DOWN = "down"


class MigrationEvent(StrEnum):
    """Lifecycle notifications published by a migration set."""

    LOAD = "load"
    SAVE = "save"
    MIGRATION = "migration"
    COMPLETE = "complete"


class LegacyMigrationRecord(TypedDict):
    """Entry of the legacy ``migrations`` list, only ``title`` is read."""

    title: str


class PersistedState(TypedDict):
    """Durable record of applied migrations.

    Attributes:
        migrationsDone: Titles of applied migrations in the order they ran
        migrations: Legacy layout, used only when ``migrationsDone`` is absent
    """

    migrationsDone: NotRequired[List[str]]
    migrations: NotRequired[List[LegacyMigrationRecord]]
