"""
Migration Library

This library tracks and executes an ordered sequence of reversible named
migrations, recording which of them have been applied so repeated runs are
idempotent and partial progress survives restarts.

Example:
    >>> from lib.migrate import JsonFileStore, MigrationSet
    >>>
    >>> migrationSet = MigrationSet(JsonFileStore(".migrate"))
    >>> migrationSet.addMigration("1-add-pets", addPets, removePets)
    >>> migrationSet.addMigration("2-add-owners", addOwners, removeOwners)
    >>>
    >>> await migrationSet.up()  # applies both, state saved to .migrate
    >>> await migrationSet.down(targetName="2-add-owners")  # reverts the second one
    >>> await migrationSet.migrationsRequired("up")  # what `up` would run now
"""

from .errors import (
    MigrationActionError,
    MigrationError,
    MigrationLoadError,
    ParseError,
    StoreIOError,
    UnknownTargetError,
)
from .events import NotificationChannel
from .interface import CompletionStoreInterface, MigrationInterface
from .migration import Migration
from .selector import positionOfMigration, selectMigrations
from .set import MigrationSet
from .store import JsonFileStore, MemoryStore, parsePersistedState
from .types import Direction, MigrationEvent, PersistedState

__all__ = [
    "CompletionStoreInterface",
    "Direction",
    "JsonFileStore",
    "MemoryStore",
    "Migration",
    "MigrationActionError",
    "MigrationError",
    "MigrationEvent",
    "MigrationInterface",
    "MigrationLoadError",
    "MigrationSet",
    "NotificationChannel",
    "ParseError",
    "PersistedState",
    "StoreIOError",
    "UnknownTargetError",
    "parsePersistedState",
    "positionOfMigration",
    "selectMigrations",
]
