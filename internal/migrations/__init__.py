"""
Migration files handling, dood!

This module discovers migration modules on disk and creates new ones.
"""

from .create import createMigration
from .loader import discoverMigrations, listMigrationFiles, loadMigration

__all__ = [
    "createMigration",
    "discoverMigrations",
    "listMigrationFiles",
    "loadMigration",
]
