"""
Selection of the migrations a run has to execute.

Everything here is pure: no I/O, no mutation of the arguments.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from .errors import UnknownTargetError
from .interface import MigrationInterface
from .types import Direction


def positionOfMigration(migrations: Sequence[MigrationInterface], title: str) -> int:
    """Index of the migration with given title, -1 if there is none."""
    for i, migration in enumerate(migrations):
        if migration.title == title:
            return i
    return -1


def _targetIndex(migrations: Sequence[MigrationInterface], targetName: str) -> int:
    index = positionOfMigration(migrations, targetName)
    if index == -1:
        raise UnknownTargetError(targetName)
    return index


def selectUp(
    migrations: Sequence[MigrationInterface],
    migrationsDone: Iterable[str],
    targetName: Optional[str] = None,
) -> List[MigrationInterface]:
    """
    Migrations not applied yet, from the start of the catalog through the target.

    Args:
        migrations: Full catalog in execution order
        migrationsDone: Titles already applied
        targetName: Title of the last migration to consider (None = whole catalog)

    Returns:
        Unapplied migrations in catalog order

    Raises:
        UnknownTargetError: If targetName is not in the catalog
    """
    cutoff = len(migrations) - 1 if not targetName else _targetIndex(migrations, targetName)
    done = set(migrationsDone)

    candidates = [migration.title for migration in migrations[: cutoff + 1]]
    pending = [title for title in candidates if title not in done]

    byTitle: Dict[str, MigrationInterface] = {migration.title: migration for migration in migrations}
    return [byTitle[title] for title in pending]


def selectDown(
    migrations: Sequence[MigrationInterface],
    position: int,
    targetName: Optional[str] = None,
) -> List[MigrationInterface]:
    """
    Applied migrations from the target up to position, newest first.

    Args:
        migrations: Full catalog in execution order
        position: Number of leading catalog entries currently applied
        targetName: Title of the last migration to revert (None = revert all)

    Returns:
        Migrations to revert, in reverse catalog order

    Raises:
        UnknownTargetError: If targetName is not in the catalog
    """
    start = 0 if not targetName else _targetIndex(migrations, targetName)
    return list(reversed(migrations[start:position]))


def selectMigrations(
    direction: Direction | str,
    migrations: Sequence[MigrationInterface],
    migrationsDone: Iterable[str],
    position: int,
    targetName: Optional[str] = None,
) -> List[MigrationInterface]:
    """
    Compute the ordered list of migrations a run in given direction must execute.

    Up selection is set based (catalog minus migrationsDone), down selection
    is index based (catalog prefix bounded by position).

    Raises:
        UnknownTargetError: If targetName is not in the catalog
        ValueError: If direction is not 'up' or 'down'
    """
    match Direction(direction):
        case Direction.UP:
            return selectUp(migrations, migrationsDone, targetName)
        case Direction.DOWN:
            return selectDown(migrations, position, targetName)
