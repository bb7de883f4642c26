"""
Migration discovery, dood!

Every ``*.py`` file in the migrations directory whose name does not start
with ``_`` or ``.`` is a migration. Files are ordered by name, the title of a
migration is its file name without the ``.py`` suffix. A migration module
defines two hooks:

    async def up(environment): ...
    async def down(environment): ...
"""

import importlib.util
import logging
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import List, Optional

from lib.migrate import Migration, MigrationLoadError

logger = logging.getLogger(__name__)

MODULE_PREFIX = "_migrations_"


def listMigrationFiles(directory: str | Path) -> List[Path]:
    """
    Get migration files of a directory in execution order.

    Raises:
        MigrationLoadError: If directory does not exist
    """
    migrationsDir = Path(directory)
    if not migrationsDir.is_dir():
        raise MigrationLoadError(f"Migrations directory {migrationsDir} does not exist, dood!")

    return sorted(
        (f for f in migrationsDir.glob("*.py") if f.is_file() and not f.name.startswith(("_", "."))),
        key=lambda f: f.name,
    )


def _importModule(path: Path) -> ModuleType:
    moduleName = MODULE_PREFIX + re.sub(r"\W", "_", path.stem)
    spec = importlib.util.spec_from_file_location(moduleName, path)
    if spec is None or spec.loader is None:
        raise MigrationLoadError(f"Cannot import migration {path.name}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[moduleName] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(moduleName, None)
        raise MigrationLoadError(f"Failed to import migration {path.name}: {e}") from e
    return module


def loadMigration(path: Path, environment: Optional[str] = None) -> Migration:
    """
    Import a single migration file.

    Args:
        path: Migration module path
        environment: Environment tag passed to the hooks

    Raises:
        MigrationLoadError: If the module cannot be imported or lacks hooks
    """
    module = _importModule(path)

    for hook in ("up", "down"):
        if not callable(getattr(module, hook, None)):
            raise MigrationLoadError(f"Migration {path.name} has no {hook}() function, dood!")

    logger.debug(f"Loaded migration {path.stem}")
    return Migration(path.stem, module.up, module.down, environment)


def discoverMigrations(directory: str | Path, environment: Optional[str] = None) -> List[Migration]:
    """
    Discover all migrations of a directory.

    Args:
        directory: Directory with migration modules
        environment: Environment tag passed to every migration

    Returns:
        Migrations sorted by file name

    Raises:
        MigrationLoadError: If the directory is missing or a module is broken
    """
    migrations = [loadMigration(path, environment) for path in listMigrationFiles(directory)]
    logger.info(f"Discovered {len(migrations)} migrations in {directory}, dood!")
    return migrations
