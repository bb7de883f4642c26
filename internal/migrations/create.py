"""
Creation of new migration files, dood!

New migrations are named ``<milliseconds since epoch>-<slug>.py`` so that
sorting by file name keeps creation order.
"""

import logging
import re
import time
from pathlib import Path
from typing import Optional

from lib.migrate import MigrationError

logger = logging.getLogger(__name__)

TEMPLATE = '''"""
{description}
"""


async def up(environment):
    """Apply the migration."""
    raise NotImplementedError("Migration {title} is not implemented yet")


async def down(environment):
    """Revert the migration."""
    raise NotImplementedError("Rollback of {title} is not implemented yet")
'''


def slugify(text: str) -> str:
    """Convert text to a lowercase dash separated slug."""
    text = re.sub(r"[^\w\s-]", "", text.strip().lower())
    return re.sub(r"[\s_-]+", "-", text).strip("-")


def createMigration(directory: str | Path, title: str, now: Optional[float] = None) -> Path:
    """
    Create a new migration file from template.

    Args:
        directory: Migrations directory, created if missing
        title: Human readable migration title
        now: Timestamp in seconds used for the file name prefix (default: current time)

    Returns:
        Path of the created file

    Raises:
        MigrationError: If the title is empty or the file already exists
    """
    slug = slugify(title)
    if not slug:
        raise MigrationError("Migration title cannot be empty, dood!")

    timestamp = round((time.time() if now is None else now) * 1000)
    migrationsDir = Path(directory)
    migrationsDir.mkdir(parents=True, exist_ok=True)

    path = migrationsDir / f"{timestamp}-{slug}.py"
    if path.exists():
        raise MigrationError(f"File {path.name} already exists, dood!")

    path.write_text(TEMPLATE.format(description=title.strip().capitalize(), title=path.stem), encoding="utf-8")
    logger.info(f"Created migration {path}")
    return path
