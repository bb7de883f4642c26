"""
Test utilities for the migration runner tests.

Helpers write real migration modules to disk. Each generated migration
appends "<direction>:<title>" lines to a journal file so tests can check
what actually ran and in which order.
"""

from pathlib import Path
from typing import List

MIGRATION_TEMPLATE = '''
JOURNAL = {journal!r}


def _record(direction, environment):
    with open(JOURNAL, "a", encoding="utf-8") as f:
        f.write(f"{{direction}}:{title}:{{environment}}\\n")


async def up(environment):
    _record("up", environment)
    {upFailure}


async def down(environment):
    _record("down", environment)
    {downFailure}
'''


def writeMigration(
    directory: Path,
    title: str,
    journal: Path,
    failUp: bool = False,
    failDown: bool = False,
) -> Path:
    """
    Write a migration module recording its calls into journal.

    Args:
        directory: Migrations directory
        title: Migration title, becomes the file name
        journal: Journal file path
        failUp: Make up() raise RuntimeError after recording
        failDown: Make down() raise RuntimeError after recording

    Returns:
        Path of the written module
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{title}.py"
    path.write_text(
        MIGRATION_TEMPLATE.format(
            journal=str(journal),
            title=title,
            upFailure=f'raise RuntimeError("{title} up failed")' if failUp else "return None",
            downFailure=f'raise RuntimeError("{title} down failed")' if failDown else "return None",
        ),
        encoding="utf-8",
    )
    return path


def readJournal(journal: Path) -> List[str]:
    """Get journal lines, empty list if nothing ran yet."""
    if not journal.exists():
        return []
    return journal.read_text(encoding="utf-8").splitlines()
