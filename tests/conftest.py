"""
Pytest configuration and common fixtures for migration runner tests.

All fixtures follow camelCase naming convention.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tests.utils import writeMigration

# ============================================================================
# Filesystem Fixtures
# ============================================================================


@pytest.fixture
def workDir() -> Generator[Path, None, None]:
    """
    Provide an empty temporary working directory.

    Yields:
        Path: Temporary directory removed after the test
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def journal(workDir: Path) -> Path:
    """Path of the journal file generated migrations append to."""
    return workDir / "journal.log"


@pytest.fixture
def stateFile(workDir: Path) -> Path:
    """Path of the JSON completion record."""
    return workDir / ".migrate"


@pytest.fixture
def migrationsDir(workDir: Path, journal: Path) -> Path:
    """
    Provide a migrations directory with three recording migrations.

    Returns:
        Path: Directory holding 1-add-pets, 2-add-owners and 3-add-vets

    Example:
        def testSomething(migrationsDir, journal):
            # run migrations from migrationsDir, then
            assert readJournal(journal) == [...]
    """
    directory = workDir / "migrations"
    for title in ("1-add-pets", "2-add-owners", "3-add-vets"):
        writeMigration(directory, title, journal)
    return directory
