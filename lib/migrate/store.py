"""
Completion stores for applied migration titles, dood!

The persisted record is a JSON object:

    {"migrationsDone": ["<title>", "<title>", ...]}

Older records that only carry ``{"migrations": [{"title": ...}, ...]}``
are still understood.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional

from lib.utils import jsonDumps

from .errors import ParseError, StoreIOError
from .interface import CompletionStoreInterface
from .types import PersistedState

logger = logging.getLogger(__name__)


def parsePersistedState(data: Any) -> List[str]:
    """
    Extract applied migration titles from a persisted record.

    Args:
        data: Decoded JSON content of the record

    Returns:
        Titles from ``migrationsDone``, or titles of the legacy ``migrations``
        list if ``migrationsDone`` is absent, or an empty list

    Raises:
        ParseError: If the record does not have the expected shape
    """
    if not isinstance(data, dict):
        raise ParseError(f"Expected JSON object in migration state, got {type(data).__name__}")

    if data.get("migrationsDone") is not None:
        done = data["migrationsDone"]
        if not isinstance(done, list) or not all(isinstance(title, str) for title in done):
            raise ParseError("'migrationsDone' must be a list of strings")
        return list(done)

    legacy = data.get("migrations")
    if legacy is None:
        return []
    if not isinstance(legacy, list):
        raise ParseError("'migrations' must be a list")

    titles: List[str] = []
    for entry in legacy:
        if not isinstance(entry, dict) or not isinstance(entry.get("title"), str):
            raise ParseError(f"Legacy migration entry without title: {entry!r}")
        titles.append(entry["title"])
    logger.info(f"Read {len(titles)} titles from legacy 'migrations' record")
    return titles


class JsonFileStore(CompletionStoreInterface):
    """
    Stores applied titles in a UTF-8 JSON file.

    A missing file means nothing has been applied yet. Content that is not
    UTF-8 JSON raises ParseError; the record shape is checked by
    parsePersistedState() when titles are extracted. The file is written
    to a temporary sibling first and then moved into place.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    async def load(self) -> Optional[PersistedState]:
        return await asyncio.to_thread(self._read)

    async def save(self, migrationsDone: List[str]) -> None:
        state: PersistedState = {"migrationsDone": list(migrationsDone)}
        await asyncio.to_thread(self._write, jsonDumps(state, sort_keys=False))

    def _read(self) -> Optional[PersistedState]:
        try:
            content = self.path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"No migration state at {self.path}, starting fresh, dood!")
            return None
        except OSError as e:
            raise StoreIOError(f"Failed to read migration state {self.path}: {e}") from e

        try:
            return json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(f"Malformed migration state {self.path}: {e}") from e

    def _write(self, content: str) -> None:
        tmpPath: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmpPath = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmpPath, self.path)
            tmpPath = None
        except OSError as e:
            raise StoreIOError(f"Failed to write migration state {self.path}: {e}") from e
        finally:
            if tmpPath is not None and os.path.exists(tmpPath):
                os.unlink(tmpPath)
        logger.debug(f"Saved migration state to {self.path}")

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"


class MemoryStore(CompletionStoreInterface):
    """In-process store, nothing survives the process."""

    def __init__(self, initial: Optional[PersistedState] = None):
        self.state: Optional[PersistedState] = initial
        self.saveCount = 0

    async def load(self) -> Optional[PersistedState]:
        return self.state

    async def save(self, migrationsDone: List[str]) -> None:
        self.state = {"migrationsDone": list(migrationsDone)}
        self.saveCount += 1
