"""
Migration set: runs migrations sequentially and records progress, dood!
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from .errors import MigrationActionError, MigrationError, StoreIOError, UnknownTargetError
from .events import NotificationChannel
from .interface import CompletionStoreInterface, MigrationInterface
from .migration import Migration, MigrationAction
from .selector import selectMigrations
from .store import parsePersistedState
from .types import Direction, MigrationEvent

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Optional[Exception]], None]
RequiredCallback = Callable[[Optional[Exception], Optional[List[MigrationInterface]]], None]


class MigrationSet:
    """
    Ordered catalog of migrations bound to a completion store.

    Responsibilities:
    - Hold the catalog in execution order
    - Hydrate applied titles from the store at the start of every run
    - Select and execute migrations one at a time, stopping on first failure
    - Persist applied titles after a fully successful batch
    - Publish lifecycle notifications through ``events``

    Errors are raised from the run coroutine, or, when a completion callback
    is given, delivered to it. UnknownTargetError is always raised.

    Example:
        >>> migrationSet = MigrationSet(JsonFileStore(".migrate"))
        >>> migrationSet.registerMigrations(discoverMigrations("migrations"))
        >>> migrationSet.events.subscribe("migration", lambda m, d: print(d, m.title))
        >>> await migrationSet.up()
    """

    def __init__(self, store: CompletionStoreInterface, migrations: Optional[Sequence[MigrationInterface]] = None):
        self.store = store
        self.events = NotificationChannel()
        self.migrations: List[MigrationInterface] = []
        self.migrationsDone: List[str] = []
        self.position = 0
        self._runLock = asyncio.Lock()
        if migrations:
            self.registerMigrations(migrations)

    def addMigration(
        self,
        title: str,
        up: MigrationAction,
        down: MigrationAction,
        environment: Optional[str] = None,
    ) -> MigrationInterface:
        """
        Append a migration built from action callables to the catalog.

        Raises:
            MigrationError: If a migration with this title is already registered
        """
        migration = Migration(title, up, down, environment)
        self.registerMigrations([migration])
        return migration

    def registerMigrations(self, migrations: Sequence[MigrationInterface]) -> None:
        """
        Append migrations to the catalog, keeping the given order.

        Raises:
            MigrationError: If titles are duplicated
        """
        titles = [m.title for m in self.migrations] + [m.title for m in migrations]
        if len(titles) != len(set(titles)):
            raise MigrationError("Duplicate migration titles detected, dood!")

        self.migrations.extend(migrations)
        logger.debug(f"Registered {len(migrations)} migrations, {len(self.migrations)} total")

    async def up(self, callback: Optional[CompletionCallback] = None, targetName: Optional[str] = None) -> None:
        """Apply pending migrations through targetName (or to the end)."""
        await self.migrate(Direction.UP, targetName, callback)

    async def down(self, callback: Optional[CompletionCallback] = None, targetName: Optional[str] = None) -> None:
        """Revert applied migrations back through targetName (or to the start)."""
        await self.migrate(Direction.DOWN, targetName, callback)

    async def migrate(
        self,
        direction: Direction | str,
        targetName: Optional[str] = None,
        callback: Optional[CompletionCallback] = None,
    ) -> None:
        """
        Run migrations in given direction.

        Args:
            direction: 'up' or 'down'
            targetName: Inclusive boundary migration title, None for all
            callback: Completion callback, receives the error or None

        Raises:
            UnknownTargetError: If targetName is not in the catalog
            MigrationError: On store or action failure when no callback is given
        """
        direction = Direction(direction)
        async with self._runLock:
            error: Optional[Exception] = None
            try:
                await self._hydrate()
                migrations = selectMigrations(direction, self.migrations, self.migrationsDone, self.position, targetName)
                await self._run(direction, migrations)
            except UnknownTargetError:
                raise
            except MigrationError as e:
                if callback is None:
                    raise
                error = e

        if callback is not None:
            callback(error)

    async def migrationsRequired(
        self,
        direction: Direction | str,
        targetName: Optional[str] = None,
        callback: Optional[RequiredCallback] = None,
    ) -> Optional[List[MigrationInterface]]:
        """
        Load state and return what a run would execute, without running it.

        Neither the in-memory state of this set nor the store is modified.

        Raises:
            UnknownTargetError: If targetName is not in the catalog
            MigrationError: On store failure when no callback is given
        """
        direction = Direction(direction)
        try:
            migrationsDone = await self._loadState()
            position = len(migrationsDone)
            result = selectMigrations(direction, self.migrations, migrationsDone, position, targetName)
        except UnknownTargetError:
            raise
        except MigrationError as e:
            if callback is None:
                raise
            callback(e, None)
            return None

        if callback is not None:
            callback(None, result)
        return result

    async def _loadState(self) -> List[str]:
        self.events.emit(MigrationEvent.LOAD)
        try:
            state = await self.store.load()
        except MigrationError:
            raise
        except Exception as e:
            raise StoreIOError(f"Failed to load migration state: {e}") from e
        if state is None:
            return []

        known = {m.title for m in self.migrations}
        migrationsDone: List[str] = []
        for title in parsePersistedState(state):
            if title not in known:
                logger.warning(f"Applied migration '{title}' is not in the catalog, dropping it, dood!")
                continue
            if title not in migrationsDone:
                migrationsDone.append(title)
        return migrationsDone

    async def _hydrate(self) -> None:
        self.migrationsDone = await self._loadState()
        self.position = len(self.migrationsDone)

        prefix = [m.title for m in self.migrations[: self.position]]
        if set(prefix) != set(self.migrationsDone):
            logger.warning(
                "Applied migrations are not a prefix of the catalog, "
                f"down runs will revert the first {self.position} migrations"
            )

    async def _run(self, direction: Direction, migrations: List[MigrationInterface]) -> None:
        if not migrations:
            logger.info(f"No migrations to run {direction}, dood!")
        else:
            logger.info(f"Running {len(migrations)} migrations {direction}")

        for migration in migrations:
            self.events.emit(MigrationEvent.MIGRATION, migration, direction)
            logger.info(f"Running {direction} for {migration.title}")
            startTime = time.monotonic()
            try:
                if direction == Direction.UP:
                    await migration.up(migration.environment)
                else:
                    await migration.down(migration.environment)
            except Exception as e:
                logger.error(f"Migration {migration.title} failed: {e}, dood!")
                logger.exception(e)
                raise MigrationActionError(migration, direction, e) from e

            self._record(direction, migration)
            logger.info(f"Migration {migration.title} {direction} completed in {time.monotonic() - startTime:.2f}s")

        self.events.emit(MigrationEvent.COMPLETE)
        await self._save()

    def _record(self, direction: Direction, migration: MigrationInterface) -> None:
        if direction == Direction.UP:
            self.migrationsDone.append(migration.title)
        else:
            self.position -= 1
            if migration.title in self.migrationsDone:
                self.migrationsDone.remove(migration.title)
            else:
                logger.warning(f"Reverted {migration.title} which was not recorded as applied, dood!")

    async def _save(self) -> None:
        try:
            await self.store.save(list(self.migrationsDone))
        except MigrationError:
            raise
        except Exception as e:
            raise StoreIOError(f"Failed to save migration state: {e}") from e
        finally:
            self.events.emit(MigrationEvent.SAVE)
