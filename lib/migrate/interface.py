from abc import ABC, abstractmethod
from typing import List, Optional

from .types import PersistedState


class MigrationInterface(ABC):
    """
    Abstract base class for a single reversible migration.

    A migration is identified by its title. Both actions are coroutines:
    returning normally means success, raising means failure.
    """

    title: str
    environment: Optional[str] = None

    @abstractmethod
    async def up(self, environment: Optional[str] = None) -> None:
        """
        Apply the migration.

        Args:
            environment: Environment tag the migration was loaded with
        """
        pass

    @abstractmethod
    async def down(self, environment: Optional[str] = None) -> None:
        """
        Revert the migration.

        Args:
            environment: Environment tag the migration was loaded with
        """
        pass


class CompletionStoreInterface(ABC):
    """
    Abstract base class for durable storage of applied migration titles.

    Implementations must distinguish a missing record, which is a fresh
    start, from a record that cannot be read.
    """

    @abstractmethod
    async def load(self) -> Optional[PersistedState]:
        """
        Read the persisted record.

        Returns:
            The stored record, or None if no record exists yet

        Raises:
            StoreIOError: If the record exists but cannot be read
            ParseError: If the record is not well-formed
        """
        pass

    @abstractmethod
    async def save(self, migrationsDone: List[str]) -> None:
        """
        Overwrite the persisted record with the given titles.

        Args:
            migrationsDone: Titles of applied migrations in the order they ran

        Raises:
            StoreIOError: If the record cannot be written
        """
        pass
