import inspect
from typing import Any, Awaitable, Callable, Optional

from .interface import MigrationInterface

MigrationAction = Callable[[Optional[str]], Awaitable[None] | None]


class Migration(MigrationInterface):
    """
    Migration built from a title and a pair of action callables.

    Actions receive the environment tag and may be either coroutine
    functions or plain functions. Instances are treated as immutable.

    Example:
        >>> async def up(environment):
        ...     await db.execute("CREATE TABLE pets (name TEXT)")
        >>> async def down(environment):
        ...     await db.execute("DROP TABLE pets")
        >>> migration = Migration("1316027432511-add-pets", up, down)
    """

    def __init__(
        self,
        title: str,
        up: MigrationAction,
        down: MigrationAction,
        environment: Optional[str] = None,
    ):
        if not title:
            raise ValueError("Migration title must not be empty")
        self.title = title
        self.environment = environment
        self._up = up
        self._down = down

    async def up(self, environment: Optional[str] = None) -> None:
        await self._call(self._up, environment)

    async def down(self, environment: Optional[str] = None) -> None:
        await self._call(self._down, environment)

    @staticmethod
    async def _call(action: MigrationAction, environment: Optional[str]) -> None:
        result: Any = action(environment)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        return f"Migration(title={self.title!r}, environment={self.environment!r})"
