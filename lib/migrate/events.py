"""
Notification channel for migration lifecycle events, dood!

Observers (CLI output, reporting) subscribe to named events instead of
inheriting from the migration set.
"""

import logging
from typing import Any, Callable, Dict, List

from .types import MigrationEvent

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class NotificationChannel:
    """
    Synchronous listener registry.

    Events:
        - load: before the completion store is read
        - save: after the completion store write finished (even if it failed)
        - migration: (migration, direction) before each migration action runs
        - complete: after the last migration of a batch succeeded
    """

    def __init__(self):
        self._listeners: Dict[MigrationEvent, List[Listener]] = {}

    def subscribe(self, event: MigrationEvent | str, listener: Listener) -> None:
        """
        Register listener for event.

        Args:
            event: Event name, see MigrationEvent
            listener: Callable invoked with the event arguments

        Raises:
            ValueError: If the event name is unknown
        """
        self._listeners.setdefault(MigrationEvent(event), []).append(listener)

    def unsubscribe(self, event: MigrationEvent | str, listener: Listener) -> None:
        listeners = self._listeners.get(MigrationEvent(event), [])
        if listener in listeners:
            listeners.remove(listener)

    def listenerCount(self, event: MigrationEvent | str) -> int:
        return len(self._listeners.get(MigrationEvent(event), []))

    def emit(self, event: MigrationEvent, *args: Any) -> None:
        """Broadcast event to all listeners in registration order."""
        logger.debug(f"Emitting {event} to {self.listenerCount(event)} listeners")
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(*args)
            except Exception as e:
                logger.error(f"Listener for '{event}' failed: {e}")
                logger.exception(e)
