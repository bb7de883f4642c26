"""
Tests for the notification channel.
"""

import unittest
from unittest.mock import Mock

from .events import NotificationChannel
from .types import MigrationEvent


class TestNotificationChannel(unittest.TestCase):
    """Test suite for listener registration and emission."""

    def setUp(self):
        self.channel = NotificationChannel()

    def testEmitCallsListenersInOrder(self):
        calls = []
        self.channel.subscribe(MigrationEvent.MIGRATION, lambda m, d: calls.append(("first", m, d)))
        self.channel.subscribe("migration", lambda m, d: calls.append(("second", m, d)))

        self.channel.emit(MigrationEvent.MIGRATION, "1-a", "up")

        self.assertEqual(calls, [("first", "1-a", "up"), ("second", "1-a", "up")])

    def testEmitWithoutListeners(self):
        self.channel.emit(MigrationEvent.LOAD)
        self.assertEqual(self.channel.listenerCount("load"), 0)

    def testEventsAreIndependent(self):
        listener = Mock()
        self.channel.subscribe(MigrationEvent.SAVE, listener)

        self.channel.emit(MigrationEvent.LOAD)
        listener.assert_not_called()

        self.channel.emit(MigrationEvent.SAVE)
        listener.assert_called_once_with()

    def testUnsubscribe(self):
        listener = Mock()
        self.channel.subscribe(MigrationEvent.COMPLETE, listener)
        self.channel.unsubscribe(MigrationEvent.COMPLETE, listener)
        self.channel.unsubscribe(MigrationEvent.COMPLETE, listener)

        self.channel.emit(MigrationEvent.COMPLETE)

        listener.assert_not_called()

    def testUnknownEventRejected(self):
        with self.assertRaises(ValueError):
            self.channel.subscribe("finished", Mock())

    def testFailingListenerDoesNotStopOthers(self):
        after = Mock()
        self.channel.subscribe(MigrationEvent.COMPLETE, Mock(side_effect=RuntimeError("listener bug")))
        self.channel.subscribe(MigrationEvent.COMPLETE, after)

        with self.assertLogs(level="ERROR"):
            self.channel.emit(MigrationEvent.COMPLETE)

        after.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
