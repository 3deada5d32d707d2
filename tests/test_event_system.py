"""Tests for core.event_system.EventSystem."""
import time
from unittest.mock import MagicMock

from core.event_system import (
    EventType, StatusFlags, StatusMessageEventData,
)


def _message(text="hello"):
    return StatusMessageEventData(
        event_type=EventType.STATUS_MESSAGE, source="test", timestamp=time.time(), message=text
    )


class TestEventSystem:
    def test_publish_reaches_subscribers(self, fresh_event_system):
        callback = MagicMock()
        fresh_event_system.subscribe(EventType.STATUS_MESSAGE, callback)
        event = _message()
        fresh_event_system.publish(event)
        callback.assert_called_once_with(event)

    def test_other_event_types_not_delivered(self, fresh_event_system):
        callback = MagicMock()
        fresh_event_system.subscribe(EventType.SLIDE_SHOWN, callback)
        fresh_event_system.publish(_message())
        callback.assert_not_called()

    def test_unsubscribe(self, fresh_event_system):
        callback = MagicMock()
        fresh_event_system.subscribe(EventType.STATUS_MESSAGE, callback)
        fresh_event_system.unsubscribe(EventType.STATUS_MESSAGE, callback)
        fresh_event_system.publish(_message())
        callback.assert_not_called()

    def test_unsubscribe_unknown_is_harmless(self, fresh_event_system):
        fresh_event_system.unsubscribe(EventType.STATUS_MESSAGE, MagicMock())

    def test_failing_subscriber_does_not_block_others(self, fresh_event_system):
        broken = MagicMock(side_effect=RuntimeError("boom"))
        working = MagicMock()
        fresh_event_system.subscribe(EventType.STATUS_MESSAGE, broken)
        fresh_event_system.subscribe(EventType.STATUS_MESSAGE, working)
        fresh_event_system.publish(_message())
        working.assert_called_once()

    def test_subscriber_may_unsubscribe_itself(self, fresh_event_system):
        calls = []

        def once(event):
            calls.append(event)
            fresh_event_system.unsubscribe(EventType.STATUS_MESSAGE, once)

        fresh_event_system.subscribe(EventType.STATUS_MESSAGE, once)
        fresh_event_system.publish(_message("1"))
        fresh_event_system.publish(_message("2"))
        assert [e.message for e in calls] == ["1"]


class TestStatusFlags:
    def test_letters_in_fixed_order(self):
        assert StatusFlags(caption=True, focus=True, paused=True, verbose=True).letters() == "CFPV"
        assert StatusFlags(paused=True, caption=True).letters() == "CP"
        assert StatusFlags().letters() == ""
