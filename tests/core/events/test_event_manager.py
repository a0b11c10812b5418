"""
Unit tests for the Event Manager system.

Tests the publisher-subscriber bus the managers use to talk to each other.
"""

from unittest.mock import Mock

from blocker.core.events.events import (
    EventType,
    LogMessage,
    SessionStarted,
    StatisticsReset,
)


def make_log(text: str = "hello") -> LogMessage:
    return LogMessage(action_number=1, message=text, category="SYSTEM")


class TestEvents:
    """Test event construction."""

    def test_event_type_set_automatically(self):
        assert SessionStarted(action_number=0, seed_text="a").event_type == EventType.SESSION_STARTED
        assert StatisticsReset(action_number=2).event_type == EventType.STATISTICS_RESET

    def test_log_message_defaults(self):
        event = make_log()
        assert event.level == "INFO"
        assert event.source is None


class TestEventManager:
    """Test EventManager functionality."""

    def test_event_manager_creation(self, event_manager):
        stats = event_manager.get_statistics()
        assert not event_manager.enable_debug_logging
        assert stats['events_published'] == 0
        assert stats['events_processed'] == 0

    def test_publish_queues_until_processed(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.LOG_MESSAGE, subscriber)
        event = make_log()

        event_manager.publish(event)

        assert event_manager.get_statistics()['events_queued'] == 1
        subscriber.assert_not_called()

        assert event_manager.process_events() == 1
        subscriber.assert_called_once_with(event)
        assert event_manager.get_statistics()['events_queued'] == 0

    def test_subscriber_only_receives_its_type(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.STATISTICS_RESET, subscriber)

        event_manager.publish(make_log())
        event_manager.process_events()

        subscriber.assert_not_called()

    def test_publication_order(self, event_manager):
        received = []
        event_manager.subscribe(EventType.LOG_MESSAGE, lambda e: received.append(e.message))

        for text in ("first", "second", "third"):
            event_manager.publish(make_log(text))
        event_manager.process_events()

        assert received == ["first", "second", "third"]

    def test_subscribers_called_in_registration_order(self, event_manager):
        calls = []
        event_manager.subscribe(EventType.LOG_MESSAGE, lambda e: calls.append("phase"))
        event_manager.subscribe(EventType.LOG_MESSAGE, lambda e: calls.append("statistics"))

        event_manager.publish(make_log())
        event_manager.process_events()

        assert calls == ["phase", "statistics"]

    def test_process_events_with_limit(self, event_manager):
        subscriber = Mock()
        event_manager.subscribe(EventType.LOG_MESSAGE, subscriber)
        for i in range(3):
            event_manager.publish(make_log(str(i)))

        assert event_manager.process_events(max_events=2) == 2
        assert event_manager.get_statistics()['events_queued'] == 1
        assert event_manager.process_events() == 1
        assert [c.args[0].message for c in subscriber.call_args_list] == ["0", "1", "2"]

    def test_follow_ups_wait_for_next_process_call(self, event_manager):
        received = Mock()
        event_manager.subscribe(EventType.STATISTICS_RESET, lambda e: event_manager.publish(make_log()))
        event_manager.subscribe(EventType.LOG_MESSAGE, received)

        event_manager.publish(StatisticsReset(action_number=1))

        assert event_manager.process_events() == 1
        received.assert_not_called()
        assert event_manager.process_events() == 1
        received.assert_called_once()

    def test_drain_processes_follow_up_events(self, event_manager):
        """Events published by subscribers are handled in the same drain."""
        received = Mock()

        def republish(event):
            event_manager.publish(make_log("follow-up"))

        event_manager.subscribe(EventType.STATISTICS_RESET, republish)
        event_manager.subscribe(EventType.LOG_MESSAGE, received)

        event_manager.publish(StatisticsReset(action_number=1))
        processed = event_manager.drain()

        assert processed == 2
        received.assert_called_once()
        assert event_manager.get_statistics()['events_queued'] == 0

    def test_drain_on_empty_queue(self, event_manager):
        assert event_manager.drain() == 0

    def test_subscriber_error_does_not_stop_others(self, event_manager):
        failing = Mock(side_effect=RuntimeError("boom"))
        healthy = Mock()
        event_manager.subscribe(EventType.LOG_MESSAGE, failing)
        event_manager.subscribe(EventType.LOG_MESSAGE, healthy)

        event_manager.publish(make_log())
        event_manager.process_events()

        healthy.assert_called_once()
        assert event_manager.get_statistics()['subscriber_errors'] == 1

    def test_debug_callback(self, event_manager):
        lines = []
        event_manager.enable_debug_logging = True
        event_manager.set_debug_callback(lines.append)

        event_manager.publish(make_log(), source="Session")

        assert lines == ["[EVENT] Published LogMessage from Session"]

    def test_debug_callback_silent_when_disabled(self, event_manager):
        lines = []
        event_manager.set_debug_callback(lines.append)

        event_manager.subscribe(EventType.LOG_MESSAGE, Mock())
        event_manager.publish(make_log())
        event_manager.drain()

        assert lines == []

    def test_statistics_count_subscribers(self, event_manager):
        event_manager.subscribe(EventType.LOG_MESSAGE, Mock())
        event_manager.subscribe(EventType.STATISTICS_RESET, Mock())

        assert event_manager.get_statistics()['subscribers_count'] == 2
