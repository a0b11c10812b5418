"""
Event bus connecting the session to its managers.

The session publishes one or more events per operation and drains the bus
before the operation returns. Handlers may publish follow-up events (a roll
event triggering a phase change, a phase change triggering a log line);
those are delivered by the same drain, in publication order.

The engine is single-threaded, so the bus has no locking.
"""

from collections import defaultdict, deque
from typing import Any, Callable, NamedTuple, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .events import EventType, GameEvent


EventSubscriber = Callable[["GameEvent"], None]


class Delivery(NamedTuple):
    """A published event waiting for its handlers."""
    event: "GameEvent"
    source: str


def _name_of(handler: EventSubscriber) -> str:
    return getattr(handler, '__name__', 'anonymous')


class EventManager:
    """FIFO publish/subscribe bus keyed by EventType."""

    def __init__(self, enable_debug_logging: bool = False):
        self.enable_debug_logging = enable_debug_logging

        self._handlers: dict["EventType", list[EventSubscriber]] = defaultdict(list)
        self._pending: deque[Delivery] = deque()

        self._published = 0
        self._delivered = 0
        self._handler_failures = 0

        self._debug_callback: Optional[Callable[[str], None]] = None

    def set_debug_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        """Route bus tracing to ``callback`` (used only with debug logging on)."""
        self._debug_callback = callback

    def _trace(self, message: str) -> None:
        if self.enable_debug_logging and self._debug_callback is not None:
            self._debug_callback(f"[EVENT] {message}")

    def subscribe(
        self,
        event_type: "EventType",
        subscriber: EventSubscriber,
        subscriber_name: Optional[str] = None
    ) -> None:
        """Register ``subscriber`` for every event of ``event_type``.

        Handlers for one type run in registration order.
        """
        self._handlers[event_type].append(subscriber)
        self._trace(f"{subscriber_name or _name_of(subscriber)} listens for {event_type.name}")

    def publish(self, event: "GameEvent", source: Optional[str] = None) -> None:
        """Queue ``event``; nothing is delivered until the next process/drain."""
        delivery = Delivery(event, source or "unknown")
        self._pending.append(delivery)
        self._published += 1
        self._trace(f"Published {type(event).__name__} from {delivery.source}")

    def process_events(self, max_events: Optional[int] = None) -> int:
        """Deliver the events queued before this call.

        Events published by handlers during the call wait for the next one.

        Returns:
            Number of events delivered
        """
        batch_size = len(self._pending)
        if max_events is not None:
            batch_size = min(batch_size, max_events)

        for _ in range(batch_size):
            self._deliver(self._pending.popleft())
        return batch_size

    def drain(self, max_rounds: int = 100) -> int:
        """Deliver events until none are left, follow-ups included.

        ``max_rounds`` bounds handler feedback loops; whatever is still
        queued after the last round stays queued.

        Returns:
            Total number of events delivered
        """
        delivered = 0
        for _ in range(max_rounds):
            if not self._pending:
                break
            delivered += self.process_events()

        if self._pending:
            self._trace(f"Gave up draining with {len(self._pending)} events left")
        return delivered

    def _deliver(self, delivery: Delivery) -> None:
        event = delivery.event
        self._delivered += 1
        self._trace(f"Delivering {type(event).__name__} (action {event.action_number})")

        # Copy so a handler may subscribe others mid-delivery
        for handler in list(self._handlers.get(event.event_type, ())):
            try:
                handler(event)
            except Exception as e:
                # A broken handler must not starve the ones after it
                self._handler_failures += 1
                self._trace(f"{_name_of(handler)} failed on {type(event).__name__}: {e}")

    def get_statistics(self) -> dict[str, Any]:
        """Counters for diagnostics."""
        return {
            'events_published': self._published,
            'events_processed': self._delivered,
            'events_queued': len(self._pending),
            'subscriber_errors': self._handler_failures,
            'subscribers_count': sum(len(handlers) for handlers in self._handlers.values()),
        }
