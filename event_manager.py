from datetime import datetime
from typing import Callable, Dict, List, Optional
from dataclasses import dataclass, field

DATA_RESET = "data_reset"


@dataclass
class Event:
    event_type: str
    timestamp: datetime
    data: dict = field(default_factory=dict)


EventHandler = Callable[[Event], None]


class EventManager:
    """In-process publish/subscribe hub owned by the application root.

    Views subscribe when they are shown and unsubscribe when they go away.
    Handlers run synchronously on the caller's loop, in subscription order.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self.events: List[Event] = []
        self.event_counts: Dict[str, int] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler, returns a callable that removes it again"""
        self._subscribers.setdefault(event_type, []).append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: str, handler: EventHandler):
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, []))

    def trigger_event(self, event_type: str, data: dict = None) -> Event:
        """Record an event and deliver it to every subscriber"""
        event = Event(event_type=event_type, timestamp=self._clock(), data=data or {})
        self.events.append(event)
        self.event_counts[event_type] = self.event_counts.get(event_type, 0) + 1

        # Copy so handlers may unsubscribe while being notified
        for handler in list(self._subscribers.get(event_type, [])):
            try:
                handler(event)
            except Exception as e:
                print(f"❌ Error in {event_type} handler {getattr(handler, '__qualname__', handler)}: {e}")

        return event

    def get_latest_event(self, event_type: str) -> Optional[Event]:
        """Get the most recent event of a specific type"""
        events = [event for event in self.events if event.event_type == event_type]
        return events[-1] if events else None
