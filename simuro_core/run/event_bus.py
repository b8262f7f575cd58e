import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List

from simuro_core.config.enums import EventType

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any], None]


class EventBus:
    """Synchronous publish/subscribe hub for match lifecycle events.

    Subscribers run on the publishing thread, in subscription order. A subscriber
    that raises is logged and skipped; the remaining subscribers still receive the event.
    """

    def __init__(self):
        self._subscribers: Dict[EventType, List[Subscriber]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_type: EventType, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers[event_type].append(callback)

    def unsubscribe(self, event_type: EventType, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers[event_type]:
                self._subscribers[event_type].remove(callback)

    def publish(self, event_type: EventType, payload: Any = None) -> None:
        with self._lock:
            subscribers = list(self._subscribers[event_type])

        for callback in subscribers:
            try:
                callback(payload)
            except Exception:
                logger.exception("Subscriber %r failed while handling %s", callback, event_type.name)
