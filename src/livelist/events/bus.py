import logging
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Type


@dataclass(kw_only=True)
class Event:
    """Base class for everything published on an :class:`EventBus`."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by subscribe(); can be used to unsubscribe."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    active: bool = True

    def cancel(self):
        self.active = False


class EventBus:
    """Synchronous publish/subscribe hub keyed by event type.

    Handler failures are logged and never reach the publisher, so one broken
    listener cannot prevent the others from seeing an error report.
    """

    def __init__(self, logger: logging.Logger = None):
        self._logger = logger or logging.getLogger(__name__)
        self._handlers: Dict[Type[Event], List[Subscription]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[Event], handler: Callable) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler)
        with self._lock:
            self._handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription):
        subscription.active = False
        with self._lock:
            subs = self._handlers.get(subscription.event_type)
            if subs and subscription in subs:
                subs.remove(subscription)

    def publish(self, event: Event):
        event_type = type(event)

        with self._lock:
            subs = list(self._handlers[event_type])

        for sub in subs:
            if not sub.active:
                continue
            try:
                sub.handler(event)
            except Exception as e:
                self._logger.error(f"Handler failed for {event_type.__name__}: {e}")

    def handler_count(self, event_type: Type[Event]) -> int:
        with self._lock:
            return sum(1 for sub in self._handlers[event_type] if sub.active)
