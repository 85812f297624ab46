from .bus import Event, EventBus, Subscription
from .child_events import (
    ChildAdded,
    ChildChanged,
    ChildEvent,
    ChildMoved,
    ChildRemoved,
    SourceCancelled,
)

__all__ = [
    "ChildAdded",
    "ChildChanged",
    "ChildEvent",
    "ChildMoved",
    "ChildRemoved",
    "Event",
    "EventBus",
    "SourceCancelled",
    "Subscription",
]
