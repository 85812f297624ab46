"""Contract between an ordered view and the stream that feeds it."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable, Protocol

from ..events.child_events import ChildEvent

ChildListener = Callable[[ChildEvent], None]


@dataclass
class ChildSubscription:
    """Handle returned by :meth:`EventSource.subscribe`."""

    listener: ChildListener
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class EventSource(Protocol):
    """Delivers child events one at a time, in causal order per key.

    For changed, removed and moved events the named key must have been
    delivered as added (and not removed) before.  Implementations serialise
    delivery; listeners are never invoked concurrently.
    """

    def subscribe(self, listener: ChildListener) -> ChildSubscription: ...

    def unsubscribe(self, subscription: ChildSubscription) -> None: ...
