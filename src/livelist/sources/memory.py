"""In-memory event source holding an ordered collection of children."""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Optional, Tuple

from ..errors import KeyNotFoundError, SourceCancelledError
from ..events.child_events import (
    ChildAdded,
    ChildChanged,
    ChildEvent,
    ChildMoved,
    ChildRemoved,
    SourceCancelled,
)
from ..models.snapshot import Snapshot
from .base import ChildListener, ChildSubscription

logger = logging.getLogger(__name__)


class MemoryChildSource:
    """Local stand-in for a remote collection.

    Every mutation updates the ordered children and is delivered to each
    active listener as the matching child event, with the predecessor key
    computed from the new position.  New subscribers first receive the
    current children as added events, in order.

    Mutations and deliveries are serialised by a re-entrant lock, so a
    listener always sees one event at a time.  Listener exceptions propagate
    to the caller of the mutating method once every listener has been
    notified.
    """

    def __init__(self, children: Optional[Iterable[Tuple[str, Any]]] = None) -> None:
        self._children: List[Snapshot] = []
        self._subscriptions: List[ChildSubscription] = []
        self._lock = threading.RLock()
        self._cancelled = False
        for key, value in children or ():
            if self._find(key) is not None:
                raise ValueError(f"Duplicate child key: {key!r}")
            self._children.append(Snapshot(key, value))

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def subscribe(self, listener: ChildListener) -> ChildSubscription:
        with self._lock:
            if self._cancelled:
                raise SourceCancelledError("Cannot subscribe to a cancelled source")
            subscription = ChildSubscription(listener)
            previous_key: Optional[str] = None
            for snapshot in list(self._children):
                listener(ChildAdded(snapshot, previous_key))
                previous_key = snapshot.key
            self._subscriptions.append(subscription)
            return subscription

    def unsubscribe(self, subscription: ChildSubscription) -> None:
        with self._lock:
            subscription.cancel()
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def listener_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._children)

    def keys(self) -> List[str]:
        with self._lock:
            return [snapshot.key for snapshot in self._children]

    def get(self, key: str) -> Snapshot:
        with self._lock:
            return self._children[self._index(key)]

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def set(self, key: str, value: Any) -> None:
        """Replace *key*'s value, or append it as the last child."""

        with self._lock:
            self._ensure_live()
            snapshot = Snapshot(key, value)
            index = self._find(key)
            if index is None:
                previous_key = self._children[-1].key if self._children else None
                self._children.append(snapshot)
                self._dispatch(ChildAdded(snapshot, previous_key))
            else:
                self._children[index] = snapshot
                self._dispatch(ChildChanged(snapshot, self._previous_key(index)))

    def insert(self, key: str, value: Any, previous_key: Optional[str] = None) -> None:
        """Add a new child right after *previous_key* (first when ``None``)."""

        with self._lock:
            self._ensure_live()
            if self._find(key) is not None:
                raise ValueError(f"Duplicate child key: {key!r}")
            position = 0 if previous_key is None else self._index(previous_key) + 1
            snapshot = Snapshot(key, value)
            self._children.insert(position, snapshot)
            self._dispatch(ChildAdded(snapshot, previous_key))

    def remove(self, key: str) -> None:
        with self._lock:
            self._ensure_live()
            snapshot = self._children.pop(self._index(key))
            self._dispatch(ChildRemoved(snapshot))

    def move(self, key: str, previous_key: Optional[str] = None) -> None:
        """Reposition *key* right after *previous_key* (first when ``None``)."""

        with self._lock:
            self._ensure_live()
            if previous_key == key:
                raise ValueError("A child cannot follow itself")
            old_index = self._index(key)
            snapshot = self._children.pop(old_index)
            try:
                position = 0 if previous_key is None else self._index(previous_key) + 1
            except KeyNotFoundError:
                self._children.insert(old_index, snapshot)
                raise
            self._children.insert(position, snapshot)
            self._dispatch(ChildMoved(snapshot, previous_key))

    def cancel(self, reason: str = "", error: Optional[BaseException] = None) -> None:
        """Terminate the source and notify every listener once.

        Every listener receives the cancellation even when an earlier one
        raises; the first listener error is re-raised afterwards.
        """

        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            subscriptions, self._subscriptions = self._subscriptions, []
            logger.info("Cancelling source with %d listener(s): %s", len(subscriptions), reason)
            live = [subscription for subscription in subscriptions if subscription.active]
            try:
                self._deliver(live, SourceCancelled(reason, error))
            finally:
                for subscription in live:
                    subscription.cancel()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _ensure_live(self) -> None:
        if self._cancelled:
            raise SourceCancelledError("Source has been cancelled")

    def _dispatch(self, event: ChildEvent) -> None:
        self._deliver(list(self._subscriptions), event)

    def _deliver(self, subscriptions: List[ChildSubscription], event: ChildEvent) -> None:
        first_error: Optional[Exception] = None
        for subscription in subscriptions:
            if not subscription.active:
                continue
            try:
                subscription.listener(event)
            except Exception as exc:
                logger.debug(
                    "Listener %s failed on %s: %s", subscription.id, type(event).__name__, exc
                )
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def _find(self, key: str) -> Optional[int]:
        for index, snapshot in enumerate(self._children):
            if snapshot.key == key:
                return index
        return None

    def _index(self, key: str) -> int:
        index = self._find(key)
        if index is None:
            raise KeyNotFoundError(key)
        return index

    def _previous_key(self, index: int) -> Optional[str]:
        return self._children[index - 1].key if index > 0 else None
