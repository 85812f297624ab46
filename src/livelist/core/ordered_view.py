"""Ordered, indexable view over a stream of child events."""

from __future__ import annotations

import logging
from bisect import bisect_left
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..errors import (
    ComparisonAnomaly,
    KeyNotFoundError,
    OutOfRangeError,
    ReentrancyError,
    SourceCancelledError,
    ViewClosedError,
)
from ..errors.handler import ErrorHandler, ErrorSeverity
from ..events.child_events import (
    ChildAdded,
    ChildChanged,
    ChildEvent,
    ChildMoved,
    ChildRemoved,
    SourceCancelled,
)
from ..models.changes import Change, ChangeKind, ChangeObserver
from ..models.snapshot import Snapshot
from ..sources.base import ChildSubscription, EventSource
from .filters import Predicate
from .ordering import Direction, FieldComparator

logger = logging.getLogger(__name__)


class OrderedView:
    """Maintain a locally ordered copy of a remote collection.

    The view subscribes to *source* on construction and applies every child
    event it receives, keeping ``sequence`` free of duplicate keys, ordered
    either by the predecessor hints of the stream or by a field comparator,
    and free of elements matched by the exclusion predicate.  Each applied
    event produces exactly one :class:`Change` for the observer; bulk
    operations (:meth:`set_ordering`, :meth:`set_filter`, :meth:`reverse`)
    produce a single ``ALL`` change.

    Besides the visible sequence the view records the source's own order of
    every key, hidden or not.  Excluded children are placed back from that
    order when a later filter stops excluding them.

    The view performs no locking.  All calls, including event delivery, must
    come from one thread or be serialised by the caller.
    """

    def __init__(
        self,
        source: EventSource,
        *,
        error_handler: Optional[ErrorHandler] = None,
        observer: Optional[ChangeObserver] = None,
    ) -> None:
        self._source = source
        self._error_handler = error_handler
        self._observer = observer
        self._snapshots: List[Snapshot] = []
        # Source order of all known keys, visible and hidden.
        self._stream: List[str] = []
        self._hidden: Dict[str, Snapshot] = {}
        self._comparator: Optional[FieldComparator] = None
        self._predicate: Optional[Predicate] = None
        self._order = Direction.ASCENDING
        self._notifying = False
        self._closed = False
        self._cancelled: Optional[SourceCancelledError] = None
        self._subscription: Optional[ChildSubscription] = None
        # Sources may replay their current children synchronously here.
        self._subscription = source.subscribe(self.apply_event)

    # ------------------------------------------------------------------
    # Array-like access
    # ------------------------------------------------------------------
    def count(self) -> int:
        """Return the number of visible elements."""

        return len(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def item_at(self, index: int) -> Snapshot:
        """Return the element at *index*.

        Negative indices are rejected rather than counted from the end.
        """

        if not isinstance(index, int) or not 0 <= index < len(self._snapshots):
            raise OutOfRangeError(
                f"Index {index!r} out of range for view of {len(self._snapshots)} items"
            )
        return self._snapshots[index]

    def __getitem__(self, index: int) -> Snapshot:
        return self.item_at(index)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(list(self._snapshots))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._find(key) is not None

    def keys(self) -> List[str]:
        return [snapshot.key for snapshot in self._snapshots]

    def index_of(self, key: str) -> int:
        """Return the current index of *key*; indices shift on every mutation."""

        index = self._find(key)
        if index is None:
            raise KeyNotFoundError(key)
        return index

    def _find(self, key: str) -> Optional[int]:
        for index, snapshot in enumerate(self._snapshots):
            if snapshot.key == key:
                return index
        return None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def source(self) -> EventSource:
        return self._source

    @property
    def order(self) -> Direction:
        return self._order

    @property
    def comparator(self) -> Optional[FieldComparator]:
        return self._comparator

    @property
    def predicate(self) -> Optional[Predicate]:
        return self._predicate

    @property
    def is_sorted(self) -> bool:
        return self._comparator is not None

    @property
    def is_filtered(self) -> bool:
        return self._predicate is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> Optional[SourceCancelledError]:
        """The cancellation error reported by the source, if any."""

        return self._cancelled

    def hidden_keys(self) -> List[str]:
        """Return the keys currently excluded by the predicate, in source order."""

        return [key for key in self._stream if key in self._hidden]

    # ------------------------------------------------------------------
    # Observer
    # ------------------------------------------------------------------
    def set_change_observer(self, observer: Optional[ChangeObserver]) -> None:
        """Replace the observer; only future changes are delivered to it."""

        self._observer = observer

    def _notify(self, kind: ChangeKind, index: int, old_index: Optional[int] = None) -> None:
        observer = self._observer
        if observer is None:
            return
        self._notifying = True
        try:
            observer(Change(kind, index, old_index))
        finally:
            self._notifying = False

    def _check_reentrancy(self, operation: str) -> None:
        if self._notifying:
            raise ReentrancyError(f"{operation} called from within a change observer")

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise ViewClosedError(f"{operation} called on a torn down view")

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_ordering(
        self,
        field_path: str,
        direction: Direction = Direction.ASCENDING,
        value_type: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        """Order the view by the value at *field_path* and re-sort it."""

        self._ensure_open("set_ordering")
        self._check_reentrancy("set_ordering")
        direction = Direction(direction)
        self._comparator = FieldComparator(
            field_path,
            direction,
            value_type,
            on_anomaly=self._report_anomaly,
        )
        self._order = direction
        self._sort()
        self._notify(ChangeKind.ALL, 0)

    def reverse(self) -> None:
        """Switch to descending order.

        Without a comparator the current sequence is simply reversed, so
        calling this twice restores the original order.
        """

        self._ensure_open("reverse")
        self._check_reentrancy("reverse")
        self._order = Direction.DESCENDING
        if self._comparator is None:
            self._snapshots.reverse()
        else:
            self._comparator = self._comparator.with_direction(Direction.DESCENDING)
            self._sort()
        self._notify(ChangeKind.ALL, 0)

    def set_filter(self, predicate: Optional[Predicate]) -> None:
        """Hide every element for which *predicate* holds.

        Elements hidden by an earlier predicate that *predicate* no longer
        excludes are restored; ``None`` restores all of them.
        """

        self._ensure_open("set_filter")
        self._check_reentrancy("set_filter")
        self._predicate = predicate
        self._restore_hidden()
        if predicate is not None:
            kept: List[Snapshot] = []
            for snapshot in self._snapshots:
                if predicate(snapshot):
                    self._hidden[snapshot.key] = snapshot
                else:
                    kept.append(snapshot)
            self._snapshots = kept
        self._notify(ChangeKind.ALL, 0)

    def teardown(self) -> None:
        """Detach from the source; the view cannot be reconfigured afterwards."""

        if self._closed:
            logger.debug("teardown() called again on %r", self)
            return
        self._closed = True
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            self._source.unsubscribe(subscription)
        logger.debug("Tore down %r", self)

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------
    def apply_event(self, event: ChildEvent) -> None:
        """Apply one child event delivered by the source."""

        if self._closed:
            logger.debug("Ignoring %s delivered after teardown", type(event).__name__)
            return
        self._check_reentrancy("apply_event")
        handler = self._HANDLERS.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported child event: {event!r}")
        handler(self, event)

    def _on_child_added(self, event: ChildAdded) -> None:
        snapshot = event.snapshot
        if snapshot.key in self._hidden or self._find(snapshot.key) is not None:
            # At-least-once delivery may repeat an add.
            logger.debug("Duplicate add for %s applied as a change", snapshot.key)
            self._on_child_changed(ChildChanged(snapshot, event.previous_key))
            return
        self._link(snapshot.key, event.previous_key)
        if self._excludes(snapshot):
            self._hidden[snapshot.key] = snapshot
            return
        index = self._placement(snapshot)
        self._snapshots.insert(index, snapshot)
        self._notify(ChangeKind.ADDED, index)

    def _on_child_changed(self, event: ChildChanged) -> None:
        snapshot = event.snapshot
        index = self._find(snapshot.key)
        if index is None:
            if snapshot.key not in self._hidden:
                raise KeyNotFoundError(snapshot.key)
            if self._excludes(snapshot):
                self._hidden[snapshot.key] = snapshot
                return
            del self._hidden[snapshot.key]
            index = self._placement(snapshot)
            self._snapshots.insert(index, snapshot)
            self._notify(ChangeKind.ADDED, index)
            return

        if self._excludes(snapshot):
            del self._snapshots[index]
            self._hidden[snapshot.key] = snapshot
            self._notify(ChangeKind.REMOVED, index)
            return

        self._snapshots[index] = snapshot
        if self._comparator is not None:
            self._sort()
        # Reported at the position the element held before re-sorting.
        self._notify(ChangeKind.CHANGED, index)

    def _on_child_removed(self, event: ChildRemoved) -> None:
        key = event.snapshot.key
        index = self._find(key)
        if index is None:
            if self._hidden.pop(key, None) is None:
                raise KeyNotFoundError(key)
            self._stream.remove(key)
            return
        del self._snapshots[index]
        self._stream.remove(key)
        self._notify(ChangeKind.REMOVED, index)

    def _on_child_moved(self, event: ChildMoved) -> None:
        snapshot = event.snapshot
        key = snapshot.key
        old_index = self._find(key)
        if old_index is None and key not in self._hidden:
            raise KeyNotFoundError(key)

        stream_position = self._stream.index(key)
        del self._stream[stream_position]
        try:
            self._link(key, event.previous_key)
        except KeyNotFoundError:
            self._stream.insert(stream_position, key)
            raise

        if old_index is None:
            self._hidden[key] = snapshot
            return

        del self._snapshots[old_index]
        new_index = self._visible_index_before(self._stream.index(key))
        self._snapshots.insert(new_index, snapshot)
        if self._comparator is not None:
            self._sort()
        self._notify(ChangeKind.MOVED, new_index, old_index)

    def _on_source_cancelled(self, event: SourceCancelled) -> None:
        error = SourceCancelledError(event.reason or "Event source cancelled", cause=event.error)
        logger.warning("Event source cancelled for %r: %s", self, error)
        self._cancelled = error
        # The source drops its listeners itself when it cancels.
        self._closed = True
        self._subscription = None
        if self._error_handler is None:
            if isinstance(event.error, BaseException):
                raise error from event.error
            raise error
        self._error_handler.handle(error, ErrorSeverity.ERROR, view=repr(self))

    _HANDLERS: Dict[type, Callable[["OrderedView", Any], None]] = {
        ChildAdded: _on_child_added,
        ChildChanged: _on_child_changed,
        ChildRemoved: _on_child_removed,
        ChildMoved: _on_child_moved,
        SourceCancelled: _on_source_cancelled,
    }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _excludes(self, snapshot: Snapshot) -> bool:
        return self._predicate is not None and bool(self._predicate(snapshot))

    def _sort(self) -> None:
        if self._comparator is not None:
            self._snapshots.sort(key=self._comparator.sort_key())

    def _link(self, key: str, previous_key: Optional[str]) -> None:
        """Record *key* in source order right after *previous_key*.

        Sorted views ignore predecessor hints for placement, so an unknown
        predecessor only fails an unsorted view.
        """

        if previous_key is None:
            self._stream.insert(0, key)
            return
        try:
            position = self._stream.index(previous_key)
        except ValueError:
            if self._comparator is None:
                raise KeyNotFoundError(previous_key) from None
            logger.debug("Unknown predecessor %s for %s; appending", previous_key, key)
            position = len(self._stream) - 1
        self._stream.insert(position + 1, key)

    def _placement(self, snapshot: Snapshot) -> int:
        """Return the visible index for a linked, not yet visible *snapshot*."""

        if self._comparator is not None:
            sort_key = self._comparator.sort_key()
            return bisect_left(self._snapshots, sort_key(snapshot), key=sort_key)
        return self._visible_index_before(self._stream.index(snapshot.key))

    def _visible_index_before(self, stream_position: int) -> int:
        """Return the index after the nearest visible key preceding *stream_position*."""

        for key in reversed(self._stream[:stream_position]):
            if key not in self._hidden:
                return self.index_of(key) + 1
        return 0

    def _restore_hidden(self) -> None:
        # Source order, so each restored predecessor is in place before its successor.
        restored = [
            key
            for key in self._stream
            if key in self._hidden and not self._excludes(self._hidden[key])
        ]
        for key in restored:
            snapshot = self._hidden.pop(key)
            self._snapshots.insert(self._placement(snapshot), snapshot)

    def _report_anomaly(self, anomaly: ComparisonAnomaly) -> None:
        if self._error_handler is None:
            logger.warning("Comparison anomaly: %s", anomaly)
            return
        self._error_handler.handle(
            anomaly,
            ErrorSeverity.WARNING,
            view=repr(self),
            field_path=anomaly.field_path,
        )

    def __repr__(self) -> str:
        return (
            f"<OrderedView count={len(self._snapshots)} order={self._order.value} "
            f"sorted={self.is_sorted} filtered={self.is_filtered} closed={self._closed}>"
        )
