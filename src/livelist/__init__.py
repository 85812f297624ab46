"""Ordered, observable local views over streams of child events."""

from .core import Direction, FieldComparator, OrderedView
from .errors import (
    ComparisonAnomaly,
    KeyNotFoundError,
    LiveListError,
    OutOfRangeError,
    ReentrancyError,
    SourceCancelledError,
    ViewClosedError,
)
from .events import ChildAdded, ChildChanged, ChildMoved, ChildRemoved, SourceCancelled
from .models import Change, ChangeKind, Snapshot
from .sources import EventSource, MemoryChildSource

__all__ = [
    "Change",
    "ChangeKind",
    "ChildAdded",
    "ChildChanged",
    "ChildMoved",
    "ChildRemoved",
    "ComparisonAnomaly",
    "Direction",
    "EventSource",
    "FieldComparator",
    "KeyNotFoundError",
    "LiveListError",
    "MemoryChildSource",
    "OrderedView",
    "OutOfRangeError",
    "ReentrancyError",
    "Snapshot",
    "SourceCancelled",
    "SourceCancelledError",
    "ViewClosedError",
]
