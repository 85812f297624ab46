"""Child-level events delivered by an event source.

The four mutation kinds plus cancellation form a closed union; the ordered
view consumes all of them through a single ``apply_event`` entry point.
``previous_key`` names the key that should immediately precede the affected
child, ``None`` meaning "first".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..models.snapshot import Snapshot


@dataclass(frozen=True)
class ChildAdded:
    snapshot: Snapshot
    previous_key: Optional[str] = None


@dataclass(frozen=True)
class ChildChanged:
    snapshot: Snapshot
    previous_key: Optional[str] = None


@dataclass(frozen=True)
class ChildRemoved:
    snapshot: Snapshot


@dataclass(frozen=True)
class ChildMoved:
    snapshot: Snapshot
    previous_key: Optional[str] = None


@dataclass(frozen=True)
class SourceCancelled:
    """The source stopped delivering, e.g. because access was revoked."""

    reason: str = ""
    error: Optional[BaseException] = None


ChildEvent = Union[ChildAdded, ChildChanged, ChildRemoved, ChildMoved, SourceCancelled]
