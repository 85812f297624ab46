"""Change notifications delivered to the view's observer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class ChangeKind(str, Enum):
    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"
    MOVED = "moved"
    # The whole view is stale; emitted after bulk re-sorts and filters.
    ALL = "all"


@dataclass(frozen=True)
class Change:
    kind: ChangeKind
    index: int
    old_index: Optional[int] = None


ChangeObserver = Callable[[Change], None]
