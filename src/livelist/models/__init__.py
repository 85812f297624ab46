from .changes import Change, ChangeKind, ChangeObserver
from .snapshot import Snapshot

__all__ = ["Change", "ChangeKind", "ChangeObserver", "Snapshot"]
