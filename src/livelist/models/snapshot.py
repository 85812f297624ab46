"""Immutable snapshot of one remote child record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..config import FIELD_PATH_SEPARATOR

_MISSING = object()


def _split_path(path: str) -> list[str]:
    return [part for part in path.split(FIELD_PATH_SEPARATOR) if part]


@dataclass(frozen=True)
class Snapshot:
    """A keyed document as delivered by one child event.

    ``value`` is the opaque payload: a nested mapping, a sequence or a
    scalar.  Snapshots are replaced wholesale on every update, never patched.
    """

    key: str
    value: Any = None

    @property
    def exists(self) -> bool:
        return self.value is not None

    def _lookup(self, path: str) -> Any:
        target = self.value
        for part in _split_path(path):
            if isinstance(target, Mapping):
                if part not in target:
                    return _MISSING
                target = target[part]
            elif isinstance(target, (list, tuple)):
                try:
                    target = target[int(part)]
                except (ValueError, IndexError):
                    return _MISSING
            else:
                return _MISSING
        if target is None:
            return _MISSING
        return target

    def has_child(self, path: str) -> bool:
        """Return ``True`` when *path* resolves to a non-null value."""

        return self._lookup(path) is not _MISSING

    def get(self, path: str, default: Optional[Any] = None) -> Any:
        """Return the value stored at *path*, or *default* when absent."""

        value = self._lookup(path)
        return default if value is _MISSING else value

    def child(self, path: str) -> "Snapshot":
        """Return the sub-document at *path* as its own snapshot.

        The child's key is the last path segment; a missing child yields a
        snapshot whose ``value`` is ``None``.
        """

        parts = _split_path(path)
        key = parts[-1] if parts else self.key
        return Snapshot(key, self.get(path))
