"""Exclusion predicates over snapshots.

A predicate returns ``True`` for the snapshots an ordered view should *hide*.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from ..models.snapshot import Snapshot

Predicate = Callable[[Snapshot], bool]


def field_equals(path: str, value: Any) -> Predicate:
    """Exclude snapshots whose field at *path* equals *value*."""

    def _predicate(snapshot: Snapshot) -> bool:
        return snapshot.has_child(path) and snapshot.get(path) == value

    return _predicate


def field_in(path: str, values: Iterable[Any]) -> Predicate:
    """Exclude snapshots whose field at *path* is one of *values*."""

    candidates = list(values)

    def _predicate(snapshot: Snapshot) -> bool:
        return snapshot.has_child(path) and snapshot.get(path) in candidates

    return _predicate


def field_missing(path: str) -> Predicate:
    """Exclude snapshots that do not carry a value at *path*."""

    def _predicate(snapshot: Snapshot) -> bool:
        return not snapshot.has_child(path)

    return _predicate


def any_of(*predicates: Predicate) -> Predicate:
    def _predicate(snapshot: Snapshot) -> bool:
        return any(predicate(snapshot) for predicate in predicates)

    return _predicate
