"""Field based ordering of snapshots."""

from __future__ import annotations

import logging
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Optional

from ..errors import ComparisonAnomaly
from ..models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class FieldComparator:
    """Order snapshots by the value stored at ``field_path``.

    Heterogeneous collections are common, so a pair that cannot be compared
    (missing field, failed ``value_type`` conversion, incomparable values) is
    logged as a :class:`ComparisonAnomaly` and treated as equal instead of
    failing the whole sort.
    """

    def __init__(
        self,
        field_path: str,
        direction: Direction = Direction.ASCENDING,
        value_type: Optional[Callable[[Any], Any]] = None,
        on_anomaly: Optional[Callable[[ComparisonAnomaly], None]] = None,
    ) -> None:
        if not field_path:
            raise ValueError("field_path must not be empty")
        self._field_path = field_path
        self._direction = Direction(direction)
        self._value_type = value_type
        self._on_anomaly = on_anomaly

    @property
    def field_path(self) -> str:
        return self._field_path

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def value_type(self) -> Optional[Callable[[Any], Any]]:
        return self._value_type

    def with_direction(self, direction: Direction) -> "FieldComparator":
        """Return a copy of this comparator ordering in *direction*."""

        return FieldComparator(
            self._field_path,
            direction,
            self._value_type,
            self._on_anomaly,
        )

    def sort_key(self):
        return cmp_to_key(self.compare)

    def _report(self, left: Snapshot, right: Snapshot, reason: str) -> int:
        anomaly = ComparisonAnomaly(self._field_path, left.key, right.key, reason)
        if self._on_anomaly is not None:
            self._on_anomaly(anomaly)
        else:
            logger.warning("Comparison anomaly: %s", anomaly)
        return 0

    def compare(self, left: Snapshot, right: Snapshot) -> int:
        if not (left.has_child(self._field_path) and right.has_child(self._field_path)):
            return self._report(left, right, "missing field")

        value_left = left.get(self._field_path)
        value_right = right.get(self._field_path)
        if self._value_type is not None:
            try:
                value_left = self._value_type(value_left)
                value_right = self._value_type(value_right)
            except (TypeError, ValueError):
                return self._report(left, right, "value type mismatch")

        try:
            if value_left < value_right:
                result = -1
            elif value_right < value_left:
                result = 1
            else:
                result = 0
        except TypeError:
            return self._report(left, right, "incomparable values")

        if self._direction is Direction.DESCENDING:
            return -result
        return result

    def __call__(self, left: Snapshot, right: Snapshot) -> int:
        return self.compare(left, right)

    def __repr__(self) -> str:
        return (
            f"FieldComparator({self._field_path!r}, {self._direction.value!r}, "
            f"value_type={getattr(self._value_type, '__name__', self._value_type)!r})"
        )
