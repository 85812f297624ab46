"""Role definitions exposed by the ordered view list model."""

from __future__ import annotations

from enum import IntEnum
from typing import Dict

from PySide6.QtCore import Qt


class Roles(IntEnum):
    """Custom roles exposed to QML or widgets."""

    KEY = Qt.UserRole + 1
    VALUE = Qt.UserRole + 2
    SNAPSHOT = Qt.UserRole + 3


def role_names(base: Dict[int, bytes] | None = None) -> Dict[int, bytes]:
    """Return a mapping of Qt role numbers to byte names."""

    mapping: Dict[int, bytes] = {} if base is None else dict(base)
    mapping.update(
        {
            Roles.KEY: b"key",
            Roles.VALUE: b"value",
            Roles.SNAPSHOT: b"snapshot",
        }
    )
    return mapping
