"""Qt list model presenting an :class:`OrderedView` to views and QML."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from PySide6.QtCore import QAbstractListModel, QModelIndex, QPersistentModelIndex, Qt, Signal

from ..core.ordered_view import OrderedView
from ..models.changes import Change, ChangeKind
from ..models.snapshot import Snapshot
from .roles import Roles, role_names

logger = logging.getLogger(__name__)


class OrderedViewListModel(QAbstractListModel):
    """Expose an ordered view's elements as list rows.

    The view notifies after it has mutated, while Qt requires the
    ``begin*``/``end*`` brackets around the change.  The model therefore
    serves rows from its own mirror of the view and applies each change to
    the mirror inside the matching bracket.
    """

    # Emitted after every change has been applied to the mirror.
    changeApplied = Signal(str, int, int)

    def __init__(self, view: OrderedView, parent=None) -> None:  # type: ignore[override]
        super().__init__(parent)
        self._view: Optional[OrderedView] = view
        self._rows: List[Snapshot] = list(view)
        view.set_change_observer(self._on_change)

    def view(self) -> Optional[OrderedView]:
        return self._view

    def detach(self) -> None:
        """Stop observing the view; the rows stay as they were."""

        if self._view is not None:
            self._view.set_change_observer(None)
            self._view = None

    # ------------------------------------------------------------------
    # QAbstractListModel API
    # ------------------------------------------------------------------
    def rowCount(self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._rows)

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return role_names(super().roleNames())

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid():
            return None
        row = index.row()
        if not 0 <= row < len(self._rows):
            return None
        snapshot = self._rows[row]
        if role in (Qt.DisplayRole, Roles.KEY):
            return snapshot.key
        if role == Roles.VALUE:
            return snapshot.value
        if role == Roles.SNAPSHOT:
            return snapshot
        return None

    def snapshot_at(self, row: int) -> Optional[Snapshot]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None

    # ------------------------------------------------------------------
    # Change handling
    # ------------------------------------------------------------------
    def _on_change(self, change: Change) -> None:
        view = self._view
        if view is None:
            return

        if change.kind is ChangeKind.ADDED:
            self.beginInsertRows(QModelIndex(), change.index, change.index)
            self._rows.insert(change.index, view.item_at(change.index))
            self.endInsertRows()
        elif change.kind is ChangeKind.REMOVED:
            self.beginRemoveRows(QModelIndex(), change.index, change.index)
            self._rows.pop(change.index)
            self.endRemoveRows()
        elif change.kind is ChangeKind.CHANGED and not view.is_sorted:
            self._rows[change.index] = view.item_at(change.index)
            model_index = self.index(change.index, 0)
            self.dataChanged.emit(model_index, model_index)
        elif change.kind is ChangeKind.MOVED and not view.is_sorted:
            self._apply_move(view, change.old_index, change.index)
        else:
            # Bulk changes and re-sorted views cannot be expressed row by row.
            self._reset_from(view)

        self.changeApplied.emit(
            change.kind.value,
            change.index,
            -1 if change.old_index is None else change.old_index,
        )

    def _apply_move(self, view: OrderedView, old_row: int, new_row: int) -> None:
        if old_row == new_row:
            self._rows[new_row] = view.item_at(new_row)
            model_index = self.index(new_row, 0)
            self.dataChanged.emit(model_index, model_index)
            return
        # Qt expects the destination row as counted before the source is removed.
        destination = new_row + 1 if new_row > old_row else new_row
        if not self.beginMoveRows(QModelIndex(), old_row, old_row, QModelIndex(), destination):
            logger.debug("beginMoveRows refused %d -> %d; resetting", old_row, new_row)
            self._reset_from(view)
            return
        self._rows.pop(old_row)
        self._rows.insert(new_row, view.item_at(new_row))
        self.endMoveRows()

    def _reset_from(self, view: OrderedView) -> None:
        self.beginResetModel()
        self._rows = list(view)
        self.endResetModel()
