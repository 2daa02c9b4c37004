from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Sequence

from PySide6 import QtCore

from facetfilter.model.facet_counts import FacetEntry
from facetfilter.service.session import FilterSession, RecomputeResult


class FacetListModel(QtCore.QAbstractListModel):
    """One facet list (value, count, checked) for a Qt list view."""

    ValueRole = QtCore.Qt.UserRole + 1
    CountRole = QtCore.Qt.UserRole + 2
    GroupRole = QtCore.Qt.UserRole + 3

    # Emitted only for user edits, with the full set of checked values
    selectionEdited = QtCore.Signal(list)

    def __init__(self, entries: Sequence[FacetEntry] | None = None) -> None:
        super().__init__()
        self._entries: List[FacetEntry] = list(entries or [])

    def entries(self) -> List[FacetEntry]:
        return list(self._entries)

    def set_entries(self, entries: Sequence[FacetEntry]) -> None:
        # Structural rebuild (cascading mode)
        self.beginResetModel()
        self._entries = list(entries)
        self.endResetModel()

    def update_counts(self, entries: Sequence[FacetEntry]) -> None:
        # Live count update: same rows in the same order keep their structure
        if [e.value for e in entries] != [e.value for e in self._entries]:
            self.set_entries(entries)
            return
        self._entries = list(entries)
        if self._entries:
            self.dataChanged.emit(self.index(0), self.index(len(self._entries) - 1))

    def selected_values(self) -> List[str]:
        return [e.value for e in self._entries if e.selected]

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._entries)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or index.row() >= len(self._entries):
            return None
        entry = self._entries[index.row()]
        if role == QtCore.Qt.DisplayRole:
            return f"{entry.label} ({entry.count:,})"
        if role == QtCore.Qt.CheckStateRole:
            return QtCore.Qt.Checked if entry.selected else QtCore.Qt.Unchecked
        if role == self.ValueRole:
            return entry.value
        if role == self.CountRole:
            return entry.count
        if role == self.GroupRole:
            return entry.group
        return None

    def flags(self, index: QtCore.QModelIndex):  # type: ignore[override]
        if not index.isValid():
            return QtCore.Qt.NoItemFlags
        return QtCore.Qt.ItemIsEnabled | QtCore.Qt.ItemIsUserCheckable

    def setData(self, index: QtCore.QModelIndex, value, role: int = QtCore.Qt.EditRole) -> bool:  # type: ignore[override]
        if not index.isValid() or role != QtCore.Qt.CheckStateRole:
            return False
        row = index.row()
        self._entries[row] = replace(self._entries[row], selected=_is_checked(value))
        self.dataChanged.emit(index, index, [QtCore.Qt.CheckStateRole])
        self.selectionEdited.emit(self.selected_values())
        return True


def _is_checked(value) -> bool:
    checked = QtCore.Qt.Checked
    return value == checked or value == getattr(checked, "value", checked)


def bind_facet_models(session: FilterSession, models: Dict[str, FacetListModel]) -> None:
    """Keep list models in sync with a session, and feed user edits back.

    Model refreshes happen inside the session's rebuild guard, so the
    session ignores any selection writes they cause.
    """

    def apply(result: RecomputeResult) -> None:
        for dimension, model in models.items():
            entries = result.facet_lists.get(dimension, [])
            if session.state.cascade_mode:
                model.set_entries(entries)
            else:
                model.update_counts(entries)

    session.on_result(apply)
    for dimension, model in models.items():
        model.selectionEdited.connect(lambda values, d=dimension: session.select(d, values))
