"""Qt list model that exposes the store's entries to item views."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from PySide6.QtCore import QAbstractListModel, QModelIndex, QPersistentModelIndex, Qt

from stoicmood import stats
from stoicmood.constants import PREVIEW_LENGTH
from stoicmood.models import JournalFilter, MoodEntry
from stoicmood.store import MoodStore
from stoicmood.utils import format_timestamp_display, local_now, preview_text


class EntryListModel(QAbstractListModel):
    """List model over the filtered journal.

    Holds the current time-range filter and search query, and re-applies the
    composed filter whenever the bound store reports a change.
    """

    def __init__(self, parent=None, clock: Callable[[], datetime] = local_now) -> None:
        super().__init__(parent)
        self._clock = clock
        self._source: list[MoodEntry] = []
        self._entries: list[MoodEntry] = []
        self._filter = JournalFilter.ALL
        self._query = ""
        self._store: MoodStore | None = None

    def rowCount(
        self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._entries)

    def data(
        self,
        index: QModelIndex | QPersistentModelIndex,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> Any:
        if not index.isValid() or index.row() >= len(self._entries):
            return None

        entry = self._entries[index.row()]

        if role == Qt.ItemDataRole.DisplayRole:
            header = (
                f"[{format_timestamp_display(entry.timestamp)}] "
                f"{entry.mood.emoji} {entry.mood.display_name}"
            )
            if entry.is_quick_entry:
                header += " (quick)"
            preview = preview_text(entry.content, PREVIEW_LENGTH)
            return f"{header}\n  -> {preview}" if preview else header

        elif role == Qt.ItemDataRole.UserRole:
            return entry

        return None

    def get_entry(self, index: QModelIndex) -> MoodEntry | None:
        if not index.isValid() or index.row() >= len(self._entries):
            return None
        return self._entries[index.row()]

    def bind_store(self, store: MoodStore) -> None:
        """Follow ``store``: refresh whenever its entries change."""
        if self._store is not None:
            self._store.entries_changed.disconnect(self.set_entries)
        self._store = store
        store.entries_changed.connect(self.set_entries)
        self.set_entries(store.entries)

    def set_entries(self, entries: list[MoodEntry]) -> None:
        self._source = list(entries)
        self._refilter()

    def set_filter(self, journal_filter: JournalFilter) -> None:
        self._filter = JournalFilter(journal_filter)
        self._refilter()

    def set_search_query(self, query: str) -> None:
        self._query = query or ""
        self._refilter()

    def clear(self) -> None:
        self.beginResetModel()
        self._source = []
        self._entries = []
        self.endResetModel()

    def _refilter(self) -> None:
        self.beginResetModel()
        self._entries = stats.filter_entries(
            self._source, self._filter, self._query, self._clock()
        )
        self.endResetModel()
