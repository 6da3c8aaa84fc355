"""The journal store: single owner of the entry collection.

MoodStore keeps entries newest first, writes a full snapshot to its storage
backend after every mutation and emits Qt signals so views can refresh
without polling.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from PySide6.QtCore import QObject, Signal

from stoicmood import stats
from stoicmood.constants import STORAGE_KEY
from stoicmood.errors import PersistenceError, ValidationError
from stoicmood.models import Mood, MoodEntry, new_entry_id
from stoicmood.storage import KeyValueStorage, decode_entries, encode_entries
from stoicmood.utils import local_now


class MoodStore(QObject):
    """Owns the ordered entry collection and mediates persistence.

    Signals:
        entries_changed: emitted with a list[MoodEntry] snapshot after a mutation
        stats_changed: emitted with (total_entries, current_streak) on recount
        persist_failed: emitted with a message when a snapshot cannot be written
    """

    entries_changed = Signal(object)
    stats_changed = Signal(int, int)
    persist_failed = Signal(str)

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str = STORAGE_KEY,
        *,
        strict: bool = False,
        clock: Callable[[], datetime] = local_now,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._storage = storage
        self._storage_key = storage_key
        self._strict = strict
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: list[MoodEntry] = []
        self.total_entries = 0
        self.current_streak = 0
        self.load()

    @property
    def entries(self) -> list[MoodEntry]:
        """Copy of the collection, newest first."""
        with self._lock:
            return list(self._entries)

    def get(self, entry_id: str) -> MoodEntry | None:
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        return None

    def load(self) -> None:
        """Read the snapshot from storage; missing or corrupt data means no entries."""
        with self._lock:
            try:
                raw = self._storage.read(self._storage_key)
            except (OSError, sqlite3.DatabaseError):
                logging.exception("Failed to read journal snapshot; starting empty.")
                raw = None
            self._entries = decode_entries(raw)
            logging.info("Loaded %d journal entries.", len(self._entries))
            counts = self._recount()
            snapshot = list(self._entries)
        self._notify(snapshot, counts)

    def create_entry(
        self,
        mood: Mood | str,
        content: str,
        *,
        is_quick_entry: bool = False,
        timestamp: datetime | None = None,
    ) -> MoodEntry:
        entry = MoodEntry(
            mood=Mood(mood),
            content=content,
            timestamp=timestamp or self._clock(),
            is_quick_entry=is_quick_entry,
        )
        self.add(entry)
        return entry

    def add(self, entry: MoodEntry) -> None:
        """Insert at the front, persist and recount."""
        self._validate(entry)
        with self._lock:
            if any(existing.id == entry.id for existing in self._entries):
                raise ValidationError(f"Duplicate entry id: {entry.id}")
            self._entries = [entry, *self._entries]
            counts = self._recount()
            snapshot, error = self._write_snapshot()
        self._notify(snapshot, counts, error)

    def delete(self, entry_id: str) -> bool:
        """Remove every entry with ``entry_id``. Unknown ids are a no-op."""
        with self._lock:
            remaining = [entry for entry in self._entries if entry.id != entry_id]
            if len(remaining) == len(self._entries):
                return False
            self._entries = remaining
            counts = self._recount()
            snapshot, error = self._write_snapshot()
        self._notify(snapshot, counts, error)
        return True

    def update(self, entry: MoodEntry) -> bool:
        """Replace the entry with the same id in place. Counters are left as is."""
        self._validate(entry)
        with self._lock:
            index = next(
                (i for i, existing in enumerate(self._entries) if existing.id == entry.id),
                None,
            )
            if index is None:
                return False
            if entry.timestamp != self._entries[index].timestamp:
                raise ValidationError("Updating an entry cannot change its timestamp")
            updated = list(self._entries)
            updated[index] = entry
            self._entries = updated
            snapshot, error = self._write_snapshot()
        self._notify(snapshot, None, error)
        return True

    def import_entries(self, entries: Iterable[MoodEntry]) -> int:
        """Merge a batch of entries, re-issuing colliding ids. Persists once."""
        with self._lock:
            seen = {entry.id for entry in self._entries}
            incoming: list[MoodEntry] = []
            for entry in entries:
                try:
                    self._validate(entry)
                except ValidationError:
                    logging.warning("Skipping empty entry %s during import.", entry.id)
                    continue
                if entry.id in seen:
                    entry = replace(entry, id=new_entry_id())
                seen.add(entry.id)
                incoming.append(entry)
            if not incoming:
                return 0
            self._entries = stats.newest_first([*incoming, *self._entries])
            counts = self._recount()
            snapshot, error = self._write_snapshot()
        self._notify(snapshot, counts, error)
        return len(incoming)

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            counts = self._recount()
            snapshot, error = self._write_snapshot()
        self._notify(snapshot, counts, error)

    def persist(self) -> bool:
        """Write the full collection to storage. Returns False when the write failed."""
        with self._lock:
            _, error = self._write_snapshot()
        if error is not None:
            self._report_failure(error)
        return error is None

    def _write_snapshot(self) -> tuple[list[MoodEntry], Exception | None]:
        """Write the current collection; call with the lock held."""
        snapshot = list(self._entries)
        try:
            self._storage.write(self._storage_key, encode_entries(snapshot))
        except (TypeError, ValueError, OSError, sqlite3.DatabaseError) as exc:
            logging.exception("Failed to persist %d journal entries.", len(snapshot))
            return snapshot, exc
        return snapshot, None

    def _recount(self) -> tuple[int, int]:
        self.total_entries = len(self._entries)
        self.current_streak = stats.calculate_streak(self._entries, self._clock())
        return self.total_entries, self.current_streak

    def _notify(
        self,
        snapshot: list[MoodEntry],
        counts: tuple[int, int] | None,
        error: Exception | None = None,
    ) -> None:
        """Emit change signals outside the lock, then report a failed write."""
        if counts is not None:
            self.stats_changed.emit(*counts)
        self.entries_changed.emit(snapshot)
        if error is not None:
            self._report_failure(error)

    def _report_failure(self, error: Exception) -> None:
        self.persist_failed.emit(str(error))
        if self._strict:
            raise PersistenceError("Failed to persist journal entries") from error

    @staticmethod
    def _validate(entry: MoodEntry) -> None:
        if not entry.content or not entry.content.strip():
            raise ValidationError("Entry content must not be empty")
