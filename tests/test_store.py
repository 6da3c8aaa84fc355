"""Tests for MoodStore mutations, persistence and notifications."""

from __future__ import annotations

import json
import shutil
import tempfile
import threading
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest
from helpers import NOW, make_entry

from stoicmood.constants import STORAGE_KEY
from stoicmood.errors import PersistenceError, ValidationError
from stoicmood.models import Mood
from stoicmood.storage import MemoryKeyValueStorage, SQLiteKeyValueStorage
from stoicmood.store import MoodStore


class FailingStorage(MemoryKeyValueStorage):
    def write(self, key: str, value: bytes) -> None:
        raise OSError("disk full")


def stored_ids(storage: MemoryKeyValueStorage) -> list[str]:
    payload = json.loads(storage.read(STORAGE_KEY))
    return [record["id"] for record in payload["entries"]]


def test_empty_storage_loads_empty(store):
    assert store.entries == []
    assert store.total_entries == 0
    assert store.current_streak == 0


def test_corrupt_storage_loads_empty():
    storage = MemoryKeyValueStorage({STORAGE_KEY: b"\x00garbage"})
    store = MoodStore(storage, clock=lambda: NOW)
    assert store.entries == []


def test_add_inserts_newest_first_and_persists(store, storage):
    first = make_entry(Mood.CONTENT, "yesterday", days_ago=1)
    second = make_entry(Mood.SAD, "today")
    store.add(first)
    store.add(second)

    assert [entry.id for entry in store.entries] == [second.id, first.id]
    assert stored_ids(storage) == [second.id, first.id]
    assert store.total_entries == 2
    assert store.current_streak == 2


def test_add_rejects_empty_content(store, storage):
    with pytest.raises(ValidationError):
        store.add(make_entry(content="   "))
    assert store.entries == []
    assert storage.read(STORAGE_KEY) is None


def test_add_rejects_duplicate_id(store):
    entry = make_entry()
    store.add(entry)
    with pytest.raises(ValidationError):
        store.add(entry)
    assert store.total_entries == 1


def test_add_then_delete_restores_state(store):
    existing = [make_entry(days_ago=n) for n in (2, 1)]
    for entry in existing:
        store.add(entry)
    before_ids = sorted(entry.id for entry in store.entries)
    before_total = store.total_entries

    extra = make_entry(Mood.GRATEFUL, "extra")
    store.add(extra)
    assert store.delete(extra.id) is True

    assert sorted(entry.id for entry in store.entries) == before_ids
    assert store.total_entries == before_total


def test_delete_unknown_id_is_noop(store):
    store.add(make_entry())
    assert store.delete("missing") is False
    assert store.total_entries == 1


def test_update_replaces_in_place(store, storage):
    entries = [make_entry(content=f"note {n}", days_ago=n) for n in (3, 2, 1)]
    for entry in entries:
        store.add(entry)
    before = store.entries
    target = before[1]

    revised = target.revise(content="rewritten with more words", mood=Mood.FOCUSED)
    assert store.update(revised) is True

    after = store.entries
    assert [entry.id for entry in after] == [entry.id for entry in before]
    assert after[1].content == "rewritten with more words"
    assert after[1].word_count == 4
    assert after[1].mood is Mood.FOCUSED
    assert after[0] == before[0]
    assert after[2] == before[2]
    assert stored_ids(storage) == [entry.id for entry in after]


def test_update_unknown_id_is_noop(store):
    store.add(make_entry())
    assert store.update(make_entry(content="stranger")) is False
    assert store.entries[0].content == "steady morning"


def test_update_cannot_move_timestamp(store):
    entry = make_entry()
    store.add(entry)
    moved = make_entry(content="moved", days_ago=1, id=entry.id)
    with pytest.raises(ValidationError):
        store.update(moved)


def test_update_does_not_recount(store):
    store.add(make_entry())
    counts = []
    store.stats_changed.connect(lambda total, streak: counts.append((total, streak)))
    store.update(store.entries[0].revise(is_quick_entry=True))
    assert counts == []


def test_signals_fire_after_mutations(store):
    snapshots = []
    counts = []
    store.entries_changed.connect(snapshots.append)
    store.stats_changed.connect(lambda total, streak: counts.append((total, streak)))

    entry = store.create_entry(Mood.GRATEFUL, "sunrise walk", timestamp=NOW)
    store.delete(entry.id)

    assert [len(snapshot) for snapshot in snapshots] == [1, 0]
    assert counts == [(1, 1), (0, 0)]


def test_persist_failure_keeps_memory_state():
    store = MoodStore(FailingStorage(), clock=lambda: NOW)
    failures = []
    store.persist_failed.connect(failures.append)

    entry = make_entry()
    store.add(entry)

    assert store.entries == [entry]
    assert failures == ["disk full"]


def test_strict_store_raises_persistence_error():
    store = MoodStore(FailingStorage(), strict=True, clock=lambda: NOW)
    entry = make_entry()
    with pytest.raises(PersistenceError):
        store.add(entry)
    assert store.entries == [entry]


def test_import_entries_reissues_colliding_ids(store):
    existing = make_entry(Mood.SAD, "existing", days_ago=1)
    store.add(existing)
    clash = make_entry(Mood.CONTENT, "clash", days_ago=2, id=existing.id)

    assert store.import_entries([clash, make_entry(content="")]) == 1

    ids = [entry.id for entry in store.entries]
    assert len(set(ids)) == 2
    assert [entry.content for entry in store.entries] == ["existing", "clash"]


def test_clear(store, storage):
    store.add(make_entry())
    store.clear()
    assert store.entries == []
    assert stored_ids(storage) == []


def test_reload_from_sqlite():
    tmpdir = tempfile.mkdtemp()
    try:
        db_path = Path(tmpdir) / "journal.db"
        storage = SQLiteKeyValueStorage(db_path)
        storage.initialize()
        store = MoodStore(storage, clock=lambda: NOW)
        for n in range(3):
            store.create_entry(Mood.FOCUSED, f"Entry {n + 1}", timestamp=NOW)

        reopened = MoodStore(SQLiteKeyValueStorage(db_path), clock=lambda: NOW)
        assert reopened.entries == store.entries
        assert reopened.entries[0].content == "Entry 3"
        assert reopened.total_entries == 3
    finally:
        shutil.rmtree(tmpdir, ignore_errors=True)


def test_entries_from_store_cannot_be_edited_in_place(store, storage):
    entry = make_entry(content="one two three four five")
    store.add(entry)
    with pytest.raises(FrozenInstanceError):
        store.get(entry.id).content = "edited"

    stored = store.entries[0]
    assert stored.content == "one two three four five"
    assert stored.word_count == 5
    assert json.loads(storage.read(STORAGE_KEY))["entries"][0]["wordCount"] == 5


def test_signals_run_after_lock_released(store):
    finished = []

    def read_from_other_thread(_snapshot):
        reader = threading.Thread(target=lambda: finished.append(len(store.entries)))
        reader.start()
        reader.join(timeout=2)
        finished.append(reader.is_alive())

    store.entries_changed.connect(read_from_other_thread)
    store.add(make_entry())

    assert finished == [1, False]


def test_strict_store_notifies_before_raising():
    store = MoodStore(FailingStorage(), strict=True, clock=lambda: NOW)
    snapshots = []
    failures = []
    store.entries_changed.connect(snapshots.append)
    store.persist_failed.connect(failures.append)

    with pytest.raises(PersistenceError):
        store.add(make_entry())
    assert [len(snapshot) for snapshot in snapshots] == [1]
    assert failures == ["disk full"]
