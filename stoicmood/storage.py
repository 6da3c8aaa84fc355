"""Key-value persistence and snapshot encoding for journal entries."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from stoicmood.constants import SCHEMA_VERSION
from stoicmood.models import MoodEntry

if TYPE_CHECKING:
    from stoicmood.store import MoodStore


class KeyValueStorage(Protocol):
    def read(self, key: str) -> bytes | None: ...

    def write(self, key: str, value: bytes) -> None: ...

    def remove(self, key: str) -> None: ...


def apply_sqlite_pragmas(conn: sqlite3.Connection) -> None:
    """Apply the WAL and sync/temp_store settings shared by every connection."""
    try:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA temp_store=MEMORY;")
    except sqlite3.DatabaseError:
        logging.exception("Failed to apply SQLite PRAGMA settings.")


class SQLiteKeyValueStorage:
    """Durable key-value storage backed by a single SQLite table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def initialize(self) -> None:
        """Ensure the database file and the preferences table exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with sqlite3.connect(self.db_path) as conn:
                apply_sqlite_pragmas(conn)
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS preferences (
                        key TEXT PRIMARY KEY,
                        value BLOB NOT NULL
                    )
                    """
                )
        except sqlite3.DatabaseError:
            logging.exception("Failed to initialize journal database at %s", self.db_path)
            raise

    def read(self, key: str) -> bytes | None:
        if not self.db_path.exists():
            return None
        try:
            with sqlite3.connect(self.db_path) as conn:
                apply_sqlite_pragmas(conn)
                row = conn.execute(
                    "SELECT value FROM preferences WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.DatabaseError:
            logging.exception("Failed to read %r from %s", key, self.db_path)
            return None
        if row is None:
            return None
        value = row[0]
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def write(self, key: str, value: bytes) -> None:
        self.initialize()
        with sqlite3.connect(self.db_path) as conn:
            apply_sqlite_pragmas(conn)
            conn.execute(
                """
                INSERT INTO preferences (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, sqlite3.Binary(value)),
            )

    def remove(self, key: str) -> None:
        if not self.db_path.exists():
            return
        with sqlite3.connect(self.db_path) as conn:
            apply_sqlite_pragmas(conn)
            conn.execute("DELETE FROM preferences WHERE key = ?", (key,))


class MemoryKeyValueStorage:
    """In-process storage, handy for tests and embedding."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._values: dict[str, bytes] = dict(initial or {})

    def read(self, key: str) -> bytes | None:
        return self._values.get(key)

    def write(self, key: str, value: bytes) -> None:
        self._values[key] = bytes(value)

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


def encode_entries(entries: list[MoodEntry]) -> bytes:
    """Serialize the whole collection into a versioned JSON snapshot."""
    payload = {
        "version": SCHEMA_VERSION,
        "entries": [entry.to_record() for entry in entries],
    }
    return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")


def decode_entries(raw: bytes | str | None) -> list[MoodEntry]:
    """Decode a snapshot, returning an empty list for missing or corrupt data.

    Accepts the versioned envelope as well as a bare JSON array. Timestamps
    may be ISO-8601 strings or epoch seconds. Malformed records inside an
    otherwise readable snapshot are skipped.
    """
    if not raw:
        return []
    try:
        data: Any = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        logging.exception("Stored journal snapshot is not valid JSON; starting empty.")
        return []

    if isinstance(data, dict):
        records = data.get("entries")
        version = data.get("version", SCHEMA_VERSION)
        if isinstance(version, int) and version > SCHEMA_VERSION:
            logging.warning(
                "Snapshot version %s is newer than supported version %s.",
                version,
                SCHEMA_VERSION,
            )
    else:
        records = data
    if not isinstance(records, list):
        logging.error("Stored journal snapshot has no entry list; starting empty.")
        return []

    entries: list[MoodEntry] = []
    for record in records:
        try:
            entries.append(MoodEntry.from_record(record))
        except (KeyError, TypeError, ValueError, OverflowError):
            logging.exception("Skipping malformed journal record: %r", record)
    return entries


def import_legacy_json(json_path: Path, store: MoodStore) -> int:
    """Bulk import entries from a JSON backup file into the store."""
    json_path = Path(json_path)
    if not json_path.exists() or json_path.stat().st_size == 0:
        return 0

    try:
        raw = json_path.read_bytes()
    except OSError:
        logging.exception("Failed to read journal JSON from %s", json_path)
        return 0

    entries = decode_entries(raw)
    if not entries:
        return 0
    imported = store.import_entries(entries)
    logging.info("Imported %d journal entries from %s.", imported, json_path)
    return imported
