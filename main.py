"""Main entry point for the Stoic Mood journal."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stoicmood import stats
from stoicmood.constants import DATABASE_PATH
from stoicmood.errors import ValidationError
from stoicmood.export import export_csv, export_html, export_json
from stoicmood.models import JournalFilter, Mood
from stoicmood.storage import SQLiteKeyValueStorage, import_legacy_json
from stoicmood.store import MoodStore
from stoicmood.utils import format_timestamp_display, preview_text

EXPORTERS = {"csv": export_csv, "html": export_html, "json": export_json}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stoicmood", description="Stoic mood journal")
    parser.add_argument("--db", type=Path, default=None, help="journal database path")
    parser.add_argument("--verbose", action="store_true", help="log debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="journal a mood")
    add.add_argument("mood", help=", ".join(mood.value for mood in Mood))
    add.add_argument("text", nargs="+")
    add.add_argument("--quick", action="store_true", help="mark as a quick entry")

    lst = sub.add_parser("list", help="show entries, newest first")
    lst.add_argument(
        "--filter", choices=[f.value for f in JournalFilter], default=JournalFilter.ALL.value
    )
    lst.add_argument("--search", default="")
    lst.add_argument("--limit", type=int, default=20)

    delete = sub.add_parser("delete", help="delete an entry by id")
    delete.add_argument("entry_id")

    sub.add_parser("stats", help="streak, averages and mood distribution")

    exp = sub.add_parser("export", help="export the journal")
    exp.add_argument("format", choices=sorted(EXPORTERS))
    exp.add_argument("path", type=Path)

    imp = sub.add_parser("import", help="import entries from a JSON backup")
    imp.add_argument("path", type=Path)
    return parser


def open_store(db_path: Path) -> MoodStore:
    """Composition root: wire the SQLite backend into a store."""
    storage = SQLiteKeyValueStorage(db_path)
    storage.initialize()
    return MoodStore(storage)


def _print_stats(store: MoodStore) -> None:
    entries = store.entries
    summary = stats.summarize(entries)
    print(f"Entries: {summary.total_entries}")
    print(f"Current streak: {summary.current_streak} day(s)")
    print(f"Words: {summary.total_words} (avg {summary.average_words:.1f})")
    print(f"Quick entries: {summary.quick_entries}")
    if summary.most_common_mood is not None:
        mood = summary.most_common_mood
        print(f"Most common mood: {mood.emoji} {mood.display_name}")
    series = stats.seven_day_series(entries)
    if series:
        print("Last 7 days:")
        for day, average in series:
            print(f"  {day:%a %d %b}  {average:.1f}")
    distribution = stats.mood_distribution(entries)
    if distribution:
        print("Distribution:")
        for mood, count in distribution:
            print(f"  {mood.emoji} {mood.display_name:<10} {count}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    store = open_store(args.db or DATABASE_PATH)

    if args.command == "add":
        try:
            mood = Mood.parse(args.mood)
            entry = store.create_entry(mood, " ".join(args.text), is_quick_entry=args.quick)
        except ValidationError as exc:
            print(f"Not saved: {exc}", file=sys.stderr)
            return 2
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        print(f"Saved {entry.mood.emoji} {entry.mood.display_name} ({entry.id})")
        print(f"Current streak: {store.current_streak} day(s)")
    elif args.command == "list":
        entries = stats.filter_entries(store.entries, JournalFilter(args.filter), args.search)
        for entry in entries[: max(0, args.limit)]:
            print(
                f"{entry.id}  {format_timestamp_display(entry.timestamp)}  "
                f"{entry.mood.emoji} {entry.mood.display_name}: {preview_text(entry.content, 60)}"
            )
        if not entries:
            print("No entries yet.")
    elif args.command == "delete":
        if not store.delete(args.entry_id):
            print(f"No entry with id {args.entry_id}", file=sys.stderr)
            return 2
        print(f"Deleted {args.entry_id}")
    elif args.command == "stats":
        _print_stats(store)
    elif args.command == "export":
        count = EXPORTERS[args.format](store.entries, args.path)
        print(f"Exported {count} entries to {args.path}")
    elif args.command == "import":
        count = import_legacy_json(args.path, store)
        print(f"Imported {count} entries from {args.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
