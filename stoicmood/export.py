"""CSV, HTML and JSON exports of the journal."""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from stoicmood.constants import CSV_HEADER, JOURNAL_EXPORT_TEMPLATE
from stoicmood.models import MoodEntry
from stoicmood.storage import encode_entries
from stoicmood.utils import format_date, format_time, format_timestamp_display, local_now


def entries_to_csv(entries: Sequence[MoodEntry]) -> str:
    """Render entries as CSV with every field quoted, in collection order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for entry in entries:
        writer.writerow(
            [
                format_date(entry.timestamp),
                format_time(entry.timestamp),
                entry.mood.display_name,
                entry.content,
                entry.word_count,
            ]
        )
    return buffer.getvalue()


def render_html(
    entries: Sequence[MoodEntry], generated_at: datetime | None = None
) -> str:
    """Render a standalone HTML document listing every entry."""
    return JOURNAL_EXPORT_TEMPLATE.render(
        generated_display=format_timestamp_display(generated_at or local_now()),
        entries=[
            {
                "timestamp_display": format_timestamp_display(entry.timestamp),
                "mood_name": entry.mood.display_name,
                "emoji": entry.mood.emoji,
                "content": entry.content,
                "word_count": entry.word_count,
            }
            for entry in entries
        ],
    )


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        path.write_text(text, encoding="utf-8", newline="")
    except OSError:
        logging.exception("Failed to write journal export to %s", path)
        raise


def export_csv(entries: Sequence[MoodEntry], csv_path: Path) -> int:
    """Write the CSV export and return the number of rows exported."""
    _write_text(Path(csv_path), entries_to_csv(entries))
    return len(entries)


def export_html(entries: Sequence[MoodEntry], html_path: Path) -> int:
    """Write the HTML export and return the number of entries listed."""
    _write_text(Path(html_path), render_html(entries))
    return len(entries)


def export_json(entries: Sequence[MoodEntry], json_path: Path) -> int:
    """Write a versioned snapshot that import_legacy_json can read back."""
    _write_text(Path(json_path), encode_entries(list(entries)).decode("utf-8"))
    return len(entries)
