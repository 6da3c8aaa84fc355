"""Configuration constants and templates for the application."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from textwrap import dedent

from jinja2 import DictLoader, Environment, select_autoescape

# Storage
STORAGE_KEY = "moodEntries"
SCHEMA_VERSION = 1
DATABASE_PATH = Path(
    os.environ.get("STOICMOOD_DB", "stoic_mood.sqlite3")
).expanduser()

# Dashboard defaults
RECENT_ENTRY_LIMIT = 3
COMMON_WORD_LIMIT = 20
PREVIEW_LENGTH = 48

CSV_HEADER = ["Date", "Time", "Mood", "Entry", "Word Count"]

# Words ignored when building the common themes list
STOP_WORDS = frozenset(
    """
    a about after all also am an and any are as at be because been but by can
    could did do does for from had has have her him his how i if in into is it
    its just like me more my not of on or our out so some than that the their
    them then there they this to too up very was we were what when which who
    will with would you your
    """.split()
)

# Basic logging setup
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

# Jinja2 template environment for HTML rendering
TEMPLATE_ENV = Environment(
    loader=DictLoader(
        {
            "journal_export.html": dedent(
                """\
                <!DOCTYPE html>
                <html>
                <head>
                    <meta charset="utf-8">
                    <title>Mood Journal</title>
                    <style>
                        body { font-family: -apple-system, system-ui, sans-serif; margin: 40px; color: #333; }
                        h1 { color: #1a1a1a; margin-bottom: 30px; }
                        .entry { margin-bottom: 30px; page-break-inside: avoid; }
                        .date { font-weight: bold; color: #666; }
                        .mood { display: inline-block; margin-left: 10px; }
                        .content { margin-top: 10px; line-height: 1.6; white-space: pre-wrap; }
                        .wordcount { font-size: 12px; color: #999; margin-top: 5px; }
                    </style>
                </head>
                <body>
                    <h1>Mood Journal</h1>
                    <p>Generated on {{ generated_display }}</p>
                    <hr>
                    {% for entry in entries %}
                    <div class="entry">
                        <div class="date">{{ entry.timestamp_display }}</div>
                        <div class="mood">Mood: {{ entry.mood_name }} {{ entry.emoji }}</div>
                        <div class="content">{{ entry.content }}</div>
                        <div class="wordcount">Words: {{ entry.word_count }}</div>
                    </div>
                    {% else %}
                    <p><em>No entries yet.</em></p>
                    {% endfor %}
                </body>
                </html>
                """
            ),
        }
    ),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

JOURNAL_EXPORT_TEMPLATE = TEMPLATE_ENV.get_template("journal_export.html")
