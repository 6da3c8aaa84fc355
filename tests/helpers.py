"""Entry builders shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta

from stoicmood.models import Mood, MoodEntry

# Noon keeps day arithmetic clear of DST shifts.
NOW = datetime(2025, 6, 15, 12, 0).astimezone()


def make_entry(
    mood: Mood = Mood.CONTENT,
    content: str = "steady morning",
    days_ago: int = 0,
    hours: int = 0,
    **kwargs,
) -> MoodEntry:
    return MoodEntry(
        mood=mood,
        content=content,
        timestamp=NOW - timedelta(days=days_ago, hours=hours),
        **kwargs,
    )
