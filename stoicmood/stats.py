"""Derived statistics over a journal's entry collection.

Every function here is pure: it reads the entries it is given (plus an
optional reference time) and never mutates them. Calendar days are taken in
the local timezone.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from stoicmood.constants import COMMON_WORD_LIMIT, RECENT_ENTRY_LIMIT, STOP_WORDS
from stoicmood.models import JournalFilter, Mood, MoodEntry
from stoicmood.utils import ensure_local, local_day, local_now

TIME_BLOCK_HOURS = 3
TIME_BLOCKS = 24 // TIME_BLOCK_HOURS
WORD_PATTERN = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)?")


@dataclass(frozen=True)
class JournalSummary:
    total_entries: int
    current_streak: int
    total_words: int
    average_words: float
    quick_entries: int
    most_common_mood: Mood | None


def _reference_now(now: datetime | None) -> datetime:
    return ensure_local(now) if now is not None else local_now()


def _reference_day(today: date | datetime | None) -> date:
    return local_day(today) if today is not None else local_now().date()


def newest_first(entries: Iterable[MoodEntry]) -> list[MoodEntry]:
    """Sort by timestamp descending; entries with equal timestamps keep their order."""
    return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)


def calculate_streak(
    entries: Sequence[MoodEntry], today: date | datetime | None = None
) -> int:
    """Count consecutive calendar days with an entry, ending today.

    Entries are sorted newest first before scanning, so callers may pass the
    collection in any order. A day without entries stops the count.
    """
    if not entries:
        return 0

    reference = _reference_day(today)
    streak = 0
    for entry in newest_first(entries):
        day_diff = (reference - local_day(entry.timestamp)).days
        if day_diff == streak:
            streak += 1
        elif day_diff > streak:
            break
    return streak


def filter_by_time_range(
    entries: Iterable[MoodEntry],
    journal_filter: JournalFilter = JournalFilter.ALL,
    now: datetime | None = None,
) -> list[MoodEntry]:
    window = JournalFilter(journal_filter).window
    if window is None:
        return list(entries)
    cutoff = _reference_now(now) - window
    return [entry for entry in entries if entry.timestamp > cutoff]


def filter_by_text(entries: Iterable[MoodEntry], query: str | None) -> list[MoodEntry]:
    """Keep entries whose content or mood tag contains ``query``, ignoring case."""
    needle = (query or "").casefold()
    if not needle:
        return list(entries)
    return [
        entry
        for entry in entries
        if needle in entry.content.casefold() or needle in entry.mood.value.casefold()
    ]


def filter_entries(
    entries: Iterable[MoodEntry],
    journal_filter: JournalFilter = JournalFilter.ALL,
    query: str | None = None,
    now: datetime | None = None,
) -> list[MoodEntry]:
    """Time range filter followed by text filter."""
    return filter_by_text(filter_by_time_range(entries, journal_filter, now), query)


def quick_entries(entries: Iterable[MoodEntry]) -> list[MoodEntry]:
    return [entry for entry in entries if entry.is_quick_entry]


def entries_on_day(entries: Iterable[MoodEntry], day: date | datetime) -> list[MoodEntry]:
    target = local_day(day)
    return [entry for entry in entries if local_day(entry.timestamp) == target]


def average_mood_for_date(
    entries: Iterable[MoodEntry], day: date | datetime
) -> float | None:
    """Mean valence of the entries on ``day``, or None when there are none."""
    day_entries = entries_on_day(entries, day)
    if not day_entries:
        return None
    return sum(entry.mood.valence for entry in day_entries) / len(day_entries)


def _last_seven_days(today: date | datetime | None) -> list[date]:
    reference = _reference_day(today)
    return [reference - timedelta(days=offset) for offset in range(6, -1, -1)]


def seven_day_series(
    entries: Sequence[MoodEntry], today: date | datetime | None = None
) -> list[tuple[date, float]]:
    """Average valence per day for the week ending today; empty days are skipped."""
    series: list[tuple[date, float]] = []
    for day in _last_seven_days(today):
        average = average_mood_for_date(entries, day)
        if average is not None:
            series.append((day, average))
    return series


def entries_for_last_seven_days(
    entries: Iterable[MoodEntry], today: date | datetime | None = None
) -> list[MoodEntry]:
    first_day = _last_seven_days(today)[0]
    return [entry for entry in entries if local_day(entry.timestamp) >= first_day]


def week_overview(
    entries: Sequence[MoodEntry], today: date | datetime | None = None
) -> list[tuple[date, Mood | None]]:
    """Mood of the first entry (in collection order) on each of the last seven days."""
    overview: list[tuple[date, Mood | None]] = []
    for day in _last_seven_days(today):
        day_entries = entries_on_day(entries, day)
        overview.append((day, day_entries[0].mood if day_entries else None))
    return overview


def mood_distribution(entries: Iterable[MoodEntry]) -> list[tuple[Mood, int]]:
    """Entry count per mood, most frequent first. Ties follow Mood declaration order."""
    counts = Counter(entry.mood for entry in entries)
    ordered = [(mood, counts[mood]) for mood in Mood if counts[mood]]
    return sorted(ordered, key=lambda item: item[1], reverse=True)


def time_pattern_grid(entries: Iterable[MoodEntry]) -> list[list[int]]:
    """Entry counts by 3-hour block (rows) and weekday (columns, Sunday first)."""
    grid = [[0] * 7 for _ in range(TIME_BLOCKS)]
    for entry in entries:
        stamp = ensure_local(entry.timestamp)
        block = min(stamp.hour // TIME_BLOCK_HOURS, TIME_BLOCKS - 1)
        weekday = (stamp.weekday() + 1) % 7
        grid[block][weekday] += 1
    return grid


def recent_entries(
    entries: Sequence[MoodEntry], limit: int = RECENT_ENTRY_LIMIT
) -> list[MoodEntry]:
    return list(entries[: max(0, limit)])


def common_words(
    entries: Iterable[MoodEntry], limit: int = COMMON_WORD_LIMIT
) -> list[tuple[str, int]]:
    """Most frequent words across all entries, for the common themes view."""
    counts: Counter[str] = Counter()
    for entry in entries:
        for word in WORD_PATTERN.findall(entry.content.lower()):
            if len(word) >= 3 and word not in STOP_WORDS:
                counts[word] += 1
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[: max(0, limit)]


def summarize(
    entries: Sequence[MoodEntry], now: datetime | None = None
) -> JournalSummary:
    reference = _reference_now(now)
    total_words = sum(entry.word_count or 0 for entry in entries)
    distribution = mood_distribution(entries)
    return JournalSummary(
        total_entries=len(entries),
        current_streak=calculate_streak(entries, reference),
        total_words=total_words,
        average_words=total_words / len(entries) if entries else 0.0,
        quick_entries=len(quick_entries(entries)),
        most_common_mood=distribution[0][0] if distribution else None,
    )
