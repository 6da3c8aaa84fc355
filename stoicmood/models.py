"""Data models for moods and journal entries."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, NamedTuple

from stoicmood.utils import count_words, ensure_local, local_now, parse_timestamp


class Mood(str, Enum):
    """Moods a user can pick when journaling."""

    CONTENT = "content"
    GRATEFUL = "grateful"
    FOCUSED = "focused"
    ANXIOUS = "anxious"
    FRUSTRATED = "frustrated"
    SAD = "sad"

    @property
    def display_name(self) -> str:
        return MOOD_DETAILS[self].display_name

    @property
    def emoji(self) -> str:
        return MOOD_DETAILS[self].emoji

    @property
    def valence(self) -> int:
        """Numeric 1-5 weight used for averaging."""
        return MOOD_DETAILS[self].valence

    @classmethod
    def parse(cls, raw: str) -> Mood:
        """Look up a mood by tag or display name, ignoring case."""
        key = (raw or "").strip().lower()
        for mood in cls:
            if key in (mood.value, mood.display_name.lower()):
                return mood
        raise ValueError(f"Unknown mood: {raw!r}")


class MoodDetails(NamedTuple):
    display_name: str
    emoji: str
    valence: int


MOOD_DETAILS: dict[Mood, MoodDetails] = {
    Mood.CONTENT: MoodDetails("Content", "😌", 4),
    Mood.GRATEFUL: MoodDetails("Grateful", "🙏", 5),
    Mood.FOCUSED: MoodDetails("Focused", "🎯", 4),
    Mood.ANXIOUS: MoodDetails("Anxious", "😟", 2),
    Mood.FRUSTRATED: MoodDetails("Frustrated", "😤", 2),
    Mood.SAD: MoodDetails("Sad", "😔", 1),
}

if set(MOOD_DETAILS) != set(Mood):
    raise RuntimeError("Every Mood needs an entry in MOOD_DETAILS")


class JournalFilter(str, Enum):
    """Time range filters offered on the journal screen."""

    ALL = "all"
    WEEK = "week"
    MONTH = "month"

    @property
    def label(self) -> str:
        return {"all": "All", "week": "This Week", "month": "This Month"}[self.value]

    @property
    def window(self) -> timedelta | None:
        if self is JournalFilter.WEEK:
            return timedelta(days=7)
        if self is JournalFilter.MONTH:
            return timedelta(days=30)
        return None


def new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class MoodEntry:
    """Represents a single journaled mood with its reflection text.

    Entries are immutable. ``word_count`` is computed from ``content`` when not
    supplied and is never recomputed implicitly; use :meth:`revise` to get an
    edited copy.
    """

    mood: Mood
    content: str
    timestamp: datetime = field(default_factory=local_now)
    word_count: int | None = None
    is_quick_entry: bool = False
    id: str = field(default_factory=new_entry_id)

    def __post_init__(self) -> None:
        if not isinstance(self.mood, Mood):
            object.__setattr__(self, "mood", Mood(self.mood))
        object.__setattr__(self, "timestamp", ensure_local(self.timestamp))
        if self.word_count is None:
            object.__setattr__(self, "word_count", count_words(self.content))
        elif self.word_count < 0:
            raise ValueError("word_count must be non-negative")

    def revise(
        self,
        *,
        content: str | None = None,
        mood: Mood | None = None,
        is_quick_entry: bool | None = None,
    ) -> MoodEntry:
        """Return an edited copy keeping id and timestamp."""
        changes: dict[str, Any] = {}
        if content is not None:
            changes["content"] = content
            changes["word_count"] = count_words(content)
        if mood is not None:
            changes["mood"] = mood
        if is_quick_entry is not None:
            changes["is_quick_entry"] = is_quick_entry
        return replace(self, **changes)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted JSON record layout."""
        return {
            "id": self.id,
            "mood": self.mood.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "wordCount": self.word_count,
            "isQuickEntry": self.is_quick_entry,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> MoodEntry:
        """Build an entry from a persisted record. Raises on malformed data."""
        if not isinstance(record, dict):
            raise TypeError(f"Entry record must be an object, got {type(record).__name__}")
        word_count = record.get("wordCount")
        if word_count is not None and (
            isinstance(word_count, bool) or not isinstance(word_count, int)
        ):
            raise TypeError(f"wordCount must be an integer, got {word_count!r}")
        is_quick_entry = record.get("isQuickEntry", False)
        if not isinstance(is_quick_entry, bool):
            raise TypeError(f"isQuickEntry must be a boolean, got {is_quick_entry!r}")
        content = record["content"]
        if not isinstance(content, str):
            raise TypeError("content must be a string")
        return cls(
            id=str(record["id"]),
            mood=Mood(record["mood"]),
            content=content,
            timestamp=parse_timestamp(record["timestamp"]),
            word_count=word_count,
            is_quick_entry=is_quick_entry,
        )
