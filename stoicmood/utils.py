"""Utility functions for counting, calendar handling and formatting."""

from __future__ import annotations

from datetime import date, datetime


def count_words(text: str) -> int:
    """Count whitespace separated tokens."""
    return len((text or "").split())


def local_now() -> datetime:
    return datetime.now().astimezone()


def ensure_local(dt: datetime) -> datetime:
    """Return an aware datetime in the local timezone (naive input is taken as local)."""
    return dt.astimezone()


def local_day(value: date | datetime) -> date:
    """Calendar day of a timestamp in the local timezone."""
    if isinstance(value, datetime):
        return ensure_local(value).date()
    return value


def parse_timestamp(raw: str | int | float) -> datetime:
    """Parse a stored timestamp: ISO-8601 text or epoch seconds.

    Raises ValueError on bad input, including dates the local timezone cannot
    represent.
    """
    try:
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return datetime.fromtimestamp(raw).astimezone()
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError(f"Invalid timestamp: {raw!r}")
        return ensure_local(datetime.fromisoformat(raw.strip()))
    except (OverflowError, OSError) as exc:
        raise ValueError(f"Timestamp out of range: {raw!r}") from exc


def format_date(dt: datetime) -> str:
    return ensure_local(dt).strftime("%Y-%m-%d")


def format_time(dt: datetime) -> str:
    # Windows-safe formatting
    dt = ensure_local(dt)
    try:
        return dt.strftime("%-I:%M %p")
    except ValueError:
        return dt.strftime("%I:%M %p").lstrip("0")


def format_timestamp_display(dt: datetime | None) -> str:
    """Render timestamps into a compact, reader-friendly string."""
    if dt is None:
        return "Unknown time"
    return ensure_local(dt).strftime("%B %d, %Y at ") + format_time(dt)


def preview_text(text: str, limit: int) -> str:
    """Collapse whitespace and truncate with an ellipsis."""
    preview = " ".join((text or "").strip().split())
    if len(preview) > limit:
        preview = preview[: limit - 1] + "…"
    return preview
