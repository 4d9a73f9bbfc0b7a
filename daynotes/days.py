"""Calendar-day helpers for day notes."""

from __future__ import annotations

from datetime import date, timedelta
from typing import TypedDict

DAY_FORMAT = "%Y-%m-%d"


class NoteStats(TypedDict):
    characters: int
    words: int


def format_day(d: date) -> str:
    return d.strftime(DAY_FORMAT)


def recent_days(count: int = 7, today: date | None = None) -> list[str]:
    """Return the ids of the last *count* days, newest first."""
    if count < 1:
        return []
    start = today or date.today()
    return [format_day(start - timedelta(days=offset)) for offset in range(count)]


def note_stats(content: str) -> NoteStats:
    return {"characters": len(content), "words": len(content.split())}
