"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from collections.abc import Iterable
from functools import cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.music.value_objects import SourcingAttempt

DISCORD_MESSAGE_LIMIT = 2000


@cache
def format_duration(seconds: int | float | None) -> str:
    if seconds is None:
        return "–"

    total_seconds = max(0, int(seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_remaining(remaining_seconds: float | None, unknown: str = "Unknown") -> str:
    """Remaining playback time as ``m:ss``; ``0:00`` once past the end."""
    if remaining_seconds is None:
        return unknown
    return format_duration(max(0.0, remaining_seconds))


def format_attempts(attempts: Iterable[SourcingAttempt], header: str = "") -> str:
    """One line per sourcing attempt, in order."""
    lines = [header] if header else []
    lines.extend(f"- {attempt.describe()}" for attempt in attempts)
    return "\n".join(lines)


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def fit_message(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> str:
    """Truncate ``text`` to what a single Discord message accepts."""
    return truncate(text, limit)
