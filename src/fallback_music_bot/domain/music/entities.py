"""Core domain entities for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fallback_music_bot.domain.music.value_objects import CleanupSet, TrackMetadata
from fallback_music_bot.domain.shared.types import MAX_VOLUME, MIN_VOLUME

if TYPE_CHECKING:
    from ...application.interfaces.audio_engine import PlayableHandle


def clamp_volume(value: float) -> float:
    """Round to two decimals and clamp into the allowed volume range."""
    return max(MIN_VOLUME, min(MAX_VOLUME, round(value, 2)))


@dataclass(eq=False)
class PlaybackSession:
    """The single active track of a guild.

    At most one exists per ``session_key``; opening a new one supersedes the old.
    """

    session_key: int
    handle: PlayableHandle
    metadata: TrackMetadata = field(default_factory=TrackMetadata)
    volume: float = 0.20
    playing: bool = True
    cleanup: CleanupSet = field(default_factory=CleanupSet)

    def __post_init__(self) -> None:
        self.volume = clamp_volume(self.volume)

    @property
    def paused(self) -> bool:
        return not self.playing

    def change_volume(self, *, delta: float | None = None, absolute: float | None = None) -> float:
        if absolute is not None:
            self.volume = clamp_volume(absolute)
        elif delta is not None:
            self.volume = clamp_volume(self.volume + delta)
        return self.volume

    def remaining_seconds(self) -> float | None:
        """Seconds left in the track, floored at zero; None without a duration."""
        duration = self.metadata.duration_seconds
        if duration is None:
            return None
        return max(0.0, duration - self.handle.position())
