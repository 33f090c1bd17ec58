"""
Music Bounded Context

Value objects and entities describing requests, sourcing attempts,
playback sessions and control panels.
"""

from fallback_music_bot.domain.music.entities import PlaybackSession, clamp_volume
from fallback_music_bot.domain.music.value_objects import (
    AttemptOutcome,
    CleanupSet,
    ControlPanelState,
    PanelAction,
    SourceDescriptor,
    SourceKind,
    SourcingAttempt,
    TerminalSignal,
    TrackMetadata,
)

__all__ = [
    "AttemptOutcome",
    "CleanupSet",
    "ControlPanelState",
    "PanelAction",
    "PlaybackSession",
    "SourceDescriptor",
    "SourceKind",
    "SourcingAttempt",
    "TerminalSignal",
    "TrackMetadata",
    "clamp_volume",
]
