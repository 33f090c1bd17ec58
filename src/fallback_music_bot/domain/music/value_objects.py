"""Immutable value objects for the music bounded context."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from fallback_music_bot.domain.shared.types import (
    ChannelIdField,
    GuildIdField,
    MessageIdField,
    NonEmptyStr,
    NonNegativeFloat,
    PositiveFloat,
    TierIndex,
    UserIdField,
)


class SourceKind(Enum):
    """How a request should be fed into the sourcing tiers."""

    DIRECT_MEDIA_URL = "direct_media_url"
    STREAMING_SERVICE_LINK = "streaming_service_link"
    SEARCH_QUERY = "search_query"


class AttemptOutcome(Enum):
    OK = "ok"
    FAILED = "failed"


class TerminalSignal(Enum):
    """Terminal playback signals emitted by a playable handle."""

    ENDED = "ended"
    ERRORED = "errored"


class PanelAction(Enum):
    """Buttons on a control panel, by their custom_id fragment."""

    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"
    VOLUME_DOWN = "vol_down"
    VOLUME_UP = "vol_up"

    @property
    def volume_delta(self) -> float:
        if self is PanelAction.VOLUME_UP:
            return 0.1
        if self is PanelAction.VOLUME_DOWN:
            return -0.1
        return 0.0


class SourceDescriptor(BaseModel):
    """Normalized input to the stream acquirer.

    ``text`` is either the media URL or the search text. ``service_link`` keeps
    the streaming-service link the request came from, if any, after the text
    has been rewritten into ``"<title> <artist>"``.
    """

    model_config = ConfigDict(frozen=True)

    kind: SourceKind
    text: NonEmptyStr
    service_link: str | None = None

    @property
    def is_url(self) -> bool:
        return self.kind is SourceKind.DIRECT_MEDIA_URL

    @property
    def extractor_target(self) -> str:
        """Target string handed to the media extractor."""
        if self.kind is SourceKind.DIRECT_MEDIA_URL:
            return self.text
        return f"ytsearch1:{self.text}"


class TrackMetadata(BaseModel):
    """Descriptive data about the playing track; every field is optional."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str | None = None
    artist: str | None = None
    duration_seconds: NonNegativeFloat | None = None
    thumbnail_url: str | None = None

    @field_validator("title", "artist", "thumbnail_url", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_empty(self) -> bool:
        return (
            self.title is None
            and self.artist is None
            and self.duration_seconds is None
            and self.thumbnail_url is None
        )

    @property
    def heading(self) -> str | None:
        """``"<title> — <artist>"`` or whichever part is known."""
        if self.title and self.artist:
            return f"{self.title} — {self.artist}"
        return self.title or self.artist

    def merged_with(self, other: TrackMetadata | None) -> TrackMetadata:
        """Return a copy where fields empty on ``self`` are taken from ``other``."""
        if other is None:
            return self
        return TrackMetadata(
            title=self.title if self.title is not None else other.title,
            artist=self.artist if self.artist is not None else other.artist,
            duration_seconds=(
                self.duration_seconds
                if self.duration_seconds is not None
                else other.duration_seconds
            ),
            thumbnail_url=(
                self.thumbnail_url if self.thumbnail_url is not None else other.thumbnail_url
            ),
        )


class SourcingAttempt(BaseModel):
    """Diagnostic record of one sourcing tier or candidate attempt."""

    model_config = ConfigDict(frozen=True)

    tier_index: TierIndex
    strategy: NonEmptyStr
    outcome: AttemptOutcome
    diagnostic: str = ""
    candidate: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is AttemptOutcome.OK

    def describe(self) -> str:
        label = f"tier {self.tier_index} ({self.strategy}"
        if self.candidate:
            label += f", {self.candidate}"
        label += ")"
        if self.succeeded:
            return f"{label}: ok"
        return f"{label}: {self.diagnostic}"


@dataclass(eq=False)
class CleanupSet:
    """Temporary files owned by a session, deletable exactly once."""

    paths: frozenset[Path] = frozenset()
    _reaped: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def of(cls, *paths: Path | str) -> CleanupSet:
        return cls(frozenset(Path(p) for p in paths))

    @property
    def reaped(self) -> bool:
        return self._reaped

    def __bool__(self) -> bool:
        return bool(self.paths)

    def claim(self) -> bool:
        """Return True for the first caller only; later callers get False."""
        with self._lock:
            if self._reaped:
                return False
            self._reaped = True
            return True


class ControlPanelState(BaseModel):
    """Binding between a posted panel message and the session it watches."""

    model_config = ConfigDict(frozen=True)

    channel_id: ChannelIdField
    message_id: MessageIdField
    owner_id: UserIdField
    session_key: GuildIdField
    refresh_interval: PositiveFloat = 5.0
    last_rendered: str | None = None

    def owns(self, issuer_id: int) -> bool:
        return issuer_id == self.owner_id

    def with_rendered(self, description: str) -> ControlPanelState:
        return self.model_copy(update={"last_rendered": description})
