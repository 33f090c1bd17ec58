"""Pydantic models for Spotify Web API payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fallback_music_bot.domain.music.value_objects import TrackMetadata

UNKNOWN_ARTIST = "Unknown"


class SpotifyToken(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600


class SpotifyImage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str


class SpotifyArtist(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None


class SpotifyAlbum(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    images: list[SpotifyImage] = Field(default_factory=list)


class SpotifyTrack(BaseModel):
    """Subset of the Web API track object."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str | None = None
    artists: list[SpotifyArtist] = Field(default_factory=list)
    duration_ms: int | None = None
    album: SpotifyAlbum | None = None

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        if v is None:
            return None
        try:
            val = int(v)
            return val if val >= 0 else None
        except (TypeError, ValueError):
            return None

    @property
    def first_artist(self) -> str | None:
        if self.artists and self.artists[0].name:
            return self.artists[0].name
        return None

    def to_metadata(self, *, default_artist: str | None = None) -> TrackMetadata:
        thumbnail = None
        if self.album and self.album.images:
            thumbnail = self.album.images[0].url
        return TrackMetadata(
            title=self.name,
            artist=self.first_artist or default_artist,
            duration_seconds=self.duration_ms / 1000 if self.duration_ms is not None else None,
            thumbnail_url=thumbnail,
        )


class SpotifyTrackPage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    items: list[SpotifyTrack] = Field(default_factory=list)


class SpotifySearchResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    tracks: SpotifyTrackPage = Field(default_factory=SpotifyTrackPage)
