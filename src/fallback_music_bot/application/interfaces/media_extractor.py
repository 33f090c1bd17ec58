"""Port interface for extracting stream URLs and downloading media."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from fallback_music_bot.domain.music.value_objects import TrackMetadata
from fallback_music_bot.domain.shared.types import NonEmptyStr, NonNegativeInt


class MediaExtractionError(Exception):
    """Raised when the extractor cannot resolve or download a target."""


class ExtractedMedia(BaseModel):
    """A resolved direct stream URL plus whatever metadata came with it."""

    model_config = ConfigDict(frozen=True)

    url: NonEmptyStr
    headers: dict[str, str] = Field(default_factory=dict)
    filesize: NonNegativeInt | None = None
    metadata: TrackMetadata = Field(default_factory=TrackMetadata)


class DownloadedMedia(BaseModel):
    """A media file written to local disk."""

    model_config = ConfigDict(frozen=True)

    path: Path
    metadata: TrackMetadata = Field(default_factory=TrackMetadata)


class MediaExtractor(ABC):
    """Interface for the media extractor backing tiers 1, 3 and 4."""

    @abstractmethod
    async def extract(self, target: NonEmptyStr, format_spec: NonEmptyStr) -> ExtractedMedia:
        """Resolve ``target`` (URL or ``ytsearch1:`` query) to a direct stream URL.

        Raises:
            MediaExtractionError: If nothing playable was found.
        """
        ...

    @abstractmethod
    async def download(
        self,
        target: NonEmptyStr,
        directory: Path,
        prefix: NonEmptyStr,
        format_spec: NonEmptyStr,
    ) -> DownloadedMedia:
        """Download ``target`` into ``directory`` as ``<prefix>.<ext>``.

        Raises:
            MediaExtractionError: If the download failed or left no file.
        """
        ...
