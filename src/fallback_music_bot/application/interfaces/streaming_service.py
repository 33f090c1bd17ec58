"""Port interface for the streaming-service metadata API."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fallback_music_bot.domain.music.value_objects import TrackMetadata
from fallback_music_bot.domain.shared.types import NonEmptyStr


class StreamingServiceClient(ABC):
    """Interface for track lookup and search against a streaming service."""

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether credentials are available."""
        ...

    @abstractmethod
    async def get_track(self, link: NonEmptyStr) -> TrackMetadata:
        """Look up a track by its link or URI.

        Raises:
            ConfigurationMissingError: Without credentials.
            StreamingServiceError: On auth, network, HTTP or payload failures.
        """
        ...

    @abstractmethod
    async def search_track(self, text: NonEmptyStr) -> TrackMetadata:
        """Return the best-matching track for free text.

        Raises:
            ConfigurationMissingError: Without credentials.
            StreamingServiceError: On failure or no results.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        return None
