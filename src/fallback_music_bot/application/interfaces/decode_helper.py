"""Port interface for locating the streaming-service decode helper."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fallback_music_bot.domain.shared.types import NonEmptyStr


class DecodeHelperLocator(ABC):
    """Builds the shell command that writes a track's audio to stdout."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """False when the helper is switched off by configuration."""
        ...

    @abstractmethod
    def command_for(self, service_link: NonEmptyStr) -> str:
        """Return the shell command for ``service_link``.

        Raises:
            ConfigurationMissingError: If no helper is configured.
        """
        ...
