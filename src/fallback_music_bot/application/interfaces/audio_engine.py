"""Port interface for the audio engine that turns inputs into playable handles."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from fallback_music_bot.domain.music.value_objects import TerminalSignal
from fallback_music_bot.domain.shared.types import DiscordSnowflake, HttpUrlStr, VolumeFloat

logger = logging.getLogger(__name__)

TerminalObserver = Callable[[TerminalSignal, BaseException | None], None]


class PlaybackProbeError(Exception):
    """Raised when an input cannot be decoded into audio frames."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class UrlInput(BaseModel):
    """An HTTP-backed stream the engine reads directly."""

    model_config = ConfigDict(frozen=True)

    url: HttpUrlStr
    headers: dict[str, str] = Field(default_factory=dict)

    def describe(self) -> str:
        return "url"


class PipeInput(BaseModel):
    """A child process whose stdout carries the audio."""

    model_config = ConfigDict(frozen=True)

    argv: tuple[str, ...]
    input_format: str | None = None

    def describe(self) -> str:
        return "pipe"


class FileInput(BaseModel):
    """A local media file."""

    model_config = ConfigDict(frozen=True)

    path: Path

    def describe(self) -> str:
        return "file"


AudioInput = UrlInput | PipeInput | FileInput


class PlayableHandle(ABC):
    """A decoded stream ready to be started, with terminal-signal observers."""

    def __init__(self) -> None:
        self._terminal_observers: list[TerminalObserver] = []

    def add_terminal_observer(self, observer: TerminalObserver) -> None:
        self._terminal_observers.append(observer)

    def _notify_terminal(self, signal: TerminalSignal, error: BaseException | None = None) -> None:
        for observer in list(self._terminal_observers):
            try:
                observer(signal, error)
            except Exception:
                logger.exception("Terminal observer failed for %s", signal.value)

    @abstractmethod
    def start(self) -> None:
        """Begin sending audio to the voice connection."""
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop playback and release the underlying source."""
        ...

    @abstractmethod
    def set_volume(self, volume: VolumeFloat) -> None:
        ...

    @property
    @abstractmethod
    def volume(self) -> float:
        ...

    @abstractmethod
    def position(self) -> float:
        """Seconds of audio played so far."""
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def is_paused(self) -> bool:
        ...


class AudioEngine(ABC):
    """Interface for the voice audio engine of a session."""

    @abstractmethod
    async def make_playable(
        self,
        session_key: DiscordSnowflake,
        audio_input: AudioInput,
        *,
        volume: VolumeFloat = 0.2,
    ) -> PlayableHandle:
        """Open ``audio_input`` and decode a first frame.

        Raises:
            PlaybackProbeError: If the input produces no audio.
        """
        ...

    @abstractmethod
    def is_connected(self, session_key: DiscordSnowflake) -> bool:
        """Whether the session has a live voice connection."""
        ...
