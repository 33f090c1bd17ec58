"""Port interface for the ffmpeg/ffprobe transcoder."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from fallback_music_bot.application.interfaces.audio_engine import PipeInput, UrlInput
from fallback_music_bot.domain.shared.types import PositiveInt


class TranscodeError(Exception):
    """Raised when ffmpeg or ffprobe fails."""

    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class Transcoder(ABC):
    """Builds transcoding pipelines and converts files to canonical WAV."""

    @property
    @abstractmethod
    def input_format_hints(self) -> tuple[str, ...]:
        """ffmpeg input options tried in order for helper output; "" means auto-probe."""
        ...

    @abstractmethod
    def helper_pipeline(self, helper_command: str, input_hint: str) -> PipeInput:
        """Pipe helper stdout through ffmpeg into 48 kHz stereo WAV."""
        ...

    @abstractmethod
    def url_pipeline(self, url_input: UrlInput) -> PipeInput:
        """Pipe an HTTP stream through ffmpeg into 48 kHz stereo WAV."""
        ...

    @abstractmethod
    async def transcode_file(self, source: Path, destination: Path) -> Path:
        """Convert ``source`` into 48 kHz stereo s16le WAV at ``destination``.

        Raises:
            TranscodeError: If ffmpeg exits non-zero.
        """
        ...

    @abstractmethod
    async def record_sample(
        self, helper_command: str, destination: Path, seconds: PositiveInt = 10
    ) -> Path:
        """Record ``seconds`` of helper output into a WAV file."""
        ...

    @abstractmethod
    async def probe(self, path: Path) -> dict[str, Any]:
        """Return ffprobe's JSON description of ``path``."""
        ...
