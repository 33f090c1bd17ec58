"""
FFmpeg Transcoder

Infrastructure component that builds ffmpeg pipelines for the sourcing tiers
and runs ffmpeg/ffprobe for file conversion and stream tests.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shlex
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from fallback_music_bot.application.interfaces.audio_engine import PipeInput, UrlInput
from fallback_music_bot.application.interfaces.transcoder import TranscodeError, Transcoder
from fallback_music_bot.config.settings import AudioSettings
from fallback_music_bot.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

# Input options tried, in order, when the helper's raw output cannot be decoded.
INPUT_FORMAT_HINTS: Final[tuple[str, ...]] = (
    "",
    "-f wav",
    "-f s16le -ar 44100 -ac 2",
    "-f s16le -ar 48000 -ac 2",
    "-f mp3",
    "-f opus",
)

STDERR_LIMIT: Final[int] = 4000


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    executable: str = "ffmpeg"
    probe_executable: str = "ffprobe"

    # Reconnection settings for streaming
    reconnect: bool = True
    reconnect_streamed: bool = True
    reconnect_delay_max: int = 5

    # Canonical output
    sample_rate: int = 48000
    channels: int = 2
    codec: str = "pcm_s16le"

    def quiet_options(self) -> list[str]:
        return ["-hide_banner", "-loglevel", "error"]

    def reconnect_options(self) -> list[str]:
        opts: list[str] = []
        if self.reconnect:
            opts += ["-reconnect", "1"]
        if self.reconnect_streamed:
            opts += ["-reconnect_streamed", "1"]
        if self.reconnect_delay_max:
            opts += ["-reconnect_delay_max", str(self.reconnect_delay_max)]
        return opts

    def pcm_options(self) -> list[str]:
        return ["-c:a", self.codec, "-ar", str(self.sample_rate), "-ac", str(self.channels)]


def format_headers(headers: dict[str, str]) -> str:
    """ffmpeg ``-headers`` value: one ``Key: value`` line per header, CRLF-terminated."""
    return "".join(f"{key}: {value}\r\n" for key, value in headers.items())


class FFmpegTranscoder(Transcoder):
    """Builds ffmpeg pipelines and runs one-shot ffmpeg/ffprobe jobs."""

    def __init__(
        self, settings: AudioSettings | None = None, config: FFmpegConfig | None = None
    ) -> None:
        self._settings = settings or AudioSettings()
        self._config = config or FFmpegConfig(
            executable=self._settings.ffmpeg_path,
            probe_executable=self._settings.ffprobe_path,
        )

    @property
    def input_format_hints(self) -> tuple[str, ...]:
        return INPUT_FORMAT_HINTS

    # ── Pipelines ──────────────────────────────────────────────────────

    def helper_pipeline(self, helper_command: str, input_hint: str) -> PipeInput:
        cfg = self._config
        ffmpeg = " ".join(
            [
                shlex.quote(cfg.executable),
                *cfg.quiet_options(),
                *([input_hint] if input_hint else []),
                "-i",
                "-",
                "-vn",
                *cfg.pcm_options(),
                "-f",
                "wav",
                "-",
            ]
        )
        return PipeInput(argv=("sh", "-c", f"{helper_command} | {ffmpeg}"), input_format="wav")

    def url_pipeline(self, url_input: UrlInput) -> PipeInput:
        cfg = self._config
        argv = [cfg.executable, *cfg.quiet_options(), *cfg.reconnect_options()]
        if url_input.headers:
            argv += ["-headers", format_headers(url_input.headers)]
        argv += ["-i", url_input.url, "-vn", *cfg.pcm_options(), "-f", "wav", "pipe:1"]
        return PipeInput(argv=tuple(argv), input_format="wav")

    # ── One-shot jobs ──────────────────────────────────────────────────

    async def _run(self, *argv: str) -> tuple[bytes, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise TranscodeError(
                ErrorMessages.TRANSCODER_NOT_FOUND.format(executable=argv[0])
            ) from e

        try:
            stdout, stderr_bytes = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        stderr = stderr_bytes.decode("utf-8", errors="replace")[-STDERR_LIMIT:]
        if process.returncode != 0:
            raise TranscodeError(
                ErrorMessages.TRANSCODER_FAILED.format(
                    code=process.returncode, stderr=stderr.strip()
                ),
                stderr=stderr,
            )
        return stdout, stderr

    async def transcode_file(self, source: Path, destination: Path) -> Path:
        if not source.exists():
            raise TranscodeError(ErrorMessages.DOWNLOAD_FILE_VANISHED.format(path=source))

        cfg = self._config
        logger.info(LogTemplates.TRANSCODE_STARTED, source, destination)
        try:
            await self._run(
                cfg.executable,
                "-y",
                *cfg.quiet_options(),
                "-i",
                str(source),
                *cfg.pcm_options(),
                str(destination),
            )
        except TranscodeError as e:
            logger.warning(LogTemplates.TRANSCODE_FAILED, source, e)
            raise
        return destination

    async def record_sample(
        self, helper_command: str, destination: Path, seconds: int = 10
    ) -> Path:
        cfg = self._config
        ffmpeg = " ".join(
            [
                shlex.quote(cfg.executable),
                "-y",
                *cfg.quiet_options(),
                "-i",
                "-",
                "-t",
                str(seconds),
                *cfg.pcm_options(),
                shlex.quote(str(destination)),
            ]
        )
        await self._run("sh", "-c", f"( {helper_command} ) | {ffmpeg}")
        return destination

    async def probe(self, path: Path) -> dict[str, Any]:
        stdout, _ = await self._run(
            self._config.probe_executable,
            "-v",
            "error",
            "-show_format",
            "-show_streams",
            "-print_format",
            "json",
            str(path),
        )
        try:
            return json.loads(stdout.decode("utf-8", errors="replace") or "{}")
        except json.JSONDecodeError as e:
            raise TranscodeError(str(e)) from e


def ensure_media_tools(settings: AudioSettings | None = None) -> dict[str, str | None]:
    """Log whether ffmpeg and ffprobe are on PATH; never fails."""
    settings = settings or AudioSettings()
    found: dict[str, str | None] = {}
    for tool in (settings.ffmpeg_path, settings.ffprobe_path):
        location = shutil.which(tool)
        found[tool] = location
        if location is None:
            logger.warning(LogTemplates.MEDIA_TOOL_MISSING, tool)
        else:
            logger.info(LogTemplates.MEDIA_TOOL_FOUND, tool, location)
    return found
