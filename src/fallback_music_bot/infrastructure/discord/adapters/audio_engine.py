"""
Discord Audio Engine

Infrastructure component that turns audio inputs into playable handles on a
guild's voice connection using discord.py's FFmpegPCMAudio.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import tempfile
from typing import IO, TYPE_CHECKING

import discord

from fallback_music_bot.application.interfaces.audio_engine import (
    AudioEngine,
    AudioInput,
    FileInput,
    PipeInput,
    PlayableHandle,
    PlaybackProbeError,
    UrlInput,
)
from fallback_music_bot.config.settings import AudioSettings
from fallback_music_bot.domain.music.value_objects import TerminalSignal
from fallback_music_bot.domain.shared.messages import ErrorMessages, LogTemplates
from fallback_music_bot.infrastructure.audio.ffmpeg_transcoder import FFmpegConfig, format_headers

if TYPE_CHECKING:
    from discord.ext import commands

logger = logging.getLogger(__name__)

# discord.py sends one 20 ms PCM frame per read().
FRAME_SECONDS = 0.02
STDERR_TAIL = 2000


class PrimedAudioSource(discord.AudioSource):
    """Wraps a PCM source, holding back the first frame read by ``prime``."""

    def __init__(self, original: discord.AudioSource) -> None:
        self.original = original
        self._first: bytes | None = None
        self._cleaned = False
        self.frames_read = 0

    def prime(self) -> bool:
        """Blocking read of the first frame. False if the source yielded nothing."""
        data = self.original.read()
        if not data:
            return False
        self._first = data
        return True

    def read(self) -> bytes:
        if self._first is not None:
            data, self._first = self._first, None
        else:
            data = self.original.read()
        if data:
            self.frames_read += 1
        return data

    def is_opus(self) -> bool:
        return False

    def cleanup(self) -> None:
        # AudioSource.__del__ calls cleanup again on collection.
        if self._cleaned:
            return
        self._cleaned = True
        self.original.cleanup()


class DiscordPlayableHandle(PlayableHandle):
    """A primed source bound to one voice client."""

    def __init__(
        self,
        *,
        session_key: int,
        voice_client: discord.VoiceClient,
        source: discord.PCMVolumeTransformer,
        metered: PrimedAudioSource,
        loop: asyncio.AbstractEventLoop,
        process: subprocess.Popen[bytes] | None = None,
        stderr_file: IO[bytes] | None = None,
    ) -> None:
        super().__init__()
        self._session_key = session_key
        self._voice_client = voice_client
        self._source = source
        self._metered = metered
        self._loop = loop
        self._process = process
        self._stderr_file = stderr_file
        self._started = False
        self._released = False

    def start(self) -> None:
        if self._started:
            raise RuntimeError(ErrorMessages.HANDLE_ALREADY_STARTED)
        self._started = True
        self._voice_client.play(self._source, after=self._after)

    def _after(self, error: Exception | None) -> None:
        # Runs on the discord.py player thread.
        self._release()
        if error is not None:
            logger.warning(LogTemplates.PLAYBACK_ERROR, self._session_key, error)
        signal = TerminalSignal.ERRORED if error is not None else TerminalSignal.ENDED
        try:
            self._loop.call_soon_threadsafe(self._notify_terminal, signal, error)
        except RuntimeError:
            # Loop already closed during shutdown.
            pass

    def pause(self) -> None:
        if self._voice_client.source is self._source and self._voice_client.is_playing():
            self._voice_client.pause()

    def resume(self) -> None:
        if self._voice_client.source is self._source and self._voice_client.is_paused():
            self._voice_client.resume()

    def stop(self) -> None:
        # A newer track may already own the voice client.
        if self._started and self._voice_client.source is self._source:
            self._voice_client.stop()
        else:
            self._release()

    def set_volume(self, volume: float) -> None:
        self._source.volume = volume

    @property
    def volume(self) -> float:
        return self._source.volume

    def position(self) -> float:
        return self._metered.frames_read * FRAME_SECONDS

    def is_playing(self) -> bool:
        return self._voice_client.source is self._source and self._voice_client.is_playing()

    def is_paused(self) -> bool:
        return self._voice_client.source is self._source and self._voice_client.is_paused()

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        release_resources(self._source, self._process, self._stderr_file)


def release_resources(
    source: discord.AudioSource | None,
    process: subprocess.Popen[bytes] | None,
    stderr_file: IO[bytes] | None,
) -> None:
    if source is not None:
        try:
            source.cleanup()
        except Exception as e:
            logger.debug(LogTemplates.ENGINE_SOURCE_CLEANUP_ERROR, e)

    if process is not None:
        try:
            if process.poll() is None:
                process.kill()
            process.wait(timeout=1.0)
        except Exception as e:
            logger.debug(LogTemplates.ENGINE_PROCESS_CLEANUP_ERROR, e)

    if stderr_file is not None:
        stderr_file.close()


def read_tail(stderr_file: IO[bytes] | None, limit: int = STDERR_TAIL) -> str:
    if stderr_file is None or stderr_file.closed:
        return ""
    try:
        stderr_file.flush()
        stderr_file.seek(0)
        data = stderr_file.read()
    except OSError:
        return ""
    return data.decode("utf-8", errors="replace").strip()[-limit:]


class DiscordAudioEngine(AudioEngine):
    """Opens inputs through ffmpeg and hands back primed handles."""

    def __init__(
        self,
        bot: commands.Bot,
        settings: AudioSettings | None = None,
        config: FFmpegConfig | None = None,
    ) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._config = config or FFmpegConfig(executable=self._settings.ffmpeg_path)

    def _voice_client(self, session_key: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(session_key)
        if guild is None:
            return None
        vc = guild.voice_client
        if vc is None or not vc.is_connected():
            return None
        return vc  # type: ignore[return-value]

    def is_connected(self, session_key: int) -> bool:
        return self._voice_client(session_key) is not None

    def _open(
        self, audio_input: AudioInput, stderr_file: IO[bytes]
    ) -> tuple[discord.FFmpegPCMAudio, subprocess.Popen[bytes] | None]:
        executable = self._config.executable
        match audio_input:
            case UrlInput(url=url, headers=headers):
                before = self._config.reconnect_options()
                if headers:
                    before += ["-headers", format_headers(headers)]
                source = discord.FFmpegPCMAudio(
                    url,
                    executable=executable,
                    before_options=" ".join(_quote(opt) for opt in before),
                    options="-vn",
                    stderr=stderr_file,
                )
                return source, None
            case FileInput(path=path):
                source = discord.FFmpegPCMAudio(
                    str(path), executable=executable, options="-vn", stderr=stderr_file
                )
                return source, None
            case PipeInput(argv=argv, input_format=input_format):
                process = subprocess.Popen(
                    list(argv),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                )
                try:
                    source = discord.FFmpegPCMAudio(
                        process.stdout,
                        executable=executable,
                        pipe=True,
                        before_options=f"-f {input_format}" if input_format else None,
                        options="-vn",
                        stderr=stderr_file,
                    )
                except Exception:
                    release_resources(None, process, None)
                    raise
                return source, process
            case _:
                raise TypeError(f"Unsupported audio input: {audio_input!r}")

    async def make_playable(
        self,
        session_key: int,
        audio_input: AudioInput,
        *,
        volume: float = 0.2,
    ) -> PlayableHandle:
        vc = self._voice_client(session_key)
        if vc is None:
            raise PlaybackProbeError(ErrorMessages.VOICE_CLIENT_MISSING.format(guild_id=session_key))

        stderr_file = tempfile.TemporaryFile()
        source: discord.AudioSource | None = None
        process: subprocess.Popen[bytes] | None = None
        try:
            try:
                ffmpeg_source, process = self._open(audio_input, stderr_file)
            except (discord.ClientException, OSError) as e:
                raise PlaybackProbeError(str(e)) from e

            metered = PrimedAudioSource(ffmpeg_source)
            source = metered
            if not await asyncio.to_thread(metered.prime):
                stderr = read_tail(stderr_file)
                logger.debug(
                    LogTemplates.ENGINE_PROBE_FAILED, audio_input.describe(), session_key, stderr
                )
                raise PlaybackProbeError(ErrorMessages.STREAM_NOT_DECODABLE, stderr=stderr)

            transformer = discord.PCMVolumeTransformer(metered, volume=volume)
        except BaseException:
            release_resources(source, process, stderr_file)
            raise

        return DiscordPlayableHandle(
            session_key=session_key,
            voice_client=vc,
            source=transformer,
            metered=metered,
            loop=asyncio.get_running_loop(),
            process=process,
            stderr_file=stderr_file,
        )


def _quote(option: str) -> str:
    # FFmpegPCMAudio splits before_options with shlex.
    if not option or any(ch.isspace() for ch in option) or '"' in option:
        return '"' + option.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return option
