"""The four sourcing tiers, in the order the stream acquirer tries them."""

from __future__ import annotations

import asyncio
import logging
import os
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from ...domain.music.value_objects import TrackMetadata
from ...domain.shared.exceptions import ConfigurationMissingError, SourcingTierError
from ...domain.shared.messages import ErrorMessages
from ..interfaces.audio_engine import FileInput, PipeInput, PlaybackProbeError, UrlInput
from ..interfaces.media_extractor import MediaExtractionError
from ..interfaces.transcoder import TranscodeError
from ..services.playback_models import TierSuccess
from .base import SourcingRequest, SourcingTier, describe_failure, fold_candidates

if TYPE_CHECKING:
    from ...domain.music.value_objects import SourcingAttempt
    from ..interfaces.audio_engine import AudioEngine, PlayableHandle
    from ..interfaces.decode_helper import DecodeHelperLocator
    from ..interfaces.media_extractor import MediaExtractor
    from ..interfaces.transcoder import Transcoder

logger = logging.getLogger(__name__)


class DirectStreamTier(SourcingTier):
    """Tier 1: extractor resolves the URL or search text, engine reads the stream URL."""

    name = "direct stream"

    def __init__(
        self,
        *,
        extractor: MediaExtractor,
        engine: AudioEngine,
        format_spec: str,
        timeout_seconds: float = 45.0,
    ) -> None:
        self._extractor = extractor
        self._engine = engine
        self._format = format_spec
        self.timeout_seconds = timeout_seconds

    async def attempt(self, request: SourcingRequest, *, tier_index: int) -> TierSuccess:
        target = request.resolved.descriptor.extractor_target
        try:
            media = await self._extractor.extract(target, self._format)
            handle = await self._engine.make_playable(
                request.session_key,
                UrlInput(url=media.url, headers=media.headers),
                volume=request.volume,
            )
        except (MediaExtractionError, PlaybackProbeError) as e:
            raise SourcingTierError(self.name, describe_failure(e)) from e

        return TierSuccess(handle=handle, metadata=media.metadata, candidate=self._format)


class DecodeHelperTier(SourcingTier):
    """Tier 2: the streaming-service decode helper, raw and then through ffmpeg."""

    name = "decode helper"

    def __init__(
        self,
        *,
        locator: DecodeHelperLocator,
        transcoder: Transcoder,
        engine: AudioEngine,
        timeout_seconds: float = 45.0,
    ) -> None:
        self._locator = locator
        self._transcoder = transcoder
        self._engine = engine
        self.timeout_seconds = timeout_seconds

    def _helper_command(self, request: SourcingRequest) -> str:
        link = request.resolved.descriptor.service_link
        if not link:
            raise ConfigurationMissingError(
                "decode helper", ErrorMessages.TIER_NOT_APPLICABLE_NO_LINK
            )
        if not self._locator.enabled:
            raise ConfigurationMissingError(
                "decode helper", ErrorMessages.TIER_DISABLED_PREFER_YOUTUBE
            )
        return self._locator.command_for(link)

    def _candidates(self, command: str) -> list[tuple[str, PipeInput]]:
        candidates = [("raw helper output", PipeInput(argv=("sh", "-c", command)))]
        for hint in self._transcoder.input_format_hints:
            label = f"ffmpeg {hint}" if hint else "ffmpeg auto-probe"
            candidates.append((label, self._transcoder.helper_pipeline(command, hint)))
        return candidates

    async def attempt(self, request: SourcingRequest, *, tier_index: int) -> TierSuccess:
        try:
            command = self._helper_command(request)
        except ConfigurationMissingError as e:
            raise SourcingTierError(self.name, e.message) from e

        failures: list[SourcingAttempt] = []
        for label, pipe in self._candidates(command):
            try:
                handle = await self._engine.make_playable(
                    request.session_key, pipe, volume=request.volume
                )
            except PlaybackProbeError as e:
                failures.append(self._candidate_failure(tier_index, label, e))
                continue
            return TierSuccess(
                handle=handle,
                metadata=request.prefetched or TrackMetadata(),
                candidate=label,
                failed_candidates=tuple(failures),
            )

        raise SourcingTierError(self.name, fold_candidates(failures), candidates=failures)


class ExplicitUrlTier(SourcingTier):
    """Tier 3: per format spec, play the extracted URL over HTTP, then via an ffmpeg pipe."""

    name = "explicit url"

    def __init__(
        self,
        *,
        extractor: MediaExtractor,
        transcoder: Transcoder,
        engine: AudioEngine,
        format_specs: list[str],
        timeout_seconds: float = 45.0,
    ) -> None:
        self._extractor = extractor
        self._transcoder = transcoder
        self._engine = engine
        self._formats = list(format_specs)
        self.timeout_seconds = timeout_seconds

    async def attempt(self, request: SourcingRequest, *, tier_index: int) -> TierSuccess:
        target = request.resolved.descriptor.extractor_target
        failures: list[SourcingAttempt] = []

        for format_spec in self._formats:
            try:
                media = await self._extractor.extract(target, format_spec)
            except MediaExtractionError as e:
                failures.append(self._candidate_failure(tier_index, format_spec, e))
                continue

            url_input = UrlInput(url=media.url, headers=media.headers)
            errors: list[str] = []
            for mode, audio_input in (
                ("http", url_input),
                ("ffmpeg pipe", self._transcoder.url_pipeline(url_input)),
            ):
                try:
                    handle = await self._engine.make_playable(
                        request.session_key, audio_input, volume=request.volume
                    )
                except PlaybackProbeError as e:
                    errors.append(f"{mode}: {describe_failure(e)}")
                    continue
                return TierSuccess(
                    handle=handle,
                    metadata=media.metadata,
                    candidate=f"{format_spec} ({mode})",
                    failed_candidates=tuple(failures),
                )

            failures.append(self._candidate_failure(tier_index, format_spec, ", ".join(errors)))

        raise SourcingTierError(self.name, fold_candidates(failures), candidates=failures)


class DownloadTier(SourcingTier):
    """Tier 4: download to a temp file, play it, transcode to WAV if it will not play."""

    name = "download"

    def __init__(
        self,
        *,
        extractor: MediaExtractor,
        transcoder: Transcoder,
        engine: AudioEngine,
        directory: Path,
        format_spec: str = "bestaudio",
        timeout_seconds: float = 180.0,
    ) -> None:
        self._extractor = extractor
        self._transcoder = transcoder
        self._engine = engine
        self._directory = Path(directory)
        self._format = format_spec
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def _unique_prefix() -> str:
        return f"yt-{os.getpid()}-{uuid.uuid4().hex[:12]}"

    @staticmethod
    def _discard(paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove %s after failed download tier", path)

    def _purge(self, prefix: str) -> None:
        """Remove every file yt-dlp wrote for ``prefix``, partial downloads included."""
        self._discard(sorted(self._directory.glob(f"{prefix}.*")))

    def _purge_when_done(self, download: asyncio.Future, prefix: str) -> None:
        # The worker thread outlives a cancelled await and may still write files.
        def _on_done(task: asyncio.Future) -> None:
            if not task.cancelled() and task.exception() is not None:
                logger.debug("Abandoned download %s failed: %s", prefix, task.exception())
            self._purge(prefix)

        download.add_done_callback(_on_done)

    async def _play(self, request: SourcingRequest, path: Path) -> PlayableHandle:
        return await self._engine.make_playable(
            request.session_key, FileInput(path=path), volume=request.volume
        )

    async def attempt(self, request: SourcingRequest, *, tier_index: int) -> TierSuccess:
        target = request.resolved.descriptor.extractor_target
        prefix = self._unique_prefix()
        created: list[Path] = []
        succeeded = False

        download = asyncio.ensure_future(
            self._extractor.download(target, self._directory, prefix, self._format)
        )
        try:
            try:
                downloaded = await asyncio.shield(download)
            except asyncio.CancelledError:
                self._purge_when_done(download, prefix)
                raise
            except MediaExtractionError as e:
                raise SourcingTierError(self.name, describe_failure(e)) from e
            created.append(downloaded.path)

            try:
                handle = await self._play(request, downloaded.path)
                candidate = "downloaded file"
                failures: list[SourcingAttempt] = []
            except PlaybackProbeError as e:
                failures = [self._candidate_failure(tier_index, "downloaded file", e)]
                wav_path = self._directory / f"{prefix}.wav"
                created.append(wav_path)
                try:
                    await self._transcoder.transcode_file(downloaded.path, wav_path)
                    handle = await self._play(request, wav_path)
                except (TranscodeError, PlaybackProbeError) as inner:
                    failures.append(self._candidate_failure(tier_index, "transcoded wav", inner))
                    raise SourcingTierError(
                        self.name, fold_candidates(failures), candidates=failures
                    ) from inner
                candidate = "transcoded wav"

            succeeded = True
            return TierSuccess(
                handle=handle,
                metadata=downloaded.metadata,
                cleanup_paths=tuple(created),
                candidate=candidate,
                failed_candidates=tuple(failures),
            )
        finally:
            if not succeeded:
                self._discard(created)
                self._purge(prefix)
