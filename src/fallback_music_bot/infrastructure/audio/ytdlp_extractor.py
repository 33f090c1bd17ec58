"""MediaExtractor implementation using the yt-dlp Python API."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, cast

from yt_dlp import YoutubeDL

from fallback_music_bot.application.interfaces.media_extractor import (
    DownloadedMedia,
    ExtractedMedia,
    MediaExtractionError,
    MediaExtractor,
)
from fallback_music_bot.config.settings import AudioSettings
from fallback_music_bot.domain.shared.messages import ErrorMessages, LogTemplates
from fallback_music_bot.infrastructure.audio.models import (
    LOG_URL_TRUNCATE,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

PARTIAL_SUFFIXES = (".part", ".ytdl", ".temp")


class YtDlpExtractor(MediaExtractor):
    """Resolves stream URLs and downloads media through ``yt_dlp.YoutubeDL``.

    yt-dlp is blocking, so every call runs in a worker thread.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.default_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    @staticmethod
    def _parse_info(data: Any, target: str) -> YtDlpTrackInfo:
        if not isinstance(data, dict):
            raise MediaExtractionError(ErrorMessages.EXTRACTOR_NO_INFO.format(target=target))

        entries = data.get("entries")
        if entries is not None:
            first = next((e for e in entries if isinstance(e, dict)), None)
            if first is None:
                raise MediaExtractionError(
                    ErrorMessages.EXTRACTOR_NO_ENTRIES.format(target=target)
                )
            data = first

        return YtDlpTrackInfo.model_validate(dict(data))

    # ── Extraction ─────────────────────────────────────────────────────

    def _extract_sync(self, target: str, format_spec: str) -> YtDlpTrackInfo:
        opts = self._get_opts(format=format_spec)
        try:
            with YoutubeDL(params=cast(Any, opts.to_params())) as ydl:
                data = ydl.extract_info(target, download=False)
        except Exception as e:
            logger.warning(
                LogTemplates.YTDLP_EXTRACT_FAILED, target[:LOG_URL_TRUNCATE], format_spec, e
            )
            raise MediaExtractionError(str(e)) from e
        return self._parse_info(data, target)

    async def extract(self, target: str, format_spec: str) -> ExtractedMedia:
        info = await asyncio.to_thread(self._extract_sync, target, format_spec)

        url = info.stream_url
        if not url:
            raise MediaExtractionError(ErrorMessages.EXTRACTOR_NO_URL.format(target=target))

        return ExtractedMedia(
            url=url,
            headers=info.http_headers,
            filesize=info.size,
            metadata=info.to_metadata(),
        )

    # ── Download ───────────────────────────────────────────────────────

    def _download_sync(
        self, target: str, directory: Path, prefix: str, format_spec: str
    ) -> tuple[YtDlpTrackInfo, Path]:
        directory.mkdir(parents=True, exist_ok=True)
        opts = self._get_opts(
            format=format_spec,
            skip_download=False,
            outtmpl=str(directory / f"{prefix}.%(ext)s"),
        )
        try:
            with YoutubeDL(params=cast(Any, opts.to_params())) as ydl:
                data = ydl.extract_info(target, download=True)
        except Exception as e:
            logger.warning(LogTemplates.YTDLP_DOWNLOAD_FAILED, target[:LOG_URL_TRUNCATE], e)
            raise MediaExtractionError(str(e)) from e

        info = self._parse_info(data, target)
        path = find_downloaded_file(directory, prefix)
        if path is None:
            raise MediaExtractionError(
                ErrorMessages.DOWNLOAD_FILE_MISSING.format(prefix=prefix, directory=directory)
            )
        return info, path

    async def download(
        self, target: str, directory: Path, prefix: str, format_spec: str
    ) -> DownloadedMedia:
        info, path = await asyncio.to_thread(
            self._download_sync, target, Path(directory), prefix, format_spec
        )
        logger.info(LogTemplates.YTDLP_DOWNLOADED, target[:LOG_URL_TRUNCATE], path)
        return DownloadedMedia(path=path, metadata=info.to_metadata())


def find_downloaded_file(directory: Path, prefix: str) -> Path | None:
    """Locate the finished file yt-dlp wrote for ``prefix``, ignoring partial downloads."""
    candidates = sorted(
        p
        for p in directory.glob(f"{prefix}.*")
        if p.is_file() and p.suffix not in PARTIAL_SUFFIXES
    )
    return candidates[0] if candidates else None
