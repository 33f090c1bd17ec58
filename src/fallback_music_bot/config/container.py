"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the resolver, sourcing tiers, session store,
reaper, audio engine and playback controller. Components are created
on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_engine import AudioEngine
    from ..application.interfaces.decode_helper import DecodeHelperLocator
    from ..application.interfaces.media_extractor import MediaExtractor
    from ..application.interfaces.streaming_service import StreamingServiceClient
    from ..application.interfaces.transcoder import Transcoder
    from ..application.services.playback_controller import PlaybackController
    from ..application.services.request_resolver import RequestResolver
    from ..application.services.resource_reaper import ResourceReaper
    from ..application.services.session_store import PlaybackSessionStore
    from ..application.sourcing.stream_acquirer import StreamAcquirer
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _streaming_service: StreamingServiceClient | None = None
    _media_extractor: MediaExtractor | None = None
    _transcoder: Transcoder | None = None
    _helper_locator: DecodeHelperLocator | None = None
    _audio_engine: AudioEngine | None = None

    # Application services
    _request_resolver: RequestResolver | None = None
    _resource_reaper: ResourceReaper | None = None
    _session_store: PlaybackSessionStore | None = None
    _stream_acquirer: StreamAcquirer | None = None
    _playback_controller: PlaybackController | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Infrastructure Adapters ===

    @property
    def streaming_service(self) -> StreamingServiceClient:
        """Get the Spotify Web API client."""
        if self._streaming_service is None:
            from ..infrastructure.spotify.web_api import SpotifyWebApiClient

            self._streaming_service = SpotifyWebApiClient(self.settings.spotify)
        return self._streaming_service

    @property
    def media_extractor(self) -> MediaExtractor:
        """Get the yt-dlp media extractor."""
        if self._media_extractor is None:
            from ..infrastructure.audio.ytdlp_extractor import YtDlpExtractor

            self._media_extractor = YtDlpExtractor(self.settings.audio)
        return self._media_extractor

    @property
    def transcoder(self) -> Transcoder:
        """Get the ffmpeg transcoder."""
        if self._transcoder is None:
            from ..infrastructure.audio.ffmpeg_transcoder import FFmpegTranscoder

            self._transcoder = FFmpegTranscoder(self.settings.audio)
        return self._transcoder

    @property
    def helper_locator(self) -> DecodeHelperLocator:
        """Get the decode-helper command locator."""
        if self._helper_locator is None:
            from ..infrastructure.audio.helper_command import HelperCommandLocator

            self._helper_locator = HelperCommandLocator(self.settings.spotify)
        return self._helper_locator

    @property
    def audio_engine(self) -> AudioEngine:
        """Get the Discord voice audio engine."""
        if self._audio_engine is None:
            from ..infrastructure.discord.adapters.audio_engine import DiscordAudioEngine

            self._audio_engine = DiscordAudioEngine(self.bot, self.settings.audio)
        return self._audio_engine

    # === Application Services ===

    @property
    def request_resolver(self) -> RequestResolver:
        """Get the request resolver."""
        if self._request_resolver is None:
            from ..application.services.request_resolver import RequestResolver

            self._request_resolver = RequestResolver(streaming_service=self.streaming_service)
        return self._request_resolver

    @property
    def resource_reaper(self) -> ResourceReaper:
        """Get the temporary-file reaper."""
        if self._resource_reaper is None:
            from ..application.services.resource_reaper import ResourceReaper

            self._resource_reaper = ResourceReaper()
        return self._resource_reaper

    @property
    def session_store(self) -> PlaybackSessionStore:
        """Get the playback session store."""
        if self._session_store is None:
            from ..application.services.session_store import PlaybackSessionStore

            self._session_store = PlaybackSessionStore(
                reaper=self.resource_reaper,
                default_volume=self.settings.audio.default_volume,
            )
        return self._session_store

    @property
    def stream_acquirer(self) -> StreamAcquirer:
        """Get the stream acquirer with its four tiers in order."""
        if self._stream_acquirer is None:
            from ..application.sourcing.stream_acquirer import StreamAcquirer
            from ..application.sourcing.tiers import (
                DecodeHelperTier,
                DirectStreamTier,
                DownloadTier,
                ExplicitUrlTier,
            )

            audio = self.settings.audio
            self._stream_acquirer = StreamAcquirer(
                [
                    DirectStreamTier(
                        extractor=self.media_extractor,
                        engine=self.audio_engine,
                        format_spec=audio.default_format,
                        timeout_seconds=audio.tier_timeout_seconds,
                    ),
                    DecodeHelperTier(
                        locator=self.helper_locator,
                        transcoder=self.transcoder,
                        engine=self.audio_engine,
                        timeout_seconds=audio.tier_timeout_seconds,
                    ),
                    ExplicitUrlTier(
                        extractor=self.media_extractor,
                        transcoder=self.transcoder,
                        engine=self.audio_engine,
                        format_specs=list(audio.fallback_formats),
                        timeout_seconds=audio.tier_timeout_seconds,
                    ),
                    DownloadTier(
                        extractor=self.media_extractor,
                        transcoder=self.transcoder,
                        engine=self.audio_engine,
                        directory=audio.download_dir,
                        format_spec=audio.download_format,
                        timeout_seconds=audio.download_timeout_seconds,
                    ),
                ]
            )
        return self._stream_acquirer

    @property
    def playback_controller(self) -> PlaybackController:
        """Get the playback controller."""
        if self._playback_controller is None:
            from ..application.services.playback_controller import PlaybackController

            self._playback_controller = PlaybackController(
                resolver=self.request_resolver,
                acquirer=self.stream_acquirer,
                store=self.session_store,
                reaper=self.resource_reaper,
                engine=self.audio_engine,
                helper_locator=self.helper_locator,
                transcoder=self.transcoder,
                scratch_dir=self.settings.audio.download_dir,
                default_volume=self.settings.audio.default_volume,
            )
        return self._playback_controller

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Check external media tools before the first request."""
        from ..infrastructure.audio.ffmpeg_transcoder import ensure_media_tools

        ensure_media_tools(self.settings.audio)

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._playback_controller is not None:
            try:
                await self._playback_controller.shutdown()
            except Exception as exc:
                logger.warning("Failed shutting down playback controller: %r", exc)

        if self._streaming_service is not None:
            await self._streaming_service.aclose()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
