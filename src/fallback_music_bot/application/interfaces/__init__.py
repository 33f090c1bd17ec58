"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from fallback_music_bot.application.interfaces.audio_engine import (
    AudioEngine,
    AudioInput,
    FileInput,
    PipeInput,
    PlayableHandle,
    PlaybackProbeError,
    UrlInput,
)
from fallback_music_bot.application.interfaces.decode_helper import DecodeHelperLocator
from fallback_music_bot.application.interfaces.media_extractor import (
    DownloadedMedia,
    ExtractedMedia,
    MediaExtractionError,
    MediaExtractor,
)
from fallback_music_bot.application.interfaces.panel_renderer import PanelRenderer, PanelSnapshot
from fallback_music_bot.application.interfaces.streaming_service import StreamingServiceClient
from fallback_music_bot.application.interfaces.transcoder import TranscodeError, Transcoder

__all__ = [
    "AudioEngine",
    "AudioInput",
    "DecodeHelperLocator",
    "DownloadedMedia",
    "ExtractedMedia",
    "FileInput",
    "MediaExtractionError",
    "MediaExtractor",
    "PanelRenderer",
    "PanelSnapshot",
    "PipeInput",
    "PlayableHandle",
    "PlaybackProbeError",
    "StreamingServiceClient",
    "TranscodeError",
    "Transcoder",
    "UrlInput",
]
