"""Audio infrastructure - yt-dlp extractor, ffmpeg transcoder and decode-helper locator."""

from fallback_music_bot.infrastructure.audio.ffmpeg_transcoder import (
    FFmpegConfig,
    FFmpegTranscoder,
    ensure_media_tools,
)
from fallback_music_bot.infrastructure.audio.helper_command import HelperCommandLocator
from fallback_music_bot.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from fallback_music_bot.infrastructure.audio.ytdlp_extractor import YtDlpExtractor

__all__ = [
    "AudioFormatInfo",
    "FFmpegConfig",
    "FFmpegTranscoder",
    "HelperCommandLocator",
    "YtDlpExtractor",
    "YtDlpOpts",
    "YtDlpTrackInfo",
    "ensure_media_tools",
]
