"""
Sourcing Pipeline

Ordered fallback tiers that turn a source descriptor into a playable
handle, and the driver that runs them.
"""

from fallback_music_bot.application.sourcing.base import SourcingRequest, SourcingTier
from fallback_music_bot.application.sourcing.stream_acquirer import StreamAcquirer
from fallback_music_bot.application.sourcing.tiers import (
    DecodeHelperTier,
    DirectStreamTier,
    DownloadTier,
    ExplicitUrlTier,
)

__all__ = [
    "DecodeHelperTier",
    "DirectStreamTier",
    "DownloadTier",
    "ExplicitUrlTier",
    "SourcingRequest",
    "SourcingTier",
    "StreamAcquirer",
]
