"""URL and URI classification for music requests."""

from __future__ import annotations

import re
from typing import Final

HTTP_URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://\S+$", re.IGNORECASE)

SERVICE_LINK_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://open\.spotify\.com/", re.IGNORECASE),
    re.compile(r"^spotify:", re.IGNORECASE),
]

_TRACK_URI_PATTERN: Final[re.Pattern[str]] = re.compile(r"spotify:track:([^?&\s]+)")
_TRACK_PATH_PATTERN: Final[re.Pattern[str]] = re.compile(r"/track/([^?&/\s]+)")


def is_streaming_service_link(text: str) -> bool:
    return any(pattern.search(text) for pattern in SERVICE_LINK_PATTERNS)


def is_direct_media_url(text: str) -> bool:
    """Any http(s) URL that is not a streaming-service link."""
    return bool(HTTP_URL_PATTERN.match(text)) and not is_streaming_service_link(text)


def extract_track_id(link: str) -> str | None:
    """Pull the track id out of ``spotify:track:<id>`` or ``.../track/<id>``."""
    for pattern in (_TRACK_URI_PATTERN, _TRACK_PATH_PATTERN):
        match = pattern.search(link)
        if match and match.group(1):
            return match.group(1)
    return None


def to_track_uri(link: str) -> str:
    """Normalize a track link to ``spotify:track:<id>``; unparsable input is returned as-is."""
    track_id = extract_track_id(link)
    if track_id is None:
        return link
    return f"spotify:track:{track_id}"
