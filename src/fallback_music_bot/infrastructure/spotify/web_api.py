"""StreamingServiceClient implementation backed by the Spotify Web API."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from fallback_music_bot.application.interfaces.streaming_service import StreamingServiceClient
from fallback_music_bot.config.settings import SpotifySettings
from fallback_music_bot.domain.music.links import extract_track_id
from fallback_music_bot.domain.music.value_objects import TrackMetadata
from fallback_music_bot.domain.shared.exceptions import (
    ConfigurationMissingError,
    StreamingServiceError,
)
from fallback_music_bot.domain.shared.messages import ErrorMessages, LogTemplates
from fallback_music_bot.infrastructure.spotify.models import (
    UNKNOWN_ARTIST,
    SpotifySearchResponse,
    SpotifyToken,
    SpotifyTrack,
)

logger = logging.getLogger(__name__)

# Refresh the token this many seconds before Spotify says it expires.
TOKEN_EXPIRY_MARGIN = 30.0


class SpotifyWebApiClient(StreamingServiceClient):
    """Client-credentials token exchange, track lookup and track search.

    Every failure surfaces as ``StreamingServiceError`` (or
    ``ConfigurationMissingError`` without credentials) so callers can
    downgrade without inspecting httpx internals.
    """

    def __init__(
        self,
        settings: SpotifySettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or SpotifySettings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._token: SpotifyToken | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return self._settings.has_credentials

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.request_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ── Token ──────────────────────────────────────────────────────────

    async def _access_token(self) -> str:
        if not self.configured:
            raise ConfigurationMissingError("spotify credentials")

        async with self._token_lock:
            if self._token is not None and time.monotonic() < self._token_expires_at:
                return self._token.access_token

            data = await self._request(
                "token",
                "POST",
                self._settings.token_url,
                data={"grant_type": "client_credentials"},
                auth=(
                    self._settings.client_id,
                    self._settings.client_secret.get_secret_value(),
                ),
            )
            try:
                token = SpotifyToken.model_validate(data)
            except ValidationError as e:
                raise StreamingServiceError("token", ErrorMessages.SPOTIFY_TOKEN_MISSING) from e

            self._token = token
            self._token_expires_at = (
                time.monotonic() + max(0.0, token.expires_in - TOKEN_EXPIRY_MARGIN)
            )
            logger.debug(LogTemplates.SPOTIFY_TOKEN_REFRESHED, token.expires_in)
            return token.access_token

    # ── HTTP ───────────────────────────────────────────────────────────

    async def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._http().request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise StreamingServiceError(
                operation,
                f"Spotify {operation} returned HTTP {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise StreamingServiceError(operation, f"Spotify {operation} failed: {e}") from e
        except ValueError as e:
            raise StreamingServiceError(
                operation, f"Spotify {operation} returned invalid JSON"
            ) from e

    async def _get(self, operation: str, path: str, **params: Any) -> Any:
        token = await self._access_token()
        return await self._request(
            operation,
            "GET",
            f"{self._settings.api_base_url.rstrip('/')}/{path.lstrip('/')}",
            params=params or None,
            headers={"Authorization": f"Bearer {token}"},
        )

    # ── Lookups ────────────────────────────────────────────────────────

    async def get_track(self, link: str) -> TrackMetadata:
        track_id = extract_track_id(link)
        if track_id is None:
            raise StreamingServiceError(
                "lookup", ErrorMessages.SPOTIFY_TRACK_ID_UNPARSABLE.format(link=link)
            )

        data = await self._get("lookup", f"tracks/{track_id}")
        try:
            track = SpotifyTrack.model_validate(data)
        except ValidationError as e:
            raise StreamingServiceError("lookup", ErrorMessages.SPOTIFY_TRACK_INCOMPLETE) from e

        if not track.name or not track.first_artist:
            raise StreamingServiceError("lookup", ErrorMessages.SPOTIFY_TRACK_INCOMPLETE)
        return track.to_metadata()

    async def search_track(self, text: str) -> TrackMetadata:
        data = await self._get("search", "search", q=text, type="track", limit=1)
        try:
            result = SpotifySearchResponse.model_validate(data)
        except ValidationError as e:
            raise StreamingServiceError("search", "Spotify search payload was malformed") from e

        if not result.tracks.items or not result.tracks.items[0].name:
            raise StreamingServiceError("search", f"No Spotify results for '{text}'")
        return result.tracks.items[0].to_metadata(default_artist=UNKNOWN_ARTIST)
