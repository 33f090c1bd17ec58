"""Spotify Web API integration."""

from fallback_music_bot.infrastructure.spotify.web_api import SpotifyWebApiClient

__all__ = ["SpotifyWebApiClient"]
