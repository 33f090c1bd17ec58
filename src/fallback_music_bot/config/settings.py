"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import DiscordSnowflake, MAX_VOLUME, MIN_VOLUME


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    guild_ids: tuple[DiscordSnowflake, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("guild_ids", "guilds")
    )
    sync_on_startup: bool = True
    embed_color: int = 0x1DB954

    @field_validator("guild_ids", mode="before")
    @classmethod
    def _coerce_guild_ids(cls, v: object) -> object:
        """Accept a list (JSON array) or a comma-separated string."""
        if isinstance(v, str):
            return tuple(int(part) for part in v.split(",") if part.strip())
        if isinstance(v, list):
            return tuple(v)
        return v

    @field_validator("embed_color")
    @classmethod
    def _validate_embed_color(cls, v: int) -> int:
        if not 0 <= v <= 0xFFFFFF:
            raise ValueError(ErrorMessages.INVALID_EMBED_COLOR)
        return v


class AudioSettings(BaseModel):
    """Audio sourcing and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: float = Field(default=0.20, ge=MIN_VOLUME, le=MAX_VOLUME)
    default_format: str = Field(
        default="bestaudio/best",
        validation_alias=AliasChoices("default_format", "ytdlp_format"),
    )
    fallback_formats: tuple[str, ...] = (
        "bestaudio[ext=webm]/bestaudio/best",
        "bestaudio[ext=m4a]/bestaudio/best",
        "bestaudio/best",
    )
    download_format: str = "bestaudio"
    download_dir: Path = Field(default_factory=lambda: Path(os.getcwd()))
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    tier_timeout_seconds: float = Field(default=45.0, gt=0)
    download_timeout_seconds: float = Field(default=180.0, gt=0)
    verbose_diagnostics: bool = Field(
        default=False,
        validation_alias=AliasChoices("verbose_diagnostics", "verbose", "music_verbose"),
    )

    @field_validator("fallback_formats", mode="before")
    @classmethod
    def _coerce_formats(cls, v: object) -> object:
        if isinstance(v, list):
            return tuple(v)
        return v


class SpotifySettings(BaseModel):
    """Spotify Web API credentials and decode-helper configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: str = ""
    client_secret: SecretStr = SecretStr("")
    stream_cmd: str | None = Field(
        default=None, validation_alias=AliasChoices("stream_cmd", "spotify_stream_cmd")
    )
    helper_path: Path = Path(".bin") / "librespot-wrapper"
    prefer_youtube: bool = False
    token_url: str = "https://accounts.spotify.com/api/token"
    api_base_url: str = "https://api.spotify.com/v1"
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    @field_validator("stream_cmd", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id.strip() and self.client_secret.get_secret_value().strip())


class PanelSettings(BaseModel):
    """Control panel configuration."""

    model_config = SettingsConfigDict(frozen=True)

    refresh_interval_seconds: float = Field(default=5.0, gt=0)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__GUILD_IDS, etc. (nested with ``__``)
    - AUDIO__DEFAULT_VOLUME, AUDIO__VERBOSE_DIAGNOSTICS, ...
    - SPOTIFY__CLIENT_ID, SPOTIFY__CLIENT_SECRET, SPOTIFY__STREAM_CMD, SPOTIFY__PREFER_YOUTUBE
    - PANEL__REFRESH_INTERVAL_SECONDS
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    panel: PanelSettings = Field(default_factory=PanelSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
