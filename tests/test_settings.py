"""
Unit Tests for Application Settings Configuration

Tests for:
- Loading settings from environment variables
- Default values for optional fields
- Type coercion (strings to ints, bools, floats, tuples)
- Nested settings objects (DiscordSettings, AudioSettings, SpotifySettings, PanelSettings)
- Invalid values (wrong types, out of range values)
- Field aliases
- Settings caching and clearing
"""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from fallback_music_bot.config.settings import (
    AudioSettings,
    DiscordSettings,
    PanelSettings,
    Settings,
    SpotifySettings,
    clear_settings_cache,
    get_settings,
)

# =============================================================================
# DiscordSettings Tests
# =============================================================================


class TestDiscordSettings:
    """Unit tests for DiscordSettings configuration."""

    def test_create_with_defaults(self):
        """Should create DiscordSettings with default values."""
        discord = DiscordSettings()

        assert discord.token.get_secret_value() == ""
        assert discord.guild_ids == ()
        assert discord.sync_on_startup is True
        assert discord.embed_color == 0x1DB954

    def test_token_alias_bot_token(self):
        """Should accept bot_token as an alias."""
        discord = DiscordSettings(bot_token="abc")

        assert discord.token == SecretStr("abc")

    def test_guild_ids_from_comma_separated_string(self):
        """Should split a comma-separated string of guild ids."""
        discord = DiscordSettings(guild_ids="123, 456,")

        assert discord.guild_ids == (123, 456)

    def test_guild_ids_from_list(self):
        """Should accept a list of guild ids."""
        discord = DiscordSettings(guilds=[1, 2])

        assert discord.guild_ids == (1, 2)

    def test_invalid_guild_id_zero(self):
        """Should reject non-positive guild ids."""
        with pytest.raises(ValidationError):
            DiscordSettings(guild_ids=[0])

    def test_invalid_embed_color(self):
        """Should reject colors outside 24-bit RGB."""
        with pytest.raises(ValidationError):
            DiscordSettings(embed_color=0x1000000)

    def test_immutability(self):
        """Should be frozen."""
        discord = DiscordSettings()

        with pytest.raises(ValidationError):
            discord.sync_on_startup = False


# =============================================================================
# AudioSettings Tests
# =============================================================================


class TestAudioSettings:
    """Unit tests for AudioSettings configuration."""

    def test_create_with_defaults(self):
        """Should create AudioSettings with default values."""
        audio = AudioSettings()

        assert audio.default_volume == 0.20
        assert audio.default_format == "bestaudio/best"
        assert len(audio.fallback_formats) == 3
        assert audio.tier_timeout_seconds == 45.0
        assert audio.download_timeout_seconds == 180.0
        assert audio.verbose_diagnostics is False
        assert audio.download_dir == Path.cwd()

    def test_volume_validation_maximum(self):
        """Should reject volumes above the maximum."""
        with pytest.raises(ValidationError, match="less than or equal to 5"):
            AudioSettings(default_volume=5.1)

    def test_volume_validation_minimum(self):
        """Should reject negative volumes."""
        with pytest.raises(ValidationError):
            AudioSettings(default_volume=-0.1)

    def test_ytdlp_format_alias(self):
        """Should accept ytdlp_format as an alias for default_format."""
        audio = AudioSettings(ytdlp_format="bestaudio[ext=m4a]")

        assert audio.default_format == "bestaudio[ext=m4a]"

    def test_verbose_alias(self):
        audio = AudioSettings(music_verbose=True)

        assert audio.verbose_diagnostics is True

    def test_fallback_formats_from_list(self):
        audio = AudioSettings(fallback_formats=["a", "b"])

        assert audio.fallback_formats == ("a", "b")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            AudioSettings(tier_timeout_seconds=0)


# =============================================================================
# SpotifySettings Tests
# =============================================================================


class TestSpotifySettings:
    """Unit tests for SpotifySettings configuration."""

    def test_defaults_have_no_credentials(self):
        """Should report no credentials by default."""
        spotify = SpotifySettings()

        assert spotify.has_credentials is False
        assert spotify.stream_cmd is None
        assert spotify.prefer_youtube is False
        assert spotify.helper_path == Path(".bin") / "librespot-wrapper"

    def test_has_credentials(self):
        spotify = SpotifySettings(client_id="id", client_secret="secret")

        assert spotify.has_credentials is True

    def test_whitespace_credentials_do_not_count(self):
        spotify = SpotifySettings(client_id="  ", client_secret="secret")

        assert spotify.has_credentials is False

    def test_blank_stream_cmd_is_none(self):
        """Should treat a blank stream command as unset."""
        spotify = SpotifySettings(stream_cmd="   ")

        assert spotify.stream_cmd is None

    def test_stream_cmd_alias(self):
        spotify = SpotifySettings(spotify_stream_cmd="helper {uri}")

        assert spotify.stream_cmd == "helper {uri}"


class TestPanelSettings:
    def test_refresh_interval_default(self):
        assert PanelSettings().refresh_interval_seconds == 5.0

    def test_refresh_interval_positive(self):
        with pytest.raises(ValidationError):
            PanelSettings(refresh_interval_seconds=0)


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    """Unit tests for main Settings configuration container."""

    def test_create_with_all_defaults(self, monkeypatch):
        """Should create Settings with all default values."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("DEBUG", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.discord, DiscordSettings)
        assert isinstance(settings.audio, AudioSettings)
        assert isinstance(settings.spotify, SpotifySettings)
        assert isinstance(settings.panel, PanelSettings)

    def test_load_nested_settings_from_env(self, monkeypatch):
        """Should load nested settings using env_nested_delimiter."""
        monkeypatch.setenv("DISCORD__TOKEN", "bot-token")
        monkeypatch.setenv("DISCORD__GUILD_IDS", "[111, 222]")
        monkeypatch.setenv("AUDIO__DEFAULT_VOLUME", "0.8")
        monkeypatch.setenv("AUDIO__VERBOSE_DIAGNOSTICS", "true")
        monkeypatch.setenv("SPOTIFY__CLIENT_ID", "cid")
        monkeypatch.setenv("SPOTIFY__CLIENT_SECRET", "csecret")
        monkeypatch.setenv("SPOTIFY__PREFER_YOUTUBE", "1")
        monkeypatch.setenv("PANEL__REFRESH_INTERVAL_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.discord.token.get_secret_value() == "bot-token"
        assert settings.discord.guild_ids == (111, 222)
        assert settings.audio.default_volume == 0.8
        assert settings.audio.verbose_diagnostics is True
        assert settings.spotify.has_credentials is True
        assert settings.spotify.prefer_youtube is True
        assert settings.panel.refresh_interval_seconds == 2.5

    def test_log_level_validation_case_insensitive(self, monkeypatch):
        """Should accept case-insensitive log levels and normalize to uppercase."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"

    def test_log_level_validation_invalid(self, monkeypatch):
        """Should raise ValidationError for invalid log level."""
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None)

    def test_environment_validation(self, monkeypatch):
        """Should validate environment is one of allowed literal values."""
        monkeypatch.setenv("ENVIRONMENT", "staging")

        with pytest.raises(ValidationError, match="Input should be"):
            Settings(_env_file=None)

    def test_nested_validation_propagates(self, monkeypatch):
        """Should surface nested validation errors."""
        monkeypatch.setenv("AUDIO__DEFAULT_VOLUME", "9")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


# =============================================================================
# Settings Caching Tests
# =============================================================================


class TestSettingsCaching:
    """Unit tests for settings caching."""

    def test_get_settings_returns_cached_instance(self, monkeypatch):
        """Should return the same instance on repeated calls."""
        clear_settings_cache()
        monkeypatch.setenv("ENVIRONMENT", "test")

        first = get_settings()
        second = get_settings()

        assert first is second
        clear_settings_cache()

    def test_clear_settings_cache(self, monkeypatch):
        """Should return a new instance after clear_settings_cache()."""
        clear_settings_cache()
        monkeypatch.setenv("ENVIRONMENT", "test")
        first = get_settings()

        clear_settings_cache()
        monkeypatch.setenv("ENVIRONMENT", "production")
        second = get_settings()

        assert first is not second
        assert second.environment == "production"
        clear_settings_cache()
