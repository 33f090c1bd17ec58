#!/usr/bin/env python3
"""
Fallback music bot entry point.

Loads settings from the environment, configures logging from
``logging_config.json``, logs which sourcing tiers and Spotify features the
configuration enables, then runs the bot until a signal or fatal error.
"""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from fallback_music_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from fallback_music_bot.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO", config_path: Path | None = None) -> None:
    """Apply the JSON logging config, or a plain console format when it cannot be read."""
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)
    path = config_path or _LOGGING_CONFIG_PATH

    try:
        with open(path) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning("Could not load %s, falling back to basic config", path)

    logging.getLogger().setLevel(resolved_level)


def log_configuration(logger: logging.Logger, settings: Settings) -> None:
    audio = settings.audio
    spotify = settings.spotify
    logger.info(
        LogTemplates.BOT_SOURCING_SUMMARY,
        len(audio.fallback_formats),
        audio.tier_timeout_seconds,
        audio.download_timeout_seconds,
        audio.download_dir,
    )
    logger.info(
        LogTemplates.BOT_SPOTIFY_SUMMARY,
        "enabled" if spotify.has_credentials else "disabled",
        spotify.stream_cmd or spotify.helper_path,
        spotify.prefer_youtube,
    )


def main() -> int:
    from fallback_music_bot.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    log_configuration(logger, settings)

    from fallback_music_bot.config.container import create_container
    from fallback_music_bot.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(token_value)
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """``fallback-music-bot`` console script."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
