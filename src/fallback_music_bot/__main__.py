"""Allow ``python -m fallback_music_bot``."""

from fallback_music_bot.main import cli

cli()
