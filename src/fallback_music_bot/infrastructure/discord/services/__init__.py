"""Discord-side implementations of application ports."""

from fallback_music_bot.infrastructure.discord.services.panel_renderer import (
    DiscordPanelRenderer,
    build_panel_embed,
)

__all__ = ["DiscordPanelRenderer", "build_panel_embed"]
