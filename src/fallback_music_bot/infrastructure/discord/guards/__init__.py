"""Voice channel guard functions for Discord cogs."""

from fallback_music_bot.infrastructure.discord.guards.voice_guards import (
    connect_to,
    require_bot_connected,
    require_guild,
    require_member,
    resolve_join_target,
    send_ephemeral,
)

__all__ = [
    "connect_to",
    "require_bot_connected",
    "require_guild",
    "require_member",
    "resolve_join_target",
    "send_ephemeral",
]
