"""Reusable voice-channel guard functions for Discord slash commands.

These are free functions that accept explicit dependencies rather than relying
on a specific cog instance, making them usable from any cog.
"""

from __future__ import annotations

import asyncio
import logging

import discord

from fallback_music_bot.domain.shared.exceptions import VoiceEnvironmentError
from fallback_music_bot.domain.shared.messages import DiscordUIMessages, LogTemplates

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0

VoiceTarget = discord.VoiceChannel | discord.StageChannel


async def send_ephemeral(interaction: discord.Interaction, message: str) -> None:
    """Send an ephemeral message, handling both fresh and already-responded interactions."""
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


def require_guild(interaction: discord.Interaction) -> discord.Guild:
    if interaction.guild is None:
        raise VoiceEnvironmentError(DiscordUIMessages.STATE_SERVER_ONLY)
    return interaction.guild


def require_member(interaction: discord.Interaction) -> discord.Member:
    require_guild(interaction)
    user = interaction.user
    if not isinstance(user, discord.Member):
        raise VoiceEnvironmentError(DiscordUIMessages.STATE_VERIFY_VOICE_FAILED)
    return user


def resolve_join_target(
    interaction: discord.Interaction, channel: VoiceTarget | None = None
) -> VoiceTarget:
    """The explicit channel, else the caller's current voice channel."""
    if channel is not None:
        require_guild(interaction)
        return channel

    member = require_member(interaction)
    if member.voice is None or member.voice.channel is None:
        raise VoiceEnvironmentError(DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE)
    return member.voice.channel


def require_bot_connected(
    interaction: discord.Interaction, message: str = DiscordUIMessages.STATE_NOT_CONNECTED
) -> discord.VoiceClient:
    guild = require_guild(interaction)
    vc = guild.voice_client
    if not isinstance(vc, discord.VoiceClient) or not vc.is_connected():
        raise VoiceEnvironmentError(message)
    return vc


async def connect_to(guild: discord.Guild, channel: VoiceTarget) -> None:
    """Connect, or move an existing connection, to ``channel``."""
    vc = guild.voice_client
    try:
        async with asyncio.timeout(CONNECT_TIMEOUT):
            if isinstance(vc, discord.VoiceClient) and vc.is_connected():
                if vc.channel is None or vc.channel.id != channel.id:
                    await vc.move_to(channel)
            else:
                if vc is not None:
                    await vc.disconnect(force=True)
                await channel.connect(self_deaf=True)
    except TimeoutError as e:
        logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel.id)
        raise VoiceEnvironmentError(DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE) from e
    except discord.Forbidden as e:
        logger.error(LogTemplates.VOICE_NO_PERMISSION, channel.id)
        raise VoiceEnvironmentError(DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE) from e
    except discord.ClientException as e:
        raise VoiceEnvironmentError(DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE) from e

    logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
