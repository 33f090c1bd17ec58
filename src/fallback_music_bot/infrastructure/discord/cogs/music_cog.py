"""Slash-command music cog delegating to the playback controller."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from fallback_music_bot.application.services.control_panel import build_snapshot
from fallback_music_bot.domain.music.value_objects import ControlPanelState
from fallback_music_bot.domain.shared.exceptions import VoiceEnvironmentError
from fallback_music_bot.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from fallback_music_bot.infrastructure.discord.guards.voice_guards import (
    VoiceTarget,
    connect_to,
    require_bot_connected,
    require_guild,
    resolve_join_target,
    send_ephemeral,
)
from fallback_music_bot.infrastructure.discord.services.panel_renderer import (
    DiscordPanelRenderer,
    build_panel_embed,
)
from fallback_music_bot.infrastructure.discord.views.control_panel_view import ControlPanelView
from fallback_music_bot.utils.reply import fit_message, format_attempts, truncate

if TYPE_CHECKING:
    from ....application.services.playback_models import PlayResult
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.GroupCog, group_name="music", group_description="Music playback"):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        super().__init__()

    # ── Voice ──────────────────────────────────────────────────────────

    @app_commands.command(name="join", description="Join your voice channel or the one given.")
    @app_commands.describe(channel="Voice channel to join")
    async def join(
        self,
        interaction: discord.Interaction,
        channel: discord.VoiceChannel | discord.StageChannel | None = None,
    ) -> None:
        target: VoiceTarget = resolve_join_target(interaction, channel)
        guild = require_guild(interaction)

        await interaction.response.defer(ephemeral=True)
        await connect_to(guild, target)
        await interaction.followup.send(
            DiscordUIMessages.SUCCESS_JOINED.format(channel_id=target.id), ephemeral=True
        )

    @app_commands.command(name="leave", description="Stop playback and leave voice.")
    async def leave(self, interaction: discord.Interaction) -> None:
        vc = require_bot_connected(interaction, DiscordUIMessages.STATE_NOT_CONNECTED_LEAVE)
        guild = require_guild(interaction)

        await self.container.playback_controller.stop(guild.id)
        await vc.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild.id)
        await send_ephemeral(interaction, DiscordUIMessages.SUCCESS_LEFT)

    # ── Playback ───────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL, Spotify link or search.")
    @app_commands.describe(query="Direct media URL, Spotify track link or search text")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        query = query.strip()
        if not query:
            raise VoiceEnvironmentError(DiscordUIMessages.ERROR_EMPTY_QUERY)
        guild = require_guild(interaction)
        require_bot_connected(interaction)

        # Acquisition outlasts the 3 s interaction deadline.
        await interaction.response.send_message(
            DiscordUIMessages.PLAY_RESOLVING.format(query=truncate(query, 200))
        )

        result = await self.container.playback_controller.play(guild.id, query)
        await interaction.edit_original_response(content=self._format_play_result(result))

    def _format_play_result(self, result: PlayResult) -> str:
        verbose = self.container.settings.audio.verbose_diagnostics
        lines = [result.message]

        if result.success:
            if result.strategy:
                lines[0] += DiscordUIMessages.PLAY_VIA.format(strategy=result.strategy)
            if verbose and result.attempts:
                lines.append(
                    format_attempts(result.attempts, DiscordUIMessages.PLAY_DIAGNOSTICS_HEADER)
                )
        elif result.attempts:
            lines.append(format_attempts(result.attempts, DiscordUIMessages.PLAY_DIAGNOSTICS_HEADER))

        return fit_message("\n".join(lines))

    # ── Control panel ──────────────────────────────────────────────────

    @app_commands.command(name="control", description="Open a control panel for the current track.")
    async def control(self, interaction: discord.Interaction) -> None:
        guild = require_guild(interaction)
        controller = self.container.playback_controller

        session = controller.store.get(guild.id)
        if session is None:
            await send_ephemeral(interaction, DiscordUIMessages.CONTROL_NOTHING_PLAYING)
            return

        color = self.container.settings.discord.embed_color
        view = ControlPanelView(owner_id=interaction.user.id, guild_id=guild.id, controller=controller)
        embed = build_panel_embed(build_snapshot(session), color=color)

        await interaction.response.send_message(embed=embed, view=view)
        message = await interaction.original_response()
        view.set_message(message)

        panel = ControlPanelState(
            channel_id=message.channel.id,
            message_id=message.id,
            owner_id=interaction.user.id,
            session_key=guild.id,
            refresh_interval=self.container.settings.panel.refresh_interval_seconds,
        )
        controller.open_panel(panel, DiscordPanelRenderer(message, view, color=color))

    # ── Diagnostics ────────────────────────────────────────────────────

    @app_commands.command(
        name="streamtest",
        description="Record a short sample from the Spotify decode helper and probe it.",
    )
    @app_commands.describe(uri="Spotify track URL or URI")
    async def streamtest(self, interaction: discord.Interaction, uri: str) -> None:
        uri = uri.strip()
        if not uri:
            await send_ephemeral(interaction, DiscordUIMessages.STREAMTEST_EMPTY)
            return

        await interaction.response.defer(ephemeral=True)
        result = await self.container.playback_controller.stream_test(uri)
        await interaction.followup.send(fit_message(result.message), ephemeral=True)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
