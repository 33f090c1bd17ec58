"""Main Discord bot class integrating the DI container and cog lifecycle."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from fallback_music_bot.domain.shared.exceptions import VoiceEnvironmentError
from fallback_music_bot.domain.shared.messages import DiscordUIMessages, LogTemplates
from fallback_music_bot.infrastructure.discord.views.control_panel_view import (
    parse_custom_id,
    run_panel_action,
)

if TYPE_CHECKING:
    from ...config.container import Container
    from ...config.settings import Settings

logger = logging.getLogger(__name__)

COGS: tuple[str, ...] = ("fallback_music_bot.infrastructure.discord.cogs.music_cog",)


class MusicBot(commands.Bot):
    def __init__(
        self,
        container: Container,
        settings: Settings,
        **kwargs,
    ) -> None:
        intents = discord.Intents.default()
        intents.voice_states = True
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            **kwargs,
        )

        self.container = container
        self.settings = settings
        container.set_bot(self)

    async def setup_hook(self) -> None:
        logger.info(LogTemplates.BOT_SETUP)

        await self.container.initialize()

        for cog in COGS:
            await self.load_extension(cog)
            logger.info(LogTemplates.BOT_COG_LOADED, cog)

        self.tree.on_error = self._on_app_command_error

        if self.settings.discord.sync_on_startup:
            try:
                await self._sync_commands()
            except discord.HTTPException as e:
                logger.warning(LogTemplates.BOT_SYNC_FAILED, e)

        logger.info(LogTemplates.BOT_SETUP_COMPLETE)

    async def _sync_commands(self) -> None:
        for guild_id in self.settings.discord.guild_ids:
            guild = discord.Object(id=guild_id)
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info(LogTemplates.BOT_COMMANDS_SYNCED_GUILD, len(synced), guild_id)

        synced = await self.tree.sync()
        logger.info(LogTemplates.BOT_COMMANDS_SYNCED, len(synced))

    async def _on_app_command_error(
        self, interaction: discord.Interaction, error: Exception
    ) -> None:
        """Global slash-command error handler; sends ephemeral messages to avoid channel spam."""
        original = getattr(error, "original", error)

        if isinstance(original, VoiceEnvironmentError):
            message = original.reason
        else:
            logger.error(
                LogTemplates.BOT_SLASH_COMMAND_ERROR,
                getattr(interaction.command, "name", "<unknown>"),
                original,
            )
            message = DiscordUIMessages.ERROR_OCCURRED.format(error=original)

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException:
            logger.warning(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        """Serve panel buttons whose view is gone, e.g. panels posted before a restart."""
        if interaction.type is not discord.InteractionType.component:
            return
        parsed = parse_custom_id((interaction.data or {}).get("custom_id", ""))
        if parsed is None:
            return

        controller = self.container.playback_controller
        message = interaction.message
        # A live ControlPanelView already handles presses on its own message.
        if message is not None and controller.get_panel(message.id) is not None:
            return

        action, owner_id, guild_id = parsed
        logger.info(LogTemplates.PANEL_DETACHED_ACTION, action.value, guild_id)
        await run_panel_action(
            interaction, controller, action, owner_id=owner_id, guild_id=guild_id
        )

    async def on_ready(self) -> None:
        logger.info(
            LogTemplates.BOT_READY,
            self.user,  # type: ignore
            self.user.id,  # type: ignore
        )

    async def close(self) -> None:
        logger.info(LogTemplates.BOT_CLOSING)

        try:
            await self.container.shutdown()
        except Exception as e:
            logger.warning(LogTemplates.BOT_CONTAINER_SHUTDOWN_ERROR, e)

        for vc in list(self.voice_clients):
            try:
                await vc.disconnect(force=True)
            except discord.HTTPException:
                pass

        await super().close()
        logger.info(LogTemplates.BOT_SHUTDOWN_COMPLETE)

    def run_with_graceful_shutdown(self, token: str, *, shutdown_timeout: float = 30.0) -> None:
        async def runner():
            async with self:
                loop = asyncio.get_running_loop()

                async def _graceful_close() -> None:
                    try:
                        await asyncio.wait_for(self.close(), timeout=shutdown_timeout)
                    except TimeoutError:
                        logger.warning(LogTemplates.BOT_SHUTDOWN_TIMEOUT, shutdown_timeout)

                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, lambda: asyncio.create_task(_graceful_close()))
                await self.start(token)

        asyncio.run(runner())


def create_bot(container: Container, settings: Settings) -> MusicBot:
    return MusicBot(container=container, settings=settings)
