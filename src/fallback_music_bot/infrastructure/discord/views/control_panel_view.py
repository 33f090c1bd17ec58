"""Control panel view with Pause, Resume, Stop and volume buttons."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from fallback_music_bot.domain.music.value_objects import PanelAction
from fallback_music_bot.domain.shared.exceptions import AuthorizationDeniedError
from fallback_music_bot.domain.shared.messages import DiscordUIMessages, LogTemplates
from fallback_music_bot.infrastructure.discord.guards.voice_guards import send_ephemeral
from fallback_music_bot.infrastructure.discord.views.base_view import BaseInteractiveView

if TYPE_CHECKING:
    from ....application.services.playback_controller import PlaybackController

logger = logging.getLogger(__name__)

CUSTOM_ID_PREFIX = "music"

BUTTONS: tuple[tuple[PanelAction, str, discord.ButtonStyle], ...] = (
    (PanelAction.PAUSE, DiscordUIMessages.BUTTON_PAUSE, discord.ButtonStyle.secondary),
    (PanelAction.RESUME, DiscordUIMessages.BUTTON_RESUME, discord.ButtonStyle.success),
    (PanelAction.STOP, DiscordUIMessages.BUTTON_STOP, discord.ButtonStyle.danger),
    (PanelAction.VOLUME_DOWN, DiscordUIMessages.BUTTON_VOLUME_DOWN, discord.ButtonStyle.primary),
    (PanelAction.VOLUME_UP, DiscordUIMessages.BUTTON_VOLUME_UP, discord.ButtonStyle.primary),
)


def make_custom_id(action: PanelAction, owner_id: int, guild_id: int) -> str:
    return f"{CUSTOM_ID_PREFIX}:{action.value}:{owner_id}:{guild_id}"


def parse_custom_id(custom_id: str) -> tuple[PanelAction, int, int] | None:
    """Inverse of ``make_custom_id``; None for foreign or malformed ids."""
    parts = custom_id.split(":")
    if len(parts) != 4 or parts[0] != CUSTOM_ID_PREFIX:
        return None
    try:
        return PanelAction(parts[1]), int(parts[2]), int(parts[3])
    except ValueError:
        return None


class ControlButton(discord.ui.Button["ControlPanelView"]):
    def __init__(self, action: PanelAction, label: str, style: discord.ButtonStyle, custom_id: str):
        super().__init__(label=label, style=style, custom_id=custom_id)
        self.action = action

    async def callback(self, interaction: discord.Interaction) -> None:
        assert self.view is not None
        await self.view.handle_action(interaction, self.action)


class ControlPanelView(BaseInteractiveView):
    """Buttons for one panel; only ``owner_id`` may press them."""

    def __init__(
        self,
        *,
        owner_id: int,
        guild_id: int,
        controller: PlaybackController,
    ) -> None:
        super().__init__(timeout=None)
        self.owner_id = owner_id
        self.guild_id = guild_id
        self.controller = controller

        for action, label, style in BUTTONS:
            self.add_item(
                ControlButton(action, label, style, make_custom_id(action, owner_id, guild_id))
            )

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.owner_id:
            logger.info(
                LogTemplates.PANEL_ACTION_DENIED, interaction.user.id, "press", self.owner_id
            )
            await send_ephemeral(interaction, DiscordUIMessages.CONTROL_NOT_OWNER)
            return False
        return True

    async def handle_action(self, interaction: discord.Interaction, action: PanelAction) -> None:
        await run_panel_action(
            interaction, self.controller, action, owner_id=self.owner_id, guild_id=self.guild_id
        )


async def run_panel_action(
    interaction: discord.Interaction,
    controller: PlaybackController,
    action: PanelAction,
    *,
    owner_id: int,
    guild_id: int,
) -> None:
    """Apply one button press and answer it ephemerally."""
    try:
        outcome = await controller.on_control_action(
            action,
            issuer_id=interaction.user.id,
            session_key=guild_id,
            owner_id=owner_id,
        )
    except AuthorizationDeniedError:
        await send_ephemeral(interaction, DiscordUIMessages.CONTROL_NOT_OWNER)
        return

    await send_ephemeral(interaction, outcome.message)
