"""Draws control panel snapshots onto their Discord message."""

from __future__ import annotations

import logging

import discord

from fallback_music_bot.application.interfaces.panel_renderer import PanelRenderer, PanelSnapshot
from fallback_music_bot.domain.music.value_objects import ControlPanelState
from fallback_music_bot.domain.shared.messages import DiscordUIMessages
from fallback_music_bot.infrastructure.discord.views.base_view import BaseInteractiveView

logger = logging.getLogger(__name__)


def build_panel_embed(snapshot: PanelSnapshot, *, color: int) -> discord.Embed:
    embed = discord.Embed(
        title=snapshot.heading or DiscordUIMessages.PANEL_TITLE,
        description=snapshot.description,
        color=color,
    )
    if snapshot.thumbnail_url:
        embed.set_thumbnail(url=snapshot.thumbnail_url)
    return embed


class DiscordPanelRenderer(PanelRenderer):
    """Edits one panel message; the final render disables its buttons."""

    def __init__(
        self,
        message: discord.Message | discord.PartialMessage,
        view: BaseInteractiveView | None = None,
        *,
        color: int = 0x1DB954,
    ) -> None:
        self._message = message
        self._view = view
        self._color = color

    async def render(self, panel: ControlPanelState, snapshot: PanelSnapshot) -> None:
        embed = build_panel_embed(snapshot, color=self._color)

        if self._view is None:
            await self._message.edit(embed=embed)
            return

        if snapshot.terminal or snapshot.failed:
            self._view.disable_buttons()
            self._view.stop()
        await self._message.edit(embed=embed, view=self._view)
