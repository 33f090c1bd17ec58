"""Discord UI views and components."""

from __future__ import annotations

from fallback_music_bot.infrastructure.discord.views.base_view import BaseInteractiveView
from fallback_music_bot.infrastructure.discord.views.control_panel_view import (
    ControlPanelView,
    make_custom_id,
    parse_custom_id,
    run_panel_action,
)

__all__ = [
    "BaseInteractiveView",
    "ControlPanelView",
    "make_custom_id",
    "parse_custom_id",
    "run_panel_action",
]
