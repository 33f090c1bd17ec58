"""Port interface for drawing a control panel."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from fallback_music_bot.domain.music.value_objects import ControlPanelState


class PanelSnapshot(BaseModel):
    """Everything a renderer needs to draw one refresh of a panel."""

    model_config = ConfigDict(frozen=True)

    heading: str | None = None
    description: str
    thumbnail_url: str | None = None
    terminal: bool = False
    failed: bool = False


class PanelRenderer(ABC):
    """Draws panel snapshots onto their message."""

    @abstractmethod
    async def render(self, panel: ControlPanelState, snapshot: PanelSnapshot) -> None:
        """Replace the panel message content with ``snapshot``."""
        ...
