"""Control Panel Synchronizer - keeps a posted status panel in step with its session."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...utils.reply import format_remaining
from ..interfaces.panel_renderer import PanelSnapshot

if TYPE_CHECKING:
    from ...domain.music.entities import PlaybackSession
    from ...domain.music.value_objects import ControlPanelState
    from ..interfaces.panel_renderer import PanelRenderer
    from .session_store import PlaybackSessionStore

logger = logging.getLogger(__name__)


class PanelState(Enum):
    """Lifecycle of a control panel.

    State transitions:
    - ACTIVE -> UPDATING (refresh tick)
    - UPDATING -> ACTIVE (session present, render succeeded)
    - UPDATING -> TERMINATED (session absent, or read/render error)
    """

    ACTIVE = "active"
    UPDATING = "updating"
    TERMINATED = "terminated"


def session_status(session: PlaybackSession) -> str:
    handle = session.handle
    if handle.is_paused() or not session.playing:
        return DiscordUIMessages.PANEL_STATUS_PAUSED
    if handle.is_playing():
        return DiscordUIMessages.PANEL_STATUS_PLAYING
    return DiscordUIMessages.PANEL_STATUS_STOPPED


def build_snapshot(session: PlaybackSession) -> PanelSnapshot:
    """Render-ready view of a live session."""
    metadata = session.metadata
    description = DiscordUIMessages.PANEL_DESCRIPTION.format(
        status=session_status(session),
        volume=session.volume,
        remaining=format_remaining(
            session.remaining_seconds(), DiscordUIMessages.PANEL_REMAINING_UNKNOWN
        ),
    )
    return PanelSnapshot(
        heading=metadata.heading or DiscordUIMessages.PANEL_TITLE,
        description=description,
        thumbnail_url=metadata.thumbnail_url,
    )


TERMINAL_SNAPSHOT = PanelSnapshot(
    heading=DiscordUIMessages.PANEL_TITLE,
    description=DiscordUIMessages.PANEL_NO_ACTIVE_TRACK,
    terminal=True,
)

FAILED_SNAPSHOT = PanelSnapshot(
    heading=DiscordUIMessages.PANEL_TITLE,
    description=DiscordUIMessages.PANEL_FAILED,
    terminal=True,
    failed=True,
)


class ControlPanelSynchronizer:
    """Periodically re-renders one panel until its session is gone.

    The loop is a cancellable task; it exits on its own the first refresh
    after ``store.get(session_key)`` returns None.
    """

    def __init__(
        self,
        *,
        panel: ControlPanelState,
        store: PlaybackSessionStore,
        renderer: PanelRenderer,
    ) -> None:
        self._panel = panel
        self._store = store
        self._renderer = renderer
        self._state = PanelState.ACTIVE
        self._render_lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None

    @property
    def panel(self) -> ControlPanelState:
        return self._panel

    @property
    def state(self) -> PanelState:
        return self._state

    @property
    def terminated(self) -> bool:
        return self._state is PanelState.TERMINATED

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            LogTemplates.PANEL_STARTED,
            self._panel.message_id,
            self._panel.session_key,
            self._panel.owner_id,
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run_loop(self) -> None:
        while not self.terminated:
            await asyncio.sleep(self._panel.refresh_interval)
            await self.refresh_once()

    async def refresh_once(self) -> PanelState:
        """Run one ACTIVE -> UPDATING -> {ACTIVE, TERMINATED} cycle."""
        async with self._render_lock:
            if self.terminated:
                return self._state
            self._state = PanelState.UPDATING

            try:
                session = self._store.get(self._panel.session_key)
                if session is None:
                    await self._render(TERMINAL_SNAPSHOT)
                    self._terminate()
                    return self._state

                await self._render(build_snapshot(session))
                self._state = PanelState.ACTIVE
            except Exception:
                logger.exception(
                    LogTemplates.PANEL_RENDER_FAILED,
                    self._panel.message_id,
                    self._panel.session_key,
                )
                await self._render_failure()
                self._terminate()

            return self._state

    async def _render(self, snapshot: PanelSnapshot) -> None:
        await self._renderer.render(self._panel, snapshot)
        self._panel = self._panel.with_rendered(snapshot.description)

    async def _render_failure(self) -> None:
        try:
            await self._render(FAILED_SNAPSHOT)
        except Exception as e:
            logger.debug("Best-effort failure render also failed: %s", e)

    def _terminate(self) -> None:
        self._state = PanelState.TERMINATED
        logger.info(
            LogTemplates.PANEL_TERMINATED, self._panel.message_id, self._panel.session_key
        )
