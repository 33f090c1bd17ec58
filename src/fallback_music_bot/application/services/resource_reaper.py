"""Resource Reaper - deletes a session's temporary files exactly once."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.value_objects import CleanupSet, TerminalSignal
    from ..interfaces.audio_engine import PlayableHandle

logger = logging.getLogger(__name__)


def _delete_paths(paths: frozenset[Path]) -> None:
    for path in sorted(paths):
        try:
            path.unlink(missing_ok=True)
            logger.debug(LogTemplates.REAPER_DELETED, path)
        except OSError as e:
            logger.warning(LogTemplates.REAPER_DELETE_FAILED, path, e)


class ResourceReaper:
    """Reclaims temporary artifacts when playback reaches a terminal state.

    Deletion runs in a worker thread from a background task, so neither the
    session lock nor the voice thread ever waits on the filesystem.
    """

    def __init__(self) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    def register(self, handle: PlayableHandle, cleanup: CleanupSet) -> None:
        """Reap ``cleanup`` on the handle's first ENDED or ERRORED signal."""
        self._loop = asyncio.get_running_loop()

        def _on_terminal(signal: TerminalSignal, error: BaseException | None) -> None:
            if cleanup.reaped:
                logger.debug(LogTemplates.REAPER_ALREADY_REAPED, signal.value)
                return
            self._schedule(cleanup)

        handle.add_terminal_observer(_on_terminal)

    def reap(self, cleanup: CleanupSet) -> asyncio.Task[None] | None:
        """Start deleting every path in ``cleanup``; later calls are no-ops."""
        if not cleanup.claim():
            return None
        if not cleanup.paths:
            return None
        task = asyncio.create_task(asyncio.to_thread(_delete_paths, cleanup.paths))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _schedule(self, cleanup: CleanupSet) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None:
            self.reap(cleanup)
        elif self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self.reap, cleanup)

    async def drain(self) -> None:
        """Wait for in-flight deletions to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
