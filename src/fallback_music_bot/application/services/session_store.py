"""Playback Session Store - one active track per guild, guarded by per-guild locks."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from ...domain.music.entities import PlaybackSession
from ...domain.music.value_objects import CleanupSet, TrackMetadata
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake
from .playback_models import ControlOutcome

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from ..interfaces.audio_engine import PlayableHandle
    from .resource_reaper import ResourceReaper

logger = logging.getLogger(__name__)


class PlaybackSessionStore:
    """Owns every ``PlaybackSession``.

    Mutations for a key hold that key's ``asyncio.Lock``; different keys never
    wait on each other. Reaping is handed to the reaper and never awaited
    under a lock.
    """

    def __init__(self, *, reaper: ResourceReaper, default_volume: float = 0.20) -> None:
        self._reaper = reaper
        self._default_volume = default_volume
        self._sessions: dict[DiscordSnowflake, PlaybackSession] = {}
        self._locks: dict[DiscordSnowflake, asyncio.Lock] = {}
        self._lock_users: dict[DiscordSnowflake, int] = {}

    @asynccontextmanager
    async def _locked(self, key: DiscordSnowflake) -> AsyncIterator[None]:
        """Hold the key's lock; the lock is dropped once nobody holds or waits for it."""
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def get(self, key: DiscordSnowflake) -> PlaybackSession | None:
        return self._sessions.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def open(
        self,
        key: DiscordSnowflake,
        handle: PlayableHandle,
        metadata: TrackMetadata | None = None,
        cleanup: CleanupSet | Iterable[Path] | None = None,
        *,
        volume: float | None = None,
    ) -> PlaybackSession:
        """Install a new session, closing any existing one first, and start playback."""
        if not isinstance(cleanup, CleanupSet):
            cleanup = CleanupSet.of(*(cleanup or ()))

        async with self._locked(key):
            previous = self._sessions.pop(key, None)
            if previous is not None:
                logger.info(LogTemplates.SESSION_SUPERSEDED, key)
                self._shutdown(previous)

            session = PlaybackSession(
                session_key=key,
                handle=handle,
                metadata=metadata or TrackMetadata(),
                volume=self._default_volume if volume is None else volume,
                cleanup=cleanup,
            )
            handle.set_volume(session.volume)
            try:
                handle.start()
            except Exception:
                logger.warning(LogTemplates.SESSION_START_FAILED, key)
                self._shutdown(session)
                raise
            self._sessions[key] = session

        logger.info(LogTemplates.SESSION_OPENED, key, session.volume)
        return session

    async def pause(self, key: DiscordSnowflake) -> ControlOutcome:
        async with self._locked(key):
            session = self._sessions.get(key)
            if session is None:
                return self._missing(key)
            if not session.playing:
                return ControlOutcome(
                    success=False,
                    message=DiscordUIMessages.CONTROL_ALREADY_PAUSED,
                    volume=session.volume,
                )
            session.handle.pause()
            session.playing = False

        logger.info(LogTemplates.PLAYBACK_PAUSED, key)
        return ControlOutcome(
            success=True, message=DiscordUIMessages.CONTROL_PAUSED, volume=session.volume
        )

    async def resume(self, key: DiscordSnowflake) -> ControlOutcome:
        async with self._locked(key):
            session = self._sessions.get(key)
            if session is None:
                return self._missing(key)
            if session.playing:
                return ControlOutcome(
                    success=False,
                    message=DiscordUIMessages.CONTROL_NOT_PAUSED,
                    volume=session.volume,
                )
            session.handle.resume()
            session.playing = True

        logger.info(LogTemplates.PLAYBACK_RESUMED, key)
        return ControlOutcome(
            success=True, message=DiscordUIMessages.CONTROL_RESUMED, volume=session.volume
        )

    async def set_volume(
        self,
        key: DiscordSnowflake,
        *,
        delta: float | None = None,
        absolute: float | None = None,
    ) -> ControlOutcome:
        """Adjust volume by ``delta`` or set it to ``absolute``; always clamped to [0, 5]."""
        if (delta is None) == (absolute is None):
            raise ValueError(ErrorMessages.VOLUME_CHANGE_REQUIRED)

        async with self._locked(key):
            session = self._sessions.get(key)
            if session is None:
                return self._missing(key)
            volume = session.change_volume(delta=delta, absolute=absolute)
            session.handle.set_volume(volume)

        logger.info(LogTemplates.VOLUME_CHANGED, key, volume)
        return ControlOutcome(
            success=True,
            message=DiscordUIMessages.CONTROL_VOLUME.format(volume=volume),
            volume=volume,
        )

    async def close(
        self, key: DiscordSnowflake, expected: PlayableHandle | None = None
    ) -> bool:
        """Remove and stop the session.

        With ``expected`` set, only close if that handle is still the active one,
        so a late terminal signal from a superseded track is ignored.
        """
        async with self._locked(key):
            session = self._sessions.get(key)
            if session is None:
                logger.debug(LogTemplates.SESSION_NOT_FOUND, key)
                return False
            if expected is not None and session.handle is not expected:
                logger.debug(LogTemplates.SESSION_STALE_TERMINAL, key)
                return False
            del self._sessions[key]
            self._shutdown(session)

        logger.info(LogTemplates.SESSION_CLOSED, key)
        return True

    async def close_all(self) -> None:
        for key in list(self._sessions):
            await self.close(key)

    def _shutdown(self, session: PlaybackSession) -> None:
        try:
            session.handle.stop()
        finally:
            self._reaper.reap(session.cleanup)

    @staticmethod
    def _missing(key: DiscordSnowflake) -> ControlOutcome:
        logger.debug(LogTemplates.SESSION_NOT_FOUND, key)
        return ControlOutcome(success=False, message=DiscordUIMessages.CONTROL_NOTHING_PLAYING)
