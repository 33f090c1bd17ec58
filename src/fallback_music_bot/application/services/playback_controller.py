"""Playback Controller - the entry points the Discord layer calls into."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.music.value_objects import CleanupSet, PanelAction, TerminalSignal
from ...domain.shared.exceptions import (
    AllTiersExhaustedError,
    AuthorizationDeniedError,
    ConfigurationMissingError,
    VoiceEnvironmentError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake
from ..interfaces.transcoder import TranscodeError
from .control_panel import ControlPanelSynchronizer
from .playback_models import ControlOutcome, PlayResult

if TYPE_CHECKING:
    from ...domain.music.value_objects import ControlPanelState
    from ..interfaces.audio_engine import AudioEngine, PlayableHandle, TerminalObserver
    from ..interfaces.decode_helper import DecodeHelperLocator
    from ..interfaces.panel_renderer import PanelRenderer
    from ..interfaces.transcoder import Transcoder
    from ..sourcing.stream_acquirer import StreamAcquirer
    from .request_resolver import RequestResolver
    from .resource_reaper import ResourceReaper
    from .session_store import PlaybackSessionStore

logger = logging.getLogger(__name__)

STREAM_TEST_SECONDS = 10


class StreamTestResult(BaseModel):
    success: bool
    message: str
    size_bytes: int = 0
    probe: dict | None = None


class PlaybackController:
    """Wires the resolver, acquirer, store, reaper and panels into use cases."""

    def __init__(
        self,
        *,
        resolver: RequestResolver,
        acquirer: StreamAcquirer,
        store: PlaybackSessionStore,
        reaper: ResourceReaper,
        engine: AudioEngine,
        helper_locator: DecodeHelperLocator,
        transcoder: Transcoder,
        scratch_dir: Path,
        default_volume: float = 0.20,
    ) -> None:
        self._resolver = resolver
        self._acquirer = acquirer
        self._store = store
        self._reaper = reaper
        self._engine = engine
        self._helper_locator = helper_locator
        self._transcoder = transcoder
        self._scratch_dir = Path(scratch_dir)
        self._default_volume = default_volume
        self._panels: dict[int, ControlPanelSynchronizer] = {}
        self._terminal_tasks: set[asyncio.Task[None]] = set()

    @property
    def store(self) -> PlaybackSessionStore:
        return self._store

    # ── Play ────────────────────────────────────────────────────────

    async def play(self, session_key: DiscordSnowflake, query: str) -> PlayResult:
        """Resolve ``query``, acquire a stream and make it the session's active track.

        Raises:
            VoiceEnvironmentError: If the bot is not connected to voice for the session.
        """
        query = query.strip()
        if not query:
            raise VoiceEnvironmentError(DiscordUIMessages.ERROR_EMPTY_QUERY)
        if not self._engine.is_connected(session_key):
            raise VoiceEnvironmentError(DiscordUIMessages.STATE_NOT_CONNECTED)

        logger.info(LogTemplates.PLAY_REQUESTED, session_key, query)
        resolved = await self._resolver.resolve(query)

        try:
            acquired = await self._acquirer.acquire(
                session_key, resolved, volume=self._current_volume(session_key)
            )
        except AllTiersExhaustedError as e:
            return PlayResult(
                success=False,
                message=DiscordUIMessages.PLAY_FAILED.format(query=query),
                attempts=e.attempts,
            )

        handle = acquired.handle
        cleanup = CleanupSet.of(*acquired.cleanup_paths)
        self._reaper.register(handle, cleanup)
        handle.add_terminal_observer(self._terminal_observer(session_key, handle))

        try:
            await self._store.open(
                session_key,
                handle,
                acquired.metadata,
                cleanup,
                volume=self._current_volume(session_key),
            )
        except Exception as e:
            logger.exception(LogTemplates.PLAY_START_FAILED, session_key)
            return PlayResult(
                success=False,
                message=DiscordUIMessages.PLAY_START_FAILED.format(query=query, error=e),
                strategy=acquired.strategy,
                attempts=acquired.attempts,
            )

        display = acquired.metadata.heading or resolved.descriptor.text
        logger.info(LogTemplates.PLAY_STARTED, display, session_key, acquired.strategy)
        return PlayResult(
            success=True,
            message=DiscordUIMessages.PLAY_NOW_PLAYING.format(display=display),
            metadata=acquired.metadata,
            strategy=acquired.strategy,
            attempts=acquired.attempts,
        )

    def _current_volume(self, session_key: DiscordSnowflake) -> float:
        session = self._store.get(session_key)
        return session.volume if session is not None else self._default_volume

    def _terminal_observer(
        self, session_key: DiscordSnowflake, handle: PlayableHandle
    ) -> TerminalObserver:
        def _observer(signal: TerminalSignal, error: BaseException | None) -> None:
            if error is not None:
                logger.warning(LogTemplates.PLAYBACK_ERROR, session_key, error)
            task = asyncio.get_running_loop().create_task(
                self.on_track_terminal(session_key, handle)
            )
            self._terminal_tasks.add(task)
            task.add_done_callback(self._terminal_tasks.discard)

        return _observer

    async def on_track_terminal(
        self, session_key: DiscordSnowflake, handle: PlayableHandle
    ) -> None:
        """Close the session if ``handle`` is still its active track."""
        await self._store.close(session_key, expected=handle)

    # ── Controls ────────────────────────────────────────────────────

    async def on_control_action(
        self,
        action: PanelAction | str,
        issuer_id: DiscordSnowflake,
        session_key: DiscordSnowflake,
        owner_id: DiscordSnowflake,
    ) -> ControlOutcome:
        """Apply a panel button press.

        Raises:
            AuthorizationDeniedError: If ``issuer_id`` is not ``owner_id``; nothing is mutated.
        """
        action = PanelAction(action)
        if issuer_id != owner_id:
            logger.info(LogTemplates.PANEL_ACTION_DENIED, issuer_id, action.value, owner_id)
            raise AuthorizationDeniedError(issuer_id, owner_id)

        match action:
            case PanelAction.PAUSE:
                outcome = await self._store.pause(session_key)
            case PanelAction.RESUME:
                outcome = await self._store.resume(session_key)
            case PanelAction.STOP:
                outcome = await self.stop(session_key)
            case PanelAction.VOLUME_DOWN | PanelAction.VOLUME_UP:
                outcome = await self._store.set_volume(session_key, delta=action.volume_delta)

        logger.info(LogTemplates.PANEL_ACTION, action.value, issuer_id, session_key, outcome.message)
        await self._refresh_panels(session_key)
        return outcome

    async def stop(self, session_key: DiscordSnowflake) -> ControlOutcome:
        closed = await self._store.close(session_key)
        if not closed:
            return ControlOutcome(success=False, message=DiscordUIMessages.CONTROL_NOTHING_PLAYING)
        return ControlOutcome(success=True, message=DiscordUIMessages.CONTROL_STOPPED)

    # ── Panels ──────────────────────────────────────────────────────

    def open_panel(
        self, panel: ControlPanelState, renderer: PanelRenderer
    ) -> ControlPanelSynchronizer:
        self._prune_panels()
        synchronizer = ControlPanelSynchronizer(panel=panel, store=self._store, renderer=renderer)
        self._panels[panel.message_id] = synchronizer
        synchronizer.start()
        return synchronizer

    def get_panel(self, message_id: int) -> ControlPanelSynchronizer | None:
        return self._panels.get(message_id)

    def _prune_panels(self) -> None:
        for message_id, synchronizer in list(self._panels.items()):
            if synchronizer.terminated:
                del self._panels[message_id]

    async def _refresh_panels(self, session_key: DiscordSnowflake) -> None:
        for synchronizer in list(self._panels.values()):
            if synchronizer.panel.session_key == session_key and not synchronizer.terminated:
                await synchronizer.refresh_once()

    # ── Stream test ─────────────────────────────────────────────────

    async def stream_test(self, link: str) -> StreamTestResult:
        """Record a short sample of the decode helper's output and describe it with ffprobe."""
        try:
            command = self._helper_locator.command_for(link)
        except ConfigurationMissingError:
            return StreamTestResult(success=False, message=DiscordUIMessages.STREAMTEST_NO_HELPER)

        sample = self._scratch_dir / f"streamtest-{uuid.uuid4().hex[:12]}.wav"
        cleanup = CleanupSet.of(sample)
        try:
            await self._transcoder.record_sample(command, sample, STREAM_TEST_SECONDS)
            probe = await self._transcoder.probe(sample)
            size = sample.stat().st_size
        except (TranscodeError, OSError) as e:
            logger.warning(LogTemplates.STREAMTEST_FAILED, link, e)
            stderr = getattr(e, "stderr", "") or str(e)
            return StreamTestResult(
                success=False,
                message=DiscordUIMessages.STREAMTEST_RECORD_FAILED.format(stderr=stderr[-1500:]),
            )
        finally:
            self._reaper.reap(cleanup)

        return StreamTestResult(
            success=True,
            message=DiscordUIMessages.STREAMTEST_OK.format(
                seconds=STREAM_TEST_SECONDS,
                size=size,
                probe=json.dumps(probe, indent=2)[:1500],
            ),
            size_bytes=size,
            probe=probe,
        )

    # ── Lifecycle ───────────────────────────────────────────────────

    async def shutdown(self) -> None:
        logger.info(LogTemplates.BOT_SHUTTING_DOWN)
        for synchronizer in list(self._panels.values()):
            await synchronizer.stop()
        self._panels.clear()
        await self._store.close_all()
        if self._terminal_tasks:
            await asyncio.gather(*self._terminal_tasks, return_exceptions=True)
        await self._reaper.drain()
