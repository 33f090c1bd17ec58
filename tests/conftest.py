import pytest

from fallback_music_bot.application.interfaces.audio_engine import PlayableHandle
from fallback_music_bot.domain.music.value_objects import TerminalSignal

# ============================================================================
# Playback Fakes
# ============================================================================


class FakeHandle(PlayableHandle):
    """In-memory PlayableHandle that records calls instead of touching voice."""

    def __init__(
        self,
        *,
        position: float = 0.0,
        name: str = "handle",
        start_error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.name = name
        self._volume = 0.0
        self._position = position
        self.started = False
        self.stopped = 0
        self.paused = False
        self._start_error = start_error

    def start(self) -> None:
        if self._start_error is not None:
            raise self._start_error
        self.started = True

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def stop(self) -> None:
        self.stopped += 1

    def set_volume(self, volume: float) -> None:
        self._volume = volume

    @property
    def volume(self) -> float:
        return self._volume

    def position(self) -> float:
        return self._position

    def is_playing(self) -> bool:
        return self.started and not self.paused and not self.stopped

    def is_paused(self) -> bool:
        return self.started and self.paused and not self.stopped

    def advance(self, seconds: float) -> None:
        self._position += seconds

    def fire(self, signal: TerminalSignal = TerminalSignal.ENDED, error: BaseException | None = None):
        self._notify_terminal(signal, error)

    def __repr__(self) -> str:
        return f"FakeHandle({self.name})"


@pytest.fixture
def make_handle():
    """Factory for FakeHandle instances."""

    def _make(**kwargs) -> FakeHandle:
        return FakeHandle(**kwargs)

    return _make


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def reaper():
    from fallback_music_bot.application.services.resource_reaper import ResourceReaper

    return ResourceReaper()


@pytest.fixture
def store(reaper):
    from fallback_music_bot.application.services.session_store import PlaybackSessionStore

    return PlaybackSessionStore(reaper=reaper, default_volume=0.20)


@pytest.fixture
def temp_files(tmp_path):
    """Two real files to hand to cleanup sets."""
    paths = [tmp_path / "a.webm", tmp_path / "a.wav"]
    for path in paths:
        path.write_bytes(b"data")
    return paths
