"""
Comprehensive Unit Tests for Music Domain Layer

Tests for:
- Value Objects: SourceDescriptor, TrackMetadata, SourcingAttempt, CleanupSet,
  ControlPanelState, PanelAction
- Entities: PlaybackSession
- Link classification helpers
- Exceptions
"""

import threading

import pytest
from pydantic import ValidationError

from fallback_music_bot.domain.music.entities import PlaybackSession, clamp_volume
from fallback_music_bot.domain.music.links import (
    extract_track_id,
    is_direct_media_url,
    is_streaming_service_link,
    to_track_uri,
)
from fallback_music_bot.domain.music.value_objects import (
    AttemptOutcome,
    CleanupSet,
    ControlPanelState,
    PanelAction,
    SourceDescriptor,
    SourceKind,
    SourcingAttempt,
    TrackMetadata,
)
from fallback_music_bot.domain.shared.exceptions import (
    AllTiersExhaustedError,
    ConfigurationMissingError,
    SourcingTierError,
)

# =============================================================================
# Value Object Tests
# =============================================================================


class TestSourceDescriptor:
    """Unit tests for SourceDescriptor value object."""

    def test_search_query_target(self):
        """Should prefix search text for the extractor."""
        descriptor = SourceDescriptor(kind=SourceKind.SEARCH_QUERY, text="song artist")

        assert descriptor.extractor_target == "ytsearch1:song artist"
        assert descriptor.is_url is False

    def test_direct_url_target(self):
        """Should hand URLs to the extractor untouched."""
        descriptor = SourceDescriptor(
            kind=SourceKind.DIRECT_MEDIA_URL, text="https://youtu.be/abc"
        )

        assert descriptor.extractor_target == "https://youtu.be/abc"
        assert descriptor.is_url is True

    def test_empty_text_rejected(self):
        """Should reject empty text."""
        with pytest.raises(ValidationError):
            SourceDescriptor(kind=SourceKind.SEARCH_QUERY, text="")

    def test_frozen(self):
        """Should be immutable."""
        descriptor = SourceDescriptor(kind=SourceKind.SEARCH_QUERY, text="x")

        with pytest.raises(ValidationError):
            descriptor.text = "y"


class TestTrackMetadata:
    """Unit tests for TrackMetadata value object."""

    def test_blank_strings_become_none(self):
        """Should normalize blank strings to None."""
        metadata = TrackMetadata(title="  ", artist="")

        assert metadata.title is None
        assert metadata.artist is None
        assert metadata.is_empty

    def test_heading_variants(self):
        """Should join title and artist, or use whichever exists."""
        assert TrackMetadata(title="Song", artist="Band").heading == "Song — Band"
        assert TrackMetadata(title="Song").heading == "Song"
        assert TrackMetadata(artist="Band").heading == "Band"
        assert TrackMetadata().heading is None

    def test_merge_fills_only_empty_fields(self):
        """Should keep own values and take missing ones from the other."""
        own = TrackMetadata(title="Service", duration_seconds=100.0)
        other = TrackMetadata(
            title="Extractor", artist="Uploader", duration_seconds=101.0, thumbnail_url="https://t"
        )

        merged = own.merged_with(other)

        assert merged.title == "Service"
        assert merged.artist == "Uploader"
        assert merged.duration_seconds == 100.0
        assert merged.thumbnail_url == "https://t"

    def test_merge_with_none(self):
        metadata = TrackMetadata(title="x")

        assert metadata.merged_with(None) is metadata

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            TrackMetadata(duration_seconds=-1.0)


class TestSourcingAttempt:
    """Unit tests for SourcingAttempt value object."""

    def test_describe_failure_with_candidate(self):
        attempt = SourcingAttempt(
            tier_index=3,
            strategy="explicit url",
            outcome=AttemptOutcome.FAILED,
            diagnostic="no audio",
            candidate="140",
        )

        assert attempt.describe() == "tier 3 (explicit url, 140): no audio"
        assert attempt.succeeded is False

    def test_describe_success(self):
        attempt = SourcingAttempt(tier_index=1, strategy="direct stream", outcome=AttemptOutcome.OK)

        assert attempt.describe() == "tier 1 (direct stream): ok"

    def test_tier_index_is_one_based(self):
        with pytest.raises(ValidationError):
            SourcingAttempt(tier_index=0, strategy="x", outcome=AttemptOutcome.FAILED)


class TestCleanupSet:
    """Unit tests for CleanupSet."""

    def test_claim_once(self, tmp_path):
        """Should grant the claim to the first caller only."""
        cleanup = CleanupSet.of(tmp_path / "a")

        assert cleanup.claim() is True
        assert cleanup.claim() is False
        assert cleanup.reaped is True

    def test_claim_across_threads(self, tmp_path):
        """Should grant exactly one claim under contention."""
        cleanup = CleanupSet.of(tmp_path / "a")
        results = []

        threads = [threading.Thread(target=lambda: results.append(cleanup.claim())) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1

    def test_empty_set_is_falsy(self):
        assert not CleanupSet()
        assert CleanupSet.of("x.webm")


class TestControlPanelState:
    def test_owns(self):
        panel = ControlPanelState(channel_id=1, message_id=2, owner_id=3, session_key=4)

        assert panel.owns(3) is True
        assert panel.owns(5) is False

    def test_with_rendered_copies(self):
        """Should return a new state with the last rendered text."""
        panel = ControlPanelState(channel_id=1, message_id=2, owner_id=3, session_key=4)

        updated = panel.with_rendered("Status: Playing")

        assert updated.last_rendered == "Status: Playing"
        assert panel.last_rendered is None

    def test_invalid_ids_rejected(self):
        with pytest.raises(ValidationError):
            ControlPanelState(channel_id=0, message_id=2, owner_id=3, session_key=4)


class TestPanelAction:
    @pytest.mark.parametrize(
        "action,delta",
        [
            (PanelAction.VOLUME_UP, 0.1),
            (PanelAction.VOLUME_DOWN, -0.1),
            (PanelAction.PAUSE, 0.0),
        ],
    )
    def test_volume_delta(self, action, delta):
        assert action.volume_delta == delta

    def test_from_custom_id_fragment(self):
        assert PanelAction("vol_up") is PanelAction.VOLUME_UP


# =============================================================================
# Entity Tests
# =============================================================================


class TestPlaybackSession:
    """Unit tests for PlaybackSession entity."""

    def test_volume_clamped_on_creation(self, make_handle):
        session = PlaybackSession(session_key=1, handle=make_handle(), volume=7.0)

        assert session.volume == 5.0

    def test_change_volume(self, make_handle):
        session = PlaybackSession(session_key=1, handle=make_handle(), volume=0.2)

        assert session.change_volume(delta=0.1) == pytest.approx(0.3)
        assert session.change_volume(absolute=-1.0) == 0.0

    def test_remaining_seconds(self, make_handle):
        handle = make_handle(position=30.0)
        session = PlaybackSession(
            session_key=1, handle=handle, metadata=TrackMetadata(duration_seconds=100.0)
        )

        assert session.remaining_seconds() == pytest.approx(70.0)
        handle.advance(100.0)
        assert session.remaining_seconds() == 0.0

    def test_remaining_unknown_without_duration(self, make_handle):
        session = PlaybackSession(session_key=1, handle=make_handle())

        assert session.remaining_seconds() is None

    def test_clamp_rounds(self):
        assert clamp_volume(0.30000000004) == 0.3


# =============================================================================
# Link Classification Tests
# =============================================================================


class TestLinks:
    """Unit tests for link helpers."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("https://open.spotify.com/track/abc", True),
            ("spotify:track:abc", True),
            ("https://www.youtube.com/watch?v=x", False),
            ("just words", False),
        ],
    )
    def test_is_streaming_service_link(self, text, expected):
        assert is_streaming_service_link(text) is expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("https://www.youtube.com/watch?v=x", True),
            ("http://example.com/a.mp3", True),
            ("https://open.spotify.com/track/abc", False),
            ("not a url", False),
            ("https://example.com/with space", False),
        ],
    )
    def test_is_direct_media_url(self, text, expected):
        assert is_direct_media_url(text) is expected

    @pytest.mark.parametrize(
        "link,track_id",
        [
            ("https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC?si=x", "4uLU6hMCjMI75M1A2tKUQC"),
            ("https://open.spotify.com/intl-de/track/abc", "abc"),
            ("spotify:track:abc", "abc"),
            ("https://open.spotify.com/album/abc", None),
        ],
    )
    def test_extract_track_id(self, link, track_id):
        assert extract_track_id(link) == track_id

    def test_to_track_uri(self):
        assert to_track_uri("https://open.spotify.com/track/abc?si=1") == "spotify:track:abc"
        assert to_track_uri("spotify:album:x") == "spotify:album:x"


# =============================================================================
# Exception Tests
# =============================================================================


class TestExceptions:
    def test_configuration_missing_default_message(self):
        error = ConfigurationMissingError("spotify credentials")

        assert error.message == "spotify credentials is not configured"
        assert error.code == "CONFIGURATION_MISSING"

    def test_sourcing_tier_error_keeps_candidates(self):
        attempt = SourcingAttempt(tier_index=2, strategy="decode helper", outcome=AttemptOutcome.FAILED)
        error = SourcingTierError("decode helper", "all failed", candidates=[attempt])

        assert str(error) == "decode helper: all failed"
        assert error.candidates == [attempt]

    def test_all_tiers_exhausted_counts_attempts(self):
        error = AllTiersExhaustedError("song", [])

        assert "0 failed attempts" in str(error)
        assert error.query == "song"
