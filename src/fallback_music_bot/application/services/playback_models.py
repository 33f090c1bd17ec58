"""DTOs for the playback application services."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ...domain.music.value_objects import SourceDescriptor, SourcingAttempt, TrackMetadata
from ...domain.shared.types import NonNegativeInt, VolumeFloat
from ..interfaces.audio_engine import PlayableHandle


class ResolvedRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    descriptor: SourceDescriptor
    metadata: TrackMetadata | None = None


class TierSuccess(BaseModel):
    """What a sourcing tier hands back when it produced a playable stream."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    handle: PlayableHandle
    metadata: TrackMetadata = Field(default_factory=TrackMetadata)
    cleanup_paths: tuple[Path, ...] = ()
    candidate: str | None = None
    failed_candidates: tuple[SourcingAttempt, ...] = ()


class AcquisitionResult(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    handle: PlayableHandle
    metadata: TrackMetadata
    cleanup_paths: tuple[Path, ...] = ()
    strategy: str
    tier_index: NonNegativeInt
    attempts: list[SourcingAttempt] = Field(default_factory=list)
    failed_tiers: list[SourcingAttempt] = Field(default_factory=list)


class ControlOutcome(BaseModel):
    success: bool
    message: str = ""
    volume: VolumeFloat | None = None


class PlayResult(BaseModel):
    success: bool
    message: str = ""
    metadata: TrackMetadata | None = None
    strategy: str | None = None
    attempts: list[SourcingAttempt] = Field(default_factory=list)
