"""Common capability shared by every sourcing tier."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from ...domain.music.value_objects import AttemptOutcome, SourcingAttempt, TrackMetadata
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake, VolumeFloat
from ..services.playback_models import ResolvedRequest, TierSuccess

logger = logging.getLogger(__name__)

STDERR_TAIL_CHARS = 300


class SourcingRequest(BaseModel):
    """Input handed to each tier by the stream acquirer."""

    model_config = ConfigDict(frozen=True)

    session_key: DiscordSnowflake
    resolved: ResolvedRequest
    volume: VolumeFloat = 0.2

    @property
    def prefetched(self) -> TrackMetadata | None:
        return self.resolved.metadata


def describe_failure(error: BaseException) -> str:
    """Short diagnostic for an exception, with the tail of any captured stderr."""
    text = str(error) or error.__class__.__name__
    stderr = getattr(error, "stderr", "") or ""
    stderr = stderr.strip()
    if stderr:
        text = f"{text} [stderr: {stderr[-STDERR_TAIL_CHARS:]}]"
    return text


class SourcingTier(ABC):
    """One strategy for turning a descriptor into a playable handle.

    Implementations either return a ``TierSuccess`` or raise
    ``SourcingTierError``; the acquirer records both.
    """

    name: str = "tier"
    timeout_seconds: float = 45.0

    @abstractmethod
    async def attempt(self, request: SourcingRequest, *, tier_index: int) -> TierSuccess:
        ...

    def _candidate_failure(
        self, tier_index: int, candidate: str, error: BaseException | str
    ) -> SourcingAttempt:
        diagnostic = error if isinstance(error, str) else describe_failure(error)
        logger.debug(LogTemplates.TIER_CANDIDATE_FAILED, tier_index, candidate, diagnostic)
        return SourcingAttempt(
            tier_index=tier_index,
            strategy=self.name,
            outcome=AttemptOutcome.FAILED,
            diagnostic=diagnostic,
            candidate=candidate,
        )


def fold_candidates(candidates: list[SourcingAttempt]) -> str:
    """Collapse candidate failures into one diagnostic line."""
    return "; ".join(f"{c.candidate}: {c.diagnostic}" for c in candidates)
