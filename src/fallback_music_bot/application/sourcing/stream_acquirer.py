"""Stream Acquirer - runs the sourcing tiers in order until one plays."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ...domain.music.value_objects import AttemptOutcome, SourcingAttempt, TrackMetadata
from ...domain.shared.exceptions import AllTiersExhaustedError, SourcingTierError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake, VolumeFloat
from ..services.playback_models import AcquisitionResult, ResolvedRequest, TierSuccess
from .base import SourcingRequest, SourcingTier

logger = logging.getLogger(__name__)


class StreamAcquirer:
    """Drives a fixed, ordered list of sourcing tiers.

    Every tier runs under its own timeout. A tier-level failure is recorded
    once in ``failed_tiers`` and once in the flat ``attempts`` list; the
    failed candidates of the winning tier are appended to ``attempts`` too.
    """

    def __init__(self, tiers: Sequence[SourcingTier]) -> None:
        self._tiers = list(tiers)

    @property
    def tiers(self) -> list[SourcingTier]:
        return list(self._tiers)

    async def acquire(
        self,
        session_key: DiscordSnowflake,
        resolved: ResolvedRequest,
        *,
        volume: VolumeFloat = 0.2,
    ) -> AcquisitionResult:
        request = SourcingRequest(session_key=session_key, resolved=resolved, volume=volume)
        attempts: list[SourcingAttempt] = []
        failed_tiers: list[SourcingAttempt] = []

        for tier_index, tier in enumerate(self._tiers, start=1):
            logger.info(
                LogTemplates.TIER_STARTED,
                tier_index,
                tier.name,
                resolved.descriptor.text,
                session_key,
            )
            try:
                async with asyncio.timeout(tier.timeout_seconds):
                    success = await tier.attempt(request, tier_index=tier_index)
            except SourcingTierError as e:
                failure = self._tier_failure(tier_index, tier, e.diagnostic)
            except TimeoutError:
                failure = self._tier_failure(
                    tier_index,
                    tier,
                    ErrorMessages.TIER_TIMED_OUT.format(seconds=tier.timeout_seconds),
                )
            else:
                logger.info(LogTemplates.TIER_SUCCEEDED, tier_index, tier.name, session_key)
                attempts.extend(success.failed_candidates)
                return self._result(tier_index, tier, success, resolved, attempts, failed_tiers)

            logger.warning(
                LogTemplates.TIER_FAILED, tier_index, tier.name, session_key, failure.diagnostic
            )
            attempts.append(failure)
            failed_tiers.append(failure)

        logger.error(
            LogTemplates.ALL_TIERS_EXHAUSTED,
            len(self._tiers),
            resolved.descriptor.text,
            session_key,
        )
        raise AllTiersExhaustedError(resolved.descriptor.text, attempts)

    @staticmethod
    def _tier_failure(tier_index: int, tier: SourcingTier, diagnostic: str) -> SourcingAttempt:
        return SourcingAttempt(
            tier_index=tier_index,
            strategy=tier.name,
            outcome=AttemptOutcome.FAILED,
            diagnostic=diagnostic,
        )

    @staticmethod
    def _result(
        tier_index: int,
        tier: SourcingTier,
        success: TierSuccess,
        resolved: ResolvedRequest,
        attempts: list[SourcingAttempt],
        failed_tiers: list[SourcingAttempt],
    ) -> AcquisitionResult:
        prefetched = resolved.metadata or TrackMetadata()
        return AcquisitionResult(
            handle=success.handle,
            metadata=prefetched.merged_with(success.metadata),
            cleanup_paths=success.cleanup_paths,
            strategy=tier.name,
            tier_index=tier_index,
            attempts=attempts,
            failed_tiers=failed_tiers,
        )
