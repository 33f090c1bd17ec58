"""Request Resolver - classifies request text and enriches it with service metadata."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.links import is_direct_media_url, is_streaming_service_link
from ...domain.music.value_objects import SourceDescriptor, SourceKind, TrackMetadata
from ...domain.shared.exceptions import ConfigurationMissingError, StreamingServiceError
from ...domain.shared.messages import LogTemplates
from .playback_models import ResolvedRequest

if TYPE_CHECKING:
    from ..interfaces.streaming_service import StreamingServiceClient

logger = logging.getLogger(__name__)


def _query_from(metadata: TrackMetadata) -> str | None:
    parts = [p for p in (metadata.title, metadata.artist) if p]
    return " ".join(parts) or None


class RequestResolver:
    """Turns raw request text into a ``SourceDescriptor``.

    Resolution order:

    1. Direct media URLs pass through untouched, with no service call.
    2. Streaming-service links are looked up; success rewrites the request
       into ``"<title> <artist>"`` and prefetches metadata.
    3. Anything else (including failed lookups) is enriched by a text search
       when credentials exist, otherwise passed through unchanged.

    Service failures never escape ``resolve``.
    """

    def __init__(self, *, streaming_service: StreamingServiceClient) -> None:
        self._service = streaming_service

    async def resolve(self, text: str) -> ResolvedRequest:
        text = text.strip()

        if is_direct_media_url(text):
            logger.debug(LogTemplates.RESOLVER_DIRECT_URL, text)
            return ResolvedRequest(
                descriptor=SourceDescriptor(kind=SourceKind.DIRECT_MEDIA_URL, text=text)
            )

        service_link = text if is_streaming_service_link(text) else None

        if service_link is not None:
            resolved = await self._lookup_link(service_link)
            if resolved is not None:
                return resolved

        return await self._search(text, service_link)

    async def _lookup_link(self, link: str) -> ResolvedRequest | None:
        try:
            metadata = await self._service.get_track(link)
        except (ConfigurationMissingError, StreamingServiceError) as e:
            logger.info(LogTemplates.RESOLVER_SERVICE_LOOKUP_FAILED, link, e.message)
            return None

        query = _query_from(metadata)
        if query is None:
            return None

        logger.info(LogTemplates.RESOLVER_SERVICE_LOOKUP_OK, link, query)
        return ResolvedRequest(
            descriptor=SourceDescriptor(
                kind=SourceKind.SEARCH_QUERY, text=query, service_link=link
            ),
            metadata=metadata,
        )

    async def _search(self, text: str, service_link: str | None) -> ResolvedRequest:
        unchanged = ResolvedRequest(
            descriptor=SourceDescriptor(
                kind=SourceKind.STREAMING_SERVICE_LINK if service_link else SourceKind.SEARCH_QUERY,
                text=text,
                service_link=service_link,
            )
        )

        if not self._service.configured:
            return unchanged

        try:
            metadata = await self._service.search_track(text)
        except (ConfigurationMissingError, StreamingServiceError) as e:
            logger.info(LogTemplates.RESOLVER_SEARCH_FAILED, text, e.message)
            return unchanged

        query = _query_from(metadata)
        if query is None:
            return unchanged

        # Only the query is enriched; a search hit is not trusted as track metadata.
        logger.info(LogTemplates.RESOLVER_SEARCH_ENRICHED, text, query)
        return ResolvedRequest(
            descriptor=SourceDescriptor(
                kind=SourceKind.SEARCH_QUERY, text=query, service_link=service_link
            )
        )
