"""
Item enrichment — fills display URL and color on feed items.

Items that already carry a URL are never looked up. Everything else is
resolved concurrently (bounded by a semaphore) and re-assembled in input
order. Color precedence: item.image_color > content record color > None.
"""
import asyncio
import logging
from typing import Optional, Sequence

from feed_viewer.clients.content_resolver import ContentResolver
from feed_viewer.config import settings
from feed_viewer.models import FeedItem
from feed_viewer.schemas import EnrichedFeedItem

logger = logging.getLogger(__name__)


class ItemEnricher:
    def __init__(self, resolver: ContentResolver, concurrency: Optional[int] = None) -> None:
        self._resolver = resolver
        self._concurrency = max(1, concurrency or settings.enrichment_concurrency)

    async def enrich(self, items: Sequence[FeedItem]) -> list[EnrichedFeedItem]:
        if not items:
            return []
        semaphore = asyncio.Semaphore(self._concurrency)
        # gather keeps result order aligned with `items`
        enriched = await asyncio.gather(
            *(self._enrich_one(item, semaphore) for item in items)
        )
        logger.debug("Enriched %d feed items", len(enriched))
        return list(enriched)

    async def _enrich_one(
        self, item: FeedItem, semaphore: asyncio.Semaphore
    ) -> EnrichedFeedItem:
        fields = item.model_dump()

        if item.image_url or not item.image_id:
            fields["color"] = item.image_color or None
            return EnrichedFeedItem(**fields)

        async with semaphore:
            resolved = await self._resolver.resolve(item.image_id)

        if resolved.url:
            fields["image_url"] = resolved.url
        fields["color"] = item.image_color or resolved.color
        return EnrichedFeedItem(**fields)
