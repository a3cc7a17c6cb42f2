"""
Content resolver — image_id → (display URL, representative color).

Reads the `images` collection written by the ingestion pipeline:
  { doc_id, images_paths: [...], color_representation, ... }

A missing or unreadable image must never fail a feed view, so resolve()
degrades to an empty result on any lookup error. lookup() is the raising
variant for callers that need to tell "missing" from "failed".
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from feed_viewer.config import settings
from feed_viewer.errors import EnrichmentLookupFailed
from feed_viewer.models import ContentRecord
from feed_viewer.telemetry import ENRICHMENT_LOOKUPS_TOTAL

logger = logging.getLogger(__name__)

_PROJECTION = {"_id": 0, "doc_id": 1, "images_paths": 1, "color_representation": 1}


@dataclass(frozen=True)
class ResolvedContent:
    url: Optional[str] = None
    color: Optional[str] = None


class ContentResolver:
    def __init__(self, images, timeout: Optional[float] = None) -> None:
        self._images = images
        self._timeout = timeout if timeout is not None else settings.content_lookup_timeout

    async def lookup(self, image_id: str) -> Optional[ContentRecord]:
        """Fetch the content record, or None if the image is unknown."""
        try:
            doc = await asyncio.wait_for(
                self._images.find_one({"doc_id": image_id}, projection=_PROJECTION),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise EnrichmentLookupFailed(image_id, "timed out") from exc
        except PyMongoError as exc:
            raise EnrichmentLookupFailed(image_id, str(exc)) from exc
        except Exception as exc:
            # e.g. InvalidBSON from a corrupt record; still one image only
            raise EnrichmentLookupFailed(image_id, f"{type(exc).__name__}: {exc}") from exc

        if doc is None:
            return None
        try:
            return ContentRecord.model_validate(doc)
        except ValidationError as exc:
            raise EnrichmentLookupFailed(image_id, "malformed content record") from exc

    async def resolve(self, image_id: str) -> ResolvedContent:
        try:
            record = await self.lookup(image_id)
        except EnrichmentLookupFailed as exc:
            logger.warning("%s — rendering without image", exc)
            ENRICHMENT_LOOKUPS_TOTAL.labels(outcome="failed").inc()
            return ResolvedContent()

        if record is None:
            ENRICHMENT_LOOKUPS_TOTAL.labels(outcome="missing").inc()
            return ResolvedContent()

        ENRICHMENT_LOOKUPS_TOTAL.labels(outcome="resolved").inc()
        return ResolvedContent(
            url=record.display_path,
            color=record.color_representation or None,
        )
