"""
View materializer — stage read → item enrichment → response assembly.

Each view is a single stateless pass:

  sample   │ get_sample        → enrich → SampleView
  ranked   │ get_latest_ranked → enrich → RankedView   (weights + timings)
  reranked │ get_reranked      → enrich ‖ list_variants → RerankedView

A missing stage comes back as StageNotFound. Only UpstreamUnavailable
escapes as an exception.
"""
import asyncio
import logging
from typing import Optional, Union

from opentelemetry import trace

from feed_viewer.clients.content_resolver import ContentResolver
from feed_viewer.config import settings
from feed_viewer.errors import StageNotFound
from feed_viewer.pipeline.enricher import ItemEnricher
from feed_viewer.pipeline.stages import StageAccessor
from feed_viewer.schemas import (
    RankedView,
    RerankedView,
    SampleIndex,
    SampleOwner,
    SampleSummary,
    SampleView,
)
from feed_viewer.telemetry import STAGE_NOT_FOUND_TOTAL, VIEW_LATENCY

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ViewMaterializer:
    def __init__(self, stages: StageAccessor, enricher: ItemEnricher) -> None:
        self._stages = stages
        self._enricher = enricher

    @classmethod
    def from_store(cls, store) -> "ViewMaterializer":
        return cls(StageAccessor(store), ItemEnricher(ContentResolver(store.images)))

    async def sample_view(self, feed_id: str) -> Union[SampleView, StageNotFound]:
        with tracer.start_as_current_span("sample_view") as span, \
                VIEW_LATENCY.labels(view="sample").time():
            span.set_attribute("feed.id", feed_id)

            sample = await self._stages.get_sample(feed_id)
            if isinstance(sample, StageNotFound):
                return _not_found(sample)

            items = await self._enricher.enrich(sample.feed_items)
            span.set_attribute("feed.items", len(items))
            return SampleView(
                feed_id=sample.id,
                user_id=sample.user_id,
                item_count=sample.item_count,
                updated_at=sample.updated_at,
                feed_items=items,
            )

    async def ranked_view(self, feed_id: str) -> Union[RankedView, StageNotFound]:
        with tracer.start_as_current_span("ranked_view") as span, \
                VIEW_LATENCY.labels(view="ranked").time():
            span.set_attribute("feed.id", feed_id)

            ranked = await self._stages.get_latest_ranked(feed_id)
            if isinstance(ranked, StageNotFound):
                return _not_found(ranked)

            span.set_attribute("ranked_feed.id", ranked.id)
            items = await self._enricher.enrich(ranked.feed_items)
            return RankedView(
                feed_id=ranked.feed_sample_id,
                ranked_feed_id=ranked.id,
                user_id=ranked.user_id,
                created_at=ranked.created_at,
                weights=ranked.variables.weights,
                details=ranked.details,
                feed_items=items,
            )

    async def reranked_view(
        self, feed_id: str, n_cols: Optional[int] = None
    ) -> Union[RerankedView, StageNotFound]:
        if n_cols is None:
            n_cols = settings.default_n_cols

        with tracer.start_as_current_span("reranked_view") as span, \
                VIEW_LATENCY.labels(view="reranked").time():
            span.set_attribute("feed.id", feed_id)
            span.set_attribute("feed.n_cols", n_cols)

            reranked = await self._stages.get_reranked(feed_id, n_cols)
            if isinstance(reranked, StageNotFound):
                return _not_found(reranked)

            items, variants = await asyncio.gather(
                self._enricher.enrich(reranked.feed_items),
                self._stages.list_variants(feed_id),
            )
            return RerankedView(
                feed_id=reranked.feed_sample_id,
                reranked_feed_id=reranked.id,
                ranked_feed_id=reranked.ranked_feed_id,
                user_id=reranked.user_id,
                n_cols=reranked.n_cols,
                h_min=reranked.variables.h_min,
                h_max=reranked.variables.h_max,
                cluster_sequence=reranked.variables.cluster_sequence,
                details=reranked.details,
                feed_items=items,
                available_n_cols=variants,
            )

    async def sample_index(self, limit: Optional[int] = None) -> SampleIndex:
        rows = await self._stages.list_samples(limit or settings.sample_index_limit)
        return SampleIndex(
            samples=[
                SampleSummary(
                    feed_id=sample.id,
                    user_id=sample.user_id,
                    item_count=sample.item_count,
                    updated_at=sample.updated_at,
                    user=(
                        SampleOwner(user_id=owner.id, handle=owner.handle, profile=owner.profile)
                        if owner is not None
                        else None
                    ),
                )
                for sample, owner in rows
            ]
        )


def _not_found(missing: StageNotFound) -> StageNotFound:
    STAGE_NOT_FOUND_TOTAL.labels(stage=missing.stage).inc()
    logger.info(
        "%s stage not found for feed %s (variants=%s)",
        missing.stage,
        missing.feed_id,
        list(missing.available_variants),
    )
    return missing
