"""
Feed view endpoints.

  GET /feeds                          — most recently updated samples
  GET /feeds/{feed_id}                — raw sample, enriched
  GET /feeds/{feed_id}/ranked         — latest ranking run, enriched
  GET /feeds/{feed_id}/reranked?nCols — one layout variant, enriched,
                                        plus every available nCols

A missing stage is a 404 whose detail says which stage is missing; for the
re-ranked view it also lists the nCols the client can switch to.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from feed_viewer.database import DocumentStore, get_store
from feed_viewer.errors import StageNotFound
from feed_viewer.pipeline.materializer import ViewMaterializer
from feed_viewer.schemas import RankedView, RerankedView, SampleIndex, SampleView

router = APIRouter()


def get_materializer(store: DocumentStore = Depends(get_store)) -> ViewMaterializer:
    return ViewMaterializer.from_store(store)


def _found(result):
    if isinstance(result, StageNotFound):
        raise HTTPException(status_code=404, detail=result.as_detail())
    return result


@router.get("", response_model=SampleIndex)
async def list_feed_samples(
    limit: Optional[int] = Query(None, ge=1, le=200, description="Max samples to list"),
    materializer: ViewMaterializer = Depends(get_materializer),
):
    return await materializer.sample_index(limit)


@router.get("/{feed_id}", response_model=SampleView)
async def get_sample_view(
    feed_id: str,
    materializer: ViewMaterializer = Depends(get_materializer),
):
    return _found(await materializer.sample_view(feed_id))


@router.get("/{feed_id}/ranked", response_model=RankedView)
async def get_ranked_view(
    feed_id: str,
    materializer: ViewMaterializer = Depends(get_materializer),
):
    return _found(await materializer.ranked_view(feed_id))


@router.get("/{feed_id}/reranked", response_model=RerankedView)
async def get_reranked_view(
    feed_id: str,
    n_cols: Optional[int] = Query(
        None, alias="nCols", ge=1, description="Layout variant (column count)"
    ),
    materializer: ViewMaterializer = Depends(get_materializer),
):
    return _found(await materializer.reranked_view(feed_id, n_cols))
