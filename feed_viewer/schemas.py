"""
Pydantic response schemas for the API layer.
Kept separate from the document models to avoid coupling transport to storage.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from feed_viewer.models import FeedItem, UserProfile


# ──────────────────────────── Items ───────────────────────────────────────

class EnrichedFeedItem(FeedItem):
    """A stored feed item with its display URL / color resolved."""
    color: Optional[str] = None


# ──────────────────────────── Views ───────────────────────────────────────

class SampleView(BaseModel):
    feed_id: str
    user_id: str
    item_count: int
    updated_at: Optional[datetime]
    feed_items: list[EnrichedFeedItem]


class RankedView(BaseModel):
    feed_id: str
    ranked_feed_id: str
    user_id: str
    created_at: Optional[datetime]
    # Scoring weights + timing breakdown exposed for inspection
    weights: dict[str, float]
    details: dict[str, float]
    feed_items: list[EnrichedFeedItem]


class RerankedView(BaseModel):
    feed_id: str
    reranked_feed_id: str
    ranked_feed_id: Optional[str]
    user_id: str
    n_cols: int
    h_min: Optional[float]
    h_max: Optional[float]
    cluster_sequence: list[int]
    details: dict[str, float]
    # Stored display order, never re-sorted
    feed_items: list[EnrichedFeedItem]
    available_n_cols: list[int] = Field(default_factory=list)


# ──────────────────────────── Sample index ────────────────────────────────

class SampleOwner(BaseModel):
    user_id: str
    handle: Optional[str] = None
    profile: Optional[UserProfile] = None


class SampleSummary(BaseModel):
    feed_id: str
    user_id: str
    item_count: int
    updated_at: Optional[datetime]
    user: Optional[SampleOwner] = None


class SampleIndex(BaseModel):
    samples: list[SampleSummary]
