"""
Pydantic models for the documents written by the ranking pipeline.

Collections (all read-only from this service):
  feed_samples   — unranked candidate pool per user
  ranked_feeds   — ranking runs over a sample (several per sample, newest wins)
  reranked_feeds — layout variants of a ranked feed, one per nCols
  images         — content records: display paths + representative color
  users          — owner profiles shown on the sample index

Field names follow the producers' documents; aliases map the upper-case /
camelCase keys onto Python names. Unknown keys are ignored.
"""
from datetime import datetime
from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _id_to_str(value: Any) -> Any:
    return str(value) if isinstance(value, ObjectId) else value


# ObjectId (or plain string id) → str
ObjectIdStr = Annotated[str, BeforeValidator(_id_to_str)]


class Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ──────────────────────────── Feed items ──────────────────────────────────

class FeedItem(Document):
    # Producer keys this service does not know are passed through as-is
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    image_id: Optional[str] = None
    image_url: Optional[str] = None
    source_type: Optional[str] = None
    score: float = 0.0
    is_seen: Optional[bool] = None
    # Opaque producer payload, passed through untouched
    metadata: Any = None
    # Per-item color override; beats the content record's color
    image_color: Optional[str] = None


# ──────────────────────────── Pipeline stages ─────────────────────────────

class FeedSample(Document):
    id: ObjectIdStr = Field(alias="_id")
    user_id: ObjectIdStr
    feed_items: list[FeedItem] = Field(default_factory=list)
    item_count: int = 0
    updated_at: Optional[datetime] = None


class RankingVariables(Document):
    weights: dict[str, float] = Field(default_factory=dict)


class RankedFeed(Document):
    id: ObjectIdStr = Field(alias="_id")
    user_id: ObjectIdStr
    feed_sample_id: ObjectIdStr
    feed_items: list[FeedItem] = Field(default_factory=list)
    # total_time plus per-stage durations, seconds
    details: dict[str, float] = Field(default_factory=dict)
    variables: RankingVariables = Field(default_factory=RankingVariables)
    created_at: Optional[datetime] = None


class LayoutVariables(Document):
    h_min: Optional[float] = Field(None, alias="H_MIN")
    h_max: Optional[float] = Field(None, alias="H_MAX")
    cluster_sequence: list[int] = Field(default_factory=list, alias="CLUSTER_SEQUENCE")


class RerankedFeed(Document):
    id: ObjectIdStr = Field(alias="_id")
    user_id: ObjectIdStr
    feed_sample_id: ObjectIdStr
    ranked_feed_id: Optional[ObjectIdStr] = None
    n_cols: int = Field(alias="nCols")
    variables: LayoutVariables = Field(default_factory=LayoutVariables)
    details: dict[str, float] = Field(default_factory=dict)
    feed_items: list[FeedItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None


# ──────────────────────────── Content / users ─────────────────────────────

class ContentRecord(Document):
    doc_id: str
    images_paths: list[str] = Field(default_factory=list)
    color_representation: Optional[str] = None

    @property
    def display_path(self) -> Optional[str]:
        for path in self.images_paths:
            if path:
                return path
        return None


class UserProfile(Document):
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None


class User(Document):
    id: ObjectIdStr = Field(alias="_id")
    handle: Optional[str] = None
    profile: Optional[UserProfile] = None
