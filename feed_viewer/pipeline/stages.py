"""
Pipeline stage accessor — reads one authoritative record per stage.

  sample   │ feed_samples._id == feed_id
  ranked   │ newest ranked_feeds row for the sample
           │ (created_at desc, then _id desc so equal timestamps stay stable)
  reranked │ exact (feed_sample_id, nCols) match; on a miss the caller gets
           │ StageNotFound carrying every nCols that does exist

Absence is returned as StageNotFound. Store failures raise
UpstreamUnavailable.
"""
import logging
from contextlib import contextmanager
from typing import Optional, Union

from bson import ObjectId
from pymongo.errors import PyMongoError

from feed_viewer.errors import RANKED, RERANKED, SAMPLE, StageNotFound, UpstreamUnavailable
from feed_viewer.models import FeedSample, RankedFeed, RerankedFeed, User

logger = logging.getLogger(__name__)

LATEST_FIRST = [("created_at", -1), ("_id", -1)]


def _object_id(value: str) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _variant_key(value) -> Optional[int]:
    # nCols may be stored as a double (5.0); the {"nCols": 5} query matches it
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    return int(value)


@contextmanager
def _reading(what: str):
    try:
        yield
    except PyMongoError as exc:
        logger.error("MongoDB read failed (%s): %s", what, exc)
        raise UpstreamUnavailable(f"Failed to read {what}") from exc


class StageAccessor:
    def __init__(self, store) -> None:
        self._store = store

    async def get_sample(self, feed_id: str) -> Union[FeedSample, StageNotFound]:
        oid = _object_id(feed_id)
        if oid is None:
            return StageNotFound(SAMPLE, feed_id)

        with _reading("feed sample"):
            doc = await self._store.feed_samples.find_one({"_id": oid})
        if doc is None:
            return StageNotFound(SAMPLE, feed_id)
        return FeedSample.model_validate(doc)

    async def get_latest_ranked(self, feed_id: str) -> Union[RankedFeed, StageNotFound]:
        oid = _object_id(feed_id)
        if oid is None:
            return StageNotFound(RANKED, feed_id)

        with _reading("ranked feed"):
            doc = await self._store.ranked_feeds.find_one(
                {"feed_sample_id": oid}, sort=LATEST_FIRST
            )
        if doc is None:
            return StageNotFound(RANKED, feed_id)
        return RankedFeed.model_validate(doc)

    async def get_reranked(
        self, feed_id: str, n_cols: int
    ) -> Union[RerankedFeed, StageNotFound]:
        oid = _object_id(feed_id)
        if oid is None:
            return StageNotFound(RERANKED, feed_id)

        with _reading("reranked feed"):
            doc = await self._store.reranked_feeds.find_one(
                {"feed_sample_id": oid, "nCols": n_cols}
            )
        if doc is None:
            variants = await self.list_variants(feed_id)
            return StageNotFound(RERANKED, feed_id, tuple(variants))
        return RerankedFeed.model_validate(doc)

    async def list_variants(self, feed_id: str) -> list[int]:
        """Distinct nCols of every re-ranked feed for the sample, ascending."""
        oid = _object_id(feed_id)
        if oid is None:
            return []

        with _reading("reranked variants"):
            values = await self._store.reranked_feeds.distinct(
                "nCols", {"feed_sample_id": oid}
            )
        return sorted({n for n in (_variant_key(v) for v in values) if n is not None})

    async def list_samples(self, limit: int) -> list[tuple[FeedSample, Optional[User]]]:
        """Most recently updated samples, each with its owner (if known)."""
        with _reading("feed sample index"):
            cursor = (
                self._store.feed_samples.find({}, projection={"feed_items": 0})
                .sort([("updated_at", -1)])
                .limit(limit)
            )
            samples = [FeedSample.model_validate(doc) for doc in await cursor.to_list(length=None)]

        owner_ids = {oid for oid in (_object_id(s.user_id) for s in samples) if oid is not None}
        owners: dict[str, User] = {}
        if owner_ids:
            with _reading("users"):
                cursor = self._store.users.find(
                    {"_id": {"$in": list(owner_ids)}},
                    projection={"handle": 1, "profile": 1},
                )
                for doc in await cursor.to_list(length=None):
                    user = User.model_validate(doc)
                    owners[user.id] = user

        return [(sample, owners.get(sample.user_id)) for sample in samples]
