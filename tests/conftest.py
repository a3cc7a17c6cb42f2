"""Shared fixtures: an in-memory stand-in for the MongoDB collections."""

from __future__ import annotations

import asyncio
import copy
import os
from datetime import datetime, timedelta, timezone

# Keep tests off the OTLP exporter; must be set before feed_viewer.config loads
os.environ.setdefault("TRACING_ENABLED", "false")

import pytest
from bson import ObjectId


def _matches(doc: dict, query: dict) -> bool:
    for key, expected in (query or {}).items():
        value = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


def _sorted(docs: list[dict], sort_keys) -> list[dict]:
    keys = sort_keys if isinstance(sort_keys, list) else [sort_keys]
    out = list(docs)
    # Stable sorts applied from the least significant key
    for key, direction in reversed(keys):
        present = [d for d in out if d.get(key) is not None]
        missing = [d for d in out if d.get(key) is None]
        present.sort(key=lambda d: d[key], reverse=direction < 0)
        out = present + missing if direction < 0 else missing + present
    return out


class FakeCursor:
    def __init__(self, collection: "FakeCollection", docs: list[dict]):
        self._collection = collection
        self._docs = docs

    def sort(self, key_or_list, direction=None):
        sort_keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction or 1)]
        self._docs = _sorted(self._docs, sort_keys)
        return self

    def limit(self, n: int):
        self._docs = self._docs[:n]
        return self

    async def to_list(self, length=None):
        self._collection._raise_if_failing(None)
        return [copy.deepcopy(d) for d in self._docs]


class FakeCollection:
    """Async subset of pymongo's collection API used by feed_viewer."""

    def __init__(self, docs=None):
        self.docs: list[dict] = list(docs or [])
        self.calls: list[tuple] = []
        self.error: Exception | None = None
        self.errors_by_key: dict = {}
        self.delays_by_key: dict = {}

    def _raise_if_failing(self, query):
        if self.error is not None:
            raise self.error
        for value in (query or {}).values():
            if isinstance(value, str) and value in self.errors_by_key:
                raise self.errors_by_key[value]

    async def _maybe_delay(self, query):
        for value in (query or {}).values():
            if isinstance(value, str) and value in self.delays_by_key:
                await asyncio.sleep(self.delays_by_key[value])

    async def find_one(self, query=None, projection=None, sort=None):
        self.calls.append(("find_one", query, sort))
        await self._maybe_delay(query)
        self._raise_if_failing(query)
        found = [d for d in self.docs if _matches(d, query)]
        if sort:
            found = _sorted(found, sort)
        return copy.deepcopy(found[0]) if found else None

    def find(self, query=None, projection=None):
        self.calls.append(("find", query, None))
        return FakeCursor(self, [d for d in self.docs if _matches(d, query)])

    async def distinct(self, key, query=None):
        self.calls.append(("distinct", query, key))
        self._raise_if_failing(None)
        values = []
        for doc in self.docs:
            if _matches(doc, query) and doc.get(key) not in values:
                values.append(doc.get(key))
        return values


class FakeStore:
    def __init__(self):
        self.feed_samples = FakeCollection()
        self.ranked_feeds = FakeCollection()
        self.reranked_feeds = FakeCollection()
        self.images = FakeCollection()
        self.users = FakeCollection()
        self.healthy = True

    async def ping(self) -> bool:
        return self.healthy


T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_item(image_id, **extra) -> dict:
    item = {"image_id": image_id, "source_type": "trending", "score": 0.5}
    item.update(extra)
    return item


def make_image(doc_id, url=None, color=None) -> dict:
    return {
        "_id": ObjectId(),
        "doc_id": doc_id,
        "images_paths": [url or f"http://x/{doc_id}.png"],
        "color_representation": color,
    }


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def seeded(store):
    """One sample with a ranked run pair and layout variants 3 and 4."""
    user_id = ObjectId()
    sample_id = ObjectId()
    items = [make_item("a"), make_item("b", image_url="http://x/b.png"), make_item("c")]
    store.users.docs.append({"_id": user_id, "handle": "alice_ai", "profile": {"display_name": "Alice"}})
    store.feed_samples.docs.append(
        {
            "_id": sample_id,
            "user_id": str(user_id),
            "feed_items": items,
            "item_count": len(items),
            "updated_at": T0,
        }
    )
    store.images.docs.extend(
        [make_image("a", color="#111"), make_image("c", color="#333")]
    )
    older = ObjectId()
    newer = ObjectId()
    store.ranked_feeds.docs.extend(
        [
            {
                "_id": newer,
                "user_id": str(user_id),
                "feed_sample_id": sample_id,
                "feed_items": [items[2], items[0], items[1]],
                "details": {"total_time": 0.2, "scoring_time": 0.05},
                "variables": {"weights": {"aesthetic": 0.6, "recency": 0.4}},
                "created_at": T0 + timedelta(minutes=5),
            },
            {
                "_id": older,
                "user_id": str(user_id),
                "feed_sample_id": sample_id,
                "feed_items": items,
                "details": {"total_time": 0.1},
                "variables": {"weights": {"aesthetic": 1.0}},
                "created_at": T0,
            },
        ]
    )
    for n_cols, order in ((4, [1, 2, 0]), (3, [2, 1, 0])):
        store.reranked_feeds.docs.append(
            {
                "_id": ObjectId(),
                "user_id": str(user_id),
                "feed_sample_id": sample_id,
                "ranked_feed_id": newer,
                "nCols": n_cols,
                "variables": {"H_MIN": 0.5, "H_MAX": 1.5, "CLUSTER_SEQUENCE": [2, 0, 1]},
                "details": {"total_time": 0.03},
                "feed_items": [items[i] for i in order],
            }
        )
    return {
        "sample_id": str(sample_id),
        "user_id": str(user_id),
        "ranked_id": str(newer),
        "older_ranked_id": str(older),
    }
