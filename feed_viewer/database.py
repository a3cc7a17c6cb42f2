"""
MongoDB handle for the ranking pipeline's collections.

The store is created once in the FastAPI lifespan, started before the first
request and stopped on shutdown. Request handlers receive it through
dependencies (see get_store) instead of a module-level client.
"""
import logging
from typing import Optional

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from feed_viewer.config import Settings, settings as default_settings
from feed_viewer.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class DocumentStore:
    def __init__(self, config: Optional[Settings] = None) -> None:
        self._settings = config or default_settings
        self._client: Optional[AsyncMongoClient] = None
        self._db = None

    async def start(self) -> None:
        self._client = AsyncMongoClient(
            self._settings.mongodb_uri,
            serverSelectionTimeoutMS=self._settings.mongodb_server_selection_timeout_ms,
        )
        self._db = self._client[self._settings.mongodb_db]
        try:
            await self._client.admin.command("ping")
        except PyMongoError as exc:
            await self.stop()
            raise UpstreamUnavailable(f"MongoDB unreachable: {exc}") from exc
        logger.info("MongoDB connected (db=%s)", self._settings.mongodb_db)

    async def stop(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._db = None
            logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        try:
            await self._require_client().admin.command("ping")
        except (PyMongoError, UpstreamUnavailable) as exc:
            logger.warning("MongoDB ping failed: %s", exc)
            return False
        return True

    def _require_client(self) -> AsyncMongoClient:
        if self._client is None:
            raise UpstreamUnavailable("DocumentStore not started — call start() at startup")
        return self._client

    def _collection(self, name: str):
        self._require_client()
        return self._db[name]

    # ── Collections ───────────────────────────────────────────────────────

    @property
    def feed_samples(self):
        return self._collection(self._settings.feed_samples_collection)

    @property
    def ranked_feeds(self):
        return self._collection(self._settings.ranked_feeds_collection)

    @property
    def reranked_feeds(self):
        return self._collection(self._settings.reranked_feeds_collection)

    @property
    def images(self):
        return self._collection(self._settings.images_collection)

    @property
    def users(self):
        return self._collection(self._settings.users_collection)


def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the store opened in the lifespan."""
    return request.app.state.store
