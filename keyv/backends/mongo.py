"""MongoDB backend implementation."""

from __future__ import annotations

import asyncio
import importlib
import logging
import re
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, override


try:
    pymongo_module = importlib.import_module("pymongo")
except ImportError:  # pragma: no cover - exercised when dependency is absent
    pymongo_module = None

from keyv.entry import Entry
from keyv.errors import ConfigurationError, translate_errors
from keyv.expiration import as_utc

from .protocol import Backend


if TYPE_CHECKING:
    from collections.abc import Sequence

    from keyv.expiration import Clock


logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "keyv"
DEFAULT_COLLECTION = "keyv"


def _live_filter(now: Any) -> dict[str, Any]:
    # {"expires_at": None} also matches documents without the field.
    return {"$or": [{"expires_at": None}, {"expires_at": {"$gt": now}}]}


class MongoBackend(Backend):
    """MongoDB async backend storing one ``{_id, value, expires_at}`` document per entry.

    Reads always filter out expired documents. With ``ttl_index=True`` the server also
    removes them on its own through a TTL index on ``expires_at``.
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        database: str = DEFAULT_DATABASE,
        collection: str = DEFAULT_COLLECTION,
        *,
        client: Any | None = None,
        ttl_index: bool = True,
        clock: Clock | None = None,
    ) -> None:
        """Create a backend from URL or an injected async client.

        Parameters
        ----------
        url
            MongoDB connection URL used when ``client`` is not provided.
        database
            Database holding the collection.
        collection
            Collection storing the entries.
        client
            Optional injected client supporting ``client[database][collection]`` and ``close``.
        ttl_index
            When True, :meth:`initialize` creates a TTL index on ``expires_at``.
        clock
            Time source for expiry filtering.
        """
        super().__init__(clock=clock)
        if not database or not collection:
            msg = "database and collection names must not be empty"
            raise ConfigurationError(msg)

        self._url = url
        self._database_name = database
        self._collection_name = collection
        self._ttl_index = ttl_index
        self._is_initialized = False
        self._init_lock = asyncio.Lock()
        if client is None:
            if pymongo_module is None:
                msg = "pymongo dependency is required for MongoBackend; install with `pip install pymongo`"
                raise ConfigurationError(msg)
            client = pymongo_module.AsyncMongoClient(url, tz_aware=True)
        self._client = client
        self._collection = client[database][collection]

    @override
    async def initialize(self) -> None:
        if self._is_initialized:
            return
        async with self._init_lock:
            if self._is_initialized:
                return
            if self._ttl_index:
                with translate_errors("initialize"):
                    await self._collection.create_index("expires_at", expireAfterSeconds=0)
                logger.debug("ensured TTL index on %s.%s", self._database_name, self._collection_name)
            self._is_initialized = True

    @override
    async def get(self, key: str) -> Entry | None:
        """Return the live entry for key, or None when missing or expired."""
        with translate_errors("get", key):
            document = await self._collection.find_one({"_id": key, **_live_filter(self.now())})
        if document is None:
            return None

        expires_at = document.get("expires_at")
        return Entry(
            key=key,
            value=document["value"],
            expires_at=as_utc(expires_at) if expires_at is not None else None,
        )

    @override
    async def set(self, entry: Entry) -> None:
        """Upsert the document for an entry."""
        document = {"_id": entry.key, "value": entry.value, "expires_at": entry.expires_at}
        with translate_errors("set", entry.key):
            await self._collection.replace_one({"_id": entry.key}, document, upsert=True)

    @override
    async def delete(self, key: str) -> None:
        """Delete key if present."""
        with translate_errors("delete", key):
            await self._collection.delete_one({"_id": key})

    @override
    async def delete_many(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        with translate_errors("delete_many"):
            await self._collection.delete_many({"_id": {"$in": list(keys)}})

    @override
    async def clear(self, prefix: str) -> None:
        """Delete all keys beginning with prefix."""
        query: dict[str, Any] = {"_id": {"$regex": f"^{re.escape(prefix)}"}} if prefix else {}
        with translate_errors("clear"):
            await self._collection.delete_many(query)

    @override
    async def purge_expired(self) -> int:
        with translate_errors("purge_expired"):
            result = await self._collection.delete_many({"expires_at": {"$ne": None, "$lte": self.now()}})
        return int(getattr(result, "deleted_count", 0) or 0)

    @override
    async def close(self) -> None:
        """Release backend resources."""
        maybe_awaitable = self._client.close()
        if isawaitable(maybe_awaitable):
            await maybe_awaitable
