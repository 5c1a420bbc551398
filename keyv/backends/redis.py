"""Redis-compatible backend implementation."""

from __future__ import annotations

import logging
import re
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, override


try:
    import redis.asyncio as redis_async
except ImportError:  # pragma: no cover - exercised when dependency is absent
    redis_async = None

from keyv.codec import decode_text
from keyv.entry import Entry
from keyv.errors import ConfigurationError, translate_errors
from keyv.expiration import is_deadline_passed

from .protocol import Backend


if TYPE_CHECKING:
    from collections.abc import Sequence

    from keyv.expiration import Clock


logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(prefix: str) -> str:
    """Escape Redis glob metacharacters so ``prefix`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", prefix)


class RedisBackend(Backend):
    """Redis-compatible async backend using ``redis.asyncio`` client APIs.

    Expiry is delegated to the server with ``SET ... PXAT``.
    """

    native_ttl = True

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        *,
        client: Any | None = None,
        scan_count: int = 500,
        clock: Clock | None = None,
    ) -> None:
        """Create a backend from URL or an injected async client.

        Parameters
        ----------
        url
            Redis connection URL used when ``client`` is not provided.
        client
            Optional injected client with ``get/set/delete/scan_iter/aclose`` API.
        scan_count
            Batch size hint for ``SCAN`` and for grouped deletes during :meth:`clear`.
        clock
            Time source deciding whether a deadline already passed before writing.
        """
        super().__init__(clock=clock)
        self._url = url
        self._scan_count = scan_count
        if client is not None:
            self._client = client
            return

        if redis_async is None:
            msg = "redis dependency is required for RedisBackend; install with `pip install redis`"
            raise ConfigurationError(msg)

        self._client = redis_async.from_url(url)

    @override
    async def get(self, key: str) -> Entry | None:
        """Return the entry for key, or None when key does not exist."""
        with translate_errors("get", key):
            raw = await self._client.get(key)
        value = decode_text(raw, key)
        if value is None:
            return None
        return Entry(key=key, value=value)

    @override
    async def set(self, entry: Entry) -> None:
        """Store an entry, handing its deadline to the server."""
        if entry.expires_at is None:
            with translate_errors("set", entry.key):
                await self._client.set(entry.key, entry.value)
            return

        if is_deadline_passed(entry.expires_at, self.now()):
            # Redis rejects deadlines in the past; an expired write is a delete.
            await self.delete(entry.key)
            return

        deadline_ms = int(entry.expires_at.timestamp() * 1000)
        with translate_errors("set", entry.key):
            await self._client.set(entry.key, entry.value, pxat=deadline_ms)

    @override
    async def delete(self, key: str) -> None:
        """Delete key if present."""
        with translate_errors("delete", key):
            await self._client.delete(key)

    @override
    async def delete_many(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        with translate_errors("delete_many"):
            await self._client.delete(*keys)

    @override
    async def clear(self, prefix: str) -> None:
        """Delete all keys beginning with prefix, scanning in batches."""
        batch: list[str | bytes] = []
        removed = 0
        with translate_errors("clear"):
            async for key in self._client.scan_iter(match=f"{escape_glob(prefix)}*", count=self._scan_count):
                batch.append(key)
                if len(batch) >= self._scan_count:
                    await self._client.delete(*batch)
                    removed += len(batch)
                    batch = []
            if batch:
                await self._client.delete(*batch)
                removed += len(batch)
        logger.debug("cleared %d redis keys with prefix %r", removed, prefix)

    @override
    async def purge_expired(self) -> int:
        """Redis expires keys itself; nothing to purge."""
        return 0

    @override
    async def close(self) -> None:
        """Release backend resources."""
        close_method = getattr(self._client, "aclose", None)
        if close_method is None:
            close_method = getattr(self._client, "close", None)
        if close_method is None:
            return

        maybe_awaitable = close_method()
        if isawaitable(maybe_awaitable):
            await maybe_awaitable
