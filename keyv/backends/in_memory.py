"""In-memory backend implementation."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, override

from keyv.expiration import is_expired

from .protocol import Backend


if TYPE_CHECKING:
    from collections.abc import Sequence

    from keyv.entry import Entry
    from keyv.expiration import Clock


class InMemoryBackend(Backend):
    """Process-local backend for development and tests.

    Expired entries are dropped when a read finds them or when :meth:`purge_expired`
    is called explicitly; nothing purges them in the background.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        super().__init__(clock=clock)
        self._store: dict[str, Entry] = {}
        self._lock = asyncio.Lock()

    @override
    async def get(self, key: str) -> Entry | None:
        """Return the live entry for key, dropping it when it has expired."""
        now = self.now()
        async with self._lock:
            entry = self._store.get(key)
            if entry is not None and is_expired(entry, now):
                del self._store[key]
                return None
            return entry

    @override
    async def set(self, entry: Entry) -> None:
        """Store an entry, replacing any existing one for the same key."""
        async with self._lock:
            self._store[entry.key] = entry

    @override
    async def delete(self, key: str) -> None:
        """Delete key if present."""
        async with self._lock:
            _ = self._store.pop(key, None)

    @override
    async def delete_many(self, keys: Sequence[str]) -> None:
        async with self._lock:
            for key in keys:
                _ = self._store.pop(key, None)

    @override
    async def clear(self, prefix: str) -> None:
        """Delete all keys beginning with prefix."""
        async with self._lock:
            for key in [key for key in self._store if key.startswith(prefix)]:
                del self._store[key]

    @override
    async def purge_expired(self) -> int:
        now = self.now()
        async with self._lock:
            expired = [key for key, entry in self._store.items() if is_expired(entry, now)]
            for key in expired:
                del self._store[key]
        return len(expired)

    @override
    async def close(self) -> None:
        """Release backend resources."""
        return

    def __len__(self) -> int:
        return len(self._store)
