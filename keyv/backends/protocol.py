"""Backend interface definitions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from keyv.expiration import utc_now


if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from keyv.entry import Entry
    from keyv.expiration import Clock


class Backend(ABC):
    """Async key-value backend storing :class:`~keyv.entry.Entry` records.

    Backends receive fully namespaced keys and already encoded values.
    """

    #: True when the backend removes expired keys by itself.
    native_ttl: bool = False

    def __init__(self, *, clock: Clock | None = None) -> None:
        super().__init__()
        self._clock: Clock = clock if clock is not None else utc_now

    def now(self) -> datetime:
        """Return the current time from the backend's clock."""
        return self._clock()

    async def initialize(self) -> None:  # noqa: B027
        """Prepare backend storage. Safe to call more than once."""

    @abstractmethod
    async def get(self, key: str) -> Entry | None:
        """Return the entry for key, or None when key does not exist."""

    @abstractmethod
    async def set(self, entry: Entry) -> None:
        """Store an entry, replacing any existing one for the same key."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete key if present."""

    async def delete_many(self, keys: Sequence[str]) -> None:
        """Delete every key in ``keys``; missing keys are ignored."""
        for key in keys:
            await self.delete(key)

    @abstractmethod
    async def clear(self, prefix: str) -> None:
        """Delete all keys beginning with prefix."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Delete expired entries and return how many were removed."""

    @abstractmethod
    async def close(self) -> None:
        """Close any backend resources."""
