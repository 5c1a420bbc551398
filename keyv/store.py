"""Store facade: namespacing, encoding and expiry on top of any backend."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Self

from .codec import Codec, JsonCodec
from .entry import Entry
from .errors import KeyvError, SerializationError
from .expiration import TTL, expires_at_for, is_expired, normalize_ttl, utc_now
from .namespace import Namespace
from .sweeper import ExpirySweeper


if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import timedelta
    from types import TracebackType

    from .backends import Backend
    from .expiration import Clock


logger = logging.getLogger(__name__)


class _Default(Enum):
    TTL = "default-ttl"


DEFAULT_TTL = _Default.TTL


class Store:
    """Async key-value store over one backend.

    Every key is prefixed with the store namespace before it reaches the backend, and
    every value goes through the codec. Stores sharing one backend under different
    namespaces never see each other's keys.

    Parameters
    ----------
    backend
        Backend adapter owning the physical storage.
    namespace
        Key prefix isolating this store. The empty namespace covers the whole backend.
    sep
        Separator placed between namespace and key.
    default_ttl
        TTL applied by :meth:`set` when no ``ttl`` argument is given.
    codec
        Value codec, :class:`~keyv.codec.JsonCodec` by default.
    clock
        Time source used for deadlines and expiry checks.
    sweep_interval
        When set, :meth:`initialize` starts a background task purging expired entries.
        Ignored for backends that expire keys natively.
    """

    def __init__(
        self,
        backend: Backend,
        *,
        namespace: str = "",
        sep: str = ":",
        default_ttl: TTL | None = None,
        codec: Codec | None = None,
        clock: Clock | None = None,
        sweep_interval: timedelta | float | None = None,
    ) -> None:
        super().__init__()
        self._backend = backend
        self._namespace = Namespace(namespace, sep)
        self._default_ttl = normalize_ttl(default_ttl)
        self._codec: Codec = codec if codec is not None else JsonCodec()
        self._clock: Clock = clock if clock is not None else utc_now
        self._sweeper: ExpirySweeper | None = None
        if sweep_interval is not None:
            if backend.native_ttl:
                logger.debug("%s expires keys natively; not starting a sweeper", type(backend).__name__)
            else:
                self._sweeper = ExpirySweeper(backend, sweep_interval)

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def namespace(self) -> str:
        return self._namespace.name

    @property
    def default_ttl(self) -> timedelta | None:
        return self._default_ttl

    async def initialize(self) -> None:
        """Prepare the backend and start the expiry sweeper when configured."""
        await self._backend.initialize()
        if self._sweeper is not None:
            self._sweeper.start()

    async def set(self, key: str, value: Any, ttl: TTL | None | _Default = DEFAULT_TTL) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Omitting ``ttl`` applies the store default; ``ttl=None`` stores without expiry.
        """
        backend_key = self._namespace.full_key(key)
        encoded = self._codec.encode(value)
        effective_ttl = self._default_ttl if ttl is DEFAULT_TTL else ttl
        expires_at = expires_at_for(effective_ttl, self._clock())
        await self._backend.set(Entry(key=backend_key, value=encoded, expires_at=expires_at))

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default`` when missing or expired."""
        backend_key = self._namespace.full_key(key)
        entry = await self._backend.get(backend_key)
        if entry is None:
            return default
        if is_expired(entry, self._clock()):
            await self._evict(backend_key)
            return default

        try:
            return self._codec.decode(entry.value)
        except SerializationError as error:
            msg = f"cannot decode value stored under {key!r}: {error}"
            raise SerializationError(msg) from error

    async def has(self, key: str) -> bool:
        """Return True when a live entry exists for ``key``."""
        backend_key = self._namespace.full_key(key)
        entry = await self._backend.get(backend_key)
        if entry is None:
            return False
        if is_expired(entry, self._clock()):
            await self._evict(backend_key)
            return False
        return True

    async def delete(self, key: str) -> None:
        """Delete ``key``; deleting a missing key is not an error."""
        await self._backend.delete(self._namespace.full_key(key))

    async def delete_many(self, keys: Iterable[str]) -> None:
        await self._backend.delete_many([self._namespace.full_key(key) for key in keys])

    async def clear(self) -> None:
        """Delete every entry of this store's namespace."""
        await self._backend.clear(self._namespace.prefix)

    async def purge_expired(self) -> int:
        """Eagerly delete expired entries from the backend."""
        return await self._backend.purge_expired()

    async def close(self) -> None:
        """Stop the sweeper and release backend resources."""
        if self._sweeper is not None:
            await self._sweeper.stop()
        await self._backend.close()

    async def _evict(self, backend_key: str) -> None:
        try:
            await self._backend.delete(backend_key)
        except KeyvError:
            logger.warning("failed to evict expired key %r", backend_key, exc_info=True)

    async def __aenter__(self) -> Self:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Store(backend={type(self._backend).__name__}, namespace={self._namespace.name!r})"
