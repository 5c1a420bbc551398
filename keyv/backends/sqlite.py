"""SQLite backend implementation."""

from __future__ import annotations

import asyncio
import importlib
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, override
from urllib.parse import unquote, urlsplit


try:
    aiosqlite_module = importlib.import_module("aiosqlite")
except ImportError:  # pragma: no cover - exercised when dependency is absent
    aiosqlite_module = None

from keyv.codec import decode_text
from keyv.entry import Entry
from keyv.errors import ConfigurationError, translate_errors

from .protocol import Backend
from .relational import DEFAULT_TABLE, check_identifier


if TYPE_CHECKING:
    from collections.abc import Sequence

    from keyv.expiration import Clock


logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


def sqlite_path_from_url(url: str) -> str:
    """Return the database path of a ``sqlite:///relative`` or ``sqlite:////absolute`` URL."""
    path = unquote(urlsplit(url).path)
    return path.removeprefix("/") or MEMORY_DATABASE


def _timestamp(moment: datetime | None) -> float | None:
    return None if moment is None else moment.timestamp()


class SqliteBackend(Backend):
    """SQLite async backend storing entries in a ``(key, value, expires_at)`` table.

    ``expires_at`` holds POSIX seconds, so expiry filtering is a numeric comparison.
    The table and its expiry index are created on first use.
    """

    def __init__(
        self,
        path: str = MEMORY_DATABASE,
        table: str = DEFAULT_TABLE,
        *,
        client: Any | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Create a backend from a database path or an injected connection.

        Parameters
        ----------
        path
            Database file, ``:memory:`` for a private in-process database.
        table
            Table name that stores ``key``, ``value`` and ``expires_at`` columns.
        client
            Optional injected aiosqlite connection with ``execute/commit/close`` API.
        clock
            Time source for expiry filtering.
        """
        super().__init__(clock=clock)
        self._path = path
        self._table = check_identifier(table, "table")
        self._client = client
        self._is_initialized = False
        self._init_lock = asyncio.Lock()

    @override
    async def initialize(self) -> None:
        await self._ensure_initialized()

    async def _ensure_initialized(self) -> None:
        if self._is_initialized:
            return
        async with self._init_lock:
            if self._is_initialized:
                return
            if self._client is None:
                if aiosqlite_module is None:
                    msg = "aiosqlite dependency is required for SqliteBackend; install with `pip install aiosqlite`"
                    raise ConfigurationError(msg)
                with translate_errors("connect"):
                    self._client = await aiosqlite_module.connect(self._path)
                logger.debug("opened sqlite database %s", self._path)

            with translate_errors("initialize"):
                _ = await self._execute_raw(
                    f'CREATE TABLE IF NOT EXISTS "{self._table}" '
                    '("key" TEXT PRIMARY KEY, "value" TEXT NOT NULL, expires_at REAL NULL)'
                )
                _ = await self._execute_raw(
                    f'CREATE INDEX IF NOT EXISTS "{self._table}_expires_at_idx" ON "{self._table}" (expires_at)'
                )
                await self._client.commit()
            self._is_initialized = True

    async def _execute_raw(self, query: str, params: Sequence[Any] = ()) -> int:
        cursor = await self._client.execute(query, params)
        rowcount = cursor.rowcount
        await cursor.close()
        return rowcount

    async def _write(self, operation: str, key: str | None, query: str, params: Sequence[Any] = ()) -> int:
        await self._ensure_initialized()
        with translate_errors(operation, key):
            rowcount = await self._execute_raw(query, params)
            await self._client.commit()
        return max(rowcount, 0)

    @override
    async def get(self, key: str) -> Entry | None:
        """Return the live entry for key, or None when missing or expired."""
        await self._ensure_initialized()
        with translate_errors("get", key):
            cursor = await self._client.execute(
                f'SELECT "value", expires_at FROM "{self._table}" '  # noqa: S608
                'WHERE "key" = ? AND (expires_at IS NULL OR expires_at > ?)',
                (key, _timestamp(self.now())),
            )
            row = await cursor.fetchone()
            await cursor.close()
        if row is None:
            return None

        value, expires_at = row[0], row[1]
        return Entry(
            key=key,
            value=decode_text(value, key) or "",
            expires_at=datetime.fromtimestamp(expires_at, UTC) if expires_at is not None else None,
        )

    @override
    async def set(self, entry: Entry) -> None:
        """Upsert an entry."""
        _ = await self._write(
            "set",
            entry.key,
            (
                f'INSERT INTO "{self._table}" ("key", "value", expires_at) VALUES (?, ?, ?) '  # noqa: S608
                'ON CONFLICT ("key") DO UPDATE SET "value" = excluded."value", expires_at = excluded.expires_at'
            ),
            (entry.key, entry.value, _timestamp(entry.expires_at)),
        )

    @override
    async def delete(self, key: str) -> None:
        """Delete key if present."""
        _ = await self._write("delete", key, f'DELETE FROM "{self._table}" WHERE "key" = ?', (key,))  # noqa: S608

    @override
    async def delete_many(self, keys: Sequence[str]) -> None:
        if not keys:
            return
        placeholders = ", ".join("?" for _ in keys)
        _ = await self._write(
            "delete_many",
            None,
            f'DELETE FROM "{self._table}" WHERE "key" IN ({placeholders})',  # noqa: S608
            list(keys),
        )

    @override
    async def clear(self, prefix: str) -> None:
        """Delete all keys beginning with prefix."""
        if not prefix:
            _ = await self._write("clear", None, f'DELETE FROM "{self._table}"')  # noqa: S608
            return
        _ = await self._write(
            "clear",
            None,
            # LIKE ignores ASCII case in SQLite; compare the prefix exactly
            f'DELETE FROM "{self._table}" WHERE substr("key", 1, length(?)) = ?',  # noqa: S608
            (prefix, prefix),
        )

    @override
    async def purge_expired(self) -> int:
        return await self._write(
            "purge_expired",
            None,
            f'DELETE FROM "{self._table}" WHERE expires_at IS NOT NULL AND expires_at <= ?',  # noqa: S608
            (_timestamp(self.now()),),
        )

    @override
    async def close(self) -> None:
        """Release backend resources."""
        if self._client is None:
            return
        await self._client.close()
