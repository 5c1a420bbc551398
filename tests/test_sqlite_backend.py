from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from keyv.backends import sqlite as sqlite_module
from keyv.backends.sqlite import SqliteBackend
from keyv.entry import Entry
from keyv.errors import BackendError, ConfigurationError

from fakes import FakeSqliteConnection


if TYPE_CHECKING:
    from conftest import FakeClock


@pytest.mark.asyncio
async def test_sqlite_backend_get_set_delete_roundtrip() -> None:
    client = FakeSqliteConnection()
    backend = SqliteBackend(client=client)

    await backend.set(Entry("ep1:user", '{"alice": true}'))
    assert await backend.get("ep1:user") == Entry("ep1:user", '{"alice": true}')

    await backend.delete("ep1:user")
    assert await backend.get("ep1:user") is None
    assert client.commits >= 3


@pytest.mark.asyncio
async def test_sqlite_backend_creates_table_and_index_on_first_use() -> None:
    client = FakeSqliteConnection()
    backend = SqliteBackend(client=client, table="entries")

    await backend.initialize()
    await backend.initialize()
    assert client.queries == [
        'CREATE TABLE IF NOT EXISTS "entries" ("key" TEXT PRIMARY KEY, "value" TEXT NOT NULL, expires_at REAL NULL)',
        'CREATE INDEX IF NOT EXISTS "entries_expires_at_idx" ON "entries" (expires_at)',
    ]


@pytest.mark.asyncio
async def test_sqlite_backend_stores_deadline_as_posix_seconds(clock: FakeClock) -> None:
    client = FakeSqliteConnection()
    backend = SqliteBackend(client=client, clock=clock)
    deadline = clock() + timedelta(seconds=1)

    await backend.set(Entry("k", "v", deadline))
    assert client.rows["k"] == ("v", deadline.timestamp())
    assert await backend.get("k") == Entry("k", "v", deadline)

    clock.advance(1)
    assert await backend.get("k") is None
    assert "expires_at IS NULL OR expires_at > ?" in client.queries[-1]


@pytest.mark.asyncio
async def test_sqlite_backend_clear_matches_prefix_exactly() -> None:
    client = FakeSqliteConnection()
    backend = SqliteBackend(client=client)

    await backend.set(Entry("A:1", "1"))
    await backend.set(Entry("a:1", "2"))
    await backend.set(Entry("a_b:1", "3"))

    await backend.clear("a:")
    assert sorted(client.rows) == ["A:1", "a_b:1"]
    assert 'substr("key", 1, length(?)) = ?' in client.queries[-1]

    await backend.clear("")
    assert client.rows == {}


@pytest.mark.asyncio
async def test_sqlite_backend_delete_many_and_purge(clock: FakeClock) -> None:
    client = FakeSqliteConnection()
    backend = SqliteBackend(client=client, clock=clock)

    await backend.set(Entry("a", "1"))
    await backend.set(Entry("b", "2"))
    await backend.set(Entry("c", "3", clock() - timedelta(seconds=1)))
    await backend.set(Entry("d", "4", clock() + timedelta(seconds=60)))

    await backend.delete_many([])
    await backend.delete_many(["a", "missing"])
    assert sorted(client.rows) == ["b", "c", "d"]

    assert await backend.purge_expired() == 1
    assert sorted(client.rows) == ["b", "d"]


@pytest.mark.asyncio
async def test_sqlite_backend_wraps_client_failures() -> None:
    client = FakeSqliteConnection()
    backend = SqliteBackend(client=client)
    await backend.initialize()

    client.fail_with = RuntimeError("database is locked")
    with pytest.raises(BackendError, match="'set' failed for key 'k': database is locked"):
        await backend.set(Entry("k", "v"))


@pytest.mark.asyncio
async def test_sqlite_backend_concurrent_first_use_connects_once(monkeypatch: pytest.MonkeyPatch) -> None:
    connections: list[FakeSqliteConnection] = []

    class _SlowAiosqlite:
        @staticmethod
        async def connect(path: str) -> FakeSqliteConnection:
            await asyncio.sleep(0.01)
            connection = FakeSqliteConnection()
            connections.append(connection)
            return connection

    monkeypatch.setattr(sqlite_module, "aiosqlite_module", _SlowAiosqlite)
    backend = SqliteBackend("cache.db")

    results = await asyncio.gather(*(backend.get(f"k{index}") for index in range(5)))
    await backend.close()

    assert results == [None] * 5
    assert len(connections) == 1
    assert connections[0].closed is True


@pytest.mark.asyncio
async def test_sqlite_backend_requires_dependency_without_injected_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sqlite_module, "aiosqlite_module", None)
    backend = SqliteBackend()

    with pytest.raises(ConfigurationError, match="aiosqlite dependency is required"):
        _ = await backend.get("k")


def test_sqlite_backend_rejects_invalid_identifiers() -> None:
    with pytest.raises(ConfigurationError, match="table must be a valid unquoted SQL identifier"):
        _ = SqliteBackend(table="kv store")
