"""Minimal example for Store using a SQLite file."""

import asyncio
from datetime import timedelta

from keyv import SqliteBackend, Store


async def main() -> None:
    """Run a set/get flow against a local SQLite database with periodic purging."""
    backend = SqliteBackend("keyv-example.db")
    async with Store(backend, namespace="demo", sweep_interval=timedelta(seconds=30)) as store:
        await store.set("session:42", {"user": "alice"}, ttl=60)
        print("session:", await store.get("session:42"))
        await store.clear()
        print("after clear:", await store.get("session:42"))


if __name__ == "__main__":
    asyncio.run(main())
