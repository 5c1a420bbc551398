"""Minimal example for Store using MongoDB with a TTL index."""

import asyncio
from datetime import timedelta

from keyv import StoreConfig, create_store


async def main() -> None:
    """Run a basic set/get flow against MongoDB, sweeping expired documents every minute."""
    config = StoreConfig.from_url(
        "mongodb://mongo:27017", namespace="demo", collection="kv_store", sweep_interval=timedelta(minutes=1)
    )
    async with create_store(config) as store:
        await store.set("user", {"alice": {"age": 30}}, ttl=3600)
        print("user:", await store.get("user"))
        await store.delete("user")


if __name__ == "__main__":
    asyncio.run(main())
