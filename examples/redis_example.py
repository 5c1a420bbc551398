"""Minimal example for Store using a Redis-compatible backend."""

import asyncio

from keyv import StoreConfig, create_store


async def main() -> None:
    """Run a basic set/get flow against Redis/Dragonfly, letting the server expire keys."""
    config = StoreConfig.from_url("redis://redis:6379/0", namespace="demo")
    async with create_store(config) as store:
        await store.set("counter", "1")
        await store.set("token", "abc", ttl=30)
        print("counter:", await store.get("counter"))
        print("token:", await store.get("token"))
        await store.clear()


if __name__ == "__main__":
    asyncio.run(main())
