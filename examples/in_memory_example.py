"""Minimal example for Store using the in-memory backend."""

import asyncio

from keyv import InMemoryBackend, Store


async def main() -> None:
    """Run a basic set/get/expire flow in process."""
    async with Store(InMemoryBackend(), namespace="demo") as store:
        await store.set("user", {"alice": {"age": 30}})
        print("user:", await store.get("user"))

        await store.set("session:42", {"user": "alice"}, ttl=0)
        print("expired session:", await store.get("session:42"))

        await store.clear()
        print("after clear:", await store.get("user"))


if __name__ == "__main__":
    asyncio.run(main())
