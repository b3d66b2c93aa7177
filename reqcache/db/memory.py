"""In-memory store handle for tests and local dev (no Redis needed).

Mimics the Redis commands the cache layer uses, including TTL: an entry
whose expiry has passed behaves as absent, the same way Redis would
have evicted it.  Every command yields to the event loop once, so
concurrent operations interleave the way they would over a socket.

Limitation: the data lives in this process only.  Two API instances
would each see their own cache.
"""

from __future__ import annotations

import asyncio
import time

from reqcache.db.store import StoreConfig, StoreConnection, StoreHandle

# key -> (value, expires_at or None)
Entries = dict[str, tuple[str, float | None]]


class InMemoryConnection:
    def __init__(self, entries: Entries) -> None:
        self._entries = entries

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= time.time():
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        entry = self._live(key)
        return entry[0] if entry is not None else None

    async def set(self, key: str, value: str) -> bool:
        await asyncio.sleep(0)
        # Like Redis SET, a plain set clears any previous TTL
        self._entries[key] = (value, None)
        return True

    async def expire(self, key: str, seconds: int) -> bool:
        await asyncio.sleep(0)
        entry = self._live(key)
        if entry is None:
            return False
        self._entries[key] = (entry[0], time.time() + seconds)
        return True

    async def delete(self, key: str) -> int:
        await asyncio.sleep(0)
        if self._live(key) is None:
            return 0
        del self._entries[key]
        return 1

    async def ping(self) -> bool:
        return True


class InMemoryStoreHandle(StoreHandle):
    def __init__(self, namespace: str, config: StoreConfig) -> None:
        super().__init__(namespace, config)
        self._entries: Entries = {}

    async def _open(self) -> StoreConnection:
        return InMemoryConnection(self._entries)

    async def _close(self, conn: StoreConnection) -> None:
        return None

    def clear(self) -> None:
        self._entries.clear()
