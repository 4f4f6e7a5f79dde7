"""Per-record asyncio locks.

The record store serializes mutations per row (SELECT ... FOR UPDATE); these locks
additionally keep a single process from interleaving two mutations of one market.
An entry lives only while some task holds or awaits it, so ids that never resolve
to a market leave nothing behind.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLocks:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    @asynccontextmanager
    async def lock_for(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


# Shared by every service that mutates a market or its positions.
market_locks = KeyedLocks()
