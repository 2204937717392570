"""Per-session single-writer locks."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class SessionLockRegistry:
    """
    One asyncio.Lock per session key.

    A lock is dropped from the registry as soon as no task holds or waits
    on it, so the registry only grows with the number of sessions that are
    busy right now.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Serialize the enclosed block with every other holder of ``key``."""
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
