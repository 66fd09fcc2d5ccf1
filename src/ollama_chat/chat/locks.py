"""Per-conversation locks for serializing turns inside one process."""

import asyncio
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ConversationLocks:
    """
    Hands out one asyncio.Lock per conversation id.

    - Lazy creation: a lock is created on first use
    - Max 1024 locks: least recently used idle locks are evicted
    - Locks that are held or awaited are never evicted
    """

    def __init__(self, max_locks: int = 1024):
        self.max_locks = max_locks
        self._locks: OrderedDict[int, asyncio.Lock] = OrderedDict()
        self._waiters: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _evict_idle(self) -> None:
        """Drop idle locks, oldest first, until under capacity."""
        for conversation_id in list(self._locks):
            if len(self._locks) < self.max_locks:
                return
            if self._waiters.get(conversation_id, 0) == 0:
                del self._locks[conversation_id]

    def _get(self, conversation_id: int) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            if len(self._locks) >= self.max_locks:
                self._evict_idle()
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        else:
            self._locks.move_to_end(conversation_id)
        return lock

    @asynccontextmanager
    async def hold(self, conversation_id: int) -> AsyncIterator[None]:
        """Hold the conversation's lock for the duration of the block."""
        lock = self._get(conversation_id)
        self._waiters[conversation_id] = self._waiters.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._waiters[conversation_id] - 1
            if remaining:
                self._waiters[conversation_id] = remaining
            else:
                del self._waiters[conversation_id]
