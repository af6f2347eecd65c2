"""Per-session mutual exclusion."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from cachetools import TTLCache

DEFAULT_LOCK_TTL_SECONDS = 900.0
DEFAULT_MAX_LOCKS = 100_000


class SessionLockRegistry:
    """asyncio locks keyed by session id.

    A lock that is held or awaited lives in ``_active`` with a count of its
    users and is never evicted. Once the last user leaves it moves to a TTL
    cache of idle locks, so ids of abandoned dialogs do not accumulate.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_LOCK_TTL_SECONDS,
        maxsize: int = DEFAULT_MAX_LOCKS,
    ) -> None:
        self._idle: TTLCache[str, asyncio.Lock] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._active: dict[str, tuple[asyncio.Lock, int]] = {}

    def _acquire_entry(self, session_id: str) -> asyncio.Lock:
        if session_id in self._active:
            lock, users = self._active[session_id]
        else:
            lock = self._idle.pop(session_id, None) or asyncio.Lock()
            users = 0
        self._active[session_id] = (lock, users + 1)
        return lock

    def _release_entry(self, session_id: str) -> None:
        lock, users = self._active[session_id]
        if users > 1:
            self._active[session_id] = (lock, users - 1)
            return
        del self._active[session_id]
        self._idle[session_id] = lock

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        """Serialize load -> mutate -> save for one session id.

        Usage:
            async with locks.hold(session_id):
                context = await store.get(session_id)
                ...
                await store.save(context)
        """
        lock = self._acquire_entry(session_id)
        try:
            async with lock:
                yield
        finally:
            self._release_entry(session_id)

    def __len__(self) -> int:
        return len(self._active) + len(self._idle)
