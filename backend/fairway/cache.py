from __future__ import annotations

from asyncio import Lock
from collections.abc import Awaitable, Callable
import time
from typing import Any

from .config import HOLE_CACHE_TTL_SECONDS


class TTLCache:
    """A small in-memory TTL cache with async-safe access."""

    def __init__(self, ttl_seconds: float = 300.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[Any, tuple[Any, float]] = {}

    async def get(self, key: Any) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(self, key: Any, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        expires_at = time.monotonic() + max(ttl, 0.0)
        async with self._lock:
            if ttl <= 0:
                self._store.pop(key, None)
            else:
                self._store[key] = (value, expires_at)

    async def get_or_load(self, key: Any, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key``, calling ``loader`` on a miss.

        Loader failures propagate and nothing is cached.
        """

        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await loader()
        await self.set(key, value)
        return value

    async def invalidate(self, key: Any) -> None:
        async with self._lock:
            self._store.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()


# Rows of ``course_holes`` keyed by course name. Reference data: only changes
# when an owner replaces a course's holes, which invalidates the entry.
course_holes_cache = TTLCache(ttl_seconds=HOLE_CACHE_TTL_SECONDS)
