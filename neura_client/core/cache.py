"""
Cache Store
In-memory, time-boxed memoization of a single fetched resource.

One CacheStore instance owns one named resource (e.g. account settings).
Concurrent get() calls during a fetch share the in-flight request.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and the monotonic time it was fetched."""
    value: T
    fetched_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.fetched_at < ttl


class CacheStore(Generic[T]):
    """
    TTL cache with single-flight fetching.

    Callers arriving while a fetch is in flight await the same pending
    result rather than issuing a duplicate request or receiving a stale
    value. A failed fetch propagates to every waiter and caches nothing.
    """

    # Default freshness window (5 minutes)
    DEFAULT_TTL_SECONDS = 5 * 60

    def __init__(
        self,
        name: str,
        fetcher: Callable[[], Awaitable[T]],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache store.

        Args:
            name: Resource name, used in log messages
            fetcher: Coroutine function that loads a fresh value
            ttl_seconds: Freshness window
            clock: Monotonic time source (injectable for tests)
        """
        self.name = name
        self._fetcher = fetcher
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry[T]] = None
        self._inflight: Optional[asyncio.Task] = None
        # Bumped by invalidate()/update() so a fetch that started earlier
        # cannot overwrite a newer authoritative value.
        self._generation = 0

    @property
    def fetched_at(self) -> Optional[float]:
        return self._entry.fetched_at if self._entry else None

    @property
    def is_loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def peek(self) -> Optional[T]:
        """Return the cached value (fresh or stale) without fetching."""
        return self._entry.value if self._entry else None

    def is_fresh(self) -> bool:
        return self._entry is not None and self._entry.is_fresh(self._clock(), self.ttl_seconds)

    async def get(self) -> T:
        """
        Return the cached value if fresh, otherwise fetch it.

        Raises:
            Whatever the fetcher raises; nothing is cached on failure.
        """
        if self._entry is not None and self._entry.is_fresh(self._clock(), self.ttl_seconds):
            return self._entry.value

        if self._inflight is None or self._inflight.done():
            logger.debug("Cache miss for %s, fetching", self.name)
            self._inflight = asyncio.ensure_future(self._fetch(self._generation))
        else:
            logger.debug("Fetch for %s already in flight, awaiting it", self.name)

        # shield: a cancelled caller must not cancel the fetch other callers share
        return await asyncio.shield(self._inflight)

    async def _fetch(self, generation: int) -> T:
        try:
            value = await self._fetcher()
        finally:
            self._inflight = None

        if generation == self._generation:
            self._entry = CacheEntry(value=value, fetched_at=self._clock())
        else:
            logger.debug("Discarding %s fetch result superseded by invalidate/update", self.name)
        return value

    def invalidate(self) -> None:
        """Clear value and timestamp unconditionally."""
        self._entry = None
        self._generation += 1
        logger.debug("Invalidated cache for %s", self.name)

    def update(self, value: T) -> None:
        """Push an authoritative value without fetching."""
        self._entry = CacheEntry(value=value, fetched_at=self._clock())
        self._generation += 1
