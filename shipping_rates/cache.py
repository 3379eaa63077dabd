"""
Interactive Quote Caching

Caller-side helpers for screens that re-quote as the user types. The
calculator itself holds no state; these components are owned and injected by
the calling layer.

    QuoteCache          - TTL cache keyed by (weight, warehouse, destination)
    LatestQuoteFetcher  - runs fetches in the background and drops results of
                          requests superseded by newer input
"""

import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable

from .models import CostBreakdown
from .data import CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS


CacheKey = tuple[float, str, str]
QuoteFetch = Callable[[float, str, str], list[CostBreakdown]]


class FetchSuperseded(Exception):
    """A newer request replaced this one before its result was delivered."""


# =============================================================================
# CACHE
# =============================================================================

class QuoteCache:
    """
    Thread-safe TTL cache of quote lists.

    Expired entries are dropped on read and before each insert. When full, the
    oldest inserted entry is evicted.

    Args:
        ttl_seconds: Lifetime of an entry
        max_entries: Capacity
        clock: Monotonic seconds source (injectable for tests)
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        max_entries: int = CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, tuple[CostBreakdown, ...]]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(weight_kg: float, warehouse_id: str, destination_country: str) -> CacheKey:
        return (float(weight_kg), warehouse_id, destination_country)

    def get(self, key: CacheKey) -> list[CostBreakdown] | None:
        """Cached quotes, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, quotes = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return list(quotes)

    def put(self, key: CacheKey, quotes: list[CostBreakdown]) -> None:
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)
            self._evict(now)
            self._entries[key] = (now + self.ttl_seconds, tuple(quotes))

    def invalidate(self, key: CacheKey) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict(self, now: float) -> None:
        """Drop expired entries, then oldest entries until there is room. Lock held."""
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]

        while len(self._entries) >= self.max_entries:
            del self._entries[next(iter(self._entries))]


# =============================================================================
# LATEST-ONLY FETCHER
# =============================================================================

class LatestQuoteFetcher:
    """
    Background quote fetches where only the most recent request counts.

    A new request cancels the pending one if it has not started yet. If it is
    already running, its future fails with FetchSuperseded instead of
    delivering a stale result. Completed fetches still fill the cache.

    Args:
        fetch: Callable (weight_kg, warehouse_id, destination_country) -> quotes
        cache: Shared cache (a private QuoteCache by default)
        executor: Executor to run fetches on (a private thread pool by default,
            shut down by close())
    """

    def __init__(
        self,
        fetch: QuoteFetch,
        cache: QuoteCache | None = None,
        executor: Executor | None = None,
    ):
        self._fetch = fetch
        self.cache = cache if cache is not None else QuoteCache()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="quote-fetch"
        )
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Future | None = None

    def request(
        self,
        weight_kg: float,
        warehouse_id: str,
        destination_country: str,
    ) -> Future:
        """Start a fetch for new input, superseding any earlier request."""
        key = QuoteCache.make_key(weight_kg, warehouse_id, destination_country)

        with self._lock:
            self._generation += 1
            generation = self._generation

            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

            cached = self.cache.get(key)
            if cached is not None:
                future: Future = Future()
                future.set_result(cached)
                return future

            future = self._executor.submit(self._run, generation, key)
            self._pending = future
            return future

    def _is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _run(self, generation: int, key: CacheKey) -> list[CostBreakdown]:
        if not self._is_current(generation):
            raise FetchSuperseded(f"Request {key} was superseded before it started")

        quotes = self._fetch(*key)
        self.cache.put(key, quotes)

        if not self._is_current(generation):
            raise FetchSuperseded(f"Request {key} was superseded while running")
        return quotes

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> "LatestQuoteFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "QuoteCache",
    "LatestQuoteFetcher",
    "FetchSuperseded",
]
