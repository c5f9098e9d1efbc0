"""Short-lived, block-aware memoization of smart-route results.

An entry is served only while it is younger than the TTL and, when it was
stamped with a block number, only while no newer block has been observed.
Quotes go stale quickly: any swap in a new block may move the price.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from smartroute.routing.types import SmartQuoteResult

logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 5.0
DEFAULT_SWEEP_INTERVAL_SECONDS = 30.0


@dataclass(frozen=True)
class CacheKey:
    """Request signature, compared by exact value.

    amount_in is the caller's decimal string as typed; "1.0" and "1" are
    different keys. Addresses are not case-normalized either.
    """

    input_asset: str
    output_asset: str
    amount_in: str
    v2_enabled: bool
    v3_enabled: bool


@dataclass(frozen=True)
class CacheEntry:
    result: SmartQuoteResult
    timestamp: float
    block_number: int | None = None


class QuoteCache:
    """Lock-guarded map from CacheKey to CacheEntry.

    Args:
        ttl_seconds: Maximum entry age; an entry exactly ttl_seconds old is
            still served
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._latest_block: int | None = None
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    @property
    def latest_block(self) -> int | None:
        return self._latest_block

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def _is_behind(self, entry: CacheEntry) -> bool:
        return (
            entry.block_number is not None
            and self._latest_block is not None
            and entry.block_number < self._latest_block
        )

    def get(self, key: CacheKey) -> SmartQuoteResult | None:
        """Cached result for key, or None; a stale entry is evicted on the way."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._is_expired(entry, self.clock()) or self._is_behind(entry):
                del self._entries[key]
                return None

            return entry.result

    def set(
        self, key: CacheKey, result: SmartQuoteResult, block_number: int | None = None
    ) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(result, self.clock(), block_number)

    def on_new_block(self, block_number: int) -> int:
        """Record a newly observed block and drop entries from older blocks.

        Entries are swept only when a previous block is known and the new one
        is higher. The block number is recorded either way.

        Returns:
            Number of entries evicted
        """
        evicted = 0
        with self._lock:
            if self._latest_block is not None and block_number > self._latest_block:
                for key, entry in list(self._entries.items()):
                    if entry.block_number is not None and entry.block_number < block_number:
                        del self._entries[key]
                        evicted += 1
            self._latest_block = block_number

        if evicted:
            logger.debug("quote_cache_block_sweep", block_number=block_number, evicted=evicted)
        return evicted

    def cleanup_expired(self) -> int:
        """Drop every TTL-expired entry.

        Returns:
            Number of entries evicted
        """
        with self._lock:
            now = self.clock()
            expired = [k for k, e in list(self._entries.items()) if self._is_expired(e, now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


async def run_periodic_cleanup(
    cache: QuoteCache, interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS
) -> None:
    """Sweep expired entries every interval seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        evicted = cache.cleanup_expired()
        if evicted:
            logger.debug("quote_cache_sweep", evicted=evicted, remaining=len(cache))


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "DEFAULT_SWEEP_INTERVAL_SECONDS",
    "CacheKey",
    "CacheEntry",
    "QuoteCache",
    "run_periodic_cleanup",
]
