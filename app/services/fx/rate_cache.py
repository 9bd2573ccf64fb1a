"""
FxRateCache - In-memory TTL cache of exchange rates.

One instance per process, created in the application lifespan. Entries are
keyed "FROM->TO" and expire by TTL; there is no explicit invalidation.
Mutated only from the event loop thread, so no lock is needed.
"""

import time
from dataclasses import dataclass
from typing import Callable


def rate_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency}->{to_currency}"


@dataclass(frozen=True)
class FxRateCacheEntry:
    """Cached rate and its expiry on the cache clock (seconds)."""

    rate: float
    expires_at: float


class FxRateCache:
    """TTL cache with an injectable monotonic clock."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            ttl_seconds: Entry lifetime
            clock: Monotonic clock in seconds
        """
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[str, FxRateCacheEntry] = {}

    def get(self, key: str) -> float | None:
        """Return the cached rate, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            self._entries.pop(key, None)
            return None
        return entry.rate

    def set(self, key: str, rate: float) -> None:
        self._entries[key] = FxRateCacheEntry(rate=rate, expires_at=self.clock() + self.ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
