# nba_tracker/cache.py
"""
Simple in-memory TTL cache for raw response bodies.

Entries are keyed by request URL and carry their own TTL (the equivalent of a
Cache-Control max-age stamped when the response was stored). This is a
per-process cache: restarting the process empties it.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class CacheEntry:
    """A single cached body, the timestamp when it was set, and how long it stays fresh."""
    ts: float
    ttl_seconds: float
    value: bytes

    def is_fresh(self, now: float) -> bool:
        return (now - self.ts) < self.ttl_seconds


class TTLCache:
    """A small URL -> bytes cache with per-entry TTL."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize an empty cache store."""
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[bytes]:
        """Return the cached body for key if present and not expired, else None."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(self._clock()):
                del self._store[key]
                return None
            return entry.value

    def set(self, key: str, value: bytes, ttl_seconds: float) -> None:
        """Store a body under key, fresh for ttl_seconds from now."""
        with self._lock:
            self._store[key] = CacheEntry(ts=self._clock(), ttl_seconds=ttl_seconds, value=value)

