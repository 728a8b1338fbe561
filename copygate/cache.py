"""
Verification Cache

In-memory TTL cache for fact-check lookups.
Key = SHA-256 of the normalized query parameters.

Prevents repeated HTTP calls for identical claims within the TTL.
Safe for concurrent coroutines via an asyncio lock.

Usage:
    cache = VerificationCache(ttl_seconds=300, max_entries=200)
    cached = await cache.get(params)
    if cached is None:
        value = await fetch(...)
        await cache.put(params, value)
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import time
from typing import Optional


class VerificationCache:
    """In-memory cache with TTL and oldest-first eviction."""

    def __init__(self, ttl_seconds: int = 300, max_entries: int = 200):
        self._cache: dict[str, tuple[float, dict]] = {}
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _make_key(params: dict) -> str:
        raw = json.dumps(params, sort_keys=True, default=str)
        return hashlib.sha256(raw.encode()).hexdigest()

    async def get(self, params: dict) -> Optional[dict]:
        """Return cached value if present and not expired."""
        key = self._make_key(params)
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            ts, value = entry
            if time.monotonic() - ts > self._ttl:
                del self._cache[key]
                self._misses += 1
                return None

            self._hits += 1
            return value

    async def put(self, params: dict, value: dict) -> None:
        """Store a value. Evicts the oldest entry when full."""
        key = self._make_key(params)
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                oldest_key = min(self._cache, key=lambda k: self._cache[k][0])
                del self._cache[oldest_key]

            self._cache[key] = (time.monotonic(), value)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()

    @property
    def stats(self) -> dict:
        """Cache hit/miss statistics."""
        total = self._hits + self._misses
        return {
            "entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }
