"""Resolved DID document cache.

Keyed by DID. Only successful resolutions are cached so a flaky resolver
is retried on the next request.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .models import DidDocument


@dataclass
class CacheConfig:
    """Configuration for the DID document cache.

    Attributes:
        ttl_seconds: Time-to-live for cache entries.
        max_entries: Maximum entries before LRU eviction.
    """
    ttl_seconds: int = 300
    max_entries: int = 1000


@dataclass
class _CacheEntry:
    document: DidDocument
    expires_at: datetime


class DidDocumentCache:
    """Async-safe TTL + LRU cache for resolved DID documents."""

    def __init__(self, config: Optional[CacheConfig] = None):
        self._config = config or CacheConfig()
        self._entries: Dict[str, _CacheEntry] = {}
        # Access order for LRU (most recent at end)
        self._access_order: List[str] = []
        self._lock = asyncio.Lock()
        self._hits: int = 0
        self._misses: int = 0

    async def get(self, did: str) -> Optional[DidDocument]:
        """Return the cached document for ``did``, or None if absent/expired."""
        async with self._lock:
            entry = self._entries.get(did)
            if entry is None:
                self._misses += 1
                return None

            if entry.expires_at < datetime.now(timezone.utc):
                self._remove_entry(did)
                self._misses += 1
                return None

            self._touch_access_order(did)
            self._hits += 1
            return entry.document

    async def put(self, did: str, document: DidDocument) -> None:
        async with self._lock:
            if len(self._entries) >= self._config.max_entries and did not in self._entries:
                self._evict_lru()

            self._entries[did] = _CacheEntry(
                document=document,
                expires_at=datetime.now(timezone.utc) + timedelta(seconds=self._config.ttl_seconds),
            )
            self._touch_access_order(did)

    async def invalidate(self, did: str) -> None:
        async with self._lock:
            self._remove_entry(did)

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            self._entries.clear()
            self._access_order.clear()

    def _remove_entry(self, did: str) -> None:
        """Remove entry (caller must hold lock)."""
        self._entries.pop(did, None)
        if did in self._access_order:
            self._access_order.remove(did)

    def _touch_access_order(self, did: str) -> None:
        """Move key to end of access order (caller must hold lock)."""
        if did in self._access_order:
            self._access_order.remove(did)
        self._access_order.append(did)

    def _evict_lru(self) -> None:
        """Evict least recently used entry (caller must hold lock)."""
        if self._access_order:
            self._remove_entry(self._access_order[0])

    @property
    def size(self) -> int:
        """Current number of cached entries."""
        return len(self._entries)

    def metrics(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        hit_rate = self._hits / total if total > 0 else 0.0
        return {
            "hits": self._hits,
            "misses": self._misses,
            "size": len(self._entries),
            "hit_rate": round(hit_rate, 4),
        }
