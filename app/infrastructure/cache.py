"""In-process TTL cache for frequently requested query results."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class CacheService:
    """Store values in memory for ``ttl`` seconds.

    Expired entries are evicted lazily whenever they are looked up or when
    the key listing is computed. The lock only guards the dictionary; the
    factory passed to :meth:`get_or_set` runs outside of it, so its result is
    only stored when no invalidation happened while it was running.
    """

    def __init__(self, default_ttl: int = 300, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()
        self._generation = 0
        self._hits = 0
        self._misses = 0
        logger.info("Cache service initialized (default_ttl=%ss)", default_ttl)

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        if value is _MISSING:
            logger.debug("Cache miss: %s", key)
            return default
        logger.debug("Cache hit: %s", key)
        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        seconds = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + seconds)
        logger.debug("Cache set: %s (ttl=%s)", key, seconds)

    def delete(self, key: str) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            self._generation += 1
        logger.debug("Cache delete: %s", key)
        return removed

    def has(self, key: str) -> bool:
        return self._lookup(key, count=False) is not _MISSING

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generation += 1
        logger.info("Cache flushed")

    def keys(self) -> list[str]:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
            return list(self._entries)

    def get_or_set(self, key: str, factory: Callable[[], T], ttl: int | None = None) -> T:
        """Return the cached value for ``key`` or compute and store it."""

        with self._lock:
            generation = self._generation
        value = self._lookup(key)
        if value is not _MISSING:
            return value
        value = factory()

        seconds = self.default_ttl if ttl is None else ttl
        with self._lock:
            stale = generation != self._generation
            if not stale:
                self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + seconds)
        if stale:
            logger.debug("Cache invalidated while computing %s; not storing", key)
        else:
            logger.debug("Cache set: %s (ttl=%s)", key, seconds)
        return value

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Drop every key starting with ``prefix`` and return how many were removed."""

        with self._lock:
            matching = [key for key in self._entries if key.startswith(prefix)]
            for key in matching:
                del self._entries[key]
            self._generation += 1
        if matching:
            logger.info("Invalidated %s cache entries with prefix %s", len(matching), prefix)
        return len(matching)

    def stats(self) -> dict[str, int]:
        return {"hits": self._hits, "misses": self._misses, "keys": len(self.keys())}

    def _lookup(self, key: str, *, count: bool = True) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at <= self._clock():
                del self._entries[key]
                logger.debug("Cache expired: %s", key)
                entry = None
            if count:
                if entry is None:
                    self._misses += 1
                else:
                    self._hits += 1
            return _MISSING if entry is None else entry.value


__all__ = ["CacheService"]
