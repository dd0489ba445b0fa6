"""Cache abstractions: the stock response store boundary and a TTL memo."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class CacheMiss(KeyError):
    """No entry is stored under the requested key."""


@dataclass(frozen=True)
class CacheEntry:
    """One serialized stock detail response and its provenance."""
    ticker: str
    payload: str
    updated_at: datetime
    provider: str = ""


class CacheInterface(ABC):
    """Abstract cache store. Freshness is decided by the reader, not the store."""

    @abstractmethod
    def get(self, key: str) -> CacheEntry:
        """Return the stored entry or raise CacheMiss."""
        pass

    @abstractmethod
    def set(self, entry: CacheEntry, ttl_seconds: Optional[int] = None) -> None:
        """Store an entry, replacing any previous entry for the same ticker."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an entry if present."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all cache."""
        pass


class InMemoryCache(CacheInterface):
    """Process-local cache store."""

    def __init__(self):
        self._cache: Dict[str, Tuple[CacheEntry, Optional[int]]] = {}

    def get(self, key: str) -> CacheEntry:
        if key not in self._cache:
            raise CacheMiss(key)
        entry, _ = self._cache[key]
        logger.debug("Cache hit: %s", key)
        return entry

    def set(self, entry: CacheEntry, ttl_seconds: Optional[int] = None) -> None:
        self._cache[entry.ticker] = (entry, ttl_seconds)
        logger.debug("Cache set: %s", entry.ticker)

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        count = len(self._cache)
        self._cache.clear()
        logger.info("Cache cleared: %d items removed", count)

    def stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        return {"size": len(self._cache)}


class TTLCache:
    """
    Short-lived in-memory memo for raw provider payloads.

    Expired entries are dropped when read, and every ``sweep_every`` writes
    the whole map is swept so keys that are never read again do not pile up.
    """

    def __init__(self, default_ttl: int = 300, sweep_every: int = 100):
        self._cache: Dict[str, Tuple[Any, float]] = {}
        self.default_ttl = default_ttl
        self.sweep_every = sweep_every
        self._writes = 0

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, key: str, ttl_seconds: Optional[int] = None) -> Optional[Any]:
        """Get cached value if it exists and is not expired."""
        if key not in self._cache:
            return None

        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        value, timestamp = self._cache[key]
        if time.time() - timestamp > ttl:
            del self._cache[key]
            logger.debug("Cache miss (expired): %s", key)
            return None

        logger.debug("Cache hit: %s", key)
        return value

    def set(self, key: str, value: Any) -> None:
        """Store value in cache with current timestamp."""
        self._cache[key] = (value, time.time())
        self._writes += 1
        if self._writes % self.sweep_every == 0:
            self.cleanup()

    def cleanup(self, ttl_seconds: Optional[int] = None) -> int:
        """Remove expired items, return count of removed items."""
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        now = time.time()
        expired_keys = [key for key, (_, timestamp) in self._cache.items() if now - timestamp > ttl]
        for key in expired_keys:
            del self._cache[key]
        if expired_keys:
            logger.info("Cache cleanup: %d items removed", len(expired_keys))
        return len(expired_keys)
