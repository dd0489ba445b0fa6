"""Read-through cache of assembled stock detail responses.

One TTL applies to the whole response. Staleness is decided from the entry's
age at read time; stale entries stay in the store until the next successful
fetch overwrites them.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import ValidationError

from ..cache import CacheEntry, CacheInterface, CacheMiss
from ..domain.models import StockDetailResponse

logger = logging.getLogger(__name__)

DEFAULT_STOCK_CACHE_TTL = 86400  # 24 hours


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResponseCache:
    """Whole stock detail responses keyed by ticker, fresh for one TTL.

    Store errors are logged and never raised; a failed read is a miss.
    """

    def __init__(
        self,
        store: CacheInterface,
        ttl_seconds: int = DEFAULT_STOCK_CACHE_TTL,
        provider: str = "",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.provider = provider
        self.clock = clock

    @staticmethod
    def key(ticker: str) -> str:
        return ticker.strip().upper()

    def get(self, ticker: str) -> Optional[StockDetailResponse]:
        """Return the cached response if it is still fresh, otherwise None."""
        key = self.key(ticker)
        try:
            entry = self.store.get(key)
        except CacheMiss:
            logger.info("Stock cache miss: %s", key)
            return None
        except Exception as exc:
            logger.warning("Stock cache read failed for %s: %s", key, exc)
            return None

        age = (self.clock() - entry.updated_at).total_seconds()
        if age >= self.ttl_seconds:
            logger.info("Stock cache stale: %s (age %.0fs)", key, age)
            return None

        try:
            response = StockDetailResponse.model_validate_json(entry.payload)
        except ValidationError as exc:
            logger.warning("Stock cache entry for %s is unreadable: %s", key, exc)
            return None

        logger.info("Stock cache hit: %s (age %.0fs)", key, age)
        return response

    def put(self, ticker: str, response: StockDetailResponse) -> None:
        """Replace the cached entry. Failures are logged, never raised."""
        key = self.key(ticker)
        try:
            entry = CacheEntry(
                ticker=key,
                payload=response.model_dump_json(),
                updated_at=self.clock(),
                provider=self.provider,
            )
            self.store.set(entry, ttl_seconds=self.ttl_seconds)
        except Exception as exc:
            logger.warning("Stock cache write failed for %s: %s", key, exc)
