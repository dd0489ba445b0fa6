"""SQLite-backed cache store for assembled stock detail responses."""

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from ..cache import CacheEntry, CacheInterface, CacheMiss

logger = logging.getLogger(__name__)


class SQLiteStockCache(CacheInterface):
    """
    Persistent cache store, one row per ticker.

    Rows are written with INSERT OR REPLACE so a reader never sees a
    partially updated entry. Rows are never expired here; staleness is
    judged from updated_at when read.
    """

    def __init__(self, db_path: str = "stock_cache.db"):
        self.db_path = db_path
        # A shared connection keeps ":memory:" databases alive between calls
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._init_db()

    def _init_db(self) -> None:
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS stock_cache (
                    ticker TEXT PRIMARY KEY,
                    payload_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    provider TEXT NOT NULL DEFAULT '',
                    ttl_seconds INTEGER
                )
            """)

    def get(self, key: str) -> CacheEntry:
        row = self._conn.execute(
            "SELECT ticker, payload_json, updated_at, provider FROM stock_cache WHERE ticker = ?",
            (key,),
        ).fetchone()
        if row is None:
            raise CacheMiss(key)

        ticker, payload_json, updated_at, provider = row
        logger.debug("SQLite cache hit: %s", key)
        return CacheEntry(
            ticker=ticker,
            payload=payload_json,
            updated_at=datetime.fromisoformat(updated_at),
            provider=provider,
        )

    def set(self, entry: CacheEntry, ttl_seconds: Optional[int] = None) -> None:
        with self._conn:
            self._conn.execute(
                """
                INSERT OR REPLACE INTO stock_cache (ticker, payload_json, updated_at, provider, ttl_seconds)
                VALUES (?, ?, ?, ?, ?)
                """,
                (entry.ticker, entry.payload, entry.updated_at.isoformat(), entry.provider, ttl_seconds),
            )
        logger.debug("SQLite cache set: %s", entry.ticker)

    def delete(self, key: str) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM stock_cache WHERE ticker = ?", (key,))

    def clear(self) -> None:
        with self._conn:
            cursor = self._conn.execute("DELETE FROM stock_cache")
        logger.info("SQLite cache cleared: %d rows removed", cursor.rowcount)

    def close(self) -> None:
        self._conn.close()
