"""Persistent storage backends."""

from .stock_cache import SQLiteStockCache

__all__ = ["SQLiteStockCache"]
