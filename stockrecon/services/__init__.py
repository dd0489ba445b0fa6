"""Services layer - orchestration, caching and response assembly."""

from .fetcher import StockAggregate, StockFetcher
from .response_cache import ResponseCache
from .stock_service import StockService

__all__ = ["ResponseCache", "StockAggregate", "StockFetcher", "StockService"]
