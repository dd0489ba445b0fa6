"""Stock detail service: cache, fetch, score, signal, assemble."""

import logging
import time
from typing import List, Optional

from ..analytics.scores import calculate_scores
from ..domain.models import AssetType, SearchResult, StockDetailResponse
from ..signals.generator import SignalGenerator
from .assembler import build_etf_response, build_stock_data, build_stock_response
from .fetcher import StockFetcher
from .response_cache import ResponseCache

logger = logging.getLogger(__name__)


def normalize_ticker(ticker: str) -> str:
    return ticker.strip().upper()


class StockService:
    """Serves stock detail responses, from cache when fresh."""

    def __init__(
        self,
        fetcher: StockFetcher,
        cache: Optional[ResponseCache] = None,
        generator: Optional[SignalGenerator] = None,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.generator = generator or SignalGenerator()

    async def get_stock_detail(self, ticker: str) -> StockDetailResponse:
        """
        Return the stock detail response for a ticker.

        Raises:
            TickerNotFoundError: unknown ticker
            RequiredFetchError: company or quote could not be fetched
        """
        ticker = normalize_ticker(ticker)
        if not ticker:
            raise ValueError("ticker must not be empty")

        if self.cache is not None:
            cached = self.cache.get(ticker)
            if cached is not None:
                return cached

        started = time.monotonic()
        aggregate = await self.fetcher.fetch(ticker)

        if aggregate.asset_type == AssetType.ETF:
            response = build_etf_response(aggregate)
        else:
            scores = None
            if aggregate.financial_data:
                scores = calculate_scores(aggregate.financial_data)
            else:
                logger.warning("No financial statements for %s, skipping scores", ticker)
            signals = self.generator.generate_all(
                build_stock_data(aggregate),
                scores.piotroski if scores is not None else None,
                scores.altman_z if scores is not None else None,
            )
            response = build_stock_response(aggregate, scores, signals)

        if self.cache is not None:
            self.cache.put(ticker, response)

        logger.info(
            "Built %s detail for %s in %.2fs (%d signals)",
            response.asset_type.value,
            ticker,
            time.monotonic() - started,
            len(response.signals),
        )
        return response

    async def search(self, query: str, limit: int = 10) -> List[SearchResult]:
        query = query.strip()
        if not query:
            return []
        return await self.fetcher.search(query, limit)
