"""Phased, partially fault-tolerant fetch of everything known about a ticker.

Fetches run as asyncio tasks in three dependency phases. Within a phase all
fetches run concurrently and each writes one field of the aggregate, so the
barrier can assign results without locking.

Company and quote are required: their failure cancels the rest of the phase
and aborts the request. Everything else is optional: a failure is logged,
recorded in ``StockAggregate.degraded`` and replaced by the field's default.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ..analytics.scores import FinancialPeriod
from ..domain.errors import RequiredFetchError, TickerNotFoundError
from ..domain.models import (
    AnalystEstimates,
    AssetType,
    Company,
    DCFEstimate,
    EarningsQuality,
    ETFData,
    FinancialHealth,
    Financials,
    Growth,
    Holdings,
    InsiderActivity,
    InsiderTrade,
    Performance,
    Profitability,
    Quote,
    SearchResult,
    ShortInterest,
    TechnicalMetrics,
    Valuation,
)
from ..providers.base import Repository

logger = logging.getLogger(__name__)

FINANCIAL_PERIODS = 2
INSIDER_TRADES_LIMIT = 10
DEFAULT_FETCH_TIMEOUT = 20.0


@dataclass
class StockAggregate:
    """Transient per-request record filled in by the fetch phases."""
    ticker: str
    asset_type: AssetType = AssetType.STOCK
    company: Optional[Company] = None
    quote: Optional[Quote] = None
    holdings: Optional[Holdings] = None
    financial_data: List[FinancialPeriod] = field(default_factory=list)
    insider_trades: List[InsiderTrade] = field(default_factory=list)
    insider_activity: Optional[InsiderActivity] = None
    dcf: Optional[DCFEstimate] = None
    technical_metrics: Optional[TechnicalMetrics] = None
    short_interest: Optional[ShortInterest] = None
    analyst_estimates: Optional[AnalystEstimates] = None
    valuation: Optional[Valuation] = None
    performance: Performance = field(default_factory=Performance)
    financials: Optional[Financials] = None
    profitability: Optional[Profitability] = None
    financial_health: Optional[FinancialHealth] = None
    growth: Optional[Growth] = None
    earnings_quality: Optional[EarningsQuality] = None
    etf_data: Optional[ETFData] = None
    degraded: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FetchJob:
    """One fetch in a phase: which field it fills and how."""
    field: str
    call: Callable[[], Awaitable[Any]]
    required: bool = False
    default: Callable[[], Any] = lambda: None


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one fetch. ``error`` is set when the default was substituted."""
    field: str
    value: Any = None
    error: Optional[BaseException] = None


class StockFetcher:
    """Fetch orchestrator over a Repository."""

    def __init__(self, repository: Repository, fetch_timeout: float = DEFAULT_FETCH_TIMEOUT):
        self.repository = repository
        self.fetch_timeout = fetch_timeout

    async def fetch(self, ticker: str) -> StockAggregate:
        """
        Fetch all data for a ticker.

        Raises:
            TickerNotFoundError: the provider has no company for the ticker
            RequiredFetchError: company or quote could not be fetched
        """
        started = time.monotonic()
        aggregate = StockAggregate(ticker=ticker)

        if await self._check_etf(ticker):
            aggregate.asset_type = AssetType.ETF
            await self._fetch_etf(aggregate)
        else:
            await self._fetch_stock(aggregate)

        logger.info(
            "Fetched %s (%s) in %.2fs, degraded=%s",
            ticker,
            aggregate.asset_type.value,
            time.monotonic() - started,
            aggregate.degraded or "none",
        )
        return aggregate

    async def search(self, query: str, limit: int = 10) -> List[SearchResult]:
        try:
            return await asyncio.wait_for(self.repository.search(query, limit), timeout=self.fetch_timeout)
        except Exception as exc:
            raise RequiredFetchError(query, "search", exc) from exc

    async def _check_etf(self, ticker: str) -> bool:
        try:
            return bool(await asyncio.wait_for(self.repository.is_etf(ticker), timeout=self.fetch_timeout))
        except Exception as exc:
            logger.warning("ETF check failed for %s, assuming stock: %s", ticker, exc)
            return False

    async def _fetch_stock(self, agg: StockAggregate) -> None:
        repo = self.repository
        ticker = agg.ticker

        await self._run_phase(agg, [
            FetchJob("company", lambda: repo.get_company(ticker), required=True),
            FetchJob("quote", lambda: repo.get_quote(ticker), required=True),
            FetchJob("holdings", lambda: repo.get_holdings(ticker)),
            FetchJob("financial_data", lambda: repo.get_financial_data(ticker, FINANCIAL_PERIODS), default=list),
            FetchJob("insider_trades", lambda: repo.get_insider_trades(ticker, INSIDER_TRADES_LIMIT), default=list),
            FetchJob("insider_activity", lambda: repo.get_insider_activity(ticker)),
            FetchJob("dcf", lambda: repo.get_dcf(ticker)),
            FetchJob("technical_metrics", lambda: repo.get_technical_metrics(ticker)),
            FetchJob("short_interest", lambda: repo.get_short_interest(ticker)),
            FetchJob("analyst_estimates", lambda: repo.get_analyst_estimates(ticker)),
        ])

        sector = agg.company.sector
        price = agg.quote.price
        year_high = agg.quote.fifty_two_week_high

        await self._run_phase(agg, [
            FetchJob("valuation", lambda: repo.get_valuation(ticker, sector)),
            FetchJob("performance", lambda: repo.get_performance(ticker, price, year_high), default=Performance),
            FetchJob("financials", lambda: repo.get_financials(ticker)),
        ])

        financials = agg.financials
        financial_data = agg.financial_data

        await self._run_phase(agg, [
            FetchJob("profitability", lambda: repo.get_profitability(sector, financials)),
            FetchJob("financial_health", lambda: repo.get_financial_health(sector, financials, financial_data)),
            FetchJob("growth", lambda: repo.get_growth(sector, financial_data)),
            FetchJob("earnings_quality", lambda: repo.get_earnings_quality(ticker, sector)),
        ])

    async def _fetch_etf(self, agg: StockAggregate) -> None:
        repo = self.repository
        ticker = agg.ticker

        await self._run_phase(agg, [
            FetchJob("company", lambda: repo.get_company(ticker), required=True),
            FetchJob("quote", lambda: repo.get_quote(ticker), required=True),
            FetchJob("etf_data", lambda: repo.get_etf_data(ticker)),
        ])

        price = agg.quote.price
        year_high = agg.quote.fifty_two_week_high

        await self._run_phase(agg, [
            FetchJob("performance", lambda: repo.get_performance(ticker, price, year_high), default=Performance),
        ])

    async def _run_phase(self, agg: StockAggregate, jobs: Sequence[FetchJob]) -> None:
        """Run one phase to its barrier and assign outcomes to the aggregate."""
        tasks = [
            asyncio.create_task(self._run_one(agg.ticker, job), name=f"fetch:{agg.ticker}:{job.field}")
            for job in jobs
        ]
        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        errors = [task.exception() for task in tasks if not task.cancelled() and task.exception() is not None]
        if errors:
            raise errors[0]

        for task in tasks:
            outcome: FetchOutcome = task.result()
            setattr(agg, outcome.field, outcome.value)
            if outcome.error is not None:
                agg.degraded.append(outcome.field)

    async def _run_one(self, ticker: str, job: FetchJob) -> FetchOutcome:
        try:
            value = await asyncio.wait_for(job.call(), timeout=self.fetch_timeout)
        except TickerNotFoundError:
            if job.required:
                raise
            logger.warning("Optional fetch %s for %s reported ticker not found", job.field, ticker)
            return FetchOutcome(job.field, job.default(), TickerNotFoundError(ticker))
        except Exception as exc:
            if job.required:
                raise RequiredFetchError(ticker, job.field, exc) from exc
            logger.warning("Optional fetch %s failed for %s: %s", job.field, ticker, str(exc) or type(exc).__name__)
            return FetchOutcome(job.field, job.default(), exc)

        if value is None:
            if job.field == "company":
                raise TickerNotFoundError(ticker)
            if job.required:
                raise RequiredFetchError(ticker, job.field)
            value = job.default()

        logger.debug("Fetched %s for %s", job.field, ticker)
        return FetchOutcome(job.field, value)
