"""Data-access boundary consumed by the fetch orchestrator.

Every method may raise. Returning None means the provider has no data for
the request; raising TickerNotFoundError means the ticker does not exist.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..analytics.scores import FinancialPeriod
from ..domain.models import (
    AnalystEstimates,
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


class Repository(ABC):
    """Base class for stock data providers."""

    name: str = "base"

    @abstractmethod
    async def get_company(self, ticker: str) -> Optional[Company]:
        pass

    @abstractmethod
    async def get_quote(self, ticker: str) -> Optional[Quote]:
        pass

    @abstractmethod
    async def get_financial_data(self, ticker: str, periods: int) -> List[FinancialPeriod]:
        """Annual statement periods, most recent first."""
        pass

    @abstractmethod
    async def get_financials(self, ticker: str) -> Optional[Financials]:
        pass

    @abstractmethod
    async def get_valuation(self, ticker: str, sector: str) -> Optional[Valuation]:
        pass

    @abstractmethod
    async def get_profitability(self, sector: str, financials: Optional[Financials]) -> Optional[Profitability]:
        pass

    @abstractmethod
    async def get_financial_health(
        self,
        sector: str,
        financials: Optional[Financials],
        financial_data: List[FinancialPeriod],
    ) -> Optional[FinancialHealth]:
        pass

    @abstractmethod
    async def get_growth(self, sector: str, financial_data: List[FinancialPeriod]) -> Optional[Growth]:
        pass

    @abstractmethod
    async def get_earnings_quality(self, ticker: str, sector: str) -> Optional[EarningsQuality]:
        pass

    @abstractmethod
    async def get_holdings(self, ticker: str) -> Optional[Holdings]:
        pass

    @abstractmethod
    async def get_insider_trades(self, ticker: str, limit: int) -> List[InsiderTrade]:
        pass

    @abstractmethod
    async def get_insider_activity(self, ticker: str) -> Optional[InsiderActivity]:
        pass

    @abstractmethod
    async def get_performance(self, ticker: str, current_price: float, year_high: float) -> Optional[Performance]:
        pass

    @abstractmethod
    async def get_dcf(self, ticker: str) -> Optional[DCFEstimate]:
        pass

    @abstractmethod
    async def get_technical_metrics(self, ticker: str) -> Optional[TechnicalMetrics]:
        pass

    @abstractmethod
    async def get_short_interest(self, ticker: str) -> Optional[ShortInterest]:
        pass

    @abstractmethod
    async def get_analyst_estimates(self, ticker: str) -> Optional[AnalystEstimates]:
        pass

    @abstractmethod
    async def search(self, query: str, limit: int) -> List[SearchResult]:
        pass

    @abstractmethod
    async def is_etf(self, ticker: str) -> bool:
        pass

    @abstractmethod
    async def get_etf_data(self, ticker: str) -> Optional[ETFData]:
        pass
