"""Shared fixtures: an in-process Repository with scriptable failures and delays."""

import asyncio
from datetime import datetime, timezone

import pytest

from stockrecon.analytics.scores import FinancialPeriod
from stockrecon.domain.models import (
    Company,
    DCFEstimate,
    ETFData,
    Financials,
    Holdings,
    InsiderActivity,
    InsiderTrade,
    InstitutionalHolder,
    Performance,
    Quote,
    SearchResult,
    TechnicalMetrics,
)
from stockrecon.providers.base import Repository


def make_period(**overrides) -> FinancialPeriod:
    values = dict(
        revenue=1000.0,
        gross_profit=400.0,
        operating_income=200.0,
        net_income=150.0,
        ebit=200.0,
        eps=1.5,
        total_assets=2000.0,
        total_liabilities=800.0,
        current_assets=600.0,
        current_liabilities=300.0,
        long_term_debt=400.0,
        shareholders_equity=1200.0,
        retained_earnings=700.0,
        shares_outstanding=100,
        operating_cash_flow=220.0,
        free_cash_flow=180.0,
        market_cap=5000.0,
        stock_price=50.0,
        fiscal_year=2024,
    )
    values.update(overrides)
    return FinancialPeriod(**values)


class FakeRepository(Repository):
    """
    Repository returning canned data.

    ``failures`` maps a method name to an exception to raise, ``delays`` maps
    a method name to seconds to sleep first, ``overrides`` maps a method name
    to the value to return instead of the canned one.
    """

    name = "fake"

    def __init__(self, etf: bool = False):
        self.etf = etf
        self.failures = {}
        self.delays = {}
        self.overrides = {}
        self.calls = []
        self.cancelled = []

    async def _respond(self, method: str, value):
        self.calls.append(method)
        try:
            if method in self.delays:
                await asyncio.sleep(self.delays[method])
        except asyncio.CancelledError:
            self.cancelled.append(method)
            raise
        if method in self.failures:
            raise self.failures[method]
        if method in self.overrides:
            return self.overrides[method]
        return value

    async def get_company(self, ticker):
        return await self._respond("get_company", Company(
            ticker=ticker, name="Acme Corp", exchange="NASDAQ", sector="Technology", industry="Software",
        ))

    async def get_quote(self, ticker):
        return await self._respond("get_quote", Quote(
            price=50.0,
            change=1.0,
            change_percent=2.0,
            volume=1_000_000,
            market_cap=5_000_000_000,
            fifty_two_week_high=60.0,
            fifty_two_week_low=40.0,
            as_of=datetime(2025, 1, 2, 21, 0, tzinfo=timezone.utc),
        ))

    async def get_financial_data(self, ticker, periods):
        return await self._respond("get_financial_data", [
            make_period(),
            make_period(revenue=900.0, net_income=100.0, fiscal_year=2023),
        ][:periods])

    async def get_financials(self, ticker):
        return await self._respond("get_financials", Financials(
            revenue_growth_yoy=11.1, operating_margin=20.0, debt_to_equity=0.5, roic=15.0,
        ))

    async def get_valuation(self, ticker, sector):
        return await self._respond("get_valuation", None)

    async def get_profitability(self, sector, financials):
        return await self._respond("get_profitability", None)

    async def get_financial_health(self, sector, financials, financial_data):
        return await self._respond("get_financial_health", None)

    async def get_growth(self, sector, financial_data):
        return await self._respond("get_growth", None)

    async def get_earnings_quality(self, ticker, sector):
        return await self._respond("get_earnings_quality", None)

    async def get_holdings(self, ticker):
        return await self._respond("get_holdings", Holdings(
            top_institutional=[InstitutionalHolder(fund_name="Big Fund", shares=1000, quarter_date="2024-Q4")],
            total_institutional_ownership=0.6,
        ))

    async def get_insider_trades(self, ticker, limit):
        return await self._respond("get_insider_trades", [
            InsiderTrade(insider_name="Jane Doe", trade_type="buy", shares=100, price=50.0, value=5000),
        ])

    async def get_insider_activity(self, ticker):
        return await self._respond("get_insider_activity", InsiderActivity(buy_count_90d=1, net_value_90d=5000))

    async def get_performance(self, ticker, current_price, year_high):
        return await self._respond("get_performance", Performance(day1_change=2.0))

    async def get_dcf(self, ticker):
        return await self._respond("get_dcf", DCFEstimate(dcf=60.0, stock_price=50.0, date="2025-01-02"))

    async def get_technical_metrics(self, ticker):
        return await self._respond("get_technical_metrics", TechnicalMetrics(beta=1.1, ma_50_day=48.0))

    async def get_short_interest(self, ticker):
        return await self._respond("get_short_interest", None)

    async def get_analyst_estimates(self, ticker):
        return await self._respond("get_analyst_estimates", None)

    async def search(self, query, limit):
        return await self._respond("search", [SearchResult(ticker="ACME", name="Acme Corp")])

    async def is_etf(self, ticker):
        return await self._respond("is_etf", self.etf)

    async def get_etf_data(self, ticker):
        return await self._respond("get_etf_data", ETFData(expense_ratio=0.03, holdings_count=500))


@pytest.fixture
def repository():
    return FakeRepository()
