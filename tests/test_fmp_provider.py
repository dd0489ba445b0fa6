"""Tests for the Financial Modeling Prep repository against a mocked HTTP client."""

import asyncio
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import httpx
import pytest

from stockrecon.domain.errors import ProviderError
from stockrecon.http_client import configure_http
from stockrecon.providers.fmp import FMPRepository, most_recent_filing_quarter

BASE_URL = "https://fmp.test/stable"

INCOME = [
    {
        "date": "2024-12-31", "fiscalYear": "2024", "revenue": 1000, "grossProfit": 400,
        "operatingIncome": 200, "netIncome": 150, "ebit": 210, "epsDiluted": 1.5,
        "weightedAverageShsOut": 100, "interestExpense": 20,
    },
    {
        "date": "2023-12-31", "fiscalYear": "2023", "revenue": 800, "grossProfit": 300,
        "operatingIncome": 120, "netIncome": 90, "ebit": 0, "epsDiluted": 0.9,
        "weightedAverageShsOut": 105, "interestExpense": 20,
    },
]
BALANCE = [
    {
        "date": "2024-12-31", "totalAssets": 2000, "totalLiabilities": 800, "totalCurrentAssets": 600,
        "totalCurrentLiabilities": 300, "longTermDebt": 400, "totalDebt": 500,
        "totalStockholdersEquity": 1000, "retainedEarnings": 700,
    },
    {
        "date": "2023-12-31", "totalAssets": 1800, "totalLiabilities": 850, "totalCurrentAssets": 500,
        "totalCurrentLiabilities": 300, "longTermDebt": 450, "totalDebt": 550,
        "totalStockholdersEquity": 950, "retainedEarnings": 600,
    },
]
CASH_FLOW = [
    {"date": "2024-12-31", "operatingCashFlow": 220, "freeCashFlow": 180_000_000, "commonStockRepurchased": -50},
    {"date": "2023-12-31", "operatingCashFlow": 150, "freeCashFlow": 100_000_000, "commonStockRepurchased": 0},
]
QUOTE = [{
    "symbol": "ACME", "price": 50.0, "change": 1.5, "changePercentage": 3.09, "volume": 1_200_000,
    "marketCap": 5000, "yearHigh": 60.0, "yearLow": 35.0, "priceAvg50": 48.0, "priceAvg200": 45.0,
    "timestamp": 1735851600,
}]
PROFILE = [{
    "symbol": "ACME", "companyName": "Acme Corp", "exchange": "NASDAQ", "sector": "Technology",
    "industry": "Software", "description": "Makes everything.", "beta": 1.2,
}]


def price_rows(count: int):
    days = [date.today() - timedelta(days=i) for i in range(count)]
    # Newest row first, as FMP returns them; close falls by 1 per day back
    return [{"symbol": "ACME", "date": day.isoformat(), "close": 200.0 - i} for i, day in enumerate(days)]


class FakeFMP:
    """Routes mocked GETs by endpoint. A route may be a payload, a status code or a callable(params)."""

    def __init__(self, routes):
        self.routes = routes
        self.client = AsyncMock()
        self.client.get.side_effect = self._get

    def _get(self, url, params=None, headers=None, timeout=None):
        endpoint = url[len(BASE_URL) + 1:]
        route = self.routes.get(endpoint, [])
        if callable(route):
            route = route(params)
        request = httpx.Request("GET", url)
        if isinstance(route, int):
            return httpx.Response(route, json={}, request=request)
        return httpx.Response(200, json=route, request=request)

    def endpoints(self):
        return [call.args[0][len(BASE_URL) + 1:] for call in self.client.get.call_args_list]


def make_repo(routes):
    fake = FakeFMP(routes)
    repo = FMPRepository(
        api_key="test-key",
        http_client=fake.client,
        base_url=BASE_URL,
        rpm=1000,
        rps=1000,
        retries=1,
    )
    return repo, fake


class TestFMPTransport:

    def setup_method(self):
        configure_http()

    def test_quote_and_memo(self):
        repo, fake = make_repo({"quote": QUOTE})

        async def run():
            return await repo.get_quote("ACME"), await repo.get_quote("ACME")

        quote, again = asyncio.run(run())

        assert quote.price == 50.0
        assert quote.change_percent == 3.09
        assert quote.market_cap == 5000
        assert quote.fifty_two_week_high == 60.0
        assert quote.as_of == datetime.fromtimestamp(1735851600, tz=timezone.utc)
        assert again == quote
        assert fake.client.get.call_count == 1
        params = fake.client.get.call_args.kwargs["params"]
        assert params == {"symbol": "ACME", "apikey": "test-key"}

    def test_concurrent_calls_share_one_request(self):
        repo, fake = make_repo({"quote": QUOTE, "profile": PROFILE})

        async def run():
            return await asyncio.gather(
                repo.get_quote("ACME"),
                repo.get_quote("ACME"),
                repo.get_company("ACME"),
                repo.get_company("ACME"),
            )

        first, second, company, _ = asyncio.run(run())

        assert first == second
        assert company.name == "Acme Corp"
        assert sorted(fake.endpoints()) == ["profile", "quote"]
        assert repo._inflight == {}

    def test_concurrent_failure_reaches_every_caller(self):
        repo, fake = make_repo({"profile": 503})

        async def run():
            return await asyncio.gather(
                repo.get_company("ACME"), repo.get_company("ACME"), return_exceptions=True,
            )

        results = asyncio.run(run())

        assert all(isinstance(result, ProviderError) for result in results)
        assert fake.client.get.call_count == 1

    def test_http_error_becomes_provider_error(self):
        repo, _ = make_repo({"profile": 404})

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(repo.get_company("ACME"))
        assert exc_info.value.status_code == 404

    def test_rate_limit_is_recorded(self):
        repo, _ = make_repo({"quote": 429})

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(repo.get_quote("ACME"))

        assert exc_info.value.status_code == 429
        assert repo.rate_limiter.error_429_count == 1

    def test_error_message_payload(self):
        repo, _ = make_repo({"profile": {"Error Message": "Invalid API KEY."}})

        with pytest.raises(ProviderError, match="Invalid API KEY"):
            asyncio.run(repo.get_company("ACME"))

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            FMPRepository(api_key="")


class TestFMPCompany:

    def setup_method(self):
        configure_http()

    def test_company(self):
        repo, _ = make_repo({"profile": PROFILE})
        company = asyncio.run(repo.get_company("acme"))

        assert company.ticker == "ACME"
        assert company.name == "Acme Corp"
        assert company.sector == "Technology"

    def test_unknown_ticker(self):
        repo, _ = make_repo({"profile": []})
        assert asyncio.run(repo.get_company("NOPE")) is None

    def test_search(self):
        repo, fake = make_repo({"search-symbol": [
            {"symbol": "ACME", "name": "Acme Corp", "exchange": "NASDAQ"},
            {"symbol": "", "name": "Broken row"},
        ]})
        results = asyncio.run(repo.search("acme", 5))

        assert [(r.ticker, r.exchange) for r in results] == [("ACME", "NASDAQ")]
        assert fake.client.get.call_args.kwargs["params"]["query"] == "acme"

    def test_short_interest_unavailable(self):
        repo, fake = make_repo({})
        assert asyncio.run(repo.get_short_interest("ACME")) is None
        assert fake.client.get.call_count == 0


class TestFMPFundamentals:

    def setup_method(self):
        configure_http()
        self.repo, self.fake = make_repo({
            "income-statement": INCOME,
            "balance-sheet-statement": BALANCE,
            "cash-flow-statement": CASH_FLOW,
            "quote": QUOTE,
            "profile": PROFILE,
            "ratios-ttm": [{
                "priceToEarningsRatioTTM": 30.0,
                "priceToEarningsGrowthRatioTTM": -1.0,
                "priceToFreeCashFlowRatioTTM": 25.0,
                "priceToBookRatioTTM": 8.0,
            }],
            "key-metrics-ttm": [{"evToEBITDATTM": 20.0}],
            "discounted-cash-flow": [{"symbol": "ACME", "date": "2025-01-02", "dcf": 62.5, "stockPrice": 50.0}],
        })

    def test_financial_data(self):
        periods = asyncio.run(self.repo.get_financial_data("ACME", 2))

        assert len(periods) == 2
        current, prior = periods
        assert current.revenue == 1000
        assert current.ebit == 210
        assert current.retained_earnings == 700
        assert current.shares_outstanding == 100
        assert current.free_cash_flow == 180_000_000
        assert current.market_cap == 5000
        assert current.stock_price == 50.0
        assert current.fiscal_year == 2024
        # EBIT falls back to operating income; market data only on the latest period
        assert prior.ebit == 120
        assert prior.market_cap == 0.0
        assert prior.fiscal_year == 2023

    def test_financials(self):
        fin = asyncio.run(self.repo.get_financials("ACME"))

        assert fin.revenue_growth_yoy == pytest.approx(25.0)
        assert fin.gross_margin == pytest.approx(40.0)
        assert fin.operating_margin == pytest.approx(20.0)
        assert fin.net_margin == pytest.approx(15.0)
        assert fin.roe == pytest.approx(15.0)
        assert fin.debt_to_equity == pytest.approx(0.5)
        assert fin.current_ratio == pytest.approx(2.0)
        assert fin.roic == pytest.approx(10.0)
        assert fin.asset_turnover == pytest.approx(0.5)
        assert fin.interest_coverage == pytest.approx(10.0)
        assert fin.fcf_margin == pytest.approx(18_000_000.0)

    def test_financials_without_statements(self):
        repo, _ = make_repo({})
        assert asyncio.run(repo.get_financials("ACME")) is None

    def test_valuation(self):
        valuation = asyncio.run(self.repo.get_valuation("ACME", "Technology"))

        assert valuation.pe.value == 30.0
        assert valuation.pe.sector_median == 28
        assert valuation.pe.percentile == 60
        assert valuation.ev_to_ebitda.value == 20.0
        # Negative multiples are not meaningful
        assert valuation.peg.value is None
        assert valuation.peg.sector_median == 1.8

    def test_sector_blocks(self):
        async def run():
            financial_data = await self.repo.get_financial_data("ACME", 2)
            financials = await self.repo.get_financials("ACME")
            return (
                await self.repo.get_profitability("Technology", financials),
                await self.repo.get_financial_health("Technology", financials, financial_data),
                await self.repo.get_growth("Technology", financial_data),
            )

        profitability, health, growth = asyncio.run(run())

        assert profitability.roic.value == pytest.approx(10.0)
        assert profitability.gross_margin.value == pytest.approx(40.0)
        assert health.debt_to_equity.sector_max == 1.5
        assert health.asset_turnover.value == pytest.approx(0.5)
        assert growth.revenue_growth_yoy.value == pytest.approx(25.0)
        assert growth.eps_growth_yoy.value == pytest.approx(66.667, rel=1e-4)
        assert growth.free_cash_flow_ttm.value == pytest.approx(180.0)

    def test_sector_blocks_without_inputs(self):
        async def run():
            return (
                await self.repo.get_profitability("Technology", None),
                await self.repo.get_financial_health("Technology", None, []),
                await self.repo.get_growth("Technology", []),
            )

        assert asyncio.run(run()) == (None, None, None)

    def test_earnings_quality(self):
        quality = asyncio.run(self.repo.get_earnings_quality("ACME", "Technology"))

        assert quality.accrual_ratio.value == pytest.approx(-70 / 1900 * 100)
        assert quality.buyback_yield.value == pytest.approx(1.0)

    def test_dcf(self):
        dcf = asyncio.run(self.repo.get_dcf("ACME"))

        assert dcf.dcf == 62.5
        assert dcf.stock_price == 50.0
        assert dcf.date == "2025-01-02"

    def test_technical_metrics_from_quote(self):
        metrics = asyncio.run(self.repo.get_technical_metrics("ACME"))

        assert metrics.beta == 1.2
        assert metrics.ma_50_day == 48.0
        assert metrics.ma_200_day == 45.0
        assert "historical-price-eod/full" not in self.fake.endpoints()

    def test_technical_metrics_from_history(self):
        repo, _ = make_repo({
            "quote": [{"symbol": "ACME", "price": 50.0}],
            "profile": PROFILE,
            "historical-price-eod/full": price_rows(60),
        })
        metrics = asyncio.run(repo.get_technical_metrics("ACME"))

        # Newest 50 closes are 200 down to 151
        assert metrics.ma_50_day == pytest.approx(175.5)
        assert metrics.ma_200_day == 0.0


class TestFMPEstimates:

    def setup_method(self):
        configure_http()
        this_year = date.today().year
        self.routes = {
            "grades-consensus": [
                {"symbol": "ACME", "strongBuy": 10, "buy": 20, "hold": 8, "sell": 2, "strongSell": 0, "consensus": "Buy"},
            ],
            "price-target-consensus": [
                {"symbol": "ACME", "targetHigh": 80, "targetLow": 40, "targetConsensus": 62, "targetMedian": 60},
            ],
            "analyst-estimates": [
                {"date": f"{this_year + 1}-12-31", "epsAvg": 2.5, "revenueAvg": 1100},
                {"date": f"{this_year}-12-31", "epsAvg": 2.0, "revenueAvg": 1000},
                {"date": f"{this_year - 1}-12-31", "epsAvg": 1.5, "revenueAvg": 900},
            ],
        }

    def test_analyst_estimates(self):
        repo, _ = make_repo(self.routes)
        estimates = asyncio.run(repo.get_analyst_estimates("ACME"))

        assert estimates.rating == "Buy"
        assert estimates.analyst_count == 40
        assert estimates.rating_score == pytest.approx(3.95)
        assert estimates.price_target_average == 62
        assert estimates.eps_estimate_current_year == 2.0
        assert estimates.eps_estimate_next_year == 2.5
        assert estimates.eps_growth_next_year == pytest.approx(25.0)
        assert estimates.revenue_growth_next_year == pytest.approx(10.0)

    def test_estimates_endpoint_unavailable(self):
        routes = dict(self.routes, **{"analyst-estimates": 402})
        repo, _ = make_repo(routes)
        estimates = asyncio.run(repo.get_analyst_estimates("ACME"))

        assert estimates.analyst_count == 40
        assert estimates.eps_estimate_current_year == 0.0

    def test_no_coverage(self):
        repo, _ = make_repo({})
        assert asyncio.run(repo.get_analyst_estimates("ACME")) is None


class TestFMPOwnership:

    def setup_method(self):
        configure_http()

    def test_insider_trades_and_activity(self):
        recent = (date.today() - timedelta(days=10)).isoformat()
        old = (date.today() - timedelta(days=200)).isoformat()
        repo, _ = make_repo({"insider-trading/search": [
            {"reportingName": "Jane Doe", "typeOfOwner": "director", "acquisitionOrDisposition": "A",
             "securitiesTransacted": 1000, "price": 50.0, "transactionDate": recent},
            {"reportingName": "John Roe", "typeOfOwner": "officer: CFO", "acquisitionOrDisposition": "D",
             "securitiesTransacted": 4000, "price": 55.0, "transactionDate": recent},
            {"reportingName": "New Director", "acquisitionOrDisposition": "A",
             "securitiesTransacted": 0, "price": 0, "transactionDate": recent},
            {"reportingName": "Old Sale", "acquisitionOrDisposition": "D",
             "securitiesTransacted": 10000, "price": 40.0, "transactionDate": old},
        ]})

        async def run():
            return await repo.get_insider_trades("ACME", 10), await repo.get_insider_activity("ACME")

        trades, activity = asyncio.run(run())

        assert [t.insider_name for t in trades] == ["Jane Doe", "John Roe", "Old Sale"]
        assert trades[0].trade_type == "buy"
        assert trades[0].value == 50_000
        assert trades[1].trade_type == "sell"
        assert activity.buy_count_90d == 1
        assert activity.sell_count_90d == 1
        assert activity.net_value_90d == -170_000

    def test_holdings_fall_back_to_previous_quarter(self):
        year, quarter = most_recent_filing_quarter()
        holders = [
            {"investorName": f"Fund {i}", "cik": f"000{i}", "sharesNumber": 1000 * i, "marketValue": 50_000 * i,
             "weight": 0.5, "changeInSharesNumber": 100, "changeInSharesNumberPercentage": 10.0, "ownership": 2.0}
            for i in range(1, 7)
        ]

        def route(params):
            if params["year"] == year and params["quarter"] == quarter:
                return []
            return holders

        repo, fake = make_repo({"institutional-ownership/extract-analytics/holder": route})
        holdings = asyncio.run(repo.get_holdings("ACME"))

        assert len(holdings.top_institutional) == 5
        assert holdings.top_institutional[0].fund_name == "Fund 1"
        assert holdings.top_institutional[0].shares == 1000
        assert holdings.total_institutional_ownership == pytest.approx(0.12)
        assert holdings.net_change_shares == 500
        assert fake.client.get.call_count == 2

    def test_no_holdings(self):
        repo, _ = make_repo({})
        assert asyncio.run(repo.get_holdings("ACME")) is None

    @pytest.mark.parametrize("today, expected", [
        (date(2025, 3, 1), (2024, 4)),
        (date(2025, 6, 1), (2025, 1)),
        (date(2025, 9, 1), (2025, 2)),
        (date(2025, 12, 1), (2025, 3)),
    ])
    def test_most_recent_filing_quarter(self, today, expected):
        assert most_recent_filing_quarter(today) == expected


class TestFMPPerformance:

    def setup_method(self):
        configure_http()

    @pytest.mark.parametrize("payload", [
        price_rows(30),
        {"symbol": "ACME", "historical": price_rows(30)},
    ])
    def test_performance(self, payload):
        repo, fake = make_repo({"historical-price-eod/full": payload})
        perf = asyncio.run(repo.get_performance("ACME", current_price=201.0, year_high=201.0))

        assert perf.day1_change == pytest.approx((201 - 199) / 199 * 100)
        assert perf.week1_change == pytest.approx((201 - 195) / 195 * 100)
        assert perf.year1_change == 0.0
        assert perf.percent_of_52_week_high == pytest.approx(100.0)
        assert "from" in fake.client.get.call_args.kwargs["params"]


class TestFMPETF:

    def setup_method(self):
        configure_http()

    def test_etf_detection(self):
        repo, _ = make_repo({"etf/info": [{"symbol": "VOO", "expenseRatio": 0.03}]})
        assert asyncio.run(repo.is_etf("VOO")) is True

        stock_repo, _ = make_repo({"etf/info": []})
        assert asyncio.run(stock_repo.is_etf("ACME")) is False

    def test_etf_data(self):
        repo, _ = make_repo({
            "etf/info": [{
                "symbol": "VOO", "expenseRatio": 0.03, "assetsUnderManagement": 500_000_000_000, "nav": 480.5,
                "avgVolume": 5_000_000, "holdingsCount": 504, "inceptionDate": "2010-09-07",
            }],
            "etf/holdings": [
                {"asset": f"T{i}", "name": f"Holding {i}", "sharesNumber": 1000, "weightPercentage": 7.1 - i / 2,
                 "marketValue": 1_000_000}
                for i in range(12)
            ],
            "etf/sector-weightings": [{"sector": "Technology", "weightPercentage": "31.50%"}],
            "etf/country-weightings": 500,
        })
        etf = asyncio.run(repo.get_etf_data("VOO"))

        assert etf.expense_ratio == 0.03
        assert etf.aum == 500_000_000_000
        assert etf.holdings_count == 504
        assert len(etf.holdings) == 10
        assert etf.holdings[0].ticker == "T0"
        assert etf.holdings[0].weight_percent == pytest.approx(7.1)
        assert etf.sector_weights[0].weight_percent == pytest.approx(31.5)
        # Country weights failed; the rest of the block survives
        assert etf.regions == []
