"""Financial Modeling Prep repository with rate limiting and response caching."""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from ..analytics.performance import calculate_performance, moving_averages, normalize_price_history
from ..analytics.scores import FinancialPeriod
from ..analytics.sector import percentile_inverted, sector_metric, sector_ranges
from ..cache import TTLCache
from ..config import FMP_BASE_URL
from ..domain.errors import ProviderError
from ..domain.models import (
    AnalystEstimates,
    Company,
    DCFEstimate,
    EarningsQuality,
    ETFData,
    ETFHolding,
    ETFRegionWeight,
    ETFSectorWeight,
    FinancialHealth,
    Financials,
    Growth,
    Holdings,
    InsiderActivity,
    InsiderTrade,
    InstitutionalHolder,
    Performance,
    Profitability,
    Quote,
    SearchResult,
    ShortInterest,
    TechnicalMetrics,
    Valuation,
    ValuationMetric,
)
from ..http_client import http_get
from .base import Repository
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

TOP_HOLDERS_LIMIT = 5
TOP_ETF_HOLDINGS_LIMIT = 10
INSIDER_WINDOW_DAYS = 90
INSIDER_ACTIVITY_SAMPLE = 50
FILING_DELAY_DAYS = 45  # 13F filings are due 45 days after quarter end
ASSUMED_TAX_RATE = 0.25


def _num(payload: Dict[str, Any], key: str) -> float:
    value = payload.get(key)
    if value in (None, ""):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _int(payload: Dict[str, Any], key: str) -> int:
    return int(_num(payload, key))


def _percent(value: Any) -> float:
    """Parse weights that FMP sends either as 28.5 or as "28.50%"."""
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _first(payload: Any) -> Optional[Dict[str, Any]]:
    if isinstance(payload, list):
        return payload[0] if payload else None
    if isinstance(payload, dict) and payload:
        return payload
    return None


def _as_list(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        # Some endpoints wrap rows as {"symbol": ..., "historical": [...]}
        rows = payload.get("historical")
        if isinstance(rows, list):
            return rows
    return []


def _year(date_str: str) -> int:
    try:
        return int(str(date_str)[:4])
    except ValueError:
        return 0


def most_recent_filing_quarter(today: Optional[date] = None) -> Tuple[int, int]:
    """Most recent quarter whose 13F filings should be complete."""
    cutoff = (today or date.today()) - timedelta(days=FILING_DELAY_DAYS)
    if cutoff.month >= 10:
        return cutoff.year, 3
    if cutoff.month >= 7:
        return cutoff.year, 2
    if cutoff.month >= 4:
        return cutoff.year, 1
    return cutoff.year - 1, 4


def _previous_quarter(year: int, quarter: int) -> Tuple[int, int]:
    if quarter == 1:
        return year - 1, 4
    return year, quarter - 1


def _eps_growth(current: float, prior: float) -> float:
    if prior == 0 or current == 0:
        return 0.0
    if prior > 0:
        return (current - prior) / prior * 100
    if current > 0:
        # Loss to profit
        return 100.0
    # Both negative: a shrinking loss is positive growth
    return (prior - current) / -prior * 100


class FMPRepository(Repository):
    """
    Repository backed by the Financial Modeling Prep "stable" REST API.

    Features:
    - Token bucket rate limiting shared by every call of one instance
    - Raw JSON memoized per URL, so phase-2/3 calls that reuse a statement
      endpoint do not hit the network again
    - Sector-relative metrics computed locally from typical sector ranges
    """

    name = "fmp"

    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = FMP_BASE_URL,
        rpm: int = 300,
        rps: int = 10,
        cache_ttl: int = 300,
        timeout: int = 30,
        retries: int = 3,
    ):
        if not api_key:
            raise ValueError("FMP API key is required")

        self.api_key = api_key
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = RateLimiter(rpm=rpm, rps=rps)
        self.cache = TTLCache(default_ttl=cache_ttl)
        self.timeout = timeout
        self.retries = retries

        # Requests already on the wire, keyed like the memo
        self._inflight: Dict[str, asyncio.Future] = {}

        logger.info("Initialized FMPRepository with RPM=%d, RPS=%d", rpm, rps)

    # ------------------------------------------------------------------ HTTP

    async def _get(self, endpoint: str, **params: Any) -> Any:
        """
        GET an endpoint and return decoded JSON, memoized for cache_ttl.

        Concurrent callers asking for the same URL share one request. The
        shared request is shielded so one caller being cancelled does not
        fail the others.
        """
        params = {key: value for key, value in params.items() if value is not None}
        cache_key = f"{endpoint}?{urlencode(sorted(params.items()))}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        pending = self._inflight.get(cache_key)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch(endpoint, params, cache_key))
            self._inflight[cache_key] = pending
            pending.add_done_callback(lambda _: self._inflight.pop(cache_key, None))
        else:
            logger.debug("Joining in-flight request: %s", cache_key)
        return await asyncio.shield(pending)

    async def _fetch(self, endpoint: str, params: Dict[str, Any], cache_key: str) -> Any:
        await self.rate_limiter.acquire()
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await http_get(
                url,
                params={**params, "apikey": self.api_key},
                timeout=self.timeout,
                retries=self.retries,
                client=self.http_client,
            )
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            if status_code == 429:
                self.rate_limiter.record_429()
            raise ProviderError(f"FMP {endpoint} returned HTTP {status_code}", status_code=status_code) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"FMP {endpoint} request failed: {exc}") from exc

        self.rate_limiter.reset_429_count()
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(f"FMP {endpoint} returned invalid JSON") from exc

        if isinstance(payload, dict) and "Error Message" in payload:
            raise ProviderError(f"FMP {endpoint}: {payload['Error Message']}")

        self.cache.set(cache_key, payload)
        return payload

    async def _statements(self, endpoint: str, ticker: str, limit: int) -> List[Dict[str, Any]]:
        return _as_list(await self._get(endpoint, symbol=ticker, period="annual", limit=limit))

    async def _quote_row(self, ticker: str) -> Optional[Dict[str, Any]]:
        return _first(await self._get("quote", symbol=ticker))

    # -------------------------------------------------------- identity/price

    async def get_company(self, ticker: str) -> Optional[Company]:
        profile = _first(await self._get("profile", symbol=ticker))
        if profile is None:
            return None
        return Company(
            ticker=profile.get("symbol") or ticker,
            name=profile.get("companyName") or "",
            exchange=profile.get("exchange") or "",
            sector=profile.get("sector") or "",
            industry=profile.get("industry") or "",
            description=profile.get("description") or "",
        )

    async def get_quote(self, ticker: str) -> Optional[Quote]:
        row = await self._quote_row(ticker)
        if row is None:
            return None
        timestamp = _int(row, "timestamp")
        return Quote(
            price=_num(row, "price"),
            change=_num(row, "change"),
            change_percent=_num(row, "changePercentage"),
            volume=_int(row, "volume"),
            market_cap=_int(row, "marketCap"),
            fifty_two_week_high=_num(row, "yearHigh"),
            fifty_two_week_low=_num(row, "yearLow"),
            as_of=datetime.fromtimestamp(timestamp, tz=timezone.utc) if timestamp else None,
        )

    # ------------------------------------------------------------ statements

    async def get_financial_data(self, ticker: str, periods: int) -> List[FinancialPeriod]:
        incomes, balances, cash_flows, quote = await asyncio.gather(
            self._statements("income-statement", ticker, periods),
            self._statements("balance-sheet-statement", ticker, periods),
            self._statements("cash-flow-statement", ticker, periods),
            self._quote_row(ticker),
        )

        result = []
        for i, (inc, bal, cf) in enumerate(zip(incomes, balances, cash_flows)):
            if i >= periods:
                break
            result.append(FinancialPeriod(
                revenue=_num(inc, "revenue"),
                gross_profit=_num(inc, "grossProfit"),
                operating_income=_num(inc, "operatingIncome"),
                net_income=_num(inc, "netIncome"),
                ebit=_num(inc, "ebit") or _num(inc, "operatingIncome"),
                eps=_num(inc, "epsDiluted"),
                total_assets=_num(bal, "totalAssets"),
                total_liabilities=_num(bal, "totalLiabilities"),
                current_assets=_num(bal, "totalCurrentAssets"),
                current_liabilities=_num(bal, "totalCurrentLiabilities"),
                long_term_debt=_num(bal, "longTermDebt"),
                shareholders_equity=_num(bal, "totalStockholdersEquity"),
                retained_earnings=_num(bal, "retainedEarnings"),
                shares_outstanding=_int(inc, "weightedAverageShsOut"),
                operating_cash_flow=_num(cf, "operatingCashFlow"),
                free_cash_flow=_num(cf, "freeCashFlow"),
                market_cap=_num(quote, "marketCap") if i == 0 and quote else 0.0,
                stock_price=_num(quote, "price") if i == 0 and quote else 0.0,
                fiscal_year=_year(inc.get("fiscalYear") or inc.get("date", "")),
            ))
        return result

    async def get_financials(self, ticker: str) -> Optional[Financials]:
        incomes, balances, cash_flows = await asyncio.gather(
            self._statements("income-statement", ticker, 2),
            self._statements("balance-sheet-statement", ticker, 1),
            self._statements("cash-flow-statement", ticker, 1),
        )
        if not incomes:
            return None

        current = incomes[0]
        revenue = _num(current, "revenue")
        operating_income = _num(current, "operatingIncome")
        net_income = _num(current, "netIncome")
        financials = Financials()

        if revenue > 0:
            financials.gross_margin = _num(current, "grossProfit") / revenue * 100
            financials.operating_margin = operating_income / revenue * 100
            financials.net_margin = net_income / revenue * 100
        if len(incomes) >= 2 and _num(incomes[1], "revenue") > 0:
            prior_revenue = _num(incomes[1], "revenue")
            financials.revenue_growth_yoy = (revenue - prior_revenue) / prior_revenue * 100

        if balances:
            bal = balances[0]
            equity = _num(bal, "totalStockholdersEquity")
            debt = _num(bal, "totalDebt")
            if equity > 0:
                financials.roe = net_income / equity * 100
                financials.debt_to_equity = debt / equity
            if _num(bal, "totalCurrentLiabilities") > 0:
                financials.current_ratio = _num(bal, "totalCurrentAssets") / _num(bal, "totalCurrentLiabilities")
            if equity + debt > 0:
                nopat = operating_income * (1 - ASSUMED_TAX_RATE)
                financials.roic = nopat / (equity + debt) * 100
            if _num(bal, "totalAssets") > 0:
                financials.asset_turnover = revenue / _num(bal, "totalAssets")

        interest_expense = _num(current, "interestExpense")
        if interest_expense > 0:
            financials.interest_coverage = operating_income / interest_expense

        if cash_flows and revenue > 0:
            financials.fcf_margin = _num(cash_flows[0], "freeCashFlow") / revenue * 100

        return financials

    # ----------------------------------------------------- sector-relative

    async def get_valuation(self, ticker: str, sector: str) -> Optional[Valuation]:
        ratios_payload, metrics_payload = await asyncio.gather(
            self._get("ratios-ttm", symbol=ticker),
            self._get("key-metrics-ttm", symbol=ticker),
        )
        ratios = _first(ratios_payload) or {}
        metrics = _first(metrics_payload) or {}
        if not ratios and not metrics:
            return None

        ranges = sector_ranges(sector)

        def metric(value: float, name: str) -> ValuationMetric:
            rng = ranges[name]
            if value <= 0:
                return ValuationMetric(sector_median=rng.median)
            return ValuationMetric(
                value=value,
                sector_median=rng.median,
                percentile=percentile_inverted(value, rng.min, rng.max),
            )

        return Valuation(
            pe=metric(_num(ratios, "priceToEarningsRatioTTM"), "pe"),
            peg=metric(_num(ratios, "priceToEarningsGrowthRatioTTM"), "peg"),
            ev_to_ebitda=metric(_num(metrics, "evToEBITDATTM"), "ev_to_ebitda"),
            price_to_fcf=metric(_num(ratios, "priceToFreeCashFlowRatioTTM"), "price_to_fcf"),
            price_to_book=metric(_num(ratios, "priceToBookRatioTTM"), "price_to_book"),
        )

    async def get_profitability(self, sector: str, financials: Optional[Financials]) -> Optional[Profitability]:
        if financials is None:
            return None
        profitability = Profitability(
            roic=sector_metric(financials.roic, sector, "roic"),
            roe=sector_metric(financials.roe, sector, "roe"),
            operating_margin=sector_metric(financials.operating_margin, sector, "operating_margin"),
        )
        if financials.gross_margin != 0:
            profitability.gross_margin = sector_metric(financials.gross_margin, sector, "gross_margin")
        if financials.net_margin != 0:
            profitability.net_margin = sector_metric(financials.net_margin, sector, "net_margin")
        return profitability

    async def get_financial_health(
        self,
        sector: str,
        financials: Optional[Financials],
        financial_data: List[FinancialPeriod],
    ) -> Optional[FinancialHealth]:
        if financials is None:
            return None
        asset_turnover = financials.asset_turnover
        if financial_data and financial_data[0].total_assets > 0:
            asset_turnover = financial_data[0].revenue / financial_data[0].total_assets
        return FinancialHealth(
            debt_to_equity=sector_metric(financials.debt_to_equity, sector, "debt_to_equity", lower_is_better=True),
            current_ratio=sector_metric(financials.current_ratio, sector, "current_ratio"),
            asset_turnover=sector_metric(asset_turnover, sector, "asset_turnover"),
        )

    async def get_growth(self, sector: str, financial_data: List[FinancialPeriod]) -> Optional[Growth]:
        if not financial_data:
            return None

        current = financial_data[0]
        revenue_growth = 0.0
        eps_growth = 0.0
        if len(financial_data) >= 2:
            prior = financial_data[1]
            if prior.revenue > 0:
                revenue_growth = (current.revenue - prior.revenue) / prior.revenue * 100
            eps_growth = _eps_growth(current.eps, prior.eps)

        growth = Growth(
            revenue_growth_yoy=sector_metric(revenue_growth, sector, "revenue_growth"),
            eps_growth_yoy=sector_metric(eps_growth, sector, "eps_growth"),
        )
        if current.free_cash_flow != 0:
            # Sector ranges are in millions
            growth.free_cash_flow_ttm = sector_metric(current.free_cash_flow / 1_000_000, sector, "fcf")
        return growth

    async def get_earnings_quality(self, ticker: str, sector: str) -> Optional[EarningsQuality]:
        cash_flows, incomes, balances, quote = await asyncio.gather(
            self._statements("cash-flow-statement", ticker, 1),
            self._statements("income-statement", ticker, 1),
            self._statements("balance-sheet-statement", ticker, 2),
            self._quote_row(ticker),
        )
        if not cash_flows or not incomes or not balances:
            return None

        # Accrual ratio: (net income - operating cash flow) / average total assets
        accrual_ratio = 0.0
        if len(balances) >= 2:
            avg_assets = (_num(balances[0], "totalAssets") + _num(balances[1], "totalAssets")) / 2
        else:
            avg_assets = _num(balances[0], "totalAssets")
        if avg_assets > 0:
            accrual_ratio = (
                (_num(incomes[0], "netIncome") - _num(cash_flows[0], "operatingCashFlow")) / avg_assets * 100
            )

        # Repurchases are reported as a cash outflow (negative)
        buyback_yield = 0.0
        market_cap = _num(quote, "marketCap") if quote else 0.0
        if market_cap > 0:
            buyback_yield = max(-_num(cash_flows[0], "commonStockRepurchased") / market_cap * 100, 0.0)

        return EarningsQuality(
            accrual_ratio=sector_metric(accrual_ratio, sector, "accrual_ratio", lower_is_better=True),
            buyback_yield=sector_metric(buyback_yield, sector, "buyback_yield"),
        )

    # -------------------------------------------------------------- holdings

    async def _institutional_holders(self, ticker: str, year: int, quarter: int) -> List[Dict[str, Any]]:
        return _as_list(await self._get(
            "institutional-ownership/extract-analytics/holder",
            symbol=ticker,
            year=year,
            quarter=quarter,
            page=0,
            limit=10,
        ))

    async def get_holdings(self, ticker: str) -> Optional[Holdings]:
        year, quarter = most_recent_filing_quarter()
        holders = await self._institutional_holders(ticker, year, quarter)
        if not holders:
            # Filings for the latest quarter may still be incomplete
            year, quarter = _previous_quarter(year, quarter)
            holders = await self._institutional_holders(ticker, year, quarter)
        if not holders:
            return None

        quarter_date = f"{year}-Q{quarter}"
        top = [
            InstitutionalHolder(
                fund_name=h.get("investorName") or "",
                fund_cik=str(h.get("cik") or ""),
                shares=_int(h, "sharesNumber") or _int(h, "shares"),
                value=_int(h, "marketValue") or _int(h, "value"),
                portfolio_percent=_num(h, "weight"),
                change_shares=_int(h, "changeInSharesNumber") or _int(h, "sharesChange"),
                change_percent=_num(h, "changeInSharesNumberPercentage") or _num(h, "changePercentage"),
                quarter_date=quarter_date,
            )
            for h in holders[:TOP_HOLDERS_LIMIT]
        ]
        total_ownership = sum(_num(h, "ownership") or _num(h, "ownershipPercent") for h in holders)
        return Holdings(
            top_institutional=top,
            total_institutional_ownership=total_ownership / 100,
            net_change_shares=sum(holder.change_shares for holder in top),
            net_change_quarters=1,
        )

    # --------------------------------------------------------------- insiders

    async def _insider_rows(self, ticker: str, limit: int) -> List[Dict[str, Any]]:
        return _as_list(await self._get("insider-trading/search", symbol=ticker, page=0, limit=limit))

    @staticmethod
    def _to_trade(row: Dict[str, Any]) -> InsiderTrade:
        shares = _int(row, "securitiesTransacted")
        price = _num(row, "price")
        return InsiderTrade(
            insider_name=row.get("reportingName") or "",
            title=row.get("typeOfOwner") or "",
            trade_type="buy" if row.get("acquisitionOrDisposition") == "A" else "sell",
            shares=shares,
            price=price,
            value=int(shares * price),
            trade_date=row.get("transactionDate") or "",
        )

    async def get_insider_trades(self, ticker: str, limit: int) -> List[InsiderTrade]:
        rows = await self._insider_rows(ticker, limit)
        # Rows without shares are initial-ownership filings, not trades
        return [self._to_trade(row) for row in rows if _int(row, "securitiesTransacted") != 0]

    async def get_insider_activity(self, ticker: str) -> Optional[InsiderActivity]:
        rows = await self._insider_rows(ticker, INSIDER_ACTIVITY_SAMPLE)
        cutoff = (date.today() - timedelta(days=INSIDER_WINDOW_DAYS)).isoformat()

        activity = InsiderActivity()
        for row in rows:
            if (row.get("transactionDate") or "") < cutoff:
                continue
            if _int(row, "securitiesTransacted") == 0:
                continue
            trade = self._to_trade(row)
            if trade.trade_type == "buy":
                activity.buy_count_90d += 1
                activity.net_value_90d += trade.value
            else:
                activity.sell_count_90d += 1
                activity.net_value_90d -= trade.value
            activity.trades.append(trade)
        return activity

    # ------------------------------------------------------- price-derived

    async def _price_history(self, ticker: str):
        from_date = (date.today() - timedelta(days=365)).isoformat()
        rows = _as_list(await self._get("historical-price-eod/full", symbol=ticker, **{"from": from_date}))
        return normalize_price_history(rows)

    async def get_performance(self, ticker: str, current_price: float, year_high: float) -> Optional[Performance]:
        history = await self._price_history(ticker)
        return calculate_performance(history, current_price, year_high)

    async def get_technical_metrics(self, ticker: str) -> Optional[TechnicalMetrics]:
        profile, quote = await asyncio.gather(
            self._get("profile", symbol=ticker),
            self._quote_row(ticker),
        )
        profile = _first(profile) or {}
        quote = quote or {}
        ma_50 = _num(quote, "priceAvg50")
        ma_200 = _num(quote, "priceAvg200")
        if ma_50 == 0 and ma_200 == 0:
            ma_50, ma_200 = moving_averages(await self._price_history(ticker))
        return TechnicalMetrics(beta=_num(profile, "beta"), ma_50_day=ma_50, ma_200_day=ma_200)

    async def get_short_interest(self, ticker: str) -> Optional[ShortInterest]:
        logger.debug("FMP has no short interest data for %s", ticker)
        return None

    # --------------------------------------------------------- valuation etc

    async def get_dcf(self, ticker: str) -> Optional[DCFEstimate]:
        row = _first(await self._get("discounted-cash-flow", symbol=ticker))
        if row is None:
            return None
        return DCFEstimate(dcf=_num(row, "dcf"), stock_price=_num(row, "stockPrice"), date=row.get("date") or "")

    async def get_analyst_estimates(self, ticker: str) -> Optional[AnalystEstimates]:
        grades_payload, targets_payload, estimates_payload = await asyncio.gather(
            self._get("grades-consensus", symbol=ticker),
            self._get("price-target-consensus", symbol=ticker),
            self._optional_rows("analyst-estimates", symbol=ticker, period="annual", page=0, limit=10),
        )
        grades = _first(grades_payload) or {}
        targets = _first(targets_payload) or {}
        if not grades and not targets:
            return None

        counts = [_int(grades, key) for key in ("strongBuy", "buy", "hold", "sell", "strongSell")]
        analyst_count = sum(counts)
        rating_score = 0.0
        if analyst_count:
            # strong buy = 5 ... strong sell = 1
            rating_score = sum(count * weight for count, weight in zip(counts, (5, 4, 3, 2, 1))) / analyst_count

        estimates = AnalystEstimates(
            rating=grades.get("consensus") or "",
            rating_score=round(rating_score, 2),
            analyst_count=analyst_count,
            strong_buy_count=counts[0],
            buy_count=counts[1],
            hold_count=counts[2],
            sell_count=counts[3],
            strong_sell_count=counts[4],
            price_target_high=_num(targets, "targetHigh"),
            price_target_low=_num(targets, "targetLow"),
            price_target_average=_num(targets, "targetConsensus"),
            price_target_median=_num(targets, "targetMedian"),
        )

        this_year = date.today().year
        upcoming = sorted(
            (row for row in estimates_payload if _year(row.get("date", "")) >= this_year),
            key=lambda row: row.get("date", ""),
        )
        if upcoming:
            estimates.eps_estimate_current_year = _num(upcoming[0], "epsAvg")
            estimates.revenue_estimate_current_year = _num(upcoming[0], "revenueAvg")
        if len(upcoming) >= 2:
            estimates.eps_estimate_next_year = _num(upcoming[1], "epsAvg")
            estimates.revenue_estimate_next_year = _num(upcoming[1], "revenueAvg")
            if estimates.eps_estimate_current_year > 0:
                estimates.eps_growth_next_year = (
                    (estimates.eps_estimate_next_year - estimates.eps_estimate_current_year)
                    / estimates.eps_estimate_current_year * 100
                )
            if estimates.revenue_estimate_current_year > 0:
                estimates.revenue_growth_next_year = (
                    (estimates.revenue_estimate_next_year - estimates.revenue_estimate_current_year)
                    / estimates.revenue_estimate_current_year * 100
                )
        return estimates

    # ---------------------------------------------------------------- search

    async def search(self, query: str, limit: int) -> List[SearchResult]:
        rows = _as_list(await self._get("search-symbol", query=query, limit=limit))
        return [
            SearchResult(
                ticker=row.get("symbol") or "",
                name=row.get("name") or "",
                exchange=row.get("exchangeShortName") or row.get("exchange") or "",
            )
            for row in rows
            if row.get("symbol")
        ]

    # ------------------------------------------------------------------ ETFs

    async def is_etf(self, ticker: str) -> bool:
        info = _first(await self._get("etf/info", symbol=ticker))
        return info is not None and _num(info, "expenseRatio") > 0

    async def _optional_rows(self, endpoint: str, **params: Any) -> List[Dict[str, Any]]:
        try:
            return _as_list(await self._get(endpoint, **params))
        except ProviderError as exc:
            logger.warning("Failed to fetch %s for %s, continuing without: %s", endpoint, params.get("symbol"), exc)
            return []

    async def get_etf_data(self, ticker: str) -> Optional[ETFData]:
        info = _first(await self._get("etf/info", symbol=ticker))
        if info is None:
            return None

        holdings, sectors, countries = await asyncio.gather(
            self._optional_rows("etf/holdings", symbol=ticker),
            self._optional_rows("etf/sector-weightings", symbol=ticker),
            self._optional_rows("etf/country-weightings", symbol=ticker),
        )
        return ETFData(
            expense_ratio=_num(info, "expenseRatio"),
            aum=_int(info, "assetsUnderManagement") or _int(info, "aum"),
            nav=_num(info, "nav"),
            avg_volume=_int(info, "avgVolume"),
            holdings_count=_int(info, "holdingsCount") or len(holdings),
            inception_date=info.get("inceptionDate") or "",
            holdings=[
                ETFHolding(
                    ticker=h.get("asset") or "",
                    name=h.get("name") or "",
                    shares=_num(h, "sharesNumber") or _num(h, "shares"),
                    weight_percent=_percent(h.get("weightPercentage")),
                    market_value=_int(h, "marketValue"),
                )
                for h in holdings[:TOP_ETF_HOLDINGS_LIMIT]
            ],
            sector_weights=[
                ETFSectorWeight(sector=s.get("sector") or "", weight_percent=_percent(s.get("weightPercentage")))
                for s in sectors
            ],
            regions=[
                ETFRegionWeight(region=c.get("country") or "", weight_percent=_percent(c.get("weightPercentage")))
                for c in countries
            ],
        )
