"""Response blocks for the stock detail aggregate.

Every block is a pydantic model so the assembled response can be written to
and read back from the cache as JSON without a custom codec.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class AssetType(str, Enum):
    """Kind of security behind a ticker."""
    STOCK = "stock"
    ETF = "etf"


class Company(BaseModel):
    ticker: str
    name: str
    exchange: str = ""
    sector: str = ""
    industry: str = ""
    description: str = ""


class Quote(BaseModel):
    price: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    volume: int = 0
    market_cap: int = 0
    fifty_two_week_high: float = 0.0
    fifty_two_week_low: float = 0.0
    as_of: Optional[datetime] = None


class Performance(BaseModel):
    """Price change over standard windows, in percent."""
    day1_change: float = 0.0
    week1_change: float = 0.0
    month1_change: float = 0.0
    ytd_change: float = 0.0
    year1_change: float = 0.0
    percent_of_52_week_high: float = 0.0


class ValuationMetric(BaseModel):
    value: Optional[float] = None
    sector_median: Optional[float] = None
    percentile: Optional[int] = None


class Valuation(BaseModel):
    pe: ValuationMetric = Field(default_factory=ValuationMetric)
    forward_pe: ValuationMetric = Field(default_factory=ValuationMetric)
    peg: ValuationMetric = Field(default_factory=ValuationMetric)
    ev_to_ebitda: ValuationMetric = Field(default_factory=ValuationMetric)
    price_to_fcf: ValuationMetric = Field(default_factory=ValuationMetric)
    price_to_book: ValuationMetric = Field(default_factory=ValuationMetric)


class InstitutionalHolder(BaseModel):
    fund_name: str
    fund_cik: str = ""
    shares: int = 0
    value: int = 0
    portfolio_percent: float = 0.0
    change_shares: int = 0
    change_percent: float = 0.0
    quarter_date: str = ""


class Holdings(BaseModel):
    top_institutional: List[InstitutionalHolder] = Field(default_factory=list)
    total_institutional_ownership: float = 0.0
    net_change_shares: int = 0
    net_change_quarters: int = 0


class InsiderTrade(BaseModel):
    insider_name: str
    title: str = ""
    trade_type: str  # "buy" or "sell"
    shares: int = 0
    price: float = 0.0
    value: int = 0
    trade_date: str = ""


class InsiderActivity(BaseModel):
    """Insider trades aggregated over the trailing 90 days."""
    trades: List[InsiderTrade] = Field(default_factory=list)
    buy_count_90d: int = 0
    sell_count_90d: int = 0
    net_value_90d: float = 0.0


class SectorMetric(BaseModel):
    """A metric positioned inside its sector's typical range."""
    value: float = 0.0
    sector_min: float = 0.0
    sector_median: float = 0.0
    sector_max: float = 0.0
    percentile: int = 50


class Profitability(BaseModel):
    roic: SectorMetric
    roe: SectorMetric
    operating_margin: SectorMetric
    gross_margin: Optional[SectorMetric] = None
    net_margin: Optional[SectorMetric] = None


class FinancialHealth(BaseModel):
    debt_to_equity: SectorMetric
    current_ratio: SectorMetric
    asset_turnover: SectorMetric


class Growth(BaseModel):
    revenue_growth_yoy: SectorMetric
    eps_growth_yoy: SectorMetric
    projected_eps_growth: Optional[SectorMetric] = None
    free_cash_flow_ttm: Optional[SectorMetric] = None


class EarningsQuality(BaseModel):
    accrual_ratio: SectorMetric
    buyback_yield: SectorMetric


class TechnicalMetrics(BaseModel):
    beta: float = 0.0
    ma_50_day: float = 0.0
    ma_200_day: float = 0.0


class ShortInterest(BaseModel):
    shares_short: int = 0
    shares_short_prior_month: int = 0
    short_ratio: float = 0.0  # days to cover
    short_percent_float: float = 0.0
    short_percent_shares: float = 0.0


class Financials(BaseModel):
    """Ratio-derived financial metrics. Percentages are 0-100 scaled."""
    revenue_growth_yoy: float = 0.0
    gross_margin: float = 0.0
    operating_margin: float = 0.0
    net_margin: float = 0.0
    fcf_margin: float = 0.0
    roe: float = 0.0
    roic: float = 0.0
    debt_to_equity: float = 0.0
    current_ratio: float = 0.0
    asset_turnover: float = 0.0
    interest_coverage: Optional[float] = None


class DCFEstimate(BaseModel):
    """Raw discounted-cash-flow figure reported by the provider."""
    dcf: float = 0.0
    stock_price: float = 0.0
    date: str = ""


class DCFValuation(BaseModel):
    intrinsic_value: float = 0.0
    current_price: float = 0.0
    difference_percent: float = 0.0
    assessment: str = "N/A"  # "Undervalued", "Fairly Valued", "Overvalued"


class AnalystEstimates(BaseModel):
    rating: str = ""
    rating_score: float = 0.0
    analyst_count: int = 0
    strong_buy_count: int = 0
    buy_count: int = 0
    hold_count: int = 0
    sell_count: int = 0
    strong_sell_count: int = 0
    price_target_high: float = 0.0
    price_target_low: float = 0.0
    price_target_average: float = 0.0
    price_target_median: float = 0.0
    eps_estimate_current_year: float = 0.0
    eps_estimate_next_year: float = 0.0
    eps_growth_next_year: float = 0.0
    revenue_estimate_current_year: float = 0.0
    revenue_estimate_next_year: float = 0.0
    revenue_growth_next_year: float = 0.0


class ETFHolding(BaseModel):
    ticker: str
    name: str = ""
    shares: float = 0.0
    weight_percent: float = 0.0
    market_value: int = 0


class ETFSectorWeight(BaseModel):
    sector: str
    weight_percent: float = 0.0


class ETFRegionWeight(BaseModel):
    region: str
    weight_percent: float = 0.0


class ETFData(BaseModel):
    expense_ratio: float = 0.0
    aum: int = 0
    nav: float = 0.0
    avg_volume: int = 0
    holdings_count: int = 0
    inception_date: str = ""
    holdings: List[ETFHolding] = Field(default_factory=list)
    sector_weights: List[ETFSectorWeight] = Field(default_factory=list)
    regions: List[ETFRegionWeight] = Field(default_factory=list)


class SearchResult(BaseModel):
    ticker: str
    name: str
    exchange: str = ""
    sector: str = ""


class PiotroskiSummary(BaseModel):
    score: int
    breakdown: Dict[str, bool]


class RuleOf40Summary(BaseModel):
    score: float
    revenue_growth_percent: float
    profit_margin_percent: float
    passed: bool


class AltmanZSummary(BaseModel):
    score: float
    zone: str
    components: Dict[str, float] = Field(default_factory=dict)


class Scores(BaseModel):
    piotroski: PiotroskiSummary
    rule_of_40: RuleOf40Summary
    altman_z: AltmanZSummary
    dcf_valuation: Optional[DCFValuation] = None
    grade: str


class SignalView(BaseModel):
    """Serialized form of a generated signal."""
    type: str
    category: str
    message: str
    priority: int
    data: Dict[str, Union[int, float, str]] = Field(default_factory=dict)


class DataMeta(BaseModel):
    fundamentals_as_of: str = "N/A"
    holdings_as_of: str = "N/A"
    price_as_of: str = ""
    generated_at: datetime
    degraded: List[str] = Field(default_factory=list)


class StockDetailResponse(BaseModel):
    """Everything known about one ticker at one point in time."""
    asset_type: AssetType = AssetType.STOCK
    company: Company
    quote: Quote
    performance: Performance = Field(default_factory=Performance)
    scores: Optional[Scores] = None
    signals: List[SignalView] = Field(default_factory=list)
    valuation: Optional[Valuation] = None
    holdings: Optional[Holdings] = None
    insider_trades: List[InsiderTrade] = Field(default_factory=list)
    insider_activity: Optional[InsiderActivity] = None
    financials: Optional[Financials] = None
    profitability: Optional[Profitability] = None
    financial_health: Optional[FinancialHealth] = None
    growth: Optional[Growth] = None
    earnings_quality: Optional[EarningsQuality] = None
    technical_metrics: Optional[TechnicalMetrics] = None
    short_interest: Optional[ShortInterest] = None
    analyst_estimates: Optional[AnalystEstimates] = None
    etf_data: Optional[ETFData] = None
    meta: DataMeta
