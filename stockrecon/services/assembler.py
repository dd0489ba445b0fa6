"""Turn a fetched aggregate plus scores and signals into the response model."""

from dataclasses import asdict
from datetime import datetime, timezone
from typing import List, Optional

from ..analytics.scores import StockScores
from ..domain.models import (
    AltmanZSummary,
    AssetType,
    DataMeta,
    DCFEstimate,
    DCFValuation,
    Financials,
    InsiderActivity,
    PiotroskiSummary,
    RuleOf40Summary,
    Scores,
    ShortInterest,
    SignalView,
    StockDetailResponse,
)
from ..signals.types import FinancialsData, InsiderActivityData, ShortInterestData, Signal, StockData
from .fetcher import StockAggregate

UNDERVALUED_THRESHOLD = 15.0
OVERVALUED_THRESHOLD = -15.0


def assess_dcf(estimate: Optional[DCFEstimate], quote_price: float = 0.0) -> Optional[DCFValuation]:
    """
    Compare the provider's DCF value with the market price.

    More than 15% above price is undervalued, more than 15% below is
    overvalued. The DCF payload's own price is preferred; the quote price
    is the fallback.
    """
    if estimate is None:
        return None

    price = estimate.stock_price or quote_price
    if price == 0:
        return DCFValuation(intrinsic_value=estimate.dcf, assessment="N/A")

    diff = (estimate.dcf - price) / price * 100
    if diff > UNDERVALUED_THRESHOLD:
        assessment = "Undervalued"
    elif diff < OVERVALUED_THRESHOLD:
        assessment = "Overvalued"
    else:
        assessment = "Fairly Valued"

    return DCFValuation(
        intrinsic_value=estimate.dcf,
        current_price=price,
        difference_percent=diff,
        assessment=assessment,
    )


def to_signal_financials(financials: Optional[Financials]) -> Optional[FinancialsData]:
    if financials is None:
        return None
    return FinancialsData(
        revenue_growth_yoy=financials.revenue_growth_yoy,
        operating_margin=financials.operating_margin,
        debt_to_equity=financials.debt_to_equity,
        roic=financials.roic,
    )


def to_signal_insider_activity(activity: Optional[InsiderActivity]) -> Optional[InsiderActivityData]:
    """No trades in either direction and no net value counts as no data."""
    if activity is None:
        return None
    if activity.buy_count_90d == 0 and activity.sell_count_90d == 0 and activity.net_value_90d == 0:
        return None
    return InsiderActivityData(
        buy_count_90d=activity.buy_count_90d,
        sell_count_90d=activity.sell_count_90d,
        net_value_90d=activity.net_value_90d,
    )


def to_signal_short_interest(short: Optional[ShortInterest]) -> Optional[ShortInterestData]:
    """A record with neither float percentage nor short ratio counts as no data."""
    if short is None:
        return None
    if short.short_percent_float == 0 and short.short_ratio == 0:
        return None
    return ShortInterestData(short_percent_float=short.short_percent_float, days_to_cover=short.short_ratio)


def build_stock_data(agg: StockAggregate) -> StockData:
    return StockData(
        ticker=agg.ticker,
        financials=to_signal_financials(agg.financials),
        insider_activity=to_signal_insider_activity(agg.insider_activity),
        short_interest=to_signal_short_interest(agg.short_interest),
    )


def _signal_view(signal: Signal) -> SignalView:
    return SignalView(
        type=signal.type.value,
        category=signal.category.value,
        message=signal.message,
        priority=signal.priority,
        data=dict(signal.data),
    )


def _scores_block(scores: StockScores, dcf: Optional[DCFValuation]) -> Scores:
    return Scores(
        piotroski=PiotroskiSummary(
            score=scores.piotroski.score,
            breakdown=asdict(scores.piotroski.breakdown),
        ),
        rule_of_40=RuleOf40Summary(**asdict(scores.rule_of_40)),
        altman_z=AltmanZSummary(
            score=scores.altman_z.score,
            zone=scores.altman_z.zone.value,
            components=asdict(scores.altman_z.components),
        ),
        dcf_valuation=dcf,
        grade=scores.grade,
    )


def _meta(agg: StockAggregate) -> DataMeta:
    fundamentals_as_of = "N/A"
    if agg.financial_data and agg.financial_data[0].fiscal_year > 0:
        fundamentals_as_of = str(agg.financial_data[0].fiscal_year)

    holdings_as_of = "N/A"
    if agg.holdings and agg.holdings.top_institutional:
        holdings_as_of = agg.holdings.top_institutional[0].quarter_date or "N/A"

    price_as_of = ""
    if agg.quote is not None and agg.quote.as_of is not None:
        price_as_of = agg.quote.as_of.isoformat()

    return DataMeta(
        fundamentals_as_of=fundamentals_as_of,
        holdings_as_of=holdings_as_of,
        price_as_of=price_as_of,
        generated_at=datetime.now(timezone.utc),
        degraded=list(agg.degraded),
    )


def build_stock_response(
    agg: StockAggregate,
    scores: Optional[StockScores],
    signals: List[Signal],
) -> StockDetailResponse:
    """``scores`` is None when no statements were fetched; the scores block is then omitted."""
    dcf = assess_dcf(agg.dcf, agg.quote.price)
    return StockDetailResponse(
        asset_type=AssetType.STOCK,
        company=agg.company,
        quote=agg.quote,
        performance=agg.performance,
        scores=_scores_block(scores, dcf) if scores is not None else None,
        signals=[_signal_view(signal) for signal in signals],
        valuation=agg.valuation,
        holdings=agg.holdings,
        insider_trades=agg.insider_trades,
        insider_activity=agg.insider_activity,
        financials=agg.financials,
        profitability=agg.profitability,
        financial_health=agg.financial_health,
        growth=agg.growth,
        earnings_quality=agg.earnings_quality,
        technical_metrics=agg.technical_metrics,
        short_interest=agg.short_interest,
        analyst_estimates=agg.analyst_estimates,
        meta=_meta(agg),
    )


def build_etf_response(agg: StockAggregate) -> StockDetailResponse:
    """ETFs carry no scores and no signals."""
    return StockDetailResponse(
        asset_type=AssetType.ETF,
        company=agg.company,
        quote=agg.quote,
        performance=agg.performance,
        etf_data=agg.etf_data,
        meta=_meta(agg),
    )
