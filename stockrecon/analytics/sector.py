"""Typical sector ranges and percentile placement for sector-relative metrics."""

from typing import Dict, NamedTuple

from ..domain.models import SectorMetric

FALLBACK_SECTOR = "Technology"


class MetricRange(NamedTuple):
    min: float
    median: float
    max: float


# Approximate historical ranges per sector. Percent metrics are 0-100 scaled;
# free cash flow is in millions.
_R = MetricRange
SECTOR_RANGES: Dict[str, Dict[str, MetricRange]] = {
    "Technology": {
        "pe": _R(10, 28, 60), "peg": _R(0.5, 1.8, 4), "ev_to_ebitda": _R(8, 18, 40),
        "price_to_fcf": _R(10, 25, 60), "price_to_book": _R(2, 6, 15),
        "roic": _R(5, 15, 40), "roe": _R(10, 25, 50), "operating_margin": _R(10, 20, 40),
        "gross_margin": _R(40, 60, 85), "net_margin": _R(5, 15, 30),
        "debt_to_equity": _R(0, 0.4, 1.5), "current_ratio": _R(1, 2, 4), "asset_turnover": _R(0.3, 0.6, 1.2),
        "revenue_growth": _R(-5, 10, 40), "eps_growth": _R(-10, 15, 50), "fcf": _R(0, 5000, 50000),
        "accrual_ratio": _R(-15, -5, 5), "buyback_yield": _R(0, 1.5, 5),
    },
    "Healthcare": {
        "pe": _R(8, 22, 50), "peg": _R(0.4, 1.6, 3.5), "ev_to_ebitda": _R(6, 14, 35),
        "price_to_fcf": _R(8, 20, 50), "price_to_book": _R(1.5, 4, 12),
        "roic": _R(3, 12, 30), "roe": _R(8, 18, 40), "operating_margin": _R(5, 15, 30),
        "gross_margin": _R(30, 55, 80), "net_margin": _R(2, 12, 25),
        "debt_to_equity": _R(0, 0.5, 1.8), "current_ratio": _R(1, 1.8, 3.5), "asset_turnover": _R(0.3, 0.5, 1.0),
        "revenue_growth": _R(-3, 8, 30), "eps_growth": _R(-10, 12, 40), "fcf": _R(0, 3000, 30000),
        "accrual_ratio": _R(-12, -4, 6), "buyback_yield": _R(0, 1, 4),
    },
    "Financial Services": {
        "pe": _R(6, 14, 25), "peg": _R(0.3, 1.2, 2.5), "ev_to_ebitda": _R(4, 10, 20),
        "price_to_fcf": _R(5, 12, 25), "price_to_book": _R(0.5, 1.5, 3),
        "roic": _R(2, 8, 18), "roe": _R(8, 12, 20), "operating_margin": _R(15, 30, 50),
        "gross_margin": _R(50, 70, 90), "net_margin": _R(10, 22, 40),
        "debt_to_equity": _R(0.5, 2, 8), "current_ratio": _R(0.8, 1.2, 2), "asset_turnover": _R(0.02, 0.05, 0.1),
        "revenue_growth": _R(-5, 5, 20), "eps_growth": _R(-15, 8, 25), "fcf": _R(0, 8000, 80000),
        "accrual_ratio": _R(-10, -2, 8), "buyback_yield": _R(0, 2, 6),
    },
    "Consumer Cyclical": {
        "pe": _R(8, 18, 40), "peg": _R(0.4, 1.4, 3), "ev_to_ebitda": _R(5, 12, 28),
        "price_to_fcf": _R(8, 18, 45), "price_to_book": _R(1.5, 4, 10),
        "roic": _R(4, 12, 28), "roe": _R(10, 20, 40), "operating_margin": _R(5, 12, 25),
        "gross_margin": _R(20, 35, 55), "net_margin": _R(2, 8, 18),
        "debt_to_equity": _R(0.2, 0.8, 2), "current_ratio": _R(1, 1.5, 3), "asset_turnover": _R(0.8, 1.5, 2.5),
        "revenue_growth": _R(-8, 7, 25), "eps_growth": _R(-15, 10, 35), "fcf": _R(0, 2000, 20000),
        "accrual_ratio": _R(-10, -3, 5), "buyback_yield": _R(0, 1.5, 5),
    },
    "Consumer Defensive": {
        "pe": _R(10, 20, 35), "peg": _R(1, 2.2, 4), "ev_to_ebitda": _R(8, 14, 25),
        "price_to_fcf": _R(12, 22, 45), "price_to_book": _R(2, 5, 12),
        "roic": _R(5, 14, 30), "roe": _R(12, 22, 45), "operating_margin": _R(8, 15, 28),
        "gross_margin": _R(25, 40, 60), "net_margin": _R(4, 10, 20),
        "debt_to_equity": _R(0.2, 0.6, 1.5), "current_ratio": _R(0.8, 1.2, 2), "asset_turnover": _R(0.8, 1.2, 2.0),
        "revenue_growth": _R(-2, 4, 15), "eps_growth": _R(-5, 6, 20), "fcf": _R(0, 4000, 40000),
        "accrual_ratio": _R(-8, -2, 4), "buyback_yield": _R(0, 2, 5),
    },
    "Industrials": {
        "pe": _R(10, 20, 40), "peg": _R(0.5, 1.5, 3), "ev_to_ebitda": _R(6, 12, 25),
        "price_to_fcf": _R(8, 18, 40), "price_to_book": _R(1.5, 3.5, 8),
        "roic": _R(4, 11, 25), "roe": _R(10, 18, 35), "operating_margin": _R(6, 12, 22),
        "gross_margin": _R(20, 32, 50), "net_margin": _R(3, 8, 16),
        "debt_to_equity": _R(0.3, 0.8, 2), "current_ratio": _R(1, 1.5, 2.5), "asset_turnover": _R(0.5, 0.9, 1.5),
        "revenue_growth": _R(-5, 6, 20), "eps_growth": _R(-10, 8, 25), "fcf": _R(0, 3000, 30000),
        "accrual_ratio": _R(-10, -3, 5), "buyback_yield": _R(0, 1.5, 4),
    },
    "Energy": {
        "pe": _R(5, 12, 25), "peg": _R(0.3, 1.0, 2.5), "ev_to_ebitda": _R(3, 6, 15),
        "price_to_fcf": _R(4, 10, 25), "price_to_book": _R(0.8, 1.8, 4),
        "roic": _R(2, 8, 20), "roe": _R(5, 15, 30), "operating_margin": _R(5, 15, 35),
        "gross_margin": _R(15, 30, 55), "net_margin": _R(2, 10, 25),
        "debt_to_equity": _R(0.2, 0.5, 1.5), "current_ratio": _R(0.8, 1.2, 2), "asset_turnover": _R(0.3, 0.6, 1.0),
        "revenue_growth": _R(-20, 5, 40), "eps_growth": _R(-30, 10, 60), "fcf": _R(0, 5000, 50000),
        "accrual_ratio": _R(-15, -5, 10), "buyback_yield": _R(0, 2, 6),
    },
    "Basic Materials": {
        "pe": _R(6, 14, 30), "peg": _R(0.3, 1.2, 2.5), "ev_to_ebitda": _R(4, 8, 18),
        "price_to_fcf": _R(5, 12, 30), "price_to_book": _R(0.8, 2, 5),
        "roic": _R(3, 9, 20), "roe": _R(8, 15, 28), "operating_margin": _R(8, 15, 28),
        "gross_margin": _R(15, 28, 45), "net_margin": _R(3, 9, 18),
        "debt_to_equity": _R(0.2, 0.5, 1.5), "current_ratio": _R(1, 1.8, 3), "asset_turnover": _R(0.4, 0.7, 1.2),
        "revenue_growth": _R(-10, 5, 25), "eps_growth": _R(-20, 8, 40), "fcf": _R(0, 2000, 20000),
        "accrual_ratio": _R(-12, -4, 6), "buyback_yield": _R(0, 1.5, 5),
    },
    "Utilities": {
        "pe": _R(10, 18, 30), "peg": _R(1.5, 2.5, 4.5), "ev_to_ebitda": _R(8, 12, 20),
        "price_to_fcf": _R(8, 15, 30), "price_to_book": _R(1, 2, 3.5),
        "roic": _R(2, 5, 10), "roe": _R(6, 10, 15), "operating_margin": _R(15, 25, 40),
        "gross_margin": _R(30, 45, 65), "net_margin": _R(5, 12, 22),
        "debt_to_equity": _R(0.8, 1.2, 2.5), "current_ratio": _R(0.6, 0.9, 1.5), "asset_turnover": _R(0.2, 0.3, 0.5),
        "revenue_growth": _R(-2, 3, 10), "eps_growth": _R(-5, 4, 12), "fcf": _R(0, 2000, 15000),
        "accrual_ratio": _R(-8, -2, 5), "buyback_yield": _R(0, 0.5, 2),
    },
    "Real Estate": {
        "pe": _R(15, 35, 70), "peg": _R(1, 2, 4), "ev_to_ebitda": _R(10, 18, 35),
        "price_to_fcf": _R(12, 25, 50), "price_to_book": _R(1, 2.5, 5),
        "roic": _R(2, 5, 12), "roe": _R(4, 8, 15), "operating_margin": _R(20, 35, 55),
        "gross_margin": _R(40, 60, 80), "net_margin": _R(10, 25, 45),
        "debt_to_equity": _R(0.5, 1, 2.5), "current_ratio": _R(0.5, 1, 2), "asset_turnover": _R(0.05, 0.1, 0.2),
        "revenue_growth": _R(-5, 5, 20), "eps_growth": _R(-10, 5, 20), "fcf": _R(0, 500, 5000),
        "accrual_ratio": _R(-10, -3, 8), "buyback_yield": _R(0, 0.5, 2),
    },
    "Communication Services": {
        "pe": _R(8, 18, 40), "peg": _R(0.4, 1.3, 3), "ev_to_ebitda": _R(5, 10, 22),
        "price_to_fcf": _R(6, 15, 35), "price_to_book": _R(1.2, 3, 8),
        "roic": _R(4, 10, 22), "roe": _R(8, 16, 32), "operating_margin": _R(10, 20, 35),
        "gross_margin": _R(35, 55, 75), "net_margin": _R(5, 15, 28),
        "debt_to_equity": _R(0.3, 0.8, 2), "current_ratio": _R(0.8, 1.3, 2.5), "asset_turnover": _R(0.3, 0.5, 0.9),
        "revenue_growth": _R(-5, 8, 30), "eps_growth": _R(-10, 12, 40), "fcf": _R(0, 5000, 50000),
        "accrual_ratio": _R(-10, -3, 5), "buyback_yield": _R(0, 1.5, 5),
    },
}
del _R


def sector_ranges(sector: str) -> Dict[str, MetricRange]:
    """Ranges for a sector; unknown sectors fall back to Technology."""
    return SECTOR_RANGES.get(sector, SECTOR_RANGES[FALLBACK_SECTOR])


def percentile(value: float, low: float, high: float) -> int:
    """Place a higher-is-better value in [low, high] as 0-100."""
    if high <= low:
        return 50
    if value <= low:
        return 0
    if value >= high:
        return 100
    return int((value - low) / (high - low) * 100)


def percentile_inverted(value: float, low: float, high: float) -> int:
    """Place a lower-is-better value (leverage, multiples) in [low, high] as 0-100."""
    if high <= low:
        return 50
    if value <= low:
        return 100
    if value >= high:
        return 0
    return int((high - value) / (high - low) * 100)


def sector_metric(value: float, sector: str, metric: str, lower_is_better: bool = False) -> SectorMetric:
    """Build a SectorMetric for one named metric of a sector."""
    rng = sector_ranges(sector)[metric]
    place = percentile_inverted if lower_is_better else percentile
    return SectorMetric(
        value=value,
        sector_min=rng.min,
        sector_median=rng.median,
        sector_max=rng.max,
        percentile=place(value, rng.min, rng.max),
    )
