"""Analytics modules for fundamental scoring and price performance."""

from .performance import calculate_performance, moving_averages, normalize_price_history
from .scores import (
    AltmanZone,
    AltmanZResult,
    FinancialPeriod,
    PiotroskiResult,
    RuleOf40Result,
    StockScores,
    altman_zone,
    calculate_altman_z_score,
    calculate_overall_grade,
    calculate_piotroski_score,
    calculate_rule_of_40,
    calculate_rule_of_40_with_growth,
    calculate_scores,
)
from .sector import percentile, percentile_inverted, sector_metric, sector_ranges

__all__ = [
    "AltmanZone",
    "AltmanZResult",
    "FinancialPeriod",
    "PiotroskiResult",
    "RuleOf40Result",
    "StockScores",
    "altman_zone",
    "calculate_altman_z_score",
    "calculate_overall_grade",
    "calculate_piotroski_score",
    "calculate_rule_of_40",
    "calculate_rule_of_40_with_growth",
    "calculate_scores",
    "calculate_performance",
    "moving_averages",
    "normalize_price_history",
    "percentile",
    "percentile_inverted",
    "sector_metric",
    "sector_ranges",
]
