"""Fundamental health scores: Piotroski F-Score, Altman Z-Score, Rule of 40.

All functions here are total: degenerate inputs (missing prior period, zero
denominators) produce defined reduced-fidelity results instead of raising.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Altman zone thresholds
ALTMAN_SAFE_THRESHOLD = 2.99
ALTMAN_DISTRESS_THRESHOLD = 1.81

RULE_OF_40_THRESHOLD = 40.0


@dataclass(frozen=True)
class FinancialPeriod:
    """One fiscal period of statement data."""
    revenue: float = 0.0
    gross_profit: float = 0.0
    operating_income: float = 0.0
    net_income: float = 0.0
    ebit: float = 0.0
    eps: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    current_assets: float = 0.0
    current_liabilities: float = 0.0
    long_term_debt: float = 0.0
    shareholders_equity: float = 0.0
    retained_earnings: float = 0.0
    shares_outstanding: int = 0
    operating_cash_flow: float = 0.0
    free_cash_flow: float = 0.0
    market_cap: float = 0.0
    stock_price: float = 0.0
    fiscal_year: int = 0

    def is_empty(self) -> bool:
        """True for the zero-value default period."""
        return self == _EMPTY_PERIOD


_EMPTY_PERIOD = FinancialPeriod()


@dataclass(frozen=True)
class PiotroskiBreakdown:
    # Profitability
    positive_net_income: bool = False
    positive_operating_cash_flow: bool = False
    higher_roa: bool = False
    cash_flow_exceeds_net_income: bool = False
    # Leverage / liquidity
    lower_long_term_debt_ratio: bool = False
    higher_current_ratio: bool = False
    no_new_shares: bool = False
    # Operating efficiency
    higher_gross_margin: bool = False
    higher_asset_turnover: bool = False

    def passed(self) -> int:
        return sum(1 for value in asdict(self).values() if value)


@dataclass(frozen=True)
class PiotroskiResult:
    score: int = 0
    breakdown: PiotroskiBreakdown = field(default_factory=PiotroskiBreakdown)


class AltmanZone(str, Enum):
    SAFE = "safe"
    GRAY = "gray"
    DISTRESS = "distress"


@dataclass(frozen=True)
class AltmanZComponents:
    working_capital_to_assets: float = 0.0
    retained_earnings_to_assets: float = 0.0
    ebit_to_assets: float = 0.0
    market_cap_to_liabilities: float = 0.0
    revenue_to_assets: float = 0.0


@dataclass(frozen=True)
class AltmanZResult:
    score: float = 0.0
    zone: AltmanZone = AltmanZone.DISTRESS
    components: AltmanZComponents = field(default_factory=AltmanZComponents)


@dataclass(frozen=True)
class RuleOf40Result:
    score: float = 0.0
    revenue_growth_percent: float = 0.0
    profit_margin_percent: float = 0.0
    passed: bool = False


@dataclass(frozen=True)
class StockScores:
    piotroski: PiotroskiResult
    rule_of_40: RuleOf40Result
    altman_z: AltmanZResult
    grade: str


def _ratio(numerator: float, denominator: float) -> float:
    """Division where a zero denominator contributes nothing."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


def _has_baseline(prior: Optional[FinancialPeriod]) -> bool:
    return prior is not None and not prior.is_empty()


def calculate_piotroski_score(
    current: FinancialPeriod,
    prior: Optional[FinancialPeriod] = None,
) -> PiotroskiResult:
    """
    Calculate the Piotroski F-Score (0-9).

    Level tests (net income, cash flow) only look at the current period.
    Delta tests need a prior period; without one they are counted as failed.

    Args:
        current: Most recent fiscal period
        prior: Previous fiscal period, or None / empty default

    Returns:
        PiotroskiResult with per-test breakdown
    """
    has_prior = _has_baseline(prior)

    positive_net_income = current.net_income > 0
    positive_ocf = current.operating_cash_flow > 0
    cash_flow_exceeds = current.operating_cash_flow > current.net_income

    higher_roa = False
    lower_leverage = False
    higher_current_ratio = False
    no_new_shares = False
    higher_gross_margin = False
    higher_turnover = False

    if has_prior:
        higher_roa = (
            current.total_assets > 0
            and prior.total_assets > 0
            and _ratio(current.net_income, current.total_assets)
            > _ratio(prior.net_income, prior.total_assets)
        )
        lower_leverage = (
            current.total_assets > 0
            and prior.total_assets > 0
            and _ratio(current.long_term_debt, current.total_assets)
            < _ratio(prior.long_term_debt, prior.total_assets)
        )
        higher_current_ratio = (
            current.current_liabilities > 0
            and prior.current_liabilities > 0
            and _ratio(current.current_assets, current.current_liabilities)
            > _ratio(prior.current_assets, prior.current_liabilities)
        )
        no_new_shares = (
            prior.shares_outstanding > 0
            and 0 < current.shares_outstanding <= prior.shares_outstanding
        )
        higher_gross_margin = (
            current.revenue > 0
            and prior.revenue > 0
            and _ratio(current.gross_profit, current.revenue)
            > _ratio(prior.gross_profit, prior.revenue)
        )
        higher_turnover = (
            current.total_assets > 0
            and prior.total_assets > 0
            and _ratio(current.revenue, current.total_assets)
            > _ratio(prior.revenue, prior.total_assets)
        )

    breakdown = PiotroskiBreakdown(
        positive_net_income=positive_net_income,
        positive_operating_cash_flow=positive_ocf,
        higher_roa=higher_roa,
        cash_flow_exceeds_net_income=cash_flow_exceeds,
        lower_long_term_debt_ratio=lower_leverage,
        higher_current_ratio=higher_current_ratio,
        no_new_shares=no_new_shares,
        higher_gross_margin=higher_gross_margin,
        higher_asset_turnover=higher_turnover,
    )
    return PiotroskiResult(score=breakdown.passed(), breakdown=breakdown)


def altman_zone(score: float) -> AltmanZone:
    """Bucket a Z-Score into its zone."""
    if score > ALTMAN_SAFE_THRESHOLD:
        return AltmanZone.SAFE
    if score >= ALTMAN_DISTRESS_THRESHOLD:
        return AltmanZone.GRAY
    return AltmanZone.DISTRESS


def calculate_altman_z_score(period: FinancialPeriod) -> AltmanZResult:
    """
    Calculate the Altman Z-Score for a public manufacturing-style company.

    Z = 1.2*A + 1.4*B + 3.3*C + 0.6*D + 1.0*E where
    A = working capital / total assets, B = retained earnings / total assets,
    C = EBIT / total assets, D = market cap / total liabilities,
    E = revenue / total assets.
    """
    working_capital = period.current_assets - period.current_liabilities
    components = AltmanZComponents(
        working_capital_to_assets=_ratio(working_capital, period.total_assets),
        retained_earnings_to_assets=_ratio(period.retained_earnings, period.total_assets),
        ebit_to_assets=_ratio(period.ebit, period.total_assets),
        market_cap_to_liabilities=_ratio(period.market_cap, period.total_liabilities),
        revenue_to_assets=_ratio(period.revenue, period.total_assets),
    )
    score = (
        1.2 * components.working_capital_to_assets
        + 1.4 * components.retained_earnings_to_assets
        + 3.3 * components.ebit_to_assets
        + 0.6 * components.market_cap_to_liabilities
        + 1.0 * components.revenue_to_assets
    )
    return AltmanZResult(score=score, zone=altman_zone(score), components=components)


def _profit_margin_percent(period: FinancialPeriod) -> float:
    return _ratio(period.operating_income, period.revenue) * 100


def _rule_of_40(growth: float, margin: float) -> RuleOf40Result:
    score = growth + margin
    return RuleOf40Result(
        score=score,
        revenue_growth_percent=growth,
        profit_margin_percent=margin,
        passed=score >= RULE_OF_40_THRESHOLD,
    )


def calculate_rule_of_40(current: FinancialPeriod) -> RuleOf40Result:
    """Rule of 40 with no prior period: the growth term is zero."""
    return _rule_of_40(0.0, _profit_margin_percent(current))


def calculate_rule_of_40_with_growth(
    current: FinancialPeriod,
    prior: FinancialPeriod,
) -> RuleOf40Result:
    """Rule of 40 with year-over-year revenue growth."""
    growth = 0.0
    if prior.revenue > 0:
        growth = (current.revenue - prior.revenue) / prior.revenue * 100
    return _rule_of_40(growth, _profit_margin_percent(current))


@dataclass(frozen=True)
class GradeWeights:
    """Point roll-up behind the letter grade. A display heuristic only."""
    piotroski_per_point: float = 4.0  # 9 points -> 36
    rule_of_40_max: float = 20.0
    altman_safe: float = 24.0
    altman_gray: float = 12.0
    altman_distress: float = 0.0
    ladder: Tuple[Tuple[float, str], ...] = (
        (68.0, "A"),
        (56.0, "B+"),
        (44.0, "B"),
        (32.0, "C"),
        (20.0, "D"),
    )
    floor_grade: str = "F"


DEFAULT_GRADE_WEIGHTS = GradeWeights()


def calculate_overall_grade(
    piotroski: PiotroskiResult,
    rule_of_40: RuleOf40Result,
    altman_z: AltmanZResult,
    weights: GradeWeights = DEFAULT_GRADE_WEIGHTS,
) -> str:
    """Roll the three scores into a letter grade (A, B+, B, C, D, F)."""
    points = piotroski.score * weights.piotroski_per_point

    rule_share = min(max(rule_of_40.score / RULE_OF_40_THRESHOLD, 0.0), 1.0)
    points += rule_share * weights.rule_of_40_max

    if altman_z.zone == AltmanZone.SAFE:
        points += weights.altman_safe
    elif altman_z.zone == AltmanZone.GRAY:
        points += weights.altman_gray
    else:
        points += weights.altman_distress

    for threshold, grade in weights.ladder:
        if points >= threshold:
            return grade
    return weights.floor_grade


def calculate_scores(periods: Sequence[FinancialPeriod]) -> StockScores:
    """
    Compute every score from up to two periods, most recent first.

    With fewer than two periods the delta-based tests and the growth term
    degrade to their documented defaults.
    """
    if len(periods) >= 2:
        current, prior = periods[0], periods[1]
        piotroski = calculate_piotroski_score(current, prior)
        rule_of_40 = calculate_rule_of_40_with_growth(current, prior)
    elif len(periods) == 1:
        current = periods[0]
        piotroski = calculate_piotroski_score(current)
        rule_of_40 = calculate_rule_of_40(current)
    else:
        current = _EMPTY_PERIOD
        piotroski = PiotroskiResult()
        rule_of_40 = RuleOf40Result()

    altman_z = calculate_altman_z_score(current)
    grade = calculate_overall_grade(piotroski, rule_of_40, altman_z)
    logger.debug(
        "Scores computed from %d period(s): piotroski=%d altman=%.2f rule40=%.1f grade=%s",
        len(periods),
        piotroski.score,
        altman_z.score,
        rule_of_40.score,
        grade,
    )
    return StockScores(piotroski=piotroski, rule_of_40=rule_of_40, altman_z=altman_z, grade=grade)
