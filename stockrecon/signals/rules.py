"""Pure rule functions mapping a RuleContext to at most one Signal.

Rules are registered in DEFAULT_RULES; registration order breaks priority
ties in the generator's output. Thresholds are exact: changing a boundary
changes which signals a ticker shows.
"""

from typing import Callable, Optional, Tuple

from ..analytics.scores import AltmanZone
from .types import RuleContext, Signal, SignalCategory, SignalType

Rule = Callable[[RuleContext], Optional[Signal]]

HIGH_PIOTROSKI = 7
LOW_PIOTROSKI = 3
STRONG_ALTMAN = 4.0

INSIDER_BUY_COUNT = 3
INSIDER_BUY_NET_VALUE = 100_000
INSIDER_SELL_COUNT = 5
INSIDER_SELL_NET_VALUE = -500_000

HIGH_GROWTH_PERCENT = 20.0
HIGH_DEBT_TO_EQUITY = 2.0
STRONG_ROIC_PERCENT = 20.0

LOW_SHORT_INTEREST = 5.0
ELEVATED_SHORT_INTEREST = 10.0
HIGH_SHORT_INTEREST = 20.0

LOW_DAYS_TO_COVER = 2.0
ELEVATED_DAYS_TO_COVER = 5.0
HIGH_DAYS_TO_COVER = 10.0


def high_piotroski(ctx: RuleContext) -> Optional[Signal]:
    if ctx.piotroski is None:
        return None
    score = ctx.piotroski.score
    if score < HIGH_PIOTROSKI:
        return None
    return Signal(
        type=SignalType.BULLISH,
        category=SignalCategory.FUNDAMENTAL,
        message=f"Strong Piotroski F-Score of {score} indicates solid fundamentals",
        priority=4,
        data={"score": score},
    )


def low_piotroski(ctx: RuleContext) -> Optional[Signal]:
    if ctx.piotroski is None:
        return None
    score = ctx.piotroski.score
    if score > LOW_PIOTROSKI:
        return None
    return Signal(
        type=SignalType.BEARISH,
        category=SignalCategory.FUNDAMENTAL,
        message=f"Weak Piotroski F-Score of {score} suggests fundamental concerns",
        priority=4,
        data={"score": score},
    )


def altman_distress(ctx: RuleContext) -> Optional[Signal]:
    altman = ctx.altman_z
    if altman is None or altman.zone != AltmanZone.DISTRESS:
        return None
    return Signal(
        type=SignalType.WARNING,
        category=SignalCategory.FUNDAMENTAL,
        message=f"Altman Z-Score of {altman.score:.2f} indicates elevated bankruptcy risk",
        priority=5,
        data={"score": altman.score, "zone": altman.zone.value},
    )


def altman_safe(ctx: RuleContext) -> Optional[Signal]:
    altman = ctx.altman_z
    if altman is None or altman.zone != AltmanZone.SAFE or altman.score <= STRONG_ALTMAN:
        return None
    return Signal(
        type=SignalType.BULLISH,
        category=SignalCategory.FUNDAMENTAL,
        message=f"Strong Altman Z-Score of {altman.score:.2f} indicates excellent financial health",
        priority=3,
        data={"score": altman.score, "zone": altman.zone.value},
    )


def insider_buying(ctx: RuleContext) -> Optional[Signal]:
    activity = ctx.insider_activity
    if activity is None:
        return None
    if activity.buy_count_90d < INSIDER_BUY_COUNT or activity.net_value_90d <= INSIDER_BUY_NET_VALUE:
        return None
    return Signal(
        type=SignalType.BULLISH,
        category=SignalCategory.INSIDER,
        message=(
            f"Strong insider buying: {activity.buy_count_90d} buys totaling "
            f"${activity.net_value_90d / 1000:.0f}K net in 90 days"
        ),
        priority=4,
        data={"buy_count": activity.buy_count_90d, "net_value": activity.net_value_90d},
    )


def insider_selling(ctx: RuleContext) -> Optional[Signal]:
    activity = ctx.insider_activity
    if activity is None:
        return None
    if activity.sell_count_90d < INSIDER_SELL_COUNT or activity.net_value_90d >= INSIDER_SELL_NET_VALUE:
        return None
    return Signal(
        type=SignalType.WARNING,
        category=SignalCategory.INSIDER,
        message=(
            f"Heavy insider selling: {activity.sell_count_90d} sells totaling "
            f"${-activity.net_value_90d / 1_000_000:.0f}M net in 90 days"
        ),
        priority=3,
        data={"sell_count": activity.sell_count_90d, "net_value": activity.net_value_90d},
    )


def high_growth(ctx: RuleContext) -> Optional[Signal]:
    fin = ctx.financials
    if fin is None or fin.revenue_growth_yoy <= HIGH_GROWTH_PERCENT:
        return None
    return Signal(
        type=SignalType.BULLISH,
        category=SignalCategory.FUNDAMENTAL,
        message=f"Strong revenue growth of {fin.revenue_growth_yoy:.1f}% YoY",
        priority=3,
        data={"growth": fin.revenue_growth_yoy},
    )


def negative_margins(ctx: RuleContext) -> Optional[Signal]:
    fin = ctx.financials
    if fin is None or fin.operating_margin >= 0:
        return None
    return Signal(
        type=SignalType.WARNING,
        category=SignalCategory.FUNDAMENTAL,
        message=f"Negative operating margin of {fin.operating_margin:.1f}% indicates unprofitable operations",
        priority=4,
        data={"margin": fin.operating_margin},
    )


def high_debt(ctx: RuleContext) -> Optional[Signal]:
    fin = ctx.financials
    if fin is None or fin.debt_to_equity <= HIGH_DEBT_TO_EQUITY:
        return None
    return Signal(
        type=SignalType.WARNING,
        category=SignalCategory.FUNDAMENTAL,
        message=f"High debt-to-equity ratio of {fin.debt_to_equity:.2f} indicates elevated leverage",
        priority=3,
        data={"debt_to_equity": fin.debt_to_equity},
    )


def strong_roic(ctx: RuleContext) -> Optional[Signal]:
    fin = ctx.financials
    if fin is None or fin.roic <= STRONG_ROIC_PERCENT:
        return None
    return Signal(
        type=SignalType.BULLISH,
        category=SignalCategory.FUNDAMENTAL,
        message=f"Excellent ROIC of {fin.roic:.1f}% shows strong capital efficiency",
        priority=3,
        data={"roic": fin.roic},
    )


def low_short_interest(ctx: RuleContext) -> Optional[Signal]:
    short = ctx.short_interest
    if short is None or short.short_percent_float >= LOW_SHORT_INTEREST:
        return None
    return Signal(
        type=SignalType.BULLISH,
        category=SignalCategory.TECHNICAL,
        message=f"Low short interest of {short.short_percent_float:.1f}% of float",
        priority=2,
        data={"short_percent_float": short.short_percent_float},
    )


def elevated_short_interest(ctx: RuleContext) -> Optional[Signal]:
    short = ctx.short_interest
    if short is None:
        return None
    if not ELEVATED_SHORT_INTEREST <= short.short_percent_float < HIGH_SHORT_INTEREST:
        return None
    return Signal(
        type=SignalType.BEARISH,
        category=SignalCategory.TECHNICAL,
        message=f"Elevated short interest of {short.short_percent_float:.1f}% of float",
        priority=3,
        data={"short_percent_float": short.short_percent_float},
    )


def high_short_interest(ctx: RuleContext) -> Optional[Signal]:
    short = ctx.short_interest
    if short is None or short.short_percent_float < HIGH_SHORT_INTEREST:
        return None
    return Signal(
        type=SignalType.WARNING,
        category=SignalCategory.TECHNICAL,
        message=f"High short interest of {short.short_percent_float:.1f}% of float signals heavy bearish bets",
        priority=4,
        data={"short_percent_float": short.short_percent_float},
    )


def low_days_to_cover(ctx: RuleContext) -> Optional[Signal]:
    short = ctx.short_interest
    if short is None or short.days_to_cover >= LOW_DAYS_TO_COVER:
        return None
    return Signal(
        type=SignalType.BULLISH,
        category=SignalCategory.TECHNICAL,
        message=f"Short positions could cover in {short.days_to_cover:.1f} days",
        priority=2,
        data={"days_to_cover": short.days_to_cover},
    )


def elevated_days_to_cover(ctx: RuleContext) -> Optional[Signal]:
    short = ctx.short_interest
    if short is None:
        return None
    if not ELEVATED_DAYS_TO_COVER <= short.days_to_cover < HIGH_DAYS_TO_COVER:
        return None
    return Signal(
        type=SignalType.BEARISH,
        category=SignalCategory.TECHNICAL,
        message=f"Elevated days to cover of {short.days_to_cover:.1f}",
        priority=3,
        data={"days_to_cover": short.days_to_cover},
    )


def high_days_to_cover(ctx: RuleContext) -> Optional[Signal]:
    short = ctx.short_interest
    if short is None or short.days_to_cover < HIGH_DAYS_TO_COVER:
        return None
    return Signal(
        type=SignalType.WARNING,
        category=SignalCategory.TECHNICAL,
        message=f"Days to cover of {short.days_to_cover:.1f} raises short squeeze risk",
        priority=4,
        data={"days_to_cover": short.days_to_cover},
    )


DEFAULT_RULES: Tuple[Rule, ...] = (
    high_piotroski,
    low_piotroski,
    altman_distress,
    altman_safe,
    insider_buying,
    insider_selling,
    high_growth,
    negative_margins,
    high_debt,
    strong_roic,
    low_short_interest,
    elevated_short_interest,
    high_short_interest,
    low_days_to_cover,
    elevated_days_to_cover,
    high_days_to_cover,
)
