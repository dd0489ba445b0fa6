"""Signal value types and the read-only inputs rules evaluate against."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union

from ..analytics.scores import AltmanZResult, PiotroskiResult

Scalar = Union[int, float, str]


class SignalType(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    WARNING = "warning"


class SignalCategory(str, Enum):
    FUNDAMENTAL = "fundamental"
    INSIDER = "insider"
    TECHNICAL = "technical"


@dataclass(frozen=True)
class Signal:
    """A prioritized, human-readable observation produced by one rule."""
    type: SignalType
    category: SignalCategory
    message: str
    priority: int
    data: Mapping[str, Scalar] = field(default_factory=dict)

    def __post_init__(self):
        # Evidence is read-only once the signal exists
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))


@dataclass(frozen=True)
class FinancialsData:
    """Financial ratios consulted by rules. Percentages are 0-100 scaled."""
    revenue_growth_yoy: float = 0.0
    operating_margin: float = 0.0
    debt_to_equity: float = 0.0
    roic: float = 0.0


@dataclass(frozen=True)
class InsiderActivityData:
    """Insider trading summary over the trailing 90 days."""
    buy_count_90d: int = 0
    sell_count_90d: int = 0
    net_value_90d: float = 0.0


@dataclass(frozen=True)
class ShortInterestData:
    short_percent_float: float = 0.0
    days_to_cover: float = 0.0


@dataclass(frozen=True)
class StockData:
    """Optional per-ticker inputs handed to the signal generator."""
    ticker: str = ""
    financials: Optional[FinancialsData] = None
    insider_activity: Optional[InsiderActivityData] = None
    short_interest: Optional[ShortInterestData] = None


@dataclass(frozen=True)
class RuleContext:
    """Inputs for one evaluation. Scores are None when no statements were available."""
    piotroski: Optional[PiotroskiResult] = None
    altman_z: Optional[AltmanZResult] = None
    financials: Optional[FinancialsData] = None
    insider_activity: Optional[InsiderActivityData] = None
    short_interest: Optional[ShortInterestData] = None
