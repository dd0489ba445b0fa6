"""Declarative rule engine producing ranked signals."""

from .generator import SignalGenerator
from .rules import DEFAULT_RULES
from .types import (
    FinancialsData,
    InsiderActivityData,
    RuleContext,
    ShortInterestData,
    Signal,
    SignalCategory,
    SignalType,
    StockData,
)

__all__ = [
    "DEFAULT_RULES",
    "FinancialsData",
    "InsiderActivityData",
    "RuleContext",
    "ShortInterestData",
    "Signal",
    "SignalCategory",
    "SignalGenerator",
    "SignalType",
    "StockData",
]
