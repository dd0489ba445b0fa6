"""Signal generation: run every registered rule and rank the results."""

import logging
from typing import List, Optional, Sequence

from ..analytics.scores import AltmanZResult, PiotroskiResult
from .rules import DEFAULT_RULES, Rule
from .types import RuleContext, Signal, StockData

logger = logging.getLogger(__name__)


class SignalGenerator:
    """Evaluates a fixed, ordered rule registry against one ticker's data."""

    def __init__(self, rules: Optional[Sequence[Rule]] = None):
        self.rules = tuple(DEFAULT_RULES if rules is None else rules)

    def generate_all(
        self,
        stock_data: StockData,
        piotroski: Optional[PiotroskiResult],
        altman_z: Optional[AltmanZResult],
    ) -> List[Signal]:
        """
        Evaluate all rules and return the signals that fired.

        Output is sorted by priority, highest first. The sort is stable so
        equal-priority signals keep registration order. Score rules stay silent
        when ``piotroski`` or ``altman_z`` is None.
        """
        ctx = RuleContext(
            piotroski=piotroski,
            altman_z=altman_z,
            financials=stock_data.financials,
            insider_activity=stock_data.insider_activity,
            short_interest=stock_data.short_interest,
        )

        signals = [signal for signal in (rule(ctx) for rule in self.rules) if signal is not None]
        ranked = sorted(signals, key=lambda signal: signal.priority, reverse=True)
        logger.debug("Generated %d signal(s) for %s", len(ranked), stock_data.ticker or "<unknown>")
        return ranked
