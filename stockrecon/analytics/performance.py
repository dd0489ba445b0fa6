"""Price-history normalization and performance metrics."""

import logging
from datetime import date
from typing import Iterable, Mapping, Optional, Tuple

import pandas as pd

from ..domain.models import Performance

logger = logging.getLogger(__name__)

# Trading-day offsets from the most recent bar
DAY_OFFSET = 1
WEEK_OFFSET = 5
MONTH_OFFSET = 21
YEAR_OFFSET = 252
MIN_BARS_FOR_YEAR = 251


def normalize_price_history(rows: Iterable[Mapping]) -> Optional[pd.DataFrame]:
    """
    Normalize daily bars to a DataFrame indexed by date, newest first.

    Returns:
        DataFrame with a 'Close' column and DatetimeIndex named 'Date',
        or None if no usable bars remain.
    """
    df = pd.DataFrame(list(rows))
    if df.empty:
        return None

    df.columns = [str(col).strip().capitalize() for col in df.columns]
    if "Date" not in df.columns or "Close" not in df.columns:
        logger.warning("Price history missing date/close columns: %s", list(df.columns))
        return None

    df["Date"] = pd.to_datetime(df["Date"], errors="coerce")
    df["Close"] = pd.to_numeric(df["Close"], errors="coerce")
    df = df.dropna(subset=["Date", "Close"]).set_index("Date")[["Close"]]
    df = df.sort_index(ascending=False)

    if df.empty:
        return None
    return df


def _change_since(closes: pd.Series, offset: int, current_price: float) -> float:
    if len(closes) <= offset:
        return 0.0
    old_price = float(closes.iloc[offset])
    if old_price == 0:
        return 0.0
    return (current_price - old_price) / old_price * 100


def calculate_performance(
    history: Optional[pd.DataFrame],
    current_price: float,
    year_high: float,
    today: Optional[date] = None,
) -> Performance:
    """
    Price change over day/week/month/YTD/year windows.

    Windows are counted in trading days from the newest bar; the one-year
    change needs close to a full year of bars.
    """
    percent_of_high = current_price / year_high * 100 if year_high > 0 else 0.0
    if history is None or history.empty:
        return Performance(percent_of_52_week_high=percent_of_high)

    closes = history["Close"]
    year1 = 0.0
    if len(closes) >= MIN_BARS_FOR_YEAR:
        year1 = _change_since(closes, YEAR_OFFSET, current_price)

    ytd = 0.0
    year = (today or date.today()).year
    this_year = closes[closes.index.year == year]
    if not this_year.empty:
        first_close = float(this_year.iloc[-1])
        if first_close > 0:
            ytd = (current_price - first_close) / first_close * 100

    return Performance(
        day1_change=_change_since(closes, DAY_OFFSET, current_price),
        week1_change=_change_since(closes, WEEK_OFFSET, current_price),
        month1_change=_change_since(closes, MONTH_OFFSET, current_price),
        ytd_change=ytd,
        year1_change=year1,
        percent_of_52_week_high=percent_of_high,
    )


def moving_averages(history: Optional[pd.DataFrame]) -> Tuple[float, float]:
    """Latest 50- and 200-day simple moving averages (0.0 when too short)."""
    if history is None or history.empty:
        return 0.0, 0.0

    closes = history["Close"].sort_index()
    ma_50 = closes.rolling(window=50).mean().iloc[-1] if len(closes) >= 50 else 0.0
    ma_200 = closes.rolling(window=200).mean().iloc[-1] if len(closes) >= 200 else 0.0
    return float(ma_50), float(ma_200)
