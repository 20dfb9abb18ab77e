"""Standard deviation, Bollinger Bands, ATR and historical volatility"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from ..data.models import Candle
from .moving_average import sma


@dataclass(frozen=True)
class BollingerBands:
    """Bollinger Band series, index-aligned with the input prices"""
    upper: list[Optional[float]]
    middle: list[Optional[float]]
    lower: list[Optional[float]]


def standard_deviation(values: Sequence[float]) -> Optional[float]:
    """
    Calculate population standard deviation

    Args:
        values: Numeric sample

    Returns:
        Standard deviation or None for an empty sample
    """
    if not values:
        return None

    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def bollinger_bands(values: Sequence[float], period: int = 20,
                    std_multiplier: float = 2.0) -> BollingerBands:
    """
    Calculate Bollinger Bands

    middle = SMA(period), bands = middle +/- std_multiplier * stddev(window)

    Args:
        values: Ordered close prices
        period: Window length (default 20)
        std_multiplier: Band width in standard deviations (default 2.0)

    Returns:
        BollingerBands with upper, middle and lower series
    """
    middle = sma(values, period)
    upper: list[Optional[float]] = []
    lower: list[Optional[float]] = []

    for i, mid in enumerate(middle):
        if mid is None:
            upper.append(None)
            lower.append(None)
            continue

        std = standard_deviation(values[i - period + 1:i + 1])
        upper.append(mid + std_multiplier * std)
        lower.append(mid - std_multiplier * std)

    return BollingerBands(upper=upper, middle=middle, lower=lower)


def true_range(current: Candle, previous: Optional[Candle] = None) -> float:
    """
    Calculate True Range for a single candle

    TR = max(high - low, abs(high - prev_close), abs(low - prev_close))

    Args:
        current: Current candle
        previous: Previous candle (None for first candle)

    Returns:
        True Range value
    """
    if previous is None:
        # First candle case - use high-low range
        return current.high - current.low

    range_hl = current.high - current.low
    range_hc = abs(current.high - previous.close)
    range_lc = abs(current.low - previous.close)

    return max(range_hl, range_hc, range_lc)


def true_ranges(candles: Sequence[Candle]) -> list[float]:
    """True Range of every candle in chronological order"""
    return [
        true_range(candles[i], candles[i - 1] if i > 0 else None)
        for i in range(len(candles))
    ]


def atr(candles: Sequence[Candle], period: int = 14) -> list[Optional[float]]:
    """
    Calculate Average True Range as the SMA of true ranges

    Args:
        candles: Candles in chronological order
        period: ATR period (default 14)

    Returns:
        List of ATR values, None where history is insufficient
    """
    return sma(true_ranges(candles), period)


def historical_volatility(values: Sequence[float], period: int = 14,
                          annualization_days: int = 365) -> Optional[float]:
    """
    Calculate annualized historical volatility

    Standard deviation of the last period close-to-close returns scaled by
    sqrt(annualization_days).

    Args:
        values: Ordered close prices
        period: Number of returns used (default 14)
        annualization_days: Trading days per year (default 365, crypto trades daily)

    Returns:
        Annualized volatility as a fraction, or None with fewer than period + 1 closes
    """
    if period < 1 or len(values) < period + 1:
        return None

    recent = values[-(period + 1):]
    returns = []
    for i in range(1, len(recent)):
        if recent[i - 1] == 0:
            return None
        returns.append((recent[i] - recent[i - 1]) / recent[i - 1])

    return standard_deviation(returns) * math.sqrt(annualization_days)
