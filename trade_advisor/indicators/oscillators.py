"""Stochastic oscillator and Commodity Channel Index"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from .moving_average import sma


@dataclass(frozen=True)
class StochasticResult:
    """%K and %D series, index-aligned with the input candles"""
    k: list[Optional[float]]
    d: list[Optional[float]]


def stochastic(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float],
               k_period: int = 14, d_period: int = 3) -> StochasticResult:
    """
    Calculate the Stochastic oscillator

    %K = (close - lowest low) / (highest high - lowest low) * 100 over k_period,
    %D = SMA(%K, d_period). A flat window (highest == lowest) has no %K.

    Args:
        highs: High prices
        lows: Low prices
        closes: Close prices
        k_period: %K lookback (default 14)
        d_period: %D smoothing (default 3)

    Returns:
        StochasticResult with %K and %D series
    """
    n = min(len(highs), len(lows), len(closes))
    k_values: list[Optional[float]] = [None] * n

    if k_period >= 1:
        for i in range(k_period - 1, n):
            highest_high = max(highs[i - k_period + 1:i + 1])
            lowest_low = min(lows[i - k_period + 1:i + 1])
            if highest_high == lowest_low:
                continue
            k_values[i] = (closes[i] - lowest_low) / (highest_high - lowest_low) * 100.0

    return StochasticResult(k=k_values, d=sma(k_values, d_period))


def cci(highs: Sequence[float], lows: Sequence[float], closes: Sequence[float],
        period: int = 20, constant: float = 0.015) -> list[Optional[float]]:
    """
    Calculate Commodity Channel Index

    CCI = (typical - SMA(typical)) / (constant * mean absolute deviation),
    with typical = (high + low + close) / 3.

    Args:
        highs: High prices
        lows: Low prices
        closes: Close prices
        period: Lookback (default 20)
        constant: Lambert constant (default 0.015)

    Returns:
        List of CCI values, None where history is insufficient or the window is flat
    """
    n = min(len(highs), len(lows), len(closes))
    typical = [(highs[i] + lows[i] + closes[i]) / 3.0 for i in range(n)]
    result: list[Optional[float]] = [None] * n

    if period < 1:
        return result

    for i in range(period - 1, n):
        window = typical[i - period + 1:i + 1]
        mean = sum(window) / period
        mean_deviation = sum(abs(tp - mean) for tp in window) / period
        if mean_deviation == 0:
            continue
        result[i] = (typical[i] - mean) / (constant * mean_deviation)

    return result
