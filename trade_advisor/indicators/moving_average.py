"""Simple and exponential moving averages"""

from collections.abc import Sequence
from typing import Optional


def latest(series: Sequence[Optional[float]]) -> Optional[float]:
    """
    Last value of an indicator series

    Args:
        series: Index-aligned indicator output

    Returns:
        Final element, or None for an empty series or an absent final value
    """
    return series[-1] if series else None


def sma(values: Sequence[Optional[float]], period: int) -> list[Optional[float]]:
    """
    Calculate Simple Moving Average

    output[i] is None for i < period - 1, otherwise the mean of
    values[i - period + 1 .. i]. A window holding an absent value is absent.

    Args:
        values: Ordered numeric sequence
        period: Window length

    Returns:
        List of SMA values, same length as values
    """
    n = len(values)
    if period < 1 or n < period:
        return [None] * n

    result: list[Optional[float]] = [None] * (period - 1)
    for i in range(period - 1, n):
        window = values[i - period + 1:i + 1]
        if any(v is None for v in window):
            result.append(None)
        else:
            result.append(sum(window) / period)

    return result


def ema(values: Sequence[float], period: int) -> list[Optional[float]]:
    """
    Calculate Exponential Moving Average

    Seeded with the SMA of the first period values, then
    ema[i] = (values[i] - ema[i-1]) * 2 / (period + 1) + ema[i-1].

    Args:
        values: Ordered numeric sequence without gaps
        period: EMA period

    Returns:
        List of EMA values padded with None for indices < period - 1
    """
    n = len(values)
    if period < 1 or n < period:
        return [None] * n

    multiplier = 2.0 / (period + 1)
    current = sum(values[:period]) / period

    result: list[Optional[float]] = [None] * (period - 1)
    result.append(current)

    for i in range(period, n):
        current = (values[i] - current) * multiplier + current
        result.append(current)

    return result
