"""RSI and MACD momentum indicators"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from .moving_average import ema


@dataclass(frozen=True)
class MACDResult:
    """MACD series, index-aligned with the input prices"""
    macd_line: list[Optional[float]]
    signal_line: list[Optional[float]]
    histogram: list[Optional[float]]


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def rsi(values: Sequence[float], period: int = 14) -> list[Optional[float]]:
    """
    Calculate Relative Strength Index with Wilder smoothing

    The first value (at index period) uses the plain average gain/loss of
    the first period deltas; later values use
    avg = (avg * (period - 1) + current) / period.

    Args:
        values: Ordered close prices
        period: RSI period (default 14)

    Returns:
        List of RSI values in [0, 100], None where history is insufficient
    """
    n = len(values)
    if period < 1 or n < period + 1:
        return [None] * n

    gains = []
    losses = []
    for i in range(1, n):
        delta = values[i] - values[i - 1]
        gains.append(delta if delta > 0 else 0.0)
        losses.append(-delta if delta < 0 else 0.0)

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    result: list[Optional[float]] = [None] * period
    result.append(_rsi_value(avg_gain, avg_loss))

    for i in range(period, n - 1):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result.append(_rsi_value(avg_gain, avg_loss))

    return result


def macd(values: Sequence[float], fast_period: int = 12, slow_period: int = 26,
         signal_period: int = 9) -> MACDResult:
    """
    Calculate Moving Average Convergence Divergence

    The MACD line is EMA(fast) - EMA(slow) wherever both are defined. The
    signal line is the EMA of the defined MACD values, shifted back into
    alignment; the histogram is their difference where both exist.

    Args:
        values: Ordered close prices
        fast_period: Fast EMA period (default 12)
        slow_period: Slow EMA period (default 26)
        signal_period: Signal EMA period (default 9)

    Returns:
        MACDResult with three index-aligned series
    """
    n = len(values)
    fast = ema(values, fast_period)
    slow = ema(values, slow_period)

    macd_line: list[Optional[float]] = [
        f - s if f is not None and s is not None else None
        for f, s in zip(fast, slow)
    ]

    defined = [(i, v) for i, v in enumerate(macd_line) if v is not None]
    signal_line: list[Optional[float]] = [None] * n

    signal_values = ema([v for _, v in defined], signal_period)
    for (i, _), signal_value in zip(defined, signal_values):
        signal_line[i] = signal_value

    histogram: list[Optional[float]] = [
        m - s if m is not None and s is not None else None
        for m, s in zip(macd_line, signal_line)
    ]

    return MACDResult(macd_line=macd_line, signal_line=signal_line, histogram=histogram)
