"""Candle pattern detection: double top/bottom, engulfing, candle structure"""

from collections.abc import Sequence
from dataclasses import dataclass

from ..data.models import Candle
from ..models.analysis import EngulfingResult, PatternAnalysis, PatternMatch
from ..models.signals import Signal
from .levels import find_local_extrema


@dataclass(frozen=True)
class CandleStructure:
    """Candle structure analysis results"""
    range_value: float
    body: float
    upper_shadow: float
    lower_shadow: float
    body_pct: float
    upper_pct: float
    lower_pct: float
    is_bull: bool
    is_bear: bool
    is_doji: bool


def analyze_candle_structure(candle: Candle, doji_threshold: float = 0.1) -> CandleStructure:
    """
    Analyze candle structure components

    Args:
        candle: Candle to analyze
        doji_threshold: Threshold for doji detection (body % of range)

    Returns:
        CandleStructure with all analysis components
    """
    range_value = candle.high - candle.low
    body = abs(candle.close - candle.open)
    upper_shadow = candle.high - max(candle.open, candle.close)
    lower_shadow = min(candle.open, candle.close) - candle.low

    # Calculate percentages (handle zero range)
    if range_value > 0:
        body_pct = body / range_value
        upper_pct = upper_shadow / range_value
        lower_pct = lower_shadow / range_value
    else:
        body_pct = 0.0
        upper_pct = 0.0
        lower_pct = 0.0

    return CandleStructure(
        range_value=range_value,
        body=body,
        upper_shadow=upper_shadow,
        lower_shadow=lower_shadow,
        body_pct=body_pct,
        upper_pct=upper_pct,
        lower_pct=lower_pct,
        is_bull=candle.close > candle.open,
        is_bear=candle.close < candle.open,
        is_doji=body_pct <= doji_threshold
    )


def detect_double_top(candles: Sequence[Candle], radius: int = 2, similarity: float = 0.02,
                      min_separation: int = 5, min_reversal: float = 0.03) -> PatternMatch:
    """
    Detect a double top

    Two local maxima of the highs within similarity of each other, more than
    min_separation candles apart, with closes between them dropping at least
    min_reversal below the first peak.

    Returns:
        The first matching pair (earliest first peak), or not detected
    """
    highs = [c.high for c in candles]
    closes = [c.close for c in candles]
    maxima = find_local_extrema(highs, True, radius)

    for i, first in enumerate(maxima):
        for second in maxima[i + 1:]:
            diff = abs(first.value - second.value) / first.value
            if diff >= similarity or second.index - first.index <= min_separation:
                continue

            min_between = min(closes[first.index:second.index])
            drop = (first.value - min_between) / first.value
            if drop >= min_reversal:
                return PatternMatch(detected=True, first=first, second=second, reversal=drop)

    return PatternMatch.not_detected()


def detect_double_bottom(candles: Sequence[Candle], radius: int = 2, similarity: float = 0.02,
                         min_separation: int = 5, min_reversal: float = 0.03) -> PatternMatch:
    """
    Detect a double bottom

    Mirror of detect_double_top on the lows: closes between the two minima
    must rise at least min_reversal above the first bottom.
    """
    lows = [c.low for c in candles]
    closes = [c.close for c in candles]
    minima = find_local_extrema(lows, False, radius)

    for i, first in enumerate(minima):
        for second in minima[i + 1:]:
            diff = abs(first.value - second.value) / first.value
            if diff >= similarity or second.index - first.index <= min_separation:
                continue

            max_between = max(closes[first.index:second.index])
            rise = (max_between - first.value) / first.value
            if rise >= min_reversal:
                return PatternMatch(detected=True, first=first, second=second, reversal=rise)

    return PatternMatch.not_detected()


def detect_head_and_shoulders(candles: Sequence[Candle]) -> PatternMatch:
    """Head-and-shoulders detection is not implemented; always reports not detected."""
    return PatternMatch.not_detected()


def detect_inverse_head_and_shoulders(candles: Sequence[Candle]) -> PatternMatch:
    """Inverse head-and-shoulders detection is not implemented; always reports not detected."""
    return PatternMatch.not_detected()


def detect_engulfing(candles: Sequence[Candle], lookback: int = 5) -> EngulfingResult:
    """
    Scan the last lookback candle pairs for engulfing patterns

    Bullish: previous candle bearish, current bullish, and the current body
    strictly contains the previous one (open below previous close, close
    above previous open). Bearish is symmetric.
    """
    bullish = False
    bearish = False

    for i in range(1, min(lookback, len(candles) - 1) + 1):
        current = candles[-i]
        previous = candles[-i - 1]
        cur = analyze_candle_structure(current)
        prev = analyze_candle_structure(previous)

        if (cur.is_bull and prev.is_bear and
                current.open < previous.close and current.close > previous.open):
            bullish = True

        if (cur.is_bear and prev.is_bull and
                current.open > previous.close and current.close < previous.open):
            bearish = True

    return EngulfingResult(bullish=bullish, bearish=bearish)


def analyze_price_patterns(candles: Sequence[Candle], window: int = 30, radius: int = 2,
                           similarity: float = 0.02, min_separation: int = 5,
                           min_reversal: float = 0.03, engulfing_lookback: int = 5) -> PatternAnalysis:
    """
    Run every detector over the last window candles

    Bullish evidence (double bottom, inverse head-and-shoulders, bullish
    engulfing) takes precedence over bearish evidence.
    """
    recent = list(candles[-window:]) if window > 0 else list(candles)

    double_top = detect_double_top(recent, radius, similarity, min_separation, min_reversal)
    double_bottom = detect_double_bottom(recent, radius, similarity, min_separation, min_reversal)
    head_and_shoulders = detect_head_and_shoulders(recent)
    inverse_head_and_shoulders = detect_inverse_head_and_shoulders(recent)
    engulfing = detect_engulfing(recent, engulfing_lookback)

    if double_bottom.detected or inverse_head_and_shoulders.detected or engulfing.bullish:
        signal = Signal.BULLISH
    elif double_top.detected or head_and_shoulders.detected or engulfing.bearish:
        signal = Signal.BEARISH
    else:
        signal = Signal.NEUTRAL

    return PatternAnalysis(
        double_top=double_top,
        double_bottom=double_bottom,
        head_and_shoulders=head_and_shoulders,
        inverse_head_and_shoulders=inverse_head_and_shoulders,
        engulfing=engulfing,
        signal=signal,
    )
