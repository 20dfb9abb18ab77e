"""Fixed classification vocabulary shared by analyzers and the aggregator"""

from enum import Enum


class Signal(str, Enum):
    """Directional classification with optional intensity modifier"""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"
    STRONGLY_BULLISH = "strongly bullish"
    STRONGLY_BEARISH = "strongly bearish"
    VERY_BULLISH = "very bullish"
    VERY_BEARISH = "very bearish"

    @property
    def is_bullish(self) -> bool:
        return self in (Signal.BULLISH, Signal.STRONGLY_BULLISH, Signal.VERY_BULLISH)

    @property
    def is_bearish(self) -> bool:
        return self in (Signal.BEARISH, Signal.STRONGLY_BEARISH, Signal.VERY_BEARISH)

    @property
    def is_intense(self) -> bool:
        """True for the "strongly" and "very" variants"""
        return self in (
            Signal.STRONGLY_BULLISH, Signal.STRONGLY_BEARISH,
            Signal.VERY_BULLISH, Signal.VERY_BEARISH,
        )


class TrendStrength(str, Enum):
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very strong"


class Condition(str, Enum):
    """Oscillator reading relative to its bounds"""
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


class MarketStructure(str, Enum):
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"
    RANGING = "ranging"


class VolatilityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityLevel(str, Enum):
    """Discussion volume reported by sentiment sources"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class VolumeSignal(str, Enum):
    """Daily volume profile of the technical analysis"""
    STRONG = "strong"
    INCREASING = "increasing"
    DECREASING = "decreasing"
    NEUTRAL = "neutral"


class VolumeTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class Pressure(str, Enum):
    BUYING = "buying"
    SELLING = "selling"
    NEUTRAL = "neutral"


class PressureSource(str, Enum):
    """Where buy/sell volumes came from, best first"""
    RECENT_TRADES = "recent_trades"
    TAKER_VOLUME = "taker_volume"
    CANDLE_DIRECTION = "candle_direction"


class VolumeWall(str, Enum):
    STRONG_SUPPORT = "strong support"
    STRONG_RESISTANCE = "strong resistance"
    BALANCED = "balanced"


class Concentration(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class FearGreed(str, Enum):
    EXTREME_FEAR = "extreme fear"
    FEAR = "fear"
    NEUTRAL = "neutral"
    GREED = "greed"
    EXTREME_GREED = "extreme greed"


class Confidence(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very high"


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"
    NEUTRAL = "neutral"

    @property
    def favoured_signal(self) -> Signal:
        """Plain signal that agrees with this direction"""
        if self is Direction.LONG:
            return Signal.BULLISH
        if self is Direction.SHORT:
            return Signal.BEARISH
        return Signal.NEUTRAL

    def agrees_with(self, signal: Signal) -> bool:
        if self is Direction.LONG:
            return signal.is_bullish
        if self is Direction.SHORT:
            return signal.is_bearish
        return False


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class EntryType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"
