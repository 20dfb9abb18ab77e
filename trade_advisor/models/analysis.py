"""
Immutable analysis results.

Every analyzer produces one of these snapshots per request. They are consumed
by the aggregator and never mutated after creation. Optional sub-results that
could not be computed are None and named in the owning result's ``omitted``.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..indicators.regression import LinearRegression
from .signals import (
    ActivityLevel,
    Concentration,
    Condition,
    FearGreed,
    MarketStructure,
    Pressure,
    PressureSource,
    Signal,
    TrendStrength,
    VolatilityLevel,
    VolumeSignal,
    VolumeTrend,
    VolumeWall,
)


# Levels and patterns

@dataclass(frozen=True)
class Extremum:
    """Local price extremum at a candle index"""
    index: int
    value: float


@dataclass(frozen=True)
class Level:
    """Support or resistance level; strength is the number of merged extrema"""
    price: float
    strength: int = 1


@dataclass(frozen=True)
class PatternMatch:
    """Double top/bottom (or head-and-shoulders) detection result"""
    detected: bool
    first: Optional[Extremum] = None
    second: Optional[Extremum] = None
    reversal: Optional[float] = None         # Drop (top) or rise (bottom) between the extrema, as a fraction

    @classmethod
    def not_detected(cls) -> "PatternMatch":
        return cls(detected=False)


@dataclass(frozen=True)
class EngulfingResult:
    bullish: bool
    bearish: bool


# Technical analysis

@dataclass(frozen=True)
class IndicatorSnapshot:
    """Latest value of each daily indicator"""
    sma: Mapping[int, Optional[float]]
    rsi: Optional[float]
    macd_line: Optional[float]
    signal_line: Optional[float]
    histogram: Optional[float]
    bollinger_upper: Optional[float]
    bollinger_middle: Optional[float]
    bollinger_lower: Optional[float]
    historical_volatility: Optional[float]
    atr: Optional[float]


@dataclass(frozen=True)
class TrendAnalysis:
    direction: Signal
    strength: TrendStrength
    adx: Optional[float]
    regression: Optional[LinearRegression]


@dataclass(frozen=True)
class SupportResistance:
    """Levels on each side of the current price, nearest first"""
    current_price: float
    support: tuple[Level, ...]
    resistance: tuple[Level, ...]

    @property
    def support_prices(self) -> tuple[float, ...]:
        return tuple(level.price for level in self.support)

    @property
    def resistance_prices(self) -> tuple[float, ...]:
        return tuple(level.price for level in self.resistance)

    @property
    def nearest_support(self) -> Optional[float]:
        return self.support[0].price if self.support else None

    @property
    def nearest_resistance(self) -> Optional[float]:
        return self.resistance[0].price if self.resistance else None

    @property
    def support_distance(self) -> Optional[float]:
        """Percent distance from current price down to nearest support"""
        if self.nearest_support is None:
            return None
        return (self.current_price - self.nearest_support) / self.current_price * 100.0

    @property
    def resistance_distance(self) -> Optional[float]:
        """Percent distance from current price up to nearest resistance"""
        if self.nearest_resistance is None:
            return None
        return (self.nearest_resistance - self.current_price) / self.current_price * 100.0


@dataclass(frozen=True)
class VolatilityAnalysis:
    daily: Optional[float]                   # Mean daily (high - low) / low, percent
    hourly: Optional[float]
    bollinger_band_width: Optional[float]    # (upper - lower) / middle, percent
    level: VolatilityLevel


@dataclass(frozen=True)
class MomentumAnalysis:
    rsi: Optional[float]
    rsi_condition: Condition
    macd_line: Optional[float]
    signal_line: Optional[float]
    histogram: Optional[float]
    macd_condition: Signal
    overall: Signal


@dataclass(frozen=True)
class MovingAverageAnalysis:
    """Price posture against the configured SMAs (short, medium, long)"""
    current_price: float
    sma: Mapping[int, Optional[float]]
    above: Mapping[int, Optional[bool]]      # None when the SMA itself is absent
    golden_cross: Optional[bool]
    death_cross: Optional[bool]
    trend: Signal


@dataclass(frozen=True)
class OscillatorAnalysis:
    rsi: Optional[float]
    rsi_condition: Condition
    stochastic_k: Optional[float]
    stochastic_d: Optional[float]
    stochastic_condition: Condition
    cci: Optional[float]
    cci_condition: Condition
    consensus: Signal


@dataclass(frozen=True)
class PatternAnalysis:
    double_top: PatternMatch
    double_bottom: PatternMatch
    head_and_shoulders: PatternMatch
    inverse_head_and_shoulders: PatternMatch
    engulfing: EngulfingResult
    signal: Signal


@dataclass(frozen=True)
class VolumeProfile:
    average_volume: float
    recent_average_volume: float
    ratio: Optional[float]                   # Recent average / overall average
    recent_spike: bool
    spike_count: int
    spike_percentage: float
    bearish_divergence: bool
    bullish_divergence: bool
    signal: VolumeSignal


@dataclass(frozen=True)
class MarketStructureAnalysis:
    higher_highs: bool
    higher_lows: bool
    lower_highs: bool
    lower_lows: bool
    structure: MarketStructure


@dataclass(frozen=True)
class ArbitrageOpportunity:
    """Buy on buy_venue, sell on sell_venue"""
    buy_venue: str
    sell_venue: str
    price_difference: float                  # Percent
    potential_profit: float                  # Percent, after estimated fees


@dataclass(frozen=True)
class NormalizedMarket:
    """Latest daily close and summed daily volume aligned across venues"""
    symbol: str
    prices: Mapping[str, float]
    average_price: float
    deviations: Mapping[str, float]          # Percent from the average
    volumes: Mapping[str, float]
    total_volume: float
    distribution: Mapping[str, float]        # Percent of total volume
    arbitrage: tuple[ArbitrageOpportunity, ...] = ()

    @property
    def arbitrage_found(self) -> bool:
        return len(self.arbitrage) > 0


@dataclass(frozen=True)
class TechnicalAnalysisResult:
    symbol: str
    timestamp: datetime
    current_price: float
    indicators: IndicatorSnapshot
    trend: TrendAnalysis
    support_resistance: SupportResistance
    volatility: VolatilityAnalysis
    momentum: MomentumAnalysis
    moving_averages: MovingAverageAnalysis
    oscillators: OscillatorAnalysis
    patterns: PatternAnalysis
    volume_profile: VolumeProfile
    market_structure: MarketStructureAnalysis
    normalized: Optional[NormalizedMarket] = None
    omitted: tuple[str, ...] = ()


# Volume analysis

@dataclass(frozen=True)
class VolumeTrendAnalysis:
    last_24h: float
    last_7d: float
    last_30d: float
    average_daily_24h: float
    average_daily_7d: float
    average_daily_30d: float
    trend_24h_vs_7d: Optional[float]         # Percent change
    trend_7d_vs_30d: Optional[float]
    classification: VolumeTrend
    hourly_spikes: int                       # Hourly bars above the 7d average daily volume


@dataclass(frozen=True)
class VolumeDistribution:
    volumes: Mapping[str, float]
    total: float
    percentages: Mapping[str, float]
    dominant_venue: str
    dominant_percentage: float
    concentration: Concentration


@dataclass(frozen=True)
class BuySellPressure:
    buy_volume: float
    sell_volume: float
    ratio: float
    pressure: Pressure
    source: PressureSource

    @property
    def approximated(self) -> bool:
        """True when volumes were inferred from candle direction"""
        return self.source is PressureSource.CANDLE_DIRECTION


@dataclass(frozen=True)
class VolumeWallLevel:
    price: float
    volume: float                            # Cumulative quantity that formed the wall


@dataclass(frozen=True)
class VolumeAtPrice:
    bid_volume: float
    ask_volume: float
    bid_ask_ratio: Optional[float]
    support_walls: tuple[VolumeWallLevel, ...]
    resistance_walls: tuple[VolumeWallLevel, ...]
    bid_notional: float
    ask_notional: float
    classification: VolumeWall


@dataclass(frozen=True)
class VolumeAnomaly:
    index: int
    timestamp: datetime
    volume: float
    z_score: float


@dataclass(frozen=True)
class AnomalyReport:
    anomalies: tuple[VolumeAnomaly, ...]
    recent: tuple[VolumeAnomaly, ...]

    @property
    def has_recent(self) -> bool:
        return len(self.recent) > 0


@dataclass(frozen=True)
class VolumeAnalysisResult:
    symbol: str
    timestamp: datetime
    trends: VolumeTrendAnalysis
    pressure: BuySellPressure
    daily_anomalies: AnomalyReport
    hourly_anomalies: Optional[AnomalyReport] = None
    distribution: Optional[VolumeDistribution] = None
    volume_at_price: Optional[VolumeAtPrice] = None
    omitted: tuple[str, ...] = ()


# Sentiment

@dataclass(frozen=True)
class SocialSentiment:
    score: float
    sentiment: Signal
    volume: ActivityLevel = ActivityLevel.MEDIUM


@dataclass(frozen=True)
class NewsSentiment:
    score: float
    sentiment: Signal
    headlines: tuple[str, ...] = ()
    volume: ActivityLevel = ActivityLevel.MEDIUM


@dataclass(frozen=True)
class FearGreedIndex:
    value: int
    classification: FearGreed


@dataclass(frozen=True)
class FundingRates:
    average: float
    sentiment: Signal


@dataclass(frozen=True)
class OverallSentiment:
    score: float
    classification: Signal


@dataclass(frozen=True)
class SentimentResult:
    symbol: str
    social: SocialSentiment
    news: NewsSentiment
    fear_greed: FearGreedIndex
    funding: FundingRates
    overall: OverallSentiment
    error: Optional[str] = None              # Set when this is a substituted default
