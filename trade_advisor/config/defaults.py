"""Default configuration parameters for the analysis and plan synthesis pipeline."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IndicatorParams:
    """Indicator periods used for the daily indicator snapshot."""
    sma_periods: tuple[int, ...] = (20, 50, 200)
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bollinger_period: int = 20
    bollinger_std_mult: float = 2.0
    atr_period: int = 14
    stochastic_k: int = 14
    stochastic_d: int = 3
    cci_period: int = 20
    cci_constant: float = 0.015
    volatility_period: int = 14
    annualization_days: int = 365


@dataclass(frozen=True)
class TrendParams:
    """Trend direction and strength classification."""
    regression_window: int = 30                      # Daily closes fed to the regression
    slope_threshold: float = 0.001                   # |slope| above this is directional
    adx_multiplier: float = 10.0                     # Scales mean % move into the ADX proxy
    moderate_threshold: float = 25.0
    strong_threshold: float = 50.0
    very_strong_threshold: float = 75.0


@dataclass(frozen=True)
class MomentumParams:
    """RSI condition thresholds."""
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0


@dataclass(frozen=True)
class OscillatorParams:
    """Stochastic and CCI condition thresholds."""
    stochastic_overbought: float = 80.0
    stochastic_oversold: float = 20.0
    cci_overbought: float = 100.0
    cci_oversold: float = -100.0


@dataclass(frozen=True)
class VolatilityParams:
    """Candle range volatility classification."""
    daily_window: int = 14
    hourly_window: int = 24
    low_threshold: float = 3.0                       # Avg daily range % below this is "low"
    high_threshold: float = 7.0                      # Avg daily range % above this is "high"


@dataclass(frozen=True)
class LevelParams:
    """Support/resistance detection."""
    window: int = 5                                  # Extremum radius in candles
    cluster_threshold: float = 0.01                  # Relative distance merging two extrema
    max_levels: int = 5                              # Levels kept on each side of price


@dataclass(frozen=True)
class PatternParams:
    """Double top/bottom and engulfing detection."""
    window: int = 30                                 # Daily candles scanned
    extrema_radius: int = 2
    similarity_threshold: float = 0.02               # Max relative gap between the two peaks
    min_separation: int = 5                          # Peaks must be further apart than this
    min_reversal: float = 0.03                       # Min retracement between the peaks
    engulfing_lookback: int = 5                      # Candle pairs checked


@dataclass(frozen=True)
class MarketStructureParams:
    """Higher-high / lower-low structure detection."""
    lookback: int = 10


@dataclass(frozen=True)
class VolumeProfileParams:
    """Daily volume profile used by the technical analysis."""
    recent_window: int = 5
    spike_multiplier: float = 2.0
    spike_recent_window: int = 3
    strong_ratio: float = 1.5
    increasing_ratio: float = 1.2
    decreasing_ratio: float = 0.8


@dataclass(frozen=True)
class VolumeParams:
    """Volume analyzer parameters."""
    hours_per_day: int = 24
    week_days: int = 7
    month_days: int = 30
    trend_threshold_pct: float = 20.0                # +/- % change of 24h vs 7d average
    zscore_threshold: float = 3.0
    recent_hourly_points: int = 24
    recent_daily_points: int = 7
    pressure_buying_ratio: float = 1.2
    pressure_selling_ratio: float = 0.8
    wall_support_ratio: float = 1.5
    wall_resistance_ratio: float = 0.67
    wall_volume_fraction: float = 0.1                # Share of bid sum forming a wall
    max_wall_levels: int = 3
    concentration_high_pct: float = 70.0
    concentration_low_pct: float = 40.0


@dataclass(frozen=True)
class ArbitrageParams:
    """Cross-venue arbitrage detection."""
    threshold_pct: float = 0.5
    fee_pct: float = 0.2


@dataclass(frozen=True)
class SentimentParams:
    """Classification helpers offered to sentiment providers."""
    score_threshold: float = 0.3
    score_strong_threshold: float = 0.6
    overall_threshold: float = 0.2
    overall_strong_threshold: float = 0.5
    extreme_fear_max: int = 25
    fear_max: int = 40
    neutral_max: int = 60
    greed_max: int = 75
    funding_threshold: float = 0.0005
    funding_strong_threshold: float = 0.001
    social_weight: float = 0.3
    news_weight: float = 0.2
    fear_greed_weight: float = 0.3
    funding_weight: float = 0.2


@dataclass(frozen=True)
class AggregationParams:
    """Direction vote margin and confidence bands."""
    vote_margin: int = 3
    moderate_confidence: int = 3
    high_confidence: int = 5
    very_high_confidence: int = 7


def _default_base_leverage() -> dict[str, int]:
    return {"very high": 5, "high": 3, "moderate": 2, "low": 1}


def _default_volatility_multipliers() -> dict[str, float]:
    return {"low": 1.5, "medium": 1.0, "high": 0.5}


@dataclass(frozen=True)
class PlanParams:
    """Entry, exit and sizing parameters for trade plans."""
    market_allocation: float = 0.4
    limit_allocations: tuple[float, ...] = (0.3, 0.3)
    take_profit_allocations: tuple[float, ...] = (0.3, 0.3, 0.4)
    take_profit_fallback_pcts: tuple[float, ...] = (0.03, 0.05, 0.10)
    take_profit_extension: float = 0.05              # Beyond the last level when it already exceeds the final fallback
    stop_level_buffer: float = 0.02                  # Beyond the nearest opposing level
    stop_entry_buffer: float = 0.05                  # Beyond the extreme entry
    base_leverage: dict[str, int] = field(default_factory=_default_base_leverage)
    volatility_multipliers: dict[str, float] = field(default_factory=_default_volatility_multipliers)
    high_risk_leverage: int = 4
    low_risk_leverage: int = 2


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    indicators: IndicatorParams
    trend: TrendParams
    momentum: MomentumParams
    oscillators: OscillatorParams
    volatility: VolatilityParams
    levels: LevelParams
    patterns: PatternParams
    market_structure: MarketStructureParams
    volume_profile: VolumeProfileParams
    volume: VolumeParams
    arbitrage: ArbitrageParams
    sentiment: SentimentParams
    aggregation: AggregationParams
    plan: PlanParams


# Section name -> params class, used when rebuilding a config from a dict
SECTION_TYPES = {
    "indicators": IndicatorParams,
    "trend": TrendParams,
    "momentum": MomentumParams,
    "oscillators": OscillatorParams,
    "volatility": VolatilityParams,
    "levels": LevelParams,
    "patterns": PatternParams,
    "market_structure": MarketStructureParams,
    "volume_profile": VolumeProfileParams,
    "volume": VolumeParams,
    "arbitrage": ArbitrageParams,
    "sentiment": SentimentParams,
    "aggregation": AggregationParams,
    "plan": PlanParams,
}


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(**{name: params_type() for name, params_type in SECTION_TYPES.items()})
