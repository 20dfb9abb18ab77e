"""
Technical analyzer.

Composes the indicator library, level detector and pattern detector into a
single TechnicalAnalysisResult for the primary venue. The daily series is
load-bearing; the hourly series and secondary venues are optional.
"""

from collections.abc import Sequence
from typing import Optional

import structlog

from ..config.defaults import (
    DefaultConfig,
    IndicatorParams,
    MarketStructureParams,
    MomentumParams,
    OscillatorParams,
    TrendParams,
    VolatilityParams,
    VolumeProfileParams,
    get_default_config,
)
from ..data.models import DAILY, HOURLY, Candle, VenueData
from ..data.normalizer import VenueNormalizer
from ..errors import AnalysisError, DataQualityError, MissingDataError
from ..indicators import (
    atr,
    bollinger_bands,
    cci,
    historical_volatility,
    latest,
    linear_regression,
    macd,
    rsi,
    simplified_adx,
    sma,
    stochastic,
)
from ..logging.config import get_analysis_logger, log_classification
from ..models.analysis import (
    IndicatorSnapshot,
    MarketStructureAnalysis,
    MomentumAnalysis,
    MovingAverageAnalysis,
    OscillatorAnalysis,
    TechnicalAnalysisResult,
    TrendAnalysis,
    VolatilityAnalysis,
    VolumeProfile,
)
from ..models.signals import (
    Condition,
    MarketStructure,
    Signal,
    TrendStrength,
    VolatilityLevel,
    VolumeSignal,
)
from .levels import detect_support_resistance
from .patterns import analyze_price_patterns

logger = structlog.get_logger(__name__)
analysis_logger = get_analysis_logger(__name__)


def calculate_indicator_snapshot(candles: Sequence[Candle], params: IndicatorParams) -> IndicatorSnapshot:
    """Latest value of every daily indicator; absent where history is short"""
    closes = [c.close for c in candles]

    macd_result = macd(closes, params.macd_fast, params.macd_slow, params.macd_signal)
    bands = bollinger_bands(closes, params.bollinger_period, params.bollinger_std_mult)

    return IndicatorSnapshot(
        sma={period: latest(sma(closes, period)) for period in params.sma_periods},
        rsi=latest(rsi(closes, params.rsi_period)),
        macd_line=latest(macd_result.macd_line),
        signal_line=latest(macd_result.signal_line),
        histogram=latest(macd_result.histogram),
        bollinger_upper=latest(bands.upper),
        bollinger_middle=latest(bands.middle),
        bollinger_lower=latest(bands.lower),
        historical_volatility=historical_volatility(
            closes, params.volatility_period, params.annualization_days
        ),
        atr=latest(atr(candles, params.atr_period)),
    )


def classify_trend_strength(adx: Optional[float], params: TrendParams) -> TrendStrength:
    if adx is None:
        return TrendStrength.WEAK
    if adx > params.very_strong_threshold:
        return TrendStrength.VERY_STRONG
    if adx > params.strong_threshold:
        return TrendStrength.STRONG
    if adx > params.moderate_threshold:
        return TrendStrength.MODERATE
    return TrendStrength.WEAK


def analyze_trend_strength(candles: Sequence[Candle], params: TrendParams) -> TrendAnalysis:
    """
    Trend direction from the regression slope of recent closes, strength
    from the simplified ADX proxy over the same window
    """
    closes = [c.close for c in candles[-params.regression_window:]]
    regression = linear_regression(closes)
    adx = simplified_adx(closes, params.adx_multiplier)

    direction = Signal.NEUTRAL
    if regression is not None:
        if regression.slope > params.slope_threshold:
            direction = Signal.BULLISH
        elif regression.slope < -params.slope_threshold:
            direction = Signal.BEARISH

    return TrendAnalysis(
        direction=direction,
        strength=classify_trend_strength(adx, params),
        adx=adx,
        regression=regression,
    )


def _average_range_pct(candles: Sequence[Candle]) -> Optional[float]:
    ranges = [(c.high - c.low) / c.low * 100.0 for c in candles if c.low > 0]
    if not ranges:
        return None
    return sum(ranges) / len(ranges)


def analyze_volatility(daily: Sequence[Candle], hourly: Sequence[Candle],
                       indicators: IndicatorSnapshot, params: VolatilityParams) -> VolatilityAnalysis:
    """Average candle range of recent daily and hourly bars plus Bollinger width"""
    daily_range = _average_range_pct(daily[-params.daily_window:])
    hourly_range = _average_range_pct(hourly[-params.hourly_window:]) if hourly else None

    band_width = None
    if (indicators.bollinger_middle and indicators.bollinger_upper is not None
            and indicators.bollinger_lower is not None):
        band_width = ((indicators.bollinger_upper - indicators.bollinger_lower)
                      / indicators.bollinger_middle * 100.0)

    level = VolatilityLevel.MEDIUM
    if daily_range is not None:
        if daily_range < params.low_threshold:
            level = VolatilityLevel.LOW
        elif daily_range > params.high_threshold:
            level = VolatilityLevel.HIGH

    return VolatilityAnalysis(
        daily=daily_range,
        hourly=hourly_range,
        bollinger_band_width=band_width,
        level=level,
    )


def classify_rsi(value: Optional[float], params: MomentumParams) -> Condition:
    if value is None:
        return Condition.NEUTRAL
    if value > params.rsi_overbought:
        return Condition.OVERBOUGHT
    if value < params.rsi_oversold:
        return Condition.OVERSOLD
    return Condition.NEUTRAL


def classify_macd(macd_line: Optional[float], signal_line: Optional[float],
                  histogram: Optional[float]) -> Signal:
    if macd_line is None or signal_line is None or histogram is None:
        return Signal.NEUTRAL
    if macd_line > signal_line and histogram > 0:
        return Signal.BULLISH
    if macd_line < signal_line and histogram < 0:
        return Signal.BEARISH
    return Signal.NEUTRAL


def analyze_momentum(indicators: IndicatorSnapshot, params: MomentumParams) -> MomentumAnalysis:
    """
    Combine the RSI condition and the MACD condition

    Overbought with bearish MACD is strongly bearish, oversold with bullish
    MACD strongly bullish; either bearish cue alone is bearish, either bullish
    cue alone bullish.
    """
    rsi_condition = classify_rsi(indicators.rsi, params)
    macd_condition = classify_macd(indicators.macd_line, indicators.signal_line, indicators.histogram)

    if rsi_condition is Condition.OVERBOUGHT and macd_condition is Signal.BEARISH:
        overall = Signal.STRONGLY_BEARISH
    elif rsi_condition is Condition.OVERSOLD and macd_condition is Signal.BULLISH:
        overall = Signal.STRONGLY_BULLISH
    elif rsi_condition is Condition.OVERBOUGHT or macd_condition is Signal.BEARISH:
        overall = Signal.BEARISH
    elif rsi_condition is Condition.OVERSOLD or macd_condition is Signal.BULLISH:
        overall = Signal.BULLISH
    else:
        overall = Signal.NEUTRAL

    return MomentumAnalysis(
        rsi=indicators.rsi,
        rsi_condition=rsi_condition,
        macd_line=indicators.macd_line,
        signal_line=indicators.signal_line,
        histogram=indicators.histogram,
        macd_condition=macd_condition,
        overall=overall,
    )


def analyze_moving_averages(current_price: float, indicators: IndicatorSnapshot,
                            params: IndicatorParams) -> MovingAverageAnalysis:
    """
    Price posture against the short, medium and long SMAs

    An absent SMA leaves its flag absent, which satisfies neither the
    bullish nor the bearish rule.
    """
    periods = tuple(params.sma_periods)
    above: dict[int, Optional[bool]] = {
        period: (current_price > value) if value is not None else None
        for period, value in indicators.sma.items()
    }
    flags = [above.get(period) for period in periods]

    golden_cross = death_cross = None
    if len(periods) >= 3:
        medium, long_ = indicators.sma.get(periods[1]), indicators.sma.get(periods[2])
        if medium is not None and long_ is not None:
            golden_cross = medium > long_
            death_cross = medium < long_

    if flags and all(flag is True for flag in flags):
        trend = Signal.STRONGLY_BULLISH
    elif flags and all(flag is False for flag in flags):
        trend = Signal.STRONGLY_BEARISH
    elif len(flags) >= 2 and flags[0] is True and flags[1] is True:
        trend = Signal.BULLISH
    elif len(flags) >= 2 and flags[0] is False and flags[1] is False:
        trend = Signal.BEARISH
    else:
        trend = Signal.NEUTRAL

    return MovingAverageAnalysis(
        current_price=current_price,
        sma=dict(indicators.sma),
        above=above,
        golden_cross=golden_cross,
        death_cross=death_cross,
        trend=trend,
    )


def analyze_oscillators(candles: Sequence[Candle], indicators: IndicatorSnapshot,
                        indicator_params: IndicatorParams, momentum_params: MomentumParams,
                        params: OscillatorParams) -> OscillatorAnalysis:
    """
    RSI, Stochastic and CCI conditions and their consensus

    Oversold readings count as bullish, overbought readings as bearish; the
    side with more readings wins.
    """
    highs = [c.high for c in candles]
    lows = [c.low for c in candles]
    closes = [c.close for c in candles]

    stoch = stochastic(highs, lows, closes, indicator_params.stochastic_k, indicator_params.stochastic_d)
    k, d = latest(stoch.k), latest(stoch.d)
    cci_value = latest(cci(highs, lows, closes, indicator_params.cci_period, indicator_params.cci_constant))

    rsi_condition = classify_rsi(indicators.rsi, momentum_params)

    stochastic_condition = Condition.NEUTRAL
    if k is not None and d is not None:
        if k > params.stochastic_overbought and d > params.stochastic_overbought:
            stochastic_condition = Condition.OVERBOUGHT
        elif k < params.stochastic_oversold and d < params.stochastic_oversold:
            stochastic_condition = Condition.OVERSOLD

    cci_condition = Condition.NEUTRAL
    if cci_value is not None:
        if cci_value > params.cci_overbought:
            cci_condition = Condition.OVERBOUGHT
        elif cci_value < params.cci_oversold:
            cci_condition = Condition.OVERSOLD

    conditions = (rsi_condition, stochastic_condition, cci_condition)
    bullish = sum(1 for c in conditions if c is Condition.OVERSOLD)
    bearish = sum(1 for c in conditions if c is Condition.OVERBOUGHT)

    consensus = Signal.NEUTRAL
    if bullish > bearish:
        consensus = Signal.BULLISH
    elif bearish > bullish:
        consensus = Signal.BEARISH

    return OscillatorAnalysis(
        rsi=indicators.rsi,
        rsi_condition=rsi_condition,
        stochastic_k=k,
        stochastic_d=d,
        stochastic_condition=stochastic_condition,
        cci=cci_value,
        cci_condition=cci_condition,
        consensus=consensus,
    )


def analyze_volume_profile(candles: Sequence[Candle], params: VolumeProfileParams) -> VolumeProfile:
    """Recent versus overall daily volume, spikes and price/volume divergence"""
    volumes = [c.volume for c in candles]
    closes = [c.close for c in candles]

    average_volume = sum(volumes) / len(volumes)
    recent = volumes[-params.recent_window:]
    recent_average = sum(recent) / len(recent)
    ratio = recent_average / average_volume if average_volume > 0 else None

    spike_level = average_volume * params.spike_multiplier
    spike_count = sum(1 for v in volumes if v > spike_level)
    recent_spike = any(v > spike_level for v in volumes[-params.spike_recent_window:])

    price_change = (closes[-1] - closes[0]) / closes[0]
    volume_change = (volumes[-1] - volumes[0]) / volumes[0] if volumes[0] > 0 else None

    bearish_divergence = volume_change is not None and price_change > 0 and volume_change < 0
    bullish_divergence = volume_change is not None and price_change < 0 and volume_change > 0

    signal = VolumeSignal.NEUTRAL
    if ratio is not None:
        if ratio > params.strong_ratio and recent_spike:
            signal = VolumeSignal.STRONG
        elif ratio > params.increasing_ratio:
            signal = VolumeSignal.INCREASING
        elif ratio < params.decreasing_ratio:
            signal = VolumeSignal.DECREASING

    return VolumeProfile(
        average_volume=average_volume,
        recent_average_volume=recent_average,
        ratio=ratio,
        recent_spike=recent_spike,
        spike_count=spike_count,
        spike_percentage=spike_count / len(volumes) * 100.0,
        bearish_divergence=bearish_divergence,
        bullish_divergence=bullish_divergence,
        signal=signal,
    )


def analyze_market_structure(candles: Sequence[Candle], params: MarketStructureParams) -> MarketStructureAnalysis:
    """
    Compare the first and last swing points of the recent candles

    A swing high is higher than both neighbours, a swing low lower. Uptrend
    needs higher highs and higher lows; downtrend lower highs and lower
    lows; anything else, including fewer than two swings of either kind, is
    ranging.
    """
    recent = list(candles[-params.lookback:])

    swing_highs = []
    swing_lows = []
    for i in range(1, len(recent) - 1):
        if recent[i].high > recent[i - 1].high and recent[i].high > recent[i + 1].high:
            swing_highs.append(recent[i].high)
        if recent[i].low < recent[i - 1].low and recent[i].low < recent[i + 1].low:
            swing_lows.append(recent[i].low)

    higher_highs = higher_lows = lower_highs = lower_lows = False
    if len(swing_highs) >= 2 and len(swing_lows) >= 2:
        higher_highs = swing_highs[-1] > swing_highs[0]
        higher_lows = swing_lows[-1] > swing_lows[0]
        lower_highs = swing_highs[-1] < swing_highs[0]
        lower_lows = swing_lows[-1] < swing_lows[0]

    structure = MarketStructure.RANGING
    if higher_highs and higher_lows:
        structure = MarketStructure.UPTREND
    elif lower_highs and lower_lows:
        structure = MarketStructure.DOWNTREND

    return MarketStructureAnalysis(
        higher_highs=higher_highs,
        higher_lows=higher_lows,
        lower_highs=lower_highs,
        lower_lows=lower_lows,
        structure=structure,
    )


class TechnicalAnalyzer:
    """
    Builds the technical analysis record for the primary venue
    """

    def __init__(self, config: Optional[DefaultConfig] = None):
        self.config = config or get_default_config()
        self.normalizer = VenueNormalizer(
            threshold_pct=self.config.arbitrage.threshold_pct,
            fee_pct=self.config.arbitrage.fee_pct,
        )

    def analyze(self, primary: VenueData, venues: Sequence[VenueData] = ()) -> TechnicalAnalysisResult:
        """
        Analyze the primary venue's series

        Args:
            primary: Venue whose candles drive the analysis
            venues: All venues (primary included) for cross-venue normalization

        Returns:
            TechnicalAnalysisResult

        Raises:
            MissingDataError: If the primary venue has no daily candles
            AnalysisError: On unexpected failure
        """
        daily = primary.candles(DAILY)
        if not daily:
            raise MissingDataError(
                f"Daily candles required for technical analysis of {primary.symbol}",
                data_type=DAILY,
                context={"venue": primary.venue, "symbol": primary.symbol}
            )

        try:
            hourly = primary.candles(HOURLY)
            config = self.config
            current_price = daily[-1].close
            omitted = []

            indicators = calculate_indicator_snapshot(daily, config.indicators)
            if not primary.has_timeframe(HOURLY):
                omitted.append("hourly_volatility")

            normalized = None
            if len(venues) > 1:
                normalized = self.normalizer.normalize(venues, primary.symbol)
            else:
                omitted.append("normalized")

            result = TechnicalAnalysisResult(
                symbol=primary.symbol,
                timestamp=daily[-1].open_time,
                current_price=current_price,
                indicators=indicators,
                trend=analyze_trend_strength(daily, config.trend),
                support_resistance=detect_support_resistance(
                    primary.highs(DAILY),
                    primary.lows(DAILY),
                    current_price,
                    window=config.levels.window,
                    threshold=config.levels.cluster_threshold,
                    max_levels=config.levels.max_levels,
                ),
                volatility=analyze_volatility(daily, hourly, indicators, config.volatility),
                momentum=analyze_momentum(indicators, config.momentum),
                moving_averages=analyze_moving_averages(current_price, indicators, config.indicators),
                oscillators=analyze_oscillators(
                    daily, indicators, config.indicators, config.momentum, config.oscillators
                ),
                patterns=analyze_price_patterns(
                    daily,
                    window=config.patterns.window,
                    radius=config.patterns.extrema_radius,
                    similarity=config.patterns.similarity_threshold,
                    min_separation=config.patterns.min_separation,
                    min_reversal=config.patterns.min_reversal,
                    engulfing_lookback=config.patterns.engulfing_lookback,
                ),
                volume_profile=analyze_volume_profile(daily, config.volume_profile),
                market_structure=analyze_market_structure(daily, config.market_structure),
                normalized=normalized,
                omitted=tuple(omitted),
            )

        except DataQualityError:
            raise
        except Exception as e:
            raise AnalysisError(
                f"Technical analysis failed: {str(e)}",
                analyzer="technical",
                context={"symbol": primary.symbol, "daily_candles": len(daily)}
            ) from e

        if result.omitted:
            logger.debug("Technical sub-results omitted", symbol=primary.symbol, omitted=list(result.omitted))

        log_classification(
            analysis_logger,
            analyzer="technical",
            label=result.trend.direction.value,
            symbol=primary.symbol,
            context={
                "trend_strength": result.trend.strength.value,
                "momentum": result.momentum.overall.value,
                "moving_averages": result.moving_averages.trend.value,
                "oscillators": result.oscillators.consensus.value,
                "patterns": result.patterns.signal.value,
                "structure": result.market_structure.structure.value,
                "volatility": result.volatility.level.value,
            }
        )

        return result
