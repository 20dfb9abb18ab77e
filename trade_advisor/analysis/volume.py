"""
Volume analyzer.

Trend, buy/sell pressure, cross-venue distribution, order book walls and
z-score anomalies of the volume series. Independent of the technical
analyzer; only the primary venue's daily series is load-bearing.
"""

import math
from collections.abc import Sequence
from typing import Optional

import structlog

from ..config.defaults import DefaultConfig, VolumeParams, get_default_config
from ..data.models import DAILY, HOURLY, Candle, VenueData, venue_labels
from ..errors import AnalysisError, DataQualityError, MissingDataError
from ..logging.config import get_analysis_logger, log_classification
from ..models.analysis import (
    AnomalyReport,
    BuySellPressure,
    VolumeAnalysisResult,
    VolumeAnomaly,
    VolumeDistribution,
    VolumeTrendAnalysis,
)
from ..models.signals import Concentration, Pressure, PressureSource, VolumeTrend
from .orderbook import analyze_volume_at_price

logger = structlog.get_logger(__name__)
analysis_logger = get_analysis_logger(__name__)


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _pct_change(current: float, reference: float) -> Optional[float]:
    if reference <= 0:
        return None
    return (current / reference - 1.0) * 100.0


def last_24h_volume(daily: Sequence[Candle], hourly: Sequence[Candle], hours: int = 24) -> float:
    """Sum of the last 24 hourly volumes; the latest daily volume without an hourly series"""
    if hourly:
        return sum(c.volume for c in hourly[-hours:])
    if daily:
        return daily[-1].volume
    return 0.0


def analyze_volume_trends(daily: Sequence[Candle], hourly: Sequence[Candle],
                          params: VolumeParams) -> VolumeTrendAnalysis:
    """
    Compare the last 24h volume with the 7-day and 30-day average daily volume

    Averages divide by the number of daily candles actually available. The
    classification follows the 24h versus 7d change: above
    trend_threshold_pct is increasing, below its negative decreasing.
    """
    week = [c.volume for c in daily[-params.week_days:]]
    month = [c.volume for c in daily[-params.month_days:]]

    last_24h = last_24h_volume(daily, hourly, params.hours_per_day)
    average_7d = _average(week)
    average_30d = _average(month)

    trend_24h_vs_7d = _pct_change(last_24h, average_7d)
    trend_7d_vs_30d = _pct_change(average_7d, average_30d)

    classification = VolumeTrend.STABLE
    if trend_24h_vs_7d is not None:
        if trend_24h_vs_7d > params.trend_threshold_pct:
            classification = VolumeTrend.INCREASING
        elif trend_24h_vs_7d < -params.trend_threshold_pct:
            classification = VolumeTrend.DECREASING

    hourly_spikes = sum(1 for c in hourly[-params.hours_per_day:] if c.volume > average_7d)

    return VolumeTrendAnalysis(
        last_24h=last_24h,
        last_7d=sum(week),
        last_30d=sum(month),
        average_daily_24h=last_24h,
        average_daily_7d=average_7d,
        average_daily_30d=average_30d,
        trend_24h_vs_7d=trend_24h_vs_7d,
        trend_7d_vs_30d=trend_7d_vs_30d,
        classification=classification,
        hourly_spikes=hourly_spikes,
    )


def classify_pressure(ratio: float, buying_ratio: float = 1.2, selling_ratio: float = 0.8) -> Pressure:
    if ratio > buying_ratio:
        return Pressure.BUYING
    if ratio < selling_ratio:
        return Pressure.SELLING
    return Pressure.NEUTRAL


def analyze_buy_sell_pressure(venue: VenueData, params: VolumeParams) -> BuySellPressure:
    """
    Buy versus sell volume of the venue

    Sources in order of preference: reported recent trades, taker buy
    volume carried on the recent candles, then candle direction (close above
    open counts as buying), which is flagged as approximated. Recent candles
    are the last 24 hourly bars, or the last 7 daily bars without an hourly
    series.
    """
    if venue.recent_trades is not None:
        trades = venue.recent_trades
        ratio = trades.buy_sell_ratio
        return BuySellPressure(
            buy_volume=trades.buy_volume,
            sell_volume=trades.sell_volume,
            ratio=ratio,
            pressure=classify_pressure(ratio, params.pressure_buying_ratio, params.pressure_selling_ratio),
            source=PressureSource.RECENT_TRADES,
        )

    hourly = venue.candles(HOURLY)
    if hourly:
        recent = hourly[-params.recent_hourly_points:]
    else:
        recent = venue.candles(DAILY)[-params.recent_daily_points:]

    if recent and all(c.taker_buy_volume is not None for c in recent):
        buy_volume = sum(c.taker_buy_volume for c in recent)
        sell_volume = sum(max(c.volume - c.taker_buy_volume, 0.0) for c in recent)
        source = PressureSource.TAKER_VOLUME
    else:
        buy_volume = sum(c.volume for c in recent if c.close > c.open)
        sell_volume = sum(c.volume for c in recent if c.close <= c.open)
        source = PressureSource.CANDLE_DIRECTION

    ratio = buy_volume / (sell_volume or 1.0)

    return BuySellPressure(
        buy_volume=buy_volume,
        sell_volume=sell_volume,
        ratio=ratio,
        pressure=classify_pressure(ratio, params.pressure_buying_ratio, params.pressure_selling_ratio),
        source=source,
    )


def analyze_volume_distribution(venues: Sequence[VenueData], params: VolumeParams) -> Optional[VolumeDistribution]:
    """
    Share of the last 24h volume traded on each venue

    Returns:
        VolumeDistribution, or None when the venues report no volume at all
    """
    volumes = {
        label: last_24h_volume(venue.candles(DAILY), venue.candles(HOURLY), params.hours_per_day)
        for label, venue in zip(venue_labels(venues), venues)
    }
    total = sum(volumes.values())
    if total <= 0:
        return None

    percentages = {name: volume / total * 100.0 for name, volume in volumes.items()}
    # First venue wins ties
    dominant_venue = max(percentages, key=lambda name: percentages[name])
    dominant_percentage = percentages[dominant_venue]

    concentration = Concentration.MODERATE
    if dominant_percentage > params.concentration_high_pct:
        concentration = Concentration.HIGH
    elif dominant_percentage < params.concentration_low_pct:
        concentration = Concentration.LOW

    return VolumeDistribution(
        volumes=volumes,
        total=total,
        percentages=percentages,
        dominant_venue=dominant_venue,
        dominant_percentage=dominant_percentage,
        concentration=concentration,
    )


def detect_volume_anomalies(candles: Sequence[Candle], threshold: float = 3.0,
                            recent_points: int = 24) -> AnomalyReport:
    """
    Flag volumes more than threshold population standard deviations from the mean

    Args:
        candles: Full available series
        threshold: Absolute z-score above which a volume is anomalous
        recent_points: Anomalies within this many trailing candles are recent

    Returns:
        AnomalyReport; empty when the series is empty or flat
    """
    volumes = [c.volume for c in candles]
    if not volumes:
        return AnomalyReport(anomalies=(), recent=())

    mean = sum(volumes) / len(volumes)
    stddev = math.sqrt(sum((v - mean) ** 2 for v in volumes) / len(volumes))
    if stddev == 0:
        return AnomalyReport(anomalies=(), recent=())

    anomalies = []
    for i, volume in enumerate(volumes):
        z_score = (volume - mean) / stddev
        if abs(z_score) > threshold:
            anomalies.append(VolumeAnomaly(
                index=i,
                timestamp=candles[i].open_time,
                volume=volume,
                z_score=z_score,
            ))

    recent_start = len(volumes) - recent_points
    recent = tuple(a for a in anomalies if a.index >= recent_start)

    return AnomalyReport(anomalies=tuple(anomalies), recent=recent)


class VolumeAnalyzer:
    """
    Builds the volume analysis record for the primary venue
    """

    def __init__(self, config: Optional[DefaultConfig] = None):
        self.config = config or get_default_config()

    def analyze(self, primary: VenueData, venues: Sequence[VenueData] = ()) -> VolumeAnalysisResult:
        """
        Analyze the primary venue's volume

        Args:
            primary: Venue whose series drive the analysis
            venues: All venues (primary included) for the volume distribution

        Returns:
            VolumeAnalysisResult

        Raises:
            MissingDataError: If the primary venue has no daily candles
            AnalysisError: On unexpected failure
        """
        daily = primary.candles(DAILY)
        if not daily:
            raise MissingDataError(
                f"Daily candles required for volume analysis of {primary.symbol}",
                data_type=DAILY,
                context={"venue": primary.venue, "symbol": primary.symbol}
            )

        params = self.config.volume

        try:
            hourly = primary.candles(HOURLY)
            omitted = []

            hourly_anomalies = None
            if primary.has_timeframe(HOURLY):
                hourly_anomalies = detect_volume_anomalies(
                    hourly, params.zscore_threshold, params.recent_hourly_points
                )
            else:
                omitted.append("hourly_anomalies")

            distribution = None
            if len(venues) > 1:
                distribution = analyze_volume_distribution(venues, params)
            if distribution is None:
                omitted.append("distribution")

            volume_at_price = None
            if primary.order_book is not None:
                volume_at_price = analyze_volume_at_price(
                    primary.order_book,
                    volume_fraction=params.wall_volume_fraction,
                    max_walls=params.max_wall_levels,
                    support_ratio=params.wall_support_ratio,
                    resistance_ratio=params.wall_resistance_ratio,
                )
            else:
                omitted.append("volume_at_price")

            result = VolumeAnalysisResult(
                symbol=primary.symbol,
                timestamp=daily[-1].open_time,
                trends=analyze_volume_trends(daily, hourly, params),
                pressure=analyze_buy_sell_pressure(primary, params),
                daily_anomalies=detect_volume_anomalies(
                    daily, params.zscore_threshold, params.recent_daily_points
                ),
                hourly_anomalies=hourly_anomalies,
                distribution=distribution,
                volume_at_price=volume_at_price,
                omitted=tuple(omitted),
            )

        except DataQualityError:
            raise
        except Exception as e:
            raise AnalysisError(
                f"Volume analysis failed: {str(e)}",
                analyzer="volume",
                context={"symbol": primary.symbol, "daily_candles": len(daily)}
            ) from e

        if result.omitted:
            logger.debug("Volume sub-results omitted", symbol=primary.symbol, omitted=list(result.omitted))

        log_classification(
            analysis_logger,
            analyzer="volume",
            label=result.trends.classification.value,
            symbol=primary.symbol,
            context={
                "pressure": result.pressure.pressure.value,
                "pressure_source": result.pressure.source.value,
                "walls": result.volume_at_price.classification.value if result.volume_at_price else None,
                "recent_daily_anomalies": len(result.daily_anomalies.recent),
            }
        )

        return result
