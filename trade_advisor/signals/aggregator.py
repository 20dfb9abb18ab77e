"""
Signal aggregation.

Every analysis category casts independent bullish/bearish votes from its
classifications. The vote margin resolves the direction and the agreeing
classifications accumulate the confidence score.
"""

from dataclasses import dataclass
from typing import Optional

from ..config.defaults import AggregationParams, DefaultConfig, get_default_config
from ..logging.config import get_analysis_logger, log_classification
from ..models.analysis import SentimentResult, TechnicalAnalysisResult, VolumeAnalysisResult
from ..models.plan import CategoryVotes, VoteTally
from ..models.signals import (
    Confidence,
    Direction,
    FearGreed,
    MarketStructure,
    Pressure,
    Signal,
    TrendStrength,
    VolumeTrend,
    VolumeWall,
)

analysis_logger = get_analysis_logger(__name__)


@dataclass(frozen=True)
class AggregatedSignal:
    """Resolved direction with its supporting votes; confidence is None when neutral"""
    direction: Direction
    votes: VoteTally
    confidence: Optional[Confidence] = None
    confidence_score: int = 0


def _votes(bullish_flags: list[bool], bearish_flags: list[bool]) -> CategoryVotes:
    return CategoryVotes(bullish=sum(bullish_flags), bearish=sum(bearish_flags))


def technical_votes(technical: TechnicalAnalysisResult) -> CategoryVotes:
    """Trend, MA posture, momentum, oscillator consensus, patterns and market structure"""
    trend = technical.trend.direction
    ma_trend = technical.moving_averages.trend
    momentum = technical.momentum.overall
    consensus = technical.oscillators.consensus
    pattern = technical.patterns.signal
    structure = technical.market_structure.structure

    return _votes(
        [
            trend is Signal.BULLISH,
            ma_trend.is_bullish,
            momentum.is_bullish,
            consensus is Signal.BULLISH,
            pattern is Signal.BULLISH,
            structure is MarketStructure.UPTREND,
        ],
        [
            trend is Signal.BEARISH,
            ma_trend.is_bearish,
            momentum.is_bearish,
            consensus is Signal.BEARISH,
            pattern is Signal.BEARISH,
            structure is MarketStructure.DOWNTREND,
        ],
    )


def sentiment_votes(sentiment: SentimentResult) -> CategoryVotes:
    """Overall, social and news sentiment plus the extreme fear & greed readings"""
    return _votes(
        [
            sentiment.overall.classification.is_bullish,
            sentiment.social.sentiment.is_bullish,
            sentiment.news.sentiment.is_bullish,
            sentiment.fear_greed.classification is FearGreed.EXTREME_GREED,
        ],
        [
            sentiment.overall.classification.is_bearish,
            sentiment.social.sentiment.is_bearish,
            sentiment.news.sentiment.is_bearish,
            sentiment.fear_greed.classification is FearGreed.EXTREME_FEAR,
        ],
    )


def volume_votes(volume: VolumeAnalysisResult) -> CategoryVotes:
    """Volume trend, buy/sell pressure and order book walls (when the book was supplied)"""
    walls = volume.volume_at_price.classification if volume.volume_at_price else None

    return _votes(
        [
            volume.trends.classification is VolumeTrend.INCREASING,
            volume.pressure.pressure is Pressure.BUYING,
            walls is VolumeWall.STRONG_SUPPORT,
        ],
        [
            volume.trends.classification is VolumeTrend.DECREASING,
            volume.pressure.pressure is Pressure.SELLING,
            walls is VolumeWall.STRONG_RESISTANCE,
        ],
    )


def tally_votes(technical: TechnicalAnalysisResult, sentiment: SentimentResult,
                volume: VolumeAnalysisResult) -> VoteTally:
    return VoteTally(categories={
        "technical": technical_votes(technical),
        "sentiment": sentiment_votes(sentiment),
        "volume": volume_votes(volume),
    })


def resolve_direction(bullish: int, bearish: int, margin: int = 3) -> Direction:
    """Long when bullish votes lead by at least margin, short when bearish do, else neutral"""
    if bullish - bearish >= margin:
        return Direction.LONG
    if bearish - bullish >= margin:
        return Direction.SHORT
    return Direction.NEUTRAL


def _intensity_points(signal: Signal, direction: Direction) -> int:
    if signal.is_intense and direction.agrees_with(signal):
        return 2
    if signal is direction.favoured_signal:
        return 1
    return 0


def confidence_score(direction: Direction, technical: TechnicalAnalysisResult,
                     sentiment: SentimentResult, volume: VolumeAnalysisResult) -> int:
    """
    Accumulate agreement points for a resolved direction

    Trend: +2 when strong or very strong, +1 when moderate, only if its
    direction agrees. Momentum, MA posture and overall sentiment: +2 for an
    agreeing intense classification, +1 for the plain agreeing one. Volume
    pressure and order book walls: +1 each when they agree.
    """
    if direction is Direction.NEUTRAL:
        return 0

    score = 0

    if technical.trend.direction is direction.favoured_signal:
        if technical.trend.strength in (TrendStrength.STRONG, TrendStrength.VERY_STRONG):
            score += 2
        elif technical.trend.strength is TrendStrength.MODERATE:
            score += 1

    score += _intensity_points(technical.momentum.overall, direction)
    score += _intensity_points(technical.moving_averages.trend, direction)
    score += _intensity_points(sentiment.overall.classification, direction)

    agreeing_pressure = Pressure.BUYING if direction is Direction.LONG else Pressure.SELLING
    if volume.pressure.pressure is agreeing_pressure:
        score += 1

    agreeing_wall = VolumeWall.STRONG_SUPPORT if direction is Direction.LONG else VolumeWall.STRONG_RESISTANCE
    if volume.volume_at_price is not None and volume.volume_at_price.classification is agreeing_wall:
        score += 1

    return score


def classify_confidence(score: int, params: Optional[AggregationParams] = None) -> Confidence:
    params = params or AggregationParams()
    if score >= params.very_high_confidence:
        return Confidence.VERY_HIGH
    if score >= params.high_confidence:
        return Confidence.HIGH
    if score >= params.moderate_confidence:
        return Confidence.MODERATE
    return Confidence.LOW


class SignalAggregator:
    """Resolves direction and confidence from the three analyses"""

    def __init__(self, config: Optional[DefaultConfig] = None):
        self.config = config or get_default_config()

    def aggregate(self, technical: TechnicalAnalysisResult, sentiment: SentimentResult,
                  volume: VolumeAnalysisResult) -> AggregatedSignal:
        params = self.config.aggregation
        tally = tally_votes(technical, sentiment, volume)
        direction = resolve_direction(tally.bullish, tally.bearish, params.vote_margin)

        for category, votes in tally.categories.items():
            log_classification(
                analysis_logger,
                analyzer=f"votes.{category}",
                label=f"{votes.bullish}/{votes.bearish}",
                symbol=technical.symbol,
                context={"bullish": votes.bullish, "bearish": votes.bearish}
            )

        if direction is Direction.NEUTRAL:
            log_classification(
                analysis_logger,
                analyzer="aggregator",
                label=direction.value,
                symbol=technical.symbol,
                context={"margin": tally.margin}
            )
            return AggregatedSignal(direction=direction, votes=tally)

        score = confidence_score(direction, technical, sentiment, volume)
        confidence = classify_confidence(score, params)

        log_classification(
            analysis_logger,
            analyzer="aggregator",
            label=direction.value,
            symbol=technical.symbol,
            context={"margin": tally.margin, "confidence": confidence.value, "confidence_score": score}
        )

        return AggregatedSignal(
            direction=direction,
            votes=tally,
            confidence=confidence,
            confidence_score=score,
        )
