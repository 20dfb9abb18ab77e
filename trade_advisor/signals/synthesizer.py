"""
Plan synthesis.

Resolves the aggregated signal into a TradePlan, or into a neutral
recommendation when the votes do not clear the margin. Any failure while
synthesizing becomes the neutral fallback; nothing is raised to the caller.
"""

from datetime import datetime
from typing import Optional, Union

import structlog

from ..config.defaults import DefaultConfig, get_default_config
from ..errors import AggregationError
from ..models.analysis import SentimentResult, TechnicalAnalysisResult, VolumeAnalysisResult
from ..models.plan import NEUTRAL_REASON, NeutralRecommendation, TradePlan
from ..models.signals import Direction
from ..utils.time import get_market_time
from ..validation.plan_schema import PlanValidationError, PlanValidator
from .aggregator import SignalAggregator
from .plan import (
    calculate_leverage,
    determine_entries,
    determine_stop_loss,
    determine_take_profits,
    generate_reasoning,
    summarize_sentiment,
    summarize_technical,
    summarize_volume,
)

logger = structlog.get_logger(__name__)

Recommendation = Union[TradePlan, NeutralRecommendation]


def fallback_recommendation(symbol: str, error: Exception,
                            timestamp: Optional[datetime] = None) -> NeutralRecommendation:
    """Neutral recommendation standing in for a failed synthesis"""
    return NeutralRecommendation(
        symbol=symbol,
        reason=f"Error generating recommendation: {str(error)}",
        timestamp=get_market_time(timestamp),
        error=type(error).__name__,
    )


class PlanSynthesizer:
    """
    Turns the three analyses into a trade plan
    """

    def __init__(self, config: Optional[DefaultConfig] = None,
                 validator: Optional[PlanValidator] = None):
        self.config = config or get_default_config()
        self.aggregator = SignalAggregator(self.config)
        self.validator = validator or PlanValidator()

    def synthesize(self, symbol: str, technical: TechnicalAnalysisResult, sentiment: SentimentResult,
                   volume: VolumeAnalysisResult, timestamp: Optional[datetime] = None) -> Recommendation:
        """
        Synthesize a recommendation

        Args:
            symbol: Symbol the plan is for
            technical: Technical analysis of the primary venue
            sentiment: Sentiment collaborator result
            volume: Volume analysis of the primary venue
            timestamp: Market time of the plan (defaults to the technical analysis time)

        Returns:
            TradePlan, or NeutralRecommendation on conflicting signals or failure
        """
        timestamp = get_market_time(timestamp or technical.timestamp)

        try:
            return self._synthesize(symbol, technical, sentiment, volume, timestamp)
        except Exception as e:
            logger.error(
                "Trade plan synthesis failed - returning neutral fallback",
                symbol=symbol,
                error=str(e),
                error_type=type(e).__name__
            )
            return fallback_recommendation(symbol, e, timestamp)

    def _synthesize(self, symbol: str, technical: TechnicalAnalysisResult, sentiment: SentimentResult,
                    volume: VolumeAnalysisResult, timestamp: datetime) -> Recommendation:
        params = self.config.plan
        aggregated = self.aggregator.aggregate(technical, sentiment, volume)
        direction = aggregated.direction

        if direction is Direction.NEUTRAL:
            logger.info(
                "Neutral recommendation",
                symbol=symbol,
                bullish=aggregated.votes.bullish,
                bearish=aggregated.votes.bearish
            )
            return NeutralRecommendation(
                symbol=symbol,
                reason=NEUTRAL_REASON,
                timestamp=timestamp,
                votes=aggregated.votes,
            )

        levels = technical.support_resistance
        entries = determine_entries(levels, direction, params)

        plan = TradePlan(
            symbol=symbol,
            direction=direction,
            confidence=aggregated.confidence,
            entries=entries,
            take_profits=determine_take_profits(levels, direction, params),
            stop_loss=determine_stop_loss(levels, direction, entries, params),
            leverage=calculate_leverage(aggregated.confidence, technical.volatility.level, params),
            reasoning=generate_reasoning(technical, sentiment, volume, direction, params),
            timestamp=timestamp,
            votes=aggregated.votes,
            technical_summary=summarize_technical(technical),
            sentiment_summary=summarize_sentiment(sentiment),
            volume_summary=summarize_volume(volume),
        )

        try:
            self.validator.validate_plan(plan.to_dict())
        except PlanValidationError as e:
            raise AggregationError(
                str(e),
                stage="validation",
                context={"symbol": symbol, "direction": direction.value}
            ) from e

        logger.info(
            "Trade plan generated",
            symbol=symbol,
            direction=direction.value,
            confidence=plan.confidence.value,
            leverage=plan.leverage.recommended
        )

        return plan
