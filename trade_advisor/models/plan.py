"""Trade plan and neutral recommendation contracts"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..utils.time import format_market_time
from .signals import Confidence, Direction, EntryType, RiskLevel

NEUTRAL_REASON = "Conflicting signals or lack of clear direction in the market"


@dataclass(frozen=True)
class CategoryVotes:
    """Bullish and bearish votes contributed by one analysis category"""
    bullish: int = 0
    bearish: int = 0


@dataclass(frozen=True)
class VoteTally:
    """Votes per category (technical, sentiment, volume)"""
    categories: Mapping[str, CategoryVotes]

    @property
    def bullish(self) -> int:
        return sum(votes.bullish for votes in self.categories.values())

    @property
    def bearish(self) -> int:
        return sum(votes.bearish for votes in self.categories.values())

    @property
    def margin(self) -> int:
        """Bullish minus bearish votes"""
        return self.bullish - self.bearish

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            name: {"bullish": votes.bullish, "bearish": votes.bearish}
            for name, votes in self.categories.items()
        }
        result["total"] = {"bullish": self.bullish, "bearish": self.bearish}
        return result


@dataclass(frozen=True)
class Entry:
    price: float
    type: EntryType
    allocation: float
    reason: str


@dataclass(frozen=True)
class TakeProfit:
    price: float
    allocation: float
    percentage_gain: float
    reason: str


@dataclass(frozen=True)
class StopLoss:
    price: float
    percentage_loss: float
    reason: str


@dataclass(frozen=True)
class Leverage:
    recommended: int
    risk_level: RiskLevel
    reason: str


@dataclass(frozen=True)
class TradePlan:
    """Directional trade plan. Entry and take-profit allocations each sum to 1.0."""
    symbol: str
    direction: Direction
    confidence: Confidence
    entries: tuple[Entry, ...]
    take_profits: tuple[TakeProfit, ...]
    stop_loss: StopLoss
    leverage: Leverage
    reasoning: tuple[str, ...]
    timestamp: datetime
    votes: Optional[VoteTally] = None
    technical_summary: Mapping[str, Any] = field(default_factory=dict)
    sentiment_summary: Mapping[str, Any] = field(default_factory=dict)
    volume_summary: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_actionable(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        """Serializable form consumed by the HTTP layer"""
        return {
            "symbol": self.symbol,
            "recommendation": self.direction.value,
            "confidence": self.confidence.value,
            "entries": [
                {
                    "price": entry.price,
                    "type": entry.type.value,
                    "allocation": entry.allocation,
                    "reason": entry.reason,
                }
                for entry in self.entries
            ],
            "take_profits": [
                {
                    "price": tp.price,
                    "allocation": tp.allocation,
                    "percentage_gain": tp.percentage_gain,
                    "reason": tp.reason,
                }
                for tp in self.take_profits
            ],
            "stop_loss": {
                "price": self.stop_loss.price,
                "percentage_loss": self.stop_loss.percentage_loss,
                "reason": self.stop_loss.reason,
            },
            "leverage": {
                "recommended": self.leverage.recommended,
                "risk_level": self.leverage.risk_level.value,
                "reason": self.leverage.reason,
            },
            "reasoning": list(self.reasoning),
            "votes": self.votes.to_dict() if self.votes else None,
            "timestamp": format_market_time(self.timestamp),
            "technical_summary": dict(self.technical_summary),
            "sentiment_summary": dict(self.sentiment_summary),
            "volume_summary": dict(self.volume_summary),
        }


@dataclass(frozen=True)
class NeutralRecommendation:
    """No-trade outcome: conflicting signals, or the fallback after an internal failure"""
    symbol: str
    reason: str
    timestamp: datetime
    error: Optional[str] = None              # Exception type when produced as a fallback
    votes: Optional[VoteTally] = None

    direction = Direction.NEUTRAL
    confidence = Confidence.LOW

    @property
    def is_actionable(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "symbol": self.symbol,
            "recommendation": Direction.NEUTRAL.value,
            "confidence": Confidence.LOW.value,
            "reason": self.reason,
            "timestamp": format_market_time(self.timestamp),
        }
        if self.error is not None:
            result["error"] = self.error
        if self.votes is not None:
            result["votes"] = self.votes.to_dict()
        return result
