"""Order book analysis: volume walls and bid/ask balance"""

from collections.abc import Sequence
from typing import Optional

from ..data.models import BookLevel, OrderBookSnapshot
from ..models.analysis import VolumeAtPrice, VolumeWallLevel
from ..models.signals import VolumeWall


def calculate_notional_value(levels: Sequence[BookLevel], max_levels: Optional[int] = None) -> float:
    """
    Calculate notional value for order book side

    Args:
        levels: BookLevel objects, best price first
        max_levels: Maximum levels to include (None for the whole side)

    Returns:
        Total notional value (price * quantity)
    """
    notional = 0.0
    for i, level in enumerate(levels):
        if max_levels is not None and i >= max_levels:
            break
        notional += level.price * level.quantity

    return notional


def find_volume_walls(levels: Sequence[BookLevel], threshold: float,
                      max_walls: int = 3) -> tuple[VolumeWallLevel, ...]:
    """
    Walk one side of the book accumulating quantity; each time the running
    total exceeds threshold a wall is recorded at that price and the total resets

    Args:
        levels: BookLevel objects, best price first
        threshold: Cumulative quantity forming a wall
        max_walls: Walls kept, nearest first

    Returns:
        Up to max_walls walls
    """
    walls = []
    cumulative = 0.0

    for level in levels:
        cumulative += level.quantity
        if cumulative > threshold:
            walls.append(VolumeWallLevel(price=level.price, volume=cumulative))
            cumulative = 0.0

    return tuple(walls[:max(max_walls, 0)])


def classify_volume_walls(bid_ask_ratio: Optional[float], support_ratio: float = 1.5,
                          resistance_ratio: float = 0.67) -> VolumeWall:
    """Bid-heavy books are strong support, ask-heavy books strong resistance"""
    if bid_ask_ratio is None:
        return VolumeWall.BALANCED
    if bid_ask_ratio > support_ratio:
        return VolumeWall.STRONG_SUPPORT
    if bid_ask_ratio < resistance_ratio:
        return VolumeWall.STRONG_RESISTANCE
    return VolumeWall.BALANCED


def analyze_volume_at_price(book: OrderBookSnapshot, volume_fraction: float = 0.1,
                            max_walls: int = 3, support_ratio: float = 1.5,
                            resistance_ratio: float = 0.67) -> VolumeAtPrice:
    """
    Analyze order book depth

    Wall threshold on both sides is volume_fraction of the total bid quantity.

    Args:
        book: Order book snapshot
        volume_fraction: Share of the bid sum forming a wall
        max_walls: Walls kept per side
        support_ratio: Bid/ask ratio above which the book is strong support
        resistance_ratio: Bid/ask ratio below which the book is strong resistance

    Returns:
        VolumeAtPrice analysis
    """
    bid_volume = book.bid_sum
    ask_volume = book.ask_sum
    bid_ask_ratio = bid_volume / ask_volume if ask_volume > 0 else None

    threshold = bid_volume * volume_fraction

    return VolumeAtPrice(
        bid_volume=bid_volume,
        ask_volume=ask_volume,
        bid_ask_ratio=bid_ask_ratio,
        support_walls=find_volume_walls(book.bids, threshold, max_walls),
        resistance_walls=find_volume_walls(book.asks, threshold, max_walls),
        bid_notional=calculate_notional_value(book.bids),
        ask_notional=calculate_notional_value(book.asks),
        classification=classify_volume_walls(bid_ask_ratio, support_ratio, resistance_ratio),
    )
