"""
Cross-venue normalization.

Aligns the latest daily close and the summed daily volume of every venue,
computes deviations from the cross-venue average, and lists arbitrage
opportunities between venue pairs.
"""

from collections.abc import Sequence
from typing import Optional

import structlog

from ..models.analysis import ArbitrageOpportunity, NormalizedMarket
from .models import DAILY, VenueData, venue_labels

logger = structlog.get_logger(__name__)


def detect_arbitrage_opportunities(prices: dict[str, float], threshold_pct: float = 0.5,
                                   fee_pct: float = 0.2) -> tuple[ArbitrageOpportunity, ...]:
    """
    Compare every venue pair and keep price gaps above threshold_pct

    Args:
        prices: Latest price per venue, in venue order
        threshold_pct: Minimum absolute gap in percent of the first venue's price
        fee_pct: Estimated round-trip fees in percent

    Returns:
        Opportunities sorted by potential profit, highest first
    """
    venues = list(prices)
    opportunities = []

    for i, venue_a in enumerate(venues):
        for venue_b in venues[i + 1:]:
            price_a = prices[venue_a]
            price_b = prices[venue_b]
            if price_a <= 0:
                continue

            difference = (price_b - price_a) / price_a * 100.0
            if abs(difference) <= threshold_pct:
                continue

            buy_venue, sell_venue = (venue_a, venue_b) if difference > 0 else (venue_b, venue_a)
            opportunities.append(ArbitrageOpportunity(
                buy_venue=buy_venue,
                sell_venue=sell_venue,
                price_difference=abs(difference),
                potential_profit=abs(difference) - fee_pct,
            ))

    opportunities.sort(key=lambda o: o.potential_profit, reverse=True)
    return tuple(opportunities)


class VenueNormalizer:
    """Aligns price and volume series across venues"""

    def __init__(self, threshold_pct: float = 0.5, fee_pct: float = 0.2):
        self.threshold_pct = threshold_pct
        self.fee_pct = fee_pct

    def normalize(self, venues: Sequence[VenueData], symbol: Optional[str] = None) -> Optional[NormalizedMarket]:
        """
        Normalize venues that supplied a daily series

        Venues without daily candles are skipped and logged.

        Args:
            venues: Venue data, primary venue first
            symbol: Symbol label, defaults to the first venue's symbol

        Returns:
            NormalizedMarket, or None when no venue has daily candles
        """
        prices: dict[str, float] = {}
        volumes: dict[str, float] = {}

        for label, venue in zip(venue_labels(venues), venues):
            latest = venue.latest_close(DAILY)
            if latest is None:
                logger.debug("Venue skipped in normalization - no daily candles", venue=label)
                continue
            prices[label] = latest
            volumes[label] = sum(venue.volumes(DAILY))

        if not prices:
            return None

        average_price = sum(prices.values()) / len(prices)
        deviations = {
            name: (price - average_price) / average_price * 100.0
            for name, price in prices.items()
        }

        total_volume = sum(volumes.values())
        distribution = {
            name: (volume / total_volume * 100.0) if total_volume > 0 else 0.0
            for name, volume in volumes.items()
        }

        return NormalizedMarket(
            symbol=symbol or venues[0].symbol,
            prices=prices,
            average_price=average_price,
            deviations=deviations,
            volumes=volumes,
            total_volume=total_volume,
            distribution=distribution,
            arbitrage=detect_arbitrage_opportunities(prices, self.threshold_pct, self.fee_pct),
        )
