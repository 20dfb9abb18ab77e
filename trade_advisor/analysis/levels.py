"""Support/resistance detection from local extrema"""

from collections.abc import Sequence
from typing import Union

from ..models.analysis import Extremum, Level, SupportResistance


def find_local_extrema(values: Sequence[float], find_maxima: bool = True,
                       window: int = 5) -> list[Extremum]:
    """
    Find strict local extrema

    A point is a local maximum iff it is greater than every other point
    within +/- window (minimum: smaller). Points closer than window to
    either end of the series are never extrema. Ties are not extrema.

    Args:
        values: Ordered price series (highs for maxima, lows for minima)
        find_maxima: Search for maxima when True, minima otherwise
        window: Radius in candles

    Returns:
        Extrema in index order
    """
    extrema = []
    if window < 1:
        return extrema

    for i in range(window, len(values) - window):
        center = values[i]
        neighbours = list(values[i - window:i]) + list(values[i + 1:i + window + 1])

        if find_maxima:
            is_extremum = all(center > v for v in neighbours)
        else:
            is_extremum = all(center < v for v in neighbours)

        if is_extremum:
            extrema.append(Extremum(index=i, value=center))

    return extrema


def cluster_levels(extrema: Sequence[Union[Extremum, float]], threshold: float = 0.01) -> list[Level]:
    """
    Merge nearby extrema into levels

    Values are sorted ascending; a value joins the running cluster while its
    relative distance to the cluster's last member is below threshold.
    Each cluster collapses to the mean of its members, and its strength is
    the member count. Adjacent output levels are therefore at least threshold
    apart relative to the lower one.

    Args:
        extrema: Extremum records or bare prices
        threshold: Relative merge distance (default 1%)

    Returns:
        Levels in ascending price order
    """
    values = sorted(e.value if isinstance(e, Extremum) else float(e) for e in extrema)
    if not values:
        return []

    levels = []
    cluster = [values[0]]

    for value in values[1:]:
        last = cluster[-1]
        if value == last or (last > 0 and (value - last) / last < threshold):
            cluster.append(value)
        else:
            levels.append(Level(price=sum(cluster) / len(cluster), strength=len(cluster)))
            cluster = [value]

    levels.append(Level(price=sum(cluster) / len(cluster), strength=len(cluster)))
    return levels


def nearest_levels(levels: Sequence[Level], current_price: float, below: bool,
                   count: int = 5) -> tuple[Level, ...]:
    """
    Pick the levels on one side of the current price, nearest first

    Args:
        levels: Candidate levels in any order
        current_price: Reference price
        below: Supports (strictly below) when True, resistances (strictly above) otherwise
        count: Maximum number of levels returned

    Returns:
        Up to count levels ordered by distance from the current price
    """
    if below:
        side = [level for level in levels if level.price < current_price]
        side.sort(key=lambda level: level.price, reverse=True)
    else:
        side = [level for level in levels if level.price > current_price]
        side.sort(key=lambda level: level.price)

    return tuple(side[:max(count, 0)])


def detect_support_resistance(highs: Sequence[float], lows: Sequence[float],
                              current_price: float, window: int = 5,
                              threshold: float = 0.01, max_levels: int = 5) -> SupportResistance:
    """
    Build support levels from clustered local lows and resistance levels
    from clustered local highs, keeping the nearest max_levels on each side

    Args:
        highs: High prices
        lows: Low prices
        current_price: Latest close
        window: Extremum radius
        threshold: Cluster merge distance
        max_levels: Levels kept per side

    Returns:
        SupportResistance with nearest-first ladders
    """
    resistance = cluster_levels(find_local_extrema(highs, True, window), threshold)
    support = cluster_levels(find_local_extrema(lows, False, window), threshold)

    return SupportResistance(
        current_price=current_price,
        support=nearest_levels(support, current_price, below=True, count=max_levels),
        resistance=nearest_levels(resistance, current_price, below=False, count=max_levels),
    )
