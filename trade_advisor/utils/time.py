"""
Time semantics utilities for market vs wall-clock time handling.

Candle open times arrive as epoch milliseconds and are converted to timezone
aware UTC datetimes once, at parse time. The market timestamp of an analysis
is the open time of the most recent candle; wall-clock time is only used when
no market time is available.
"""

from datetime import datetime, timezone
from typing import Optional, Union


def ms_to_datetime(epoch_ms: Union[int, float, str]) -> datetime:
    """
    Convert an epoch timestamp in milliseconds to a UTC datetime.

    Args:
        epoch_ms: Milliseconds since the Unix epoch (numeric or numeric string)

    Returns:
        Timezone-aware UTC datetime

    Raises:
        ValueError: If the value is not numeric or is out of range
    """
    try:
        value = float(epoch_ms)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid epoch milliseconds '{epoch_ms}'") from e

    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"Epoch milliseconds out of range: {epoch_ms}") from e


def datetime_to_ms(ts: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are taken as UTC)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(round(ts.timestamp() * 1000))


def get_market_time(market_ts: Optional[datetime] = None) -> datetime:
    """
    Get the current market time, preferring market timestamp over wall-clock time.

    Args:
        market_ts: Optional market timestamp from data feed

    Returns:
        Market time as UTC datetime, falling back to wall-clock time if unavailable
    """
    if market_ts is not None:
        return market_ts

    return datetime.now(timezone.utc)


def format_market_time(market_ts: datetime) -> str:
    """
    Format market timestamp for plan emission and logging.

    Args:
        market_ts: Market timestamp to format

    Returns:
        ISO8601 formatted string
    """
    return market_ts.isoformat()
