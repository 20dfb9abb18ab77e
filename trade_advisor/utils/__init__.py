"""
Utility functions module.

Time Semantics:
- Candle open times (epoch milliseconds) are converted to UTC datetimes at parse time
- The most recent candle's open time (hourly or daily) is the market time of an analysis
- Wall-clock time is only used as a fallback when no market time is available
"""
