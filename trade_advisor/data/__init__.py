"""
Data ingestion and normalization module.

Parses the per-venue input contract (candle series, order book, recent trade
totals) into immutable models and aligns prices and volumes across venues.
"""
