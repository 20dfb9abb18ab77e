"""
Trade Advisor - Multi-venue Technical Analysis and Trade Plan Synthesis

Turns normalized per-venue candlestick and order book series into a single
directional trade plan (direction, confidence, entries, take-profits,
stop-loss, leverage and reasoning).
"""

__version__ = "0.1.0"
__author__ = "Trade Advisor Team"
