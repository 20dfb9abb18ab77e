"""
Market analysis module.

Level and pattern detection, order book walls, and the technical, volume and
sentiment analyzers that feed signal aggregation.
"""
