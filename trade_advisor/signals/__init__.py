"""
Signal aggregation and plan synthesis module.

Counts direction votes across the technical, sentiment and volume analyses,
scores confidence, and builds the trade plan or the neutral recommendation.
"""
