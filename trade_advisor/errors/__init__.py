"""
Error classification system for the analysis pipeline.

This module provides a structured exception hierarchy for the kinds of errors
encountered while turning market data series into a trade plan.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
    InsufficientDataError,
)
from .system_failures import (
    SystemFailureError,
    AnalysisError,
    AggregationError,
    ConfigurationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    "InsufficientDataError",
    # System Failures
    "SystemFailureError",
    "AnalysisError",
    "AggregationError",
    "ConfigurationError",
]
