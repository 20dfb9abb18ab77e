"""
System failure error classifications.

These exceptions represent failures of the pipeline itself rather than of the
data it was given.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class AnalysisError(SystemFailureError):
    """An analyzer failed while building its result."""

    def __init__(self, message: str, analyzer: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.analyzer = analyzer


class AggregationError(SystemFailureError):
    """Unexpected failure while synthesizing a trade plan."""

    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.stage = stage


class ConfigurationError(SystemFailureError):
    """Configuration could not be loaded or failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
