"""
Errors raised when the supplied market series cannot support an analysis.

These exceptions categorize problems with the series handed to the core:
absent collaborator fields, malformed payloads and short histories.
"""

from typing import Any, Dict, Optional


class DataQualityError(Exception):
    """Input problem; the engine answers it with the neutral fallback."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MissingDataError(DataQualityError):
    """A field required by a specific analysis is absent from an upstream record."""

    def __init__(self, message: str, data_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.data_type = data_type


class MalformedDataError(DataQualityError):
    """A payload is present but does not follow the venue or sentiment contract."""

    def __init__(self, message: str, raw_data: Any = None,
                 expected_format: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
        self.expected_format = expected_format


class InsufficientDataError(DataQualityError):
    """A series is shorter than an analysis needs."""

    def __init__(self, message: str, required_count: Optional[int] = None,
                 available_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.required_count = required_count
        self.available_count = available_count
