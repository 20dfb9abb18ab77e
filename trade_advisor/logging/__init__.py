"""
Logging configuration and utilities for the trade advisor.
"""
from .config import configure_logging, get_analysis_logger, get_logger, log_classification

__all__ = ["configure_logging", "get_analysis_logger", "get_logger", "log_classification"]
