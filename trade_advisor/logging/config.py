"""
Structured logging setup for the trade advisor.

Every module obtains its logger through structlog; `configure_logging` decides
how those events are rendered (console for development, JSON lines for
collection). Analyzer classifications go through `log_classification` so that
the label behind each vote can be traced afterwards.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor


def _build_processors(include_timestamp: bool, include_caller: bool, format_json: bool,
                      extra_processors: Optional[list[Processor]]) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ))

    processors.extend(extra_processors or [])

    if format_json:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    return processors


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> None:
    """
    Route structlog through stdlib logging at the given level.

    Args:
        level: Name of a stdlib level (DEBUG shows analyzer classifications)
        format_json: Render JSON lines instead of the console format
        include_timestamp: Add a UTC ISO timestamp to each event
        include_caller: Add module, function and line of the call site
        extra_processors: Processors inserted before the renderer
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
        format="%(message)s"
    )

    structlog.configure(
        processors=_build_processors(include_timestamp, include_caller, format_json, extra_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Module logger (pass __name__)."""
    return structlog.get_logger(name)


def get_analysis_logger(name: str) -> FilteringBoundLogger:
    """
    Logger for analyzer and aggregation decisions.

    Events carry subsystem="analysis" so they can be filtered apart from
    engine and parsing events.
    """
    return get_logger(name).bind(
        subsystem="analysis",
        audit_trail=True
    )


def log_classification(
    logger: FilteringBoundLogger,
    analyzer: str,
    label: str,
    symbol: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Emit one debug event for a classification.

    Args:
        logger: Logger from get_analysis_logger
        analyzer: Component that produced the label ("technical", "volume", "aggregator")
        label: The classification value
        symbol: Symbol under analysis
        context: Inputs or sub-labels the classification was derived from
    """
    fields: dict[str, Any] = {"analyzer": analyzer, "label": label}
    if symbol is not None:
        fields["symbol"] = symbol
    if context:
        fields["context"] = context

    logger.debug("Classification", **fields)
