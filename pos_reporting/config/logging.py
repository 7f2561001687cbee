"""
Logging Configuration for the POS Reporting Service

Every line is a structlog event carrying the service name and environment.
While a report request is served, its scope (report, store, date range) is
bound into the context so query, cache and failure logs can be filtered per
report without repeating the fields at each call site.
"""

import logging
import sys
from typing import Any, Callable, Dict, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter
from structlog.typing import EventDict

from pos_reporting.config.settings import Settings, get_settings

# Server loggers rendered through the same handler instead of their own
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "gunicorn.error")


def service_context(settings: Settings) -> Callable[[Any, str, EventDict], EventDict]:
    """Processor that stamps each event with the service name and environment."""
    stamp = {"service": settings.app_name, "environment": settings.app_env}

    def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in stamp.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_service_context


def bind_report_context(params) -> Dict[str, Any]:
    """
    Bind a validated report scope into the current request's log context.

    Args:
        params: ReportParams for the report being served

    Returns:
        The bound fields
    """
    context = params.log_context()
    structlog.contextvars.bind_contextvars(**context)
    return context


def effective_log_level(settings: Settings, override: Optional[str] = None) -> str:
    """Explicit override, then DEBUG=true, then LOG_LEVEL"""
    if override:
        return override.upper()
    if settings.debug:
        return "DEBUG"
    return settings.monitoring.log_level.upper()


def configure_logging(log_level: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        settings: Configuration; defaults to the cached environment settings
    """
    settings = settings or get_settings()
    level = effective_log_level(settings, log_level)
    numeric_level = getattr(logging, level, logging.INFO)

    # Request and report context first, then the usual level/time stamps
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        service_context(settings),
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # JSON for log shippers, colored text on a developer terminal
    if settings.monitoring.log_format == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    for logger_name in SERVER_LOGGERS:
        server_logger = logging.getLogger(logger_name)
        server_logger.handlers = [handler]
        server_logger.setLevel(numeric_level)
        server_logger.propagate = False

    # Statement logging only when POSTGRES_ECHO asks for it
    if not settings.database.echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
    )
