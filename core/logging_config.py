"""
Contact Relay Structured Logging
JSON-based structured logging for the contact endpoint
"""

import logging
import sys
from typing import Optional

import structlog
from pythonjsonlogger import jsonlogger

from core.secrets import get_secret

# ============================================================================
# STRUCTURED LOGGING CONFIGURATION
# ============================================================================

def setup_json_logging(
    log_level: str = "INFO",
    service_name: str = "contact-relay",
    environment: Optional[str] = None
):
    """
    Setup JSON structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Name of the service
        environment: Environment name (development, staging, production)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    environment = environment or get_secret("ENVIRONMENT", "development")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Standard library loggers share the same JSON output
    json_handler = logging.StreamHandler(sys.stdout)
    json_formatter = jsonlogger.JsonFormatter(
        fmt='%(timestamp)s %(levelname)s %(name)s %(message)s',
        timestamp=True
    )
    json_handler.setFormatter(json_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(json_handler)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=environment,
        version=get_secret("APP_VERSION", "1.0.0")
    )


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    """Get a structured logger instance (typically get_logger(__name__))."""
    return structlog.get_logger(name)


# ============================================================================
# EVENT HELPERS
# ============================================================================

def log_request(
    logger: structlog.BoundLogger,
    method: str,
    endpoint: str,
    status: int,
    duration_ms: float,
    **extra
):
    """
    Log HTTP request with structured data

    Args:
        logger: Structlog logger instance
        method: HTTP method
        endpoint: Request endpoint
        status: HTTP status code
        duration_ms: Request duration in milliseconds
        **extra: Additional context fields
    """
    logger.info(
        "http_request",
        method=method,
        endpoint=endpoint,
        status=status,
        duration_ms=round(duration_ms, 2),
        **extra
    )


def log_error(
    logger: structlog.BoundLogger,
    error: Exception,
    context: str,
    **extra
):
    """
    Log error with full context and stack trace

    Args:
        logger: Structlog logger instance
        error: Exception instance
        context: Event name describing where it happened
        **extra: Additional context fields
    """
    logger.error(
        context,
        error_type=type(error).__name__,
        error_message=str(error),
        exc_info=True,
        **extra
    )
