"""
Structured logging configuration.
Uses structlog for structured JSON logging.
"""

import logging
import sys
from typing import Any
import structlog
from callflow.config import config


def configure_logging():
    """
    Configure structured logging for the application.

    In production: JSON formatted logs
    In development: Pretty printed colored logs
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    )

    # HTTP client libraries log every request at INFO.
    for noisy_logger in ["httpx", "httpcore", "openai"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if config.DEBUG:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        # JSON output for log aggregation
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None) -> Any:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("agent_reply_generated", message_count=3, reply_chars=412)
    """
    return structlog.get_logger(name)


# Configure on module import
configure_logging()

logger = get_logger("callflow")
