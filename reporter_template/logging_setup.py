"""Structured logging setup shared by every monitor entry point."""

import logging
import os
import sys
from typing import Optional

import structlog


def configure_logging(level: str = "INFO", log_format: Optional[str] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Output goes to stderr so the dispatcher's journal captures it.
    LOG_FORMAT in the environment overrides the configured format.
    """
    log_format = os.getenv("LOG_FORMAT", log_format or "json")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
            if log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
