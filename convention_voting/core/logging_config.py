"""Structured logging configuration.

Call ``setup_logging`` once at startup, then use ``get_logger(__name__)``:

    logger = get_logger(__name__)
    logger.info("vote_cast", motion_id=3, user_id="...")

Production renders one JSON object per line; other environments get the
colourless console renderer so test output stays readable.
"""
import logging
import sys
from typing import Optional

import structlog

from convention_voting.core.config import settings


def setup_logging(level: str = "INFO", environment: Optional[str] = None) -> None:
    """Configure structlog and the stdlib root logger."""
    environment = environment or settings.ENVIRONMENT
    log_level = getattr(logging, level.upper(), logging.INFO)

    # stdlib loggers (uvicorn, sqlalchemy) share the level and stream
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
