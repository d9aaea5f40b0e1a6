"""Logging setup shared by structlog and stdlib loggers.

HTTP-layer code logs through ``structlog.get_logger()``; services and
repositories use ``logging.getLogger(__name__)``. Both end up on the stdlib
root handler at ``settings.log_level``.
"""

import logging

import structlog

from grh.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure stdlib logging and route structlog through it."""
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(
                key_order=["event", "level", "timestamp"]
            ),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
