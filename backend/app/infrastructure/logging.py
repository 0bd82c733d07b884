from __future__ import annotations

import logging
import sys

import structlog

from app.infrastructure.config.settings import settings


LOG_CONFIGURED = False


def configure_logging(level: str = "INFO") -> None:
    global LOG_CONFIGURED
    if LOG_CONFIGURED:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    LOG_CONFIGURED = True


def get_logger(name: str):
    configure_logging(settings.log_level)
    return structlog.get_logger(name)
