"""Central logging configuration for the edge service."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(
    level: str = "INFO",
    fmt: str = DEFAULT_LOG_FORMAT,
    quiet_loggers: Iterable[str] = ("httpx", "httpcore"),
) -> None:
    """Send every record to stderr and cap ``quiet_loggers`` at WARNING.

    The upstream HTTP client logs each proxied request line at INFO, which
    would double the access log of a busy proxy.
    """

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"edge": {"format": fmt}},
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "edge",
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {name: {"level": logging.WARNING} for name in quiet_loggers},
            "root": {"handlers": ["stderr"], "level": level.upper()},
        }
    )
