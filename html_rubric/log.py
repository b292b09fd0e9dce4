"""Logging setup for the command line entrypoint."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"
NOISY_LOGGERS = ("aiohttp", "asyncio")


def configure_logging(level: str | int = "WARNING") -> None:
    """Install a single stderr handler on the root logger."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    log_level = level
    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
