from __future__ import annotations

import logging

from html_rubric.log import LOG_FORMAT, configure_logging


def test_configure_logging_installs_one_handler_at_requested_level() -> None:
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    try:
        configure_logging("debug")
        configure_logging("info")
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        assert root_logger.handlers[0].formatter._fmt == LOG_FORMAT
        assert logging.getLogger("aiohttp").level >= logging.WARNING
    finally:
        root_logger.handlers[:] = saved_handlers
        root_logger.setLevel(saved_level)
