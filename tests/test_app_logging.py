"""Tests for logging configuration."""

import logging

from print_intake.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("print_intake")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.level == logging.INFO


def test_configure_logging_accepts_level_names() -> None:
    logger = logging.getLogger("print_intake")
    logger.handlers.clear()

    configure_logging("debug")
    assert logger.level == logging.DEBUG

    configure_logging(logging.WARNING)
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1

    configure_logging()
