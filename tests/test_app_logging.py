"""Tests for logging configuration."""

import logging

from calorie_tracker.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("calorie_tracker")
    logger.handlers.clear()

    configure_logging(logging.DEBUG)
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.level == logging.INFO
    assert logger.propagate is False


def test_configure_logging_accepts_level_names() -> None:
    configure_logging("debug")
    assert logging.getLogger("calorie_tracker").level == logging.DEBUG

    configure_logging("not-a-level")
    assert logging.getLogger("calorie_tracker").level == logging.INFO


def test_configure_logging_quiets_http_client_loggers() -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging("ERROR")

    assert logging.getLogger("httpx").level == logging.ERROR
