"""Tests for logging configuration."""

import logging
from collections.abc import Iterator

import pytest

from fuel_ledger.app_logging import configure_logging


@pytest.fixture
def clean_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("fuel_ledger")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    try:
        yield logger
    finally:
        logger.handlers[:] = saved[0]
        logger.setLevel(saved[1])
        logger.propagate = saved[2]


def test_configure_logging_idempotent(clean_logger: logging.Logger) -> None:
    configure_logging()
    first_count = len(clean_logger.handlers)

    configure_logging("debug")
    second_count = len(clean_logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert clean_logger.level == logging.DEBUG
    assert clean_logger.propagate is False
