"""Pytest fixtures for picklist tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI attaches to the package logger."""
    package_logger = logging.getLogger("picklist")
    original_handlers = list(package_logger.handlers)
    original_level = package_logger.level

    yield

    for handler in package_logger.handlers:
        if handler not in original_handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(original_level)
