"""
Unit tests for logging configuration.
"""

import logging

import pytest

from universal_analytics.logging_config import (
    PACKAGE_LOGGER,
    debug_enabled,
    enable_debug,
    setup_logging,
)


@pytest.fixture
def package_logger():
    """Give the test a package logger and restore its handlers afterwards."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers


class TestSetupLogging:
    """Test setup_logging."""

    def test_console_only(self, package_logger):
        logger = setup_logging("warning")

        assert logger is package_logger
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_with_rotating_file(self, package_logger, tmp_path):
        log_file = tmp_path / "logs" / "ua.log"

        logger = setup_logging("DEBUG", log_file=log_file)
        logger.getChild("visitor").debug("hello file")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "hello file" in log_file.read_text()

    def test_repeated_setup_replaces_handlers(self, package_logger):
        setup_logging()
        setup_logging()

        assert len(package_logger.handlers) == 1


class TestDebugToggle:
    """Test enable_debug / debug_enabled."""

    def test_enable_and_disable(self, package_logger):
        enable_debug()
        assert debug_enabled() is True

        enable_debug(False)
        assert package_logger.level == logging.NOTSET
