"""Tests for logging setup."""

import logging
import os
from unittest.mock import patch

import pytest

from login_sentinel.common.logging import PACKAGE_LOGGER, get_logger


@pytest.fixture
def fresh_name(request):
    name = f"{PACKAGE_LOGGER}.tests.{request.node.name}"
    yield name
    logging.getLogger(name).handlers.clear()


class TestGetLogger:
    """Tests for get_logger."""

    def test_explicit_level(self, fresh_name):
        logger = get_logger(fresh_name, "warning")
        assert logger.level == logging.WARNING

    def test_level_from_environment(self, fresh_name):
        with patch.dict(os.environ, {"SENTINEL_LOG_LEVEL": "DEBUG"}):
            logger = get_logger(fresh_name)
        assert logger.level == logging.DEBUG

    def test_defaults_to_info(self, fresh_name):
        with patch.dict(os.environ, {}, clear=True):
            logger = get_logger(fresh_name)
        assert logger.level == logging.INFO

    def test_handler_attached_once(self, fresh_name):
        get_logger(fresh_name)
        logger = get_logger(fresh_name)

        assert len(logger.handlers) == 1
        assert logger.handlers[0].formatter._fmt == "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def test_module_loggers_propagate_to_package_logger(self, fresh_name):
        get_logger(fresh_name)
        child = logging.getLogger(f"{fresh_name}.detector")

        assert not child.handlers
        assert child.parent is logging.getLogger(fresh_name)
