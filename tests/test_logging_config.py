"""Tests for the CLI logging setup."""

import logging

import pytest

from logging_config import LOGGING_CONFIG, configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """dictConfig replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_default_level_is_info():
    """Without --debug only INFO and above are emitted."""
    configure_logging()
    assert logging.getLogger().level == logging.INFO


def test_debug_level():
    """--debug lowers the root level to DEBUG."""
    configure_logging(debug=True)
    assert logging.getLogger().level == logging.DEBUG


def test_base_config_is_not_mutated():
    """Enabling debug does not leak into the shared config dict."""
    configure_logging(debug=True)
    assert LOGGING_CONFIG["root"]["level"] == "INFO"
