"""Shared fixtures for unit tests."""

import logging

import pytest


@pytest.fixture
def restore_root_logger():
    """Yield the root logger and put its handlers and level back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
