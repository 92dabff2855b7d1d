"""
Shared fixtures for core/ module tests.

Key fixtures:
- clean_env: removes every QUERYBUILDER_* variable so Config() sees defaults.
- restore_root_logger: snapshots and restores the root logger handlers/level.
"""

import logging
import os

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """
    Remove QUERYBUILDER_* variables from the environment for one test.
    """
    for name in list(os.environ):
        if name.startswith('QUERYBUILDER_'):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def restore_root_logger():
    """
    Restore the root logger after setup_logging() replaced its handlers.
    """
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level

    yield root_logger

    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
