"""
Shared pytest configuration and fixtures for all tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'core', 'querybuilder', 'utils' without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")
    config.addinivalue_line("markers", "regression: Regression tests - previously fixed bugs")


@pytest.fixture
def fake_connection():
    """
    Provide a MagicMock standing in for a querybuilder Connection.

    quote() doubles single quotes like a SQL driver would, execute() returns
    a sentinel handle, and fetch_all/row_count/last_insert_id return values
    tests can override.
    """
    from unittest.mock import MagicMock

    connection = MagicMock(name='connection')
    connection.quote.side_effect = lambda value: "'" + str(value).replace("'", "''") + "'"
    connection.execute.return_value = 'handle'
    connection.fetch_all.return_value = []
    connection.row_count.return_value = 0
    connection.last_insert_id.return_value = None
    return connection
