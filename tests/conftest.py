"""Pytest configuration and shared fixtures for Bob tests."""

import pytest

from tests.helpers import RecordingSender, make_plist


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require live services)"
    )


@pytest.fixture
def sender():
    """Recording reply sink."""
    return RecordingSender()


@pytest.fixture
def plist_content():
    """Info.plist holding version 1.2.3 (45)."""
    return make_plist()
