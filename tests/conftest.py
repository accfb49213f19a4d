"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For the shared builders (listings, requirements, the DC inventory), see
tests/fixtures/scoring_fixtures.py
"""

import pytest

from tests.fixtures.scoring_fixtures import MutableClock


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring a database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def clock():
    """Mutable UTC clock starting at FIXED_NOW."""
    return MutableClock()
