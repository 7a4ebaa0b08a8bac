"""
pytest fixtures for mockingbird doubles.

Usage:
    pytest_plugins = ("mockingbird.pytest_plugin",)

    def test_something(reprise):
        user_class = reprise(User)
        user_class.will_find("user1")
        assert user_class.find(1) == "user1"
"""

from typing import Callable

import pytest

from mockingbird.config import MockingbirdConfig
from mockingbird.double import reprise as reprise_double


@pytest.fixture
def reprise() -> Callable[[type], type]:
    """Factory returning isolated copies of doubles, one per call."""
    return reprise_double


@pytest.fixture
def mockingbird_config() -> MockingbirdConfig:
    """Checker configuration as read from the environment."""
    return MockingbirdConfig.from_env()
