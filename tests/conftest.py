"""Pytest configuration and fixtures."""

import pytest

from cleanroom.showcase import create_lifecycle
from cleanroom.testing import FixtureLifecycle


@pytest.fixture
def lifecycle() -> FixtureLifecycle:
    """Heavy-load lifecycle with its own document."""
    return create_lifecycle()
