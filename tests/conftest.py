"""Pytest configuration and shared fixtures."""

import logging

import logfire
import pytest


# Keep spans local during tests
logfire.configure(send_to_logfire=False, console=False)


logger = logging.getLogger(__name__)


@pytest.fixture
def week_start() -> int:
    """Default week start (Sunday)."""
    return 0
