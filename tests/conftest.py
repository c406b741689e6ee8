"""Pytest configuration and shared fixtures for the pdfskeleton test suite.

This module registers the test markers, configures Hypothesis profiles and
provides the fixtures shared across unit and integration tests.
"""

import logging
import os
from typing import Generator

import pytest
from hypothesis import Phase, Verbosity, settings

from pdfskeleton.options import SkeletonOptions
from utils import ProgressTracker

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose, deadline=None)
settings.register_profile("dev", max_examples=30, deadline=None)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - real PDFs through PyMuPDF")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")


@pytest.fixture
def options() -> SkeletonOptions:
    """Provide default skeleton options."""
    return SkeletonOptions()


@pytest.fixture
def tracker() -> ProgressTracker:
    """Provide a progress tracker recording every event."""
    return ProgressTracker()


@pytest.fixture
def restore_root_logger() -> Generator[logging.Logger, None, None]:
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield root
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)
