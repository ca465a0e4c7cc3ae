"""Shared pytest fixtures."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by a test (e.g. through the CLI)."""
    yield
    structlog.reset_defaults()
