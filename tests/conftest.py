"""Shared pytest fixtures for Playwise tests.

This module provides fixtures for:
- Test environment variables with automatic restore
- Fresh settings (the get_settings cache is cleared around each test)
- Playwright doubles (page, locator) built from AsyncMock
- A capturing structlog logger for log assertions

Usage:
    @pytest.mark.asyncio
    async def test_something(fake_page):
        actions = ActionExecutor(fake_page)
"""

import os
from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
import structlog

from playwise.config.settings import get_settings
from tests.support.fakes import make_locator, make_page

pytest_plugins = ["playwise.pytest_plugin", "pytester"]

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables."""
    original_env = os.environ.copy()

    os.environ.setdefault("PLAYWISE_ENV", "test")
    os.environ.setdefault("PLAYWISE_BASE_URL", "http://localhost:3000")
    os.environ.setdefault("PLAYWISE_API_BASE_URL", "http://localhost:3000/api")

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test read settings from the current environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Playwright Doubles
# =============================================================================


@pytest.fixture
def fake_locator() -> MagicMock:
    """A visible, attached locator whose operations all succeed."""
    return make_locator()


@pytest.fixture
def fake_page(fake_locator: MagicMock) -> MagicMock:
    """A page whose ``locator()`` returns ``fake_locator`` for any selector."""
    return make_page(default=fake_locator)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def captured_logs() -> Generator[list[dict], None, None]:
    """Capture structlog events emitted during the test."""
    with structlog.testing.capture_logs() as logs:
        yield logs
