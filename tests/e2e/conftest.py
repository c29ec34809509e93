"""Browser fixtures for end-to-end tests.

This module provides fixtures for:
- Settings tuned for a local headless run
- The default fixture registry extended with a login page object
- Inline HTML for a login screen, so no server is needed

Run with:
    pytest -m e2e

Usage:
    @pytest.mark.e2e
    @pytest.mark.asyncio
    async def test_login(registry):
        result = await run_case(registry, Case("login", body))
"""

import os

import pytest
from playwright.async_api import Page

from playwise.actions import ActionExecutor
from playwise.config.settings import Settings
from playwise.fixtures import FixtureRegistry, build_default_registry
from tests.support.page_objects import LoginPage

# =============================================================================
# Configuration
# =============================================================================

# Timeouts (in milliseconds)
DEFAULT_TIMEOUT = 5_000
NAVIGATION_TIMEOUT = 15_000

LOGIN_HTML = """
<form id="login">
  <input id="username" name="username">
  <input id="password" name="password" type="password">
  <button type="submit">Login</button>
</form>
<div id="flash" hidden></div>
<script>
  document.querySelector("#login").addEventListener("submit", (event) => {
    event.preventDefault();
    const ok = document.querySelector("#username").value === "tomsmith"
      && document.querySelector("#password").value === "SuperSecretPassword!";
    const flash = document.querySelector("#flash");
    flash.textContent = ok ? "You logged into a secure area!" : "Your username is invalid!";
    setTimeout(() => { flash.hidden = false; }, 200);
  });
</script>
"""


# =============================================================================
# Harness Fixtures
# =============================================================================


@pytest.fixture
def e2e_settings() -> Settings:
    """Headless settings; PLAYWISE_BROWSER_TYPE still picks the engine."""
    return Settings(
        headless=os.environ.get("PLAYWISE_HEADLESS", "true").lower() != "false",
        default_timeout_ms=DEFAULT_TIMEOUT,
        navigation_timeout_ms=NAVIGATION_TIMEOUT,
    )


@pytest.fixture
def registry(e2e_settings: Settings) -> FixtureRegistry:
    """Default browser graph plus a login page rendered from LOGIN_HTML.

    Graph additions:
        login_page <- page, actions
    """
    registry = build_default_registry(e2e_settings)

    @registry.fixture
    async def login_page(page: Page, actions: ActionExecutor) -> LoginPage:
        await page.set_content(LOGIN_HTML)
        return LoginPage(actions)

    registry.validate(known=("ledger",))
    return registry
