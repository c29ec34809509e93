"""Default fixture graph for browser and API tests.

Graph (dependencies first):

    settings
    playwright
    browser      <- playwright, settings
    context      <- browser, settings
    page         <- context, settings
    actions      <- page, settings
    api_request  <- playwright, settings

Each test gets its own browser; nothing here is shared across sessions.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import structlog
from playwright.async_api import (
    APIRequestContext,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)

from playwise.actions.executor import ActionExecutor
from playwise.config.settings import Settings, get_settings
from playwise.core.exceptions import ConfigurationError
from playwise.fixtures.registry import FixtureRegistry

log = structlog.get_logger(__name__)

BROWSER_TYPES = ("chromium", "firefox", "webkit")


async def launch_browser(
    playwright: Playwright,
    browser_type: str = "chromium",
    headless: bool = True,
    slow_mo: float = 0,
) -> Browser:
    """Launch a browser engine by name.

    Raises:
        ConfigurationError: If ``browser_type`` is not a Playwright engine.
    """
    name = browser_type.lower()
    if name not in BROWSER_TYPES:
        raise ConfigurationError(
            f"Unsupported browser type '{browser_type}', expected one of {BROWSER_TYPES}"
        )

    browser = await getattr(playwright, name).launch(headless=headless, slow_mo=slow_mo)
    log.info("browser_launched", browser=name, version=browser.version, headless=headless)
    return browser


def register_browser_fixtures(registry: FixtureRegistry, config: Settings) -> FixtureRegistry:
    """Register the default browser/API fixtures on ``registry``."""

    @registry.fixture(name="settings")
    def _settings() -> Settings:
        return config

    @registry.fixture(timeout_ms=config.navigation_timeout_ms)
    async def playwright() -> AsyncGenerator[Playwright, None]:
        driver = await async_playwright().start()
        yield driver
        await driver.stop()

    @registry.fixture(timeout_ms=config.navigation_timeout_ms)
    async def browser(playwright: Playwright, settings: Settings) -> AsyncGenerator[Browser, None]:
        instance = await launch_browser(
            playwright,
            browser_type=settings.browser_type,
            headless=settings.headless,
            slow_mo=settings.slow_mo_ms,
        )
        yield instance
        await instance.close()
        log.debug("browser_closed", browser=settings.browser_type)

    @registry.fixture
    async def context(browser: Browser, settings: Settings) -> AsyncGenerator[BrowserContext, None]:
        instance = await browser.new_context(
            viewport={"width": settings.viewport_width, "height": settings.viewport_height},
            base_url=settings.base_url,
            ignore_https_errors=settings.ignore_https_errors,
        )
        yield instance
        await instance.close()

    @registry.fixture
    async def page(context: BrowserContext, settings: Settings) -> AsyncGenerator[Page, None]:
        instance = await context.new_page()
        instance.set_default_timeout(settings.default_timeout_ms)
        instance.set_default_navigation_timeout(settings.navigation_timeout_ms)
        yield instance
        await instance.close()

    @registry.fixture
    def actions(page: Page, settings: Settings) -> ActionExecutor:
        return ActionExecutor(
            page,
            default_timeout_ms=settings.default_timeout_ms,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            poll_interval_ms=settings.poll_interval_ms,
        )

    @registry.fixture
    async def api_request(
        playwright: Playwright, settings: Settings
    ) -> AsyncGenerator[APIRequestContext, None]:
        request = await playwright.request.new_context(
            base_url=settings.api_base_url,
            ignore_https_errors=settings.ignore_https_errors,
        )
        yield request
        await request.dispose()

    return registry


def build_default_registry(settings: Settings | None = None) -> FixtureRegistry:
    """Create a registry holding the default browser/API fixtures.

    Usage:
        registry = build_default_registry()

        @registry.fixture
        def login_page(actions, settings):
            return LoginPage(actions, settings.base_url)
    """
    return register_browser_fixtures(FixtureRegistry(), settings or get_settings())
