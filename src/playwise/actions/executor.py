"""Element and page interactions with wait semantics.

This module provides:
- ActionExecutor, the single entry point page objects use to touch the UI

Every element operation resolves its Locatable to a fresh locator, waits
for the operation's precondition (visible or attached), then performs the
action exactly once. Waiting is retried by Playwright until the timeout;
the action itself is never retried.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from playwise.actions.locatable import Locatable, describe_locatable, resolve_locatable
from playwise.core.exceptions import (
    ActionError,
    ElementNotFoundError,
    InteractionError,
    WaitTimeoutError,
)
from playwise.waits import ConditionTimeout, wait_for_condition

ElementState = Literal["attached", "detached", "visible", "hidden"]

StorageKind = Literal["localStorage", "sessionStorage"]


def _center(box: dict[str, float]) -> tuple[float, float]:
    return box["x"] + box["width"] / 2, box["y"] + box["height"] / 2


class ActionExecutor:
    """Performs single UI interactions against one page.

    Attributes:
        page: The Playwright page all selectors resolve against.
        default_timeout_ms: Wait budget used when a call gives none.
        navigation_timeout_ms: Budget for ``navigate``.
        poll_interval_ms: Interval for polled waits such as ``wait_for_text``.

    Example:
        actions = ActionExecutor(page)
        await actions.type_into(BySelector("#username"), "tomsmith")
        await actions.click(BySelector("button[type=submit]"))
        banner = await actions.read_text(BySelector("#flash"))
    """

    def __init__(
        self,
        page: Page,
        default_timeout_ms: float = 30_000,
        navigation_timeout_ms: float = 60_000,
        poll_interval_ms: float = 250,
        logger: Any | None = None,
    ) -> None:
        self.page = page
        self.default_timeout_ms = default_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._log = logger if logger is not None else structlog.get_logger(__name__)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def locate(self, target: Locatable) -> Locator:
        """Resolve a Locatable against this executor's page."""
        return resolve_locatable(self.page, target)

    def _timeout(self, timeout_ms: float | None) -> float:
        return self.default_timeout_ms if timeout_ms is None else timeout_ms

    def _describe(self, action: str, target: Locatable) -> str:
        """Describe ``target``, logging the failed action when it is not a Locatable."""
        try:
            return describe_locatable(target)
        except TypeError as e:
            self._log.error(
                "action_failed",
                action=action,
                target=repr(target),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    @asynccontextmanager
    async def _step(
        self, action: str, target: str, timeout_ms: float, **context: Any
    ) -> AsyncIterator[None]:
        """Log the outcome of one operation and map engine errors."""
        try:
            yield
        except ActionError as e:
            self._log.error(
                "action_failed",
                action=action,
                target=target,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
                **context,
            )
            raise
        except PlaywrightTimeoutError as e:
            error = WaitTimeoutError(action, target, timeout_ms, "operation timed out")
            self._log.error(
                "action_failed",
                action=action,
                target=target,
                error=str(e),
                error_type=type(error).__name__,
                exc_info=True,
                **context,
            )
            raise error from e
        except PlaywrightError as e:
            error = InteractionError(action, target, e.message)
            self._log.error(
                "action_failed",
                action=action,
                target=target,
                error=str(e),
                error_type=type(error).__name__,
                exc_info=True,
                **context,
            )
            raise error from e
        else:
            self._log.debug("action_succeeded", action=action, target=target, **context)

    async def _await_state(
        self,
        action: str,
        target: Locatable,
        locator: Locator,
        state: ElementState,
        timeout_ms: float,
    ) -> None:
        """Wait for the precondition of an operation.

        Raises:
            ElementNotFoundError: Nothing matched the locator before the timeout.
            WaitTimeoutError: An element matched but never reached ``state``.
        """
        try:
            await locator.wait_for(state=state, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            if state in ("attached", "visible") and await locator.count() == 0:
                raise ElementNotFoundError(action, target.describe(), timeout_ms) from None
            raise WaitTimeoutError(
                action, target.describe(), timeout_ms, f"element did not become {state}"
            ) from None

    # -------------------------------------------------------------------------
    # Element operations
    # -------------------------------------------------------------------------

    async def click(self, target: Locatable, timeout_ms: float | None = None) -> None:
        """Click an element once it is visible."""
        timeout = self._timeout(timeout_ms)
        async with self._step("click", self._describe("click", target), timeout):
            locator = self.locate(target)
            await self._await_state("click", target, locator, "visible", timeout)
            await locator.click(timeout=timeout)

    async def double_click(self, target: Locatable, timeout_ms: float | None = None) -> None:
        """Double-click an element once it is visible."""
        timeout = self._timeout(timeout_ms)
        async with self._step("double_click", self._describe("double_click", target), timeout):
            locator = self.locate(target)
            await self._await_state("double_click", target, locator, "visible", timeout)
            await locator.dblclick(timeout=timeout)

    async def hover(self, target: Locatable, timeout_ms: float | None = None) -> None:
        """Move the pointer over an element once it is visible."""
        timeout = self._timeout(timeout_ms)
        async with self._step("hover", self._describe("hover", target), timeout):
            locator = self.locate(target)
            await self._await_state("hover", target, locator, "visible", timeout)
            await locator.hover(timeout=timeout)

    async def type_into(
        self, target: Locatable, text: str, timeout_ms: float | None = None
    ) -> None:
        """Replace the value of an input field with ``text``."""
        timeout = self._timeout(timeout_ms)
        # Length only; field values may be credentials
        async with self._step(
            "type_into", self._describe("type_into", target), timeout, chars=len(text)
        ):
            locator = self.locate(target)
            await self._await_state("type_into", target, locator, "visible", timeout)
            await locator.fill(text, timeout=timeout)

    async def clear_field(self, target: Locatable, timeout_ms: float | None = None) -> None:
        """Empty an input field."""
        timeout = self._timeout(timeout_ms)
        async with self._step("clear_field", self._describe("clear_field", target), timeout):
            locator = self.locate(target)
            await self._await_state("clear_field", target, locator, "visible", timeout)
            await locator.fill("", timeout=timeout)

    async def select_option(
        self, target: Locatable, value: str, timeout_ms: float | None = None
    ) -> list[str]:
        """Select an option of a ``<select>`` element by value.

        Returns:
            The values Playwright reports as selected.
        """
        timeout = self._timeout(timeout_ms)
        async with self._step(
            "select_option", self._describe("select_option", target), timeout, value=value
        ):
            locator = self.locate(target)
            await self._await_state("select_option", target, locator, "visible", timeout)
            selected = await locator.select_option(value, timeout=timeout)
        return selected

    async def scroll_into_view(self, target: Locatable, timeout_ms: float | None = None) -> None:
        """Scroll the page until the element is in the viewport."""
        timeout = self._timeout(timeout_ms)
        async with self._step(
            "scroll_into_view", self._describe("scroll_into_view", target), timeout
        ):
            locator = self.locate(target)
            await self._await_state("scroll_into_view", target, locator, "attached", timeout)
            await locator.scroll_into_view_if_needed(timeout=timeout)

    async def read_text(self, target: Locatable, timeout_ms: float | None = None) -> str:
        """Return the rendered text of an element."""
        timeout = self._timeout(timeout_ms)
        async with self._step("read_text", self._describe("read_text", target), timeout):
            locator = self.locate(target)
            await self._await_state("read_text", target, locator, "attached", timeout)
            text = await locator.inner_text(timeout=timeout)
        return text

    async def read_attribute(
        self, target: Locatable, name: str, timeout_ms: float | None = None
    ) -> str | None:
        """Return an attribute value, or None when the attribute is absent."""
        timeout = self._timeout(timeout_ms)
        async with self._step(
            "read_attribute", self._describe("read_attribute", target), timeout, attribute=name
        ):
            locator = self.locate(target)
            await self._await_state("read_attribute", target, locator, "attached", timeout)
            value = await locator.get_attribute(name, timeout=timeout)
        return value

    async def is_visible(self, target: Locatable) -> bool:
        """Probe visibility without waiting."""
        async with self._step("is_visible", self._describe("is_visible", target), 0):
            visible = await self.locate(target).is_visible()
        return visible

    async def wait_for_element(
        self,
        target: Locatable,
        state: ElementState = "visible",
        timeout_ms: float | None = None,
    ) -> None:
        """Wait until an element reaches ``state``."""
        timeout = self._timeout(timeout_ms)
        async with self._step(
            "wait_for_element", self._describe("wait_for_element", target), timeout, state=state
        ):
            await self._await_state(
                "wait_for_element", target, self.locate(target), state, timeout
            )

    async def wait_for_text(
        self, target: Locatable, expected: str, timeout_ms: float | None = None
    ) -> str:
        """Poll an element's text until it contains ``expected``.

        Returns:
            The first text that contained ``expected``.
        """
        timeout = self._timeout(timeout_ms)
        async with self._step(
            "wait_for_text", self._describe("wait_for_text", target), timeout, expected=expected
        ):
            locator = self.locate(target)
            await self._await_state("wait_for_text", target, locator, "attached", timeout)
            try:
                text = await wait_for_condition(
                    action=lambda: locator.inner_text(timeout=timeout),
                    condition=lambda value: expected in value,
                    timeout_seconds=timeout / 1000,
                    poll_interval_seconds=self.poll_interval_ms / 1000,
                    error_message=f"Text never contained {expected!r}",
                )
            except ConditionTimeout as e:
                raise WaitTimeoutError(
                    "wait_for_text",
                    target.describe(),
                    timeout,
                    f"text never contained {expected!r} (last: {e.last_result!r})",
                ) from None
        return text

    async def drag_and_drop(
        self, source: Locatable, target: Locatable, timeout_ms: float | None = None
    ) -> None:
        """Drag ``source`` onto ``target`` with raw pointer events.

        Pointer down at the source centre, move to the target centre, pointer
        up. Both elements must be visible and report a bounding box.
        """
        timeout = self._timeout(timeout_ms)
        description = (
            f"{self._describe('drag_and_drop', source)} -> "
            f"{self._describe('drag_and_drop', target)}"
        )
        async with self._step("drag_and_drop", description, timeout):
            source_locator = self.locate(source)
            target_locator = self.locate(target)
            await self._await_state("drag_and_drop", source, source_locator, "visible", timeout)
            await self._await_state("drag_and_drop", target, target_locator, "visible", timeout)

            source_box = await source_locator.bounding_box(timeout=timeout)
            target_box = await target_locator.bounding_box(timeout=timeout)
            if source_box is None or target_box is None:
                raise InteractionError(
                    "drag_and_drop", description, "failed to retrieve element bounding boxes"
                )

            mouse = self.page.mouse
            await mouse.move(*_center(source_box))
            await mouse.down()
            await mouse.move(*_center(target_box))
            await mouse.up()

    # -------------------------------------------------------------------------
    # Page operations
    # -------------------------------------------------------------------------

    async def navigate(self, url: str, timeout_ms: float | None = None) -> None:
        """Load ``url`` in the page."""
        timeout = self.navigation_timeout_ms if timeout_ms is None else timeout_ms
        async with self._step("navigate", url, timeout):
            await self.page.goto(url, timeout=timeout)

    async def page_title(self) -> str:
        async with self._step("page_title", self.page.url, 0):
            title = await self.page.title()
        return title

    def current_url(self) -> str:
        return self.page.url

    async def clear_storage(self, kind: StorageKind = "localStorage") -> None:
        """Clear local or session storage for the current origin."""
        async with self._step("clear_storage", kind, 0):
            await self.page.evaluate(f"() => window.{kind}.clear()")

    async def clear_local_storage(self) -> None:
        await self.clear_storage("localStorage")

    async def clear_session_storage(self) -> None:
        await self.clear_storage("sessionStorage")

    async def add_cookies(self, cookies: list[dict[str, Any]]) -> None:
        async with self._step("add_cookies", self.page.url, 0, count=len(cookies)):
            await self.page.context.add_cookies(cookies)  # type: ignore[arg-type]

    async def cookies(self) -> list[dict[str, Any]]:
        async with self._step("cookies", self.page.url, 0):
            jar = await self.page.context.cookies()
        return [dict(cookie) for cookie in jar]

    async def clear_cookies(self) -> None:
        async with self._step("clear_cookies", self.page.url, 0):
            await self.page.context.clear_cookies()

    async def screenshot(self, path: str, full_page: bool = False) -> bytes:
        """Save a screenshot of the page to ``path``."""
        async with self._step("screenshot", path, 0, full_page=full_page):
            image = await self.page.screenshot(path=path, full_page=full_page)
        return image
