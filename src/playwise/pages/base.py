"""Base page object.

Page objects hold selectors and flows for one screen and reach the browser
only through the ActionExecutor, so every interaction gets the same wait
and logging behaviour.

Pattern:
    - One class per page/major component
    - Selectors as BySelector class constants
    - Methods for actions (click, type) and reads (get_text)

Example:
    class LoginPage(BasePage):
        path = "/login"
        USERNAME = BySelector("#username")
        PASSWORD = BySelector("#password")
        SUBMIT = BySelector("button[type=submit]")

        async def login(self, username: str, password: str) -> None:
            await self.type(self.USERNAME, username)
            await self.type(self.PASSWORD, password)
            await self.click(self.SUBMIT)
"""

from __future__ import annotations

from playwise.actions.executor import ActionExecutor, ElementState
from playwise.actions.locatable import Locatable


class BasePage:
    """Common navigation and interaction helpers for page objects."""

    path: str = "/"

    def __init__(self, actions: ActionExecutor, base_url: str = "") -> None:
        self.actions = actions
        self.base_url = base_url.rstrip("/")

    def url_for(self, path: str | None = None) -> str:
        path = self.path if path is None else path
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def navigate(self, path: str | None = None) -> None:
        """Open this page (or ``path``) relative to the base URL."""
        await self.actions.navigate(self.url_for(path))

    async def wait_for_element(
        self, target: Locatable, state: ElementState = "visible"
    ) -> None:
        await self.actions.wait_for_element(target, state=state)

    async def click(self, target: Locatable) -> None:
        await self.actions.click(target)

    async def type(self, target: Locatable, text: str) -> None:
        await self.actions.type_into(target, text)

    async def get_text(self, target: Locatable) -> str:
        return await self.actions.read_text(target)

    async def title(self) -> str:
        return await self.actions.page_title()

    def url(self) -> str:
        return self.actions.current_url()
