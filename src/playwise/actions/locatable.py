"""Element addressing for the action layer.

A Locatable is either a raw selector or a pre-built Playwright locator.
Both resolve to a fresh ``Locator`` at the moment of use so that
re-rendered elements are always looked up again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from playwright.async_api import Locator, Page


@dataclass(frozen=True)
class BySelector:
    """Address an element by Playwright selector (CSS, text=, role=, ...)."""

    selector: str

    def describe(self) -> str:
        return self.selector


@dataclass(frozen=True)
class ByHandle:
    """Address an element through an already built locator."""

    locator: Locator

    def describe(self) -> str:
        return repr(self.locator)


Locatable = Union[BySelector, ByHandle]


def describe_locatable(target: Locatable) -> str:
    """Human readable description of a Locatable for logs and errors.

    Raises:
        TypeError: If target is not one of the two Locatable variants.
    """
    if isinstance(target, (BySelector, ByHandle)):
        return target.describe()
    raise TypeError(f"Expected BySelector or ByHandle, got {type(target).__name__}")


def resolve_locatable(page: Page, target: Locatable) -> Locator:
    """Resolve a Locatable to a Playwright locator on the given page.

    Raises:
        TypeError: If target is not one of the two Locatable variants.
    """
    if isinstance(target, BySelector):
        return page.locator(target.selector)
    if isinstance(target, ByHandle):
        return target.locator
    raise TypeError(f"Expected BySelector or ByHandle, got {type(target).__name__}")
