"""Typed comparison variants evaluated by the assertion ledger.

Value comparisons are evaluated synchronously. Element comparisons wrap
Playwright's auto-retrying ``expect`` and must be awaited.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, expect


@dataclass(frozen=True)
class Evaluation:
    """Outcome of evaluating one comparison."""

    passed: bool
    actual: Any
    expected: Any


# =============================================================================
# Value comparisons
# =============================================================================


class ValueComparison:
    """Base class for comparisons over plain values."""

    kind: ClassVar[str] = "value"

    def evaluate(self) -> Evaluation:
        raise NotImplementedError


@dataclass(frozen=True)
class Equals(ValueComparison):
    actual: Any
    expected: Any
    kind: ClassVar[str] = "equals"

    def evaluate(self) -> Evaluation:
        return Evaluation(self.actual == self.expected, self.actual, self.expected)


@dataclass(frozen=True)
class NotEquals(ValueComparison):
    actual: Any
    expected: Any
    kind: ClassVar[str] = "not_equals"

    def evaluate(self) -> Evaluation:
        return Evaluation(self.actual != self.expected, self.actual, f"not {self.expected!r}")


@dataclass(frozen=True)
class Contains(ValueComparison):
    """Substring containment; case-sensitive unless told otherwise."""

    actual: str
    expected: str
    case_sensitive: bool = True
    kind: ClassVar[str] = "contains"

    def evaluate(self) -> Evaluation:
        if not isinstance(self.actual, str) or not isinstance(self.expected, str):
            return Evaluation(False, self.actual, self.expected)
        haystack, needle = self.actual, self.expected
        if not self.case_sensitive:
            haystack, needle = haystack.casefold(), needle.casefold()
        return Evaluation(needle in haystack, self.actual, self.expected)


@dataclass(frozen=True)
class IsTrue(ValueComparison):
    actual: Any
    kind: ClassVar[str] = "is_true"

    def evaluate(self) -> Evaluation:
        return Evaluation(self.actual is True, self.actual, True)


@dataclass(frozen=True)
class IsFalse(ValueComparison):
    actual: Any
    kind: ClassVar[str] = "is_false"

    def evaluate(self) -> Evaluation:
        return Evaluation(self.actual is False, self.actual, False)


@dataclass(frozen=True)
class IsNone(ValueComparison):
    actual: Any
    kind: ClassVar[str] = "is_none"

    def evaluate(self) -> Evaluation:
        return Evaluation(self.actual is None, self.actual, None)


@dataclass(frozen=True)
class IsNotNone(ValueComparison):
    actual: Any
    kind: ClassVar[str] = "is_not_none"

    def evaluate(self) -> Evaluation:
        return Evaluation(self.actual is not None, self.actual, "not None")


@dataclass(frozen=True)
class Matches(ValueComparison):
    """Full regular-expression match of a string."""

    actual: str
    pattern: str
    kind: ClassVar[str] = "matches"

    def evaluate(self) -> Evaluation:
        if not isinstance(self.actual, str):
            return Evaluation(False, self.actual, self.pattern)
        try:
            passed = re.fullmatch(self.pattern, self.actual) is not None
        except (re.error, TypeError) as e:
            # An unusable pattern is a failed comparison
            return Evaluation(False, self.actual, f"{self.pattern!r} ({e})")
        return Evaluation(passed, self.actual, self.pattern)


# =============================================================================
# Element comparisons
# =============================================================================


class ElementComparison:
    """Base class for comparisons over a UI element.

    Subclasses call Playwright's ``expect`` in ``_check``; an
    ``AssertionError`` from it is a failed comparison.
    """

    kind: ClassVar[str] = "element"
    locator: Locator

    async def evaluate(self, timeout_ms: float) -> Evaluation:
        try:
            await self._check(timeout_ms)
        except AssertionError:
            return Evaluation(False, await self._actual(), self._expected())
        return Evaluation(True, self._expected(), self._expected())

    async def _actual(self) -> Any:
        try:
            if await self.locator.count() == 0:
                return "<no element>"
            return await self._observe()
        except PlaywrightError as e:
            return f"<unavailable: {e.message}>"

    async def _check(self, timeout_ms: float) -> None:
        raise NotImplementedError

    async def _observe(self) -> Any:
        raise NotImplementedError

    def _expected(self) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class Visible(ElementComparison):
    locator: Locator
    kind: ClassVar[str] = "visible"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_be_visible(timeout=timeout_ms)

    async def _observe(self) -> Any:
        return "visible" if await self.locator.is_visible() else "hidden"

    def _expected(self) -> Any:
        return "visible"


@dataclass(frozen=True)
class Hidden(ElementComparison):
    locator: Locator
    kind: ClassVar[str] = "hidden"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_be_hidden(timeout=timeout_ms)

    async def _observe(self) -> Any:
        return "visible" if await self.locator.is_visible() else "hidden"

    def _expected(self) -> Any:
        return "hidden"


@dataclass(frozen=True)
class Attached(ElementComparison):
    """Element is present in the DOM."""

    locator: Locator
    kind: ClassVar[str] = "attached"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_be_attached(timeout=timeout_ms)

    async def _observe(self) -> Any:
        return "attached" if await self.locator.count() else "detached"

    def _expected(self) -> Any:
        return "attached"


@dataclass(frozen=True)
class Detached(ElementComparison):
    """Element is absent from the DOM."""

    locator: Locator
    kind: ClassVar[str] = "detached"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_be_attached(attached=False, timeout=timeout_ms)

    async def _observe(self) -> Any:
        return "attached" if await self.locator.count() else "detached"

    def _expected(self) -> Any:
        return "detached"


@dataclass(frozen=True)
class HasText(ElementComparison):
    locator: Locator
    text: str
    kind: ClassVar[str] = "has_text"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_have_text(self.text, timeout=timeout_ms)

    async def _observe(self) -> Any:
        return " ".join(await self.locator.all_inner_texts())

    def _expected(self) -> Any:
        return self.text


@dataclass(frozen=True)
class HasAttribute(ElementComparison):
    locator: Locator
    name: str
    value: str
    kind: ClassVar[str] = "has_attribute"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_have_attribute(self.name, self.value, timeout=timeout_ms)

    async def _observe(self) -> Any:
        return await self.locator.get_attribute(self.name)

    def _expected(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Enabled(ElementComparison):
    locator: Locator
    kind: ClassVar[str] = "enabled"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_be_enabled(timeout=timeout_ms)

    async def _observe(self) -> Any:
        return "enabled" if await self.locator.is_enabled() else "disabled"

    def _expected(self) -> Any:
        return "enabled"


@dataclass(frozen=True)
class Disabled(ElementComparison):
    locator: Locator
    kind: ClassVar[str] = "disabled"

    async def _check(self, timeout_ms: float) -> None:
        await expect(self.locator).to_be_disabled(timeout=timeout_ms)

    async def _observe(self) -> Any:
        return "enabled" if await self.locator.is_enabled() else "disabled"

    def _expected(self) -> Any:
        return "disabled"
