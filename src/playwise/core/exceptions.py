"""Playwise exception hierarchy.

This module defines the base exception class and specialized exceptions
for the fixture, action and assertion layers of the harness.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playwise.assertions.ledger import AssertionRecord


class PlaywiseError(Exception):
    """Base exception for all Playwise errors.

    All custom exceptions in Playwise inherit from this class
    to enable consistent error handling and logging.
    """

    pass


class ConfigurationError(PlaywiseError):
    """Raised when configuration is invalid or missing.

    Example:
        raise ConfigurationError("Missing required setting: base_url")
    """

    pass


# =============================================================================
# Fixture layer
# =============================================================================


class FixtureError(PlaywiseError):
    """Base class for fixture graph errors.

    Attributes:
        fixture: Name of the fixture the error relates to.
    """

    def __init__(self, fixture: str, message: str) -> None:
        self.fixture = fixture
        super().__init__(message)


class FixtureConflictError(FixtureError):
    """Raised when a fixture name is registered twice.

    Example:
        raise FixtureConflictError("page")
    """

    def __init__(self, fixture: str) -> None:
        super().__init__(fixture, f"Fixture '{fixture}' is already registered")


class UnknownFixtureError(FixtureError):
    """Raised when a fixture (or one of its dependencies) is not registered.

    Attributes:
        required_by: Fixture that declared the missing dependency, if any.
    """

    def __init__(self, fixture: str, required_by: str | None = None) -> None:
        self.required_by = required_by
        if required_by:
            message = f"Unknown fixture '{fixture}' required by '{required_by}'"
        else:
            message = f"Unknown fixture '{fixture}'"
        super().__init__(fixture, message)


class CyclicDependencyError(FixtureError):
    """Raised when fixture resolution revisits a fixture still in progress.

    Attributes:
        path: Resolution path that closes the cycle, e.g. ("a", "b", "a").
    """

    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        super().__init__(
            self.path[-1],
            f"Cyclic fixture dependency: {' -> '.join(self.path)}",
        )


class FactoryError(FixtureError):
    """Raised when a fixture factory fails to produce its instance.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, fixture: str, message: str) -> None:
        super().__init__(fixture, f"Fixture '{fixture}' failed: {message}")


# =============================================================================
# Action layer
# =============================================================================


class ActionError(PlaywiseError):
    """Base class for interaction failures.

    Attributes:
        action: Name of the executor operation (click, type_into, ...).
        target: Human readable description of the element or URL.
    """

    def __init__(self, action: str, target: str, message: str) -> None:
        self.action = action
        self.target = target
        super().__init__(f"{action} on {target}: {message}")


class ElementNotFoundError(ActionError):
    """Raised when a selector never resolves to any element within the timeout."""

    def __init__(self, action: str, target: str, timeout_ms: float) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(action, target, f"no element found within {timeout_ms:g}ms")


class WaitTimeoutError(ActionError):
    """Raised when a wait-bound operation does not complete in time.

    Used when an element exists but never meets the precondition, when an
    action or navigation times out, and when a fixture factory overruns.

    Example:
        raise WaitTimeoutError("click", "#submit", 30_000, "element stayed hidden")
    """

    def __init__(
        self,
        action: str,
        target: str,
        timeout_ms: float,
        detail: str = "condition not met",
    ) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(action, target, f"{detail} within {timeout_ms:g}ms")


class InteractionError(ActionError):
    """Raised when the browser engine rejects an interaction.

    Typical causes are an element detached mid-action or a missing
    bounding box during drag-and-drop.
    """

    pass


# =============================================================================
# Assertion layer
# =============================================================================


class LedgerClosedError(PlaywiseError):
    """Raised when recording into a ledger that was aborted or finalized."""

    pass


class HardAssertionFailure(PlaywiseError, AssertionError):
    """Raised by a failed hard assertion; aborts the current test.

    Attributes:
        record: The failing assertion record.
    """

    def __init__(self, message: str, record: AssertionRecord | None = None) -> None:
        self.record = record
        super().__init__(message)


class AggregatedSoftAssertionFailure(PlaywiseError, AssertionError):
    """Raised at test end when one or more soft assertions failed.

    Attributes:
        records: Every failing soft record, in the order recorded.
    """

    def __init__(self, records: Sequence[AssertionRecord]) -> None:
        self.records = tuple(records)
        lines = [f"{len(self.records)} soft assertion(s) failed:"]
        for index, record in enumerate(self.records, start=1):
            lines.append(
                f"  {index}. {record.message or record.comparison} "
                f"(actual: {record.actual!r}, expected: {record.expected!r})"
            )
        super().__init__("\n".join(lines))
