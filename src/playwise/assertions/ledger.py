"""Assertion ledger with hard and soft assertions.

This module provides:
- AssertionKind / AssertionOutcome enums
- AssertionRecord, an immutable record of one evaluated comparison
- AssertionLedger, the per-test ordered record of assertions

A hard failure raises immediately and closes the ledger. Soft failures are
recorded and reported together by ``finalize()`` at the end of the test.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from playwise.assertions.comparisons import ElementComparison, Evaluation, ValueComparison
from playwise.core.exceptions import (
    AggregatedSoftAssertionFailure,
    HardAssertionFailure,
    LedgerClosedError,
)


class AssertionKind(str, Enum):
    """Whether a failure aborts the test or is deferred."""

    HARD = "hard"
    SOFT = "soft"


class AssertionOutcome(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class AssertionRecord(BaseModel):
    """One evaluated comparison. Immutable once created."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: AssertionKind
    comparison: str
    actual: Any
    expected: Any
    message: str = ""
    outcome: AssertionOutcome
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def failed(self) -> bool:
        return self.outcome == AssertionOutcome.FAIL

    def describe(self) -> str:
        """One-line summary used in failure messages."""
        label = self.message or f"{self.comparison} assertion failed"
        return f"{label} (actual: {self.actual!r}, expected: {self.expected!r})"


class AssertionLedger:
    """Ordered assertion records for a single test.

    Attributes:
        test_name: Name used in log events.
        default_timeout_ms: Wait budget for element comparisons.

    Example:
        ledger = AssertionLedger("login")
        ledger.assert_soft(Equals(response.status, 200), "status code")
        await ledger.expect_hard(Visible(page.locator("#flash")), "flash shown")
        ledger.finalize()  # raises if any soft assertion failed
    """

    def __init__(
        self,
        test_name: str = "",
        default_timeout_ms: float = 5_000,
        logger: Any | None = None,
    ) -> None:
        self.test_name = test_name
        self.default_timeout_ms = default_timeout_ms
        self._log = logger if logger is not None else structlog.get_logger(__name__)
        self._records: list[AssertionRecord] = []
        self._hard_failure: AssertionRecord | None = None
        self._finalized = False

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    @property
    def records(self) -> tuple[AssertionRecord, ...]:
        return tuple(self._records)

    @property
    def failures(self) -> list[AssertionRecord]:
        return [record for record in self._records if record.failed]

    @property
    def soft_failures(self) -> list[AssertionRecord]:
        return [
            record
            for record in self._records
            if record.failed and record.kind == AssertionKind.SOFT
        ]

    @property
    def hard_failure(self) -> AssertionRecord | None:
        return self._hard_failure

    @property
    def passed(self) -> bool:
        return not self.failures

    @property
    def closed(self) -> bool:
        return self._hard_failure is not None or self._finalized

    def soft_report(self) -> str:
        """Numbered list of soft failures, empty when there are none."""
        return "\n".join(
            f"{index}. {record.describe()}"
            for index, record in enumerate(self.soft_failures, start=1)
        )

    # -------------------------------------------------------------------------
    # Value assertions
    # -------------------------------------------------------------------------

    def assert_hard(self, comparison: ValueComparison, message: str = "") -> AssertionRecord:
        """Evaluate a value comparison; raise on failure.

        Raises:
            HardAssertionFailure: If the comparison fails.
            LedgerClosedError: If the ledger was aborted or finalized.
        """
        self._ensure_open()
        evaluation = self._evaluate_value(comparison)
        return self._record(AssertionKind.HARD, comparison.kind, evaluation, message)

    def assert_soft(self, comparison: ValueComparison, message: str = "") -> AssertionRecord:
        """Evaluate a value comparison; record a failure and carry on."""
        self._ensure_open()
        evaluation = self._evaluate_value(comparison)
        return self._record(AssertionKind.SOFT, comparison.kind, evaluation, message)

    # -------------------------------------------------------------------------
    # Element assertions
    # -------------------------------------------------------------------------

    async def expect_hard(
        self,
        comparison: ElementComparison,
        message: str = "",
        timeout_ms: float | None = None,
    ) -> AssertionRecord:
        """Evaluate an element comparison, waiting up to the timeout; raise on failure."""
        self._ensure_open()
        evaluation = await self._evaluate_element(comparison, timeout_ms)
        return self._record(AssertionKind.HARD, comparison.kind, evaluation, message)

    async def expect_soft(
        self,
        comparison: ElementComparison,
        message: str = "",
        timeout_ms: float | None = None,
    ) -> AssertionRecord:
        """Evaluate an element comparison, waiting up to the timeout; defer failure."""
        self._ensure_open()
        evaluation = await self._evaluate_element(comparison, timeout_ms)
        return self._record(AssertionKind.SOFT, comparison.kind, evaluation, message)

    # -------------------------------------------------------------------------
    # End of test
    # -------------------------------------------------------------------------

    def finalize(self) -> None:
        """Fail the test if any hard or soft assertion failed.

        A hard failure wins even when the body caught its exception.
        Only the first call decides; later calls are no-ops.

        Raises:
            HardAssertionFailure: If a hard assertion failed.
            AggregatedSoftAssertionFailure: Listing every soft failure in order.
        """
        if self._finalized:
            return
        self._finalized = True

        if self._hard_failure is not None:
            self._log.error(
                "ledger_finalized_with_hard_failure",
                test=self.test_name,
                assertions=len(self._records),
            )
            raise HardAssertionFailure(
                self._hard_failure.message or self._hard_failure.describe(),
                self._hard_failure,
            )

        soft_failures = self.soft_failures
        if not soft_failures:
            self._log.debug(
                "ledger_finalized",
                test=self.test_name,
                assertions=len(self._records),
            )
            return

        self._log.error(
            "soft_assertions_failed",
            test=self.test_name,
            failed=len(soft_failures),
            assertions=len(self._records),
        )
        raise AggregatedSoftAssertionFailure(soft_failures)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._hard_failure is not None:
            raise LedgerClosedError(
                f"Ledger for '{self.test_name}' was aborted by: {self._hard_failure.describe()}"
            )
        if self._finalized:
            raise LedgerClosedError(f"Ledger for '{self.test_name}' is already finalized")

    @staticmethod
    def _evaluate_value(comparison: ValueComparison) -> Evaluation:
        if not isinstance(comparison, ValueComparison):
            raise TypeError(
                f"{type(comparison).__name__} is not a value comparison; "
                "use expect_hard/expect_soft for element comparisons"
            )
        return comparison.evaluate()

    async def _evaluate_element(
        self, comparison: ElementComparison, timeout_ms: float | None
    ) -> Evaluation:
        if not isinstance(comparison, ElementComparison):
            raise TypeError(
                f"{type(comparison).__name__} is not an element comparison; "
                "use assert_hard/assert_soft for value comparisons"
            )
        timeout = self.default_timeout_ms if timeout_ms is None else timeout_ms
        return await comparison.evaluate(timeout)

    def _record(
        self,
        kind: AssertionKind,
        comparison: str,
        evaluation: Evaluation,
        message: str,
    ) -> AssertionRecord:
        record = AssertionRecord(
            kind=kind,
            comparison=comparison,
            actual=evaluation.actual,
            expected=evaluation.expected,
            message=message,
            outcome=AssertionOutcome.PASS if evaluation.passed else AssertionOutcome.FAIL,
        )
        self._records.append(record)

        if not record.failed:
            self._log.debug(
                "assertion_passed",
                test=self.test_name,
                kind=kind.value,
                comparison=comparison,
            )
            return record

        if kind == AssertionKind.SOFT:
            self._log.warning(
                "soft_assertion_failed",
                test=self.test_name,
                comparison=comparison,
                message=message,
                actual=repr(record.actual),
                expected=repr(record.expected),
            )
            return record

        self._hard_failure = record
        self._log.error(
            "hard_assertion_failed",
            test=self.test_name,
            comparison=comparison,
            message=message,
            actual=repr(record.actual),
            expected=repr(record.expected),
        )
        raise HardAssertionFailure(message or record.describe(), record)
