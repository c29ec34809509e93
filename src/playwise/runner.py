"""Test runner boundary.

Runs a test body with its declared fixtures, a fresh assertion ledger and
guaranteed teardown, and condenses everything into a CaseResult.

Usage:
    async def login_works(login_page, ledger):
        await login_page.login("tomsmith", "SuperSecretPassword!")
        ledger.assert_hard(Contains(await login_page.flash_message(), "secure area"))

    result = await run_case(registry, Case("login", login_works))
    assert result.passed, result.error
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum

import structlog
from pydantic import BaseModel, Field

from playwise.assertions.ledger import AssertionLedger
from playwise.fixtures.registry import FixtureRegistry, dependency_names

log = structlog.get_logger(__name__)

# Name under which each case's ledger is injected into its session
LEDGER_FIXTURE = "ledger"


class CaseOutcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


class CaseResult(BaseModel):
    """Outcome of one test case.

    The primary error decides the outcome. Soft failures recorded before an
    abort and teardown failures are attached without changing it.
    """

    name: str
    outcome: CaseOutcome
    error_type: str | None = None
    error: str | None = None
    soft_failures: list[str] = Field(default_factory=list)
    teardown_warnings: list[str] = Field(default_factory=list)
    assertions: int = 0
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return self.outcome == CaseOutcome.PASSED


@dataclass(frozen=True)
class Case:
    """A test body plus the fixtures it declares.

    Attributes:
        name: Case name used in results and logs.
        body: Coroutine function receiving fixtures as keyword arguments.
        fixtures: Fixture names; defaults to the body's required parameters.
    """

    name: str
    body: Callable[..., Awaitable[None]]
    fixtures: tuple[str, ...] | None = None

    def fixture_names(self) -> tuple[str, ...]:
        if self.fixtures is not None:
            return self.fixtures
        return dependency_names(self.body)


async def run_case(
    registry: FixtureRegistry,
    case: Case,
    assertion_timeout_ms: float = 5_000,
) -> CaseResult:
    """Run one case in its own fixture session and ledger."""
    ledger = AssertionLedger(case.name, default_timeout_ms=assertion_timeout_ms)
    session = registry.session(extras={LEDGER_FIXTURE: ledger}, test_name=case.name)
    error: Exception | None = None
    started = time.perf_counter()

    with structlog.contextvars.bound_contextvars(case=case.name):
        log.info("case_started", fixtures=list(case.fixture_names()))
        try:
            kwargs = {}
            for name in case.fixture_names():
                kwargs[name] = await session.resolve(name)
            await case.body(**kwargs)
            ledger.finalize()
        except Exception as e:
            error = e
        finally:
            teardown_failures = await session.teardown_all()

        result = CaseResult(
            name=case.name,
            outcome=CaseOutcome.FAILED if error is not None else CaseOutcome.PASSED,
            error_type=type(error).__name__ if error is not None else None,
            error=str(error) if error is not None else None,
            soft_failures=[record.describe() for record in ledger.soft_failures],
            teardown_warnings=[failure.describe() for failure in teardown_failures],
            assertions=len(ledger.records),
            duration_seconds=round(time.perf_counter() - started, 3),
        )

        if result.passed:
            log.info("case_passed", duration=result.duration_seconds)
        else:
            log.error(
                "case_failed",
                error_type=result.error_type,
                error=result.error,
                soft_failures=len(result.soft_failures),
                duration=result.duration_seconds,
            )
        if result.teardown_warnings:
            log.warning("case_teardown_warnings", warnings=result.teardown_warnings)

    return result


async def run_cases(
    registry: FixtureRegistry,
    cases: Sequence[Case],
    max_concurrency: int = 1,
    assertion_timeout_ms: float = 5_000,
) -> list[CaseResult]:
    """Run cases, up to ``max_concurrency`` at a time.

    The fixture graph is validated before any case starts. Results keep
    the order of ``cases``.

    Raises:
        UnknownFixtureError: If the registry references an unregistered fixture.
        CyclicDependencyError: If the registry graph has a cycle.
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")

    registry.validate(known=(LEDGER_FIXTURE,))
    semaphore = asyncio.Semaphore(max_concurrency)

    async def guarded(case: Case) -> CaseResult:
        async with semaphore:
            return await run_case(registry, case, assertion_timeout_ms)

    results = await asyncio.gather(*(guarded(case) for case in cases))
    return list(results)
