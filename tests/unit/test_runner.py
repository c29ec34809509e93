"""Tests for the case runner boundary."""

import asyncio

import pytest

from playwise.assertions import Equals
from playwise.core.exceptions import CyclicDependencyError, UnknownFixtureError
from playwise.fixtures.registry import FixtureRegistry
from playwise.runner import Case, CaseOutcome, run_case, run_cases


def tracking_registry(events: list[str]) -> FixtureRegistry:
    """Registry with ``store <- client`` fixtures that record setup/teardown."""
    registry = FixtureRegistry()

    @registry.fixture
    async def store():
        events.append("setup:store")
        yield {}
        events.append("teardown:store")

    @registry.fixture
    async def client(store):
        events.append("setup:client")
        yield {"store": store}
        events.append("teardown:client")

    return registry


class TestRunCase:
    """Tests for a single case run."""

    @pytest.mark.asyncio
    async def test_passing_case(self) -> None:
        """
        Given: A body with passing assertions
        When: run_case is called
        Then: The result passes and fixtures are torn down in reverse
        """
        events: list[str] = []
        registry = tracking_registry(events)

        async def body(client, ledger):
            ledger.assert_hard(Equals(client["store"], {}))

        result = await run_case(registry, Case("passes", body))

        assert result.outcome == CaseOutcome.PASSED
        assert result.passed is True
        assert result.assertions == 1
        assert events == ["setup:store", "setup:client", "teardown:client", "teardown:store"]

    @pytest.mark.asyncio
    async def test_hard_failure_aborts_body(self) -> None:
        """
        Given: A body whose first assertion is hard and fails
        When: run_case is called
        Then: The rest of the body is skipped and teardown still runs
        """
        events: list[str] = []
        registry = tracking_registry(events)

        async def body(client, ledger):
            ledger.assert_hard(Equals(1, 2), "status code")
            events.append("after assertion")

        result = await run_case(registry, Case("hard", body))

        assert result.outcome == CaseOutcome.FAILED
        assert result.error_type == "HardAssertionFailure"
        assert result.error == "status code"
        assert "after assertion" not in events
        assert events[-2:] == ["teardown:client", "teardown:store"]

    @pytest.mark.asyncio
    async def test_caught_hard_failure_fails_case(self) -> None:
        """
        Given: A body that catches the exception of a failed hard assertion
        When: run_case is called
        Then: The case still fails with HardAssertionFailure
        """

        async def body(ledger):
            try:
                ledger.assert_hard(Equals(1, 2), "must be equal")
            except AssertionError:
                pass

        result = await run_case(FixtureRegistry(), Case("swallowed", body))

        assert result.outcome == CaseOutcome.FAILED
        assert result.error_type == "HardAssertionFailure"
        assert result.error == "must be equal"
        assert result.assertions == 1

    @pytest.mark.asyncio
    async def test_soft_failures_fail_after_body_completes(self) -> None:
        """
        Given: A body with two failing soft assertions
        When: run_case is called
        Then: The whole body runs and the case fails with both listed
        """
        reached: list[str] = []

        async def body(ledger):
            ledger.assert_soft(Equals(1, 2), "a")
            ledger.assert_soft(Equals(3, 3), "ok")
            ledger.assert_soft(Equals(4, 5), "b")
            reached.append("end")

        result = await run_case(FixtureRegistry(), Case("soft", body))

        assert reached == ["end"]
        assert result.error_type == "AggregatedSoftAssertionFailure"
        assert len(result.soft_failures) == 2
        assert result.soft_failures[0].startswith("a ")
        assert result.soft_failures[1].startswith("b ")
        assert result.assertions == 3

    @pytest.mark.asyncio
    async def test_body_exception_is_primary_error(self) -> None:
        async def body(ledger):
            ledger.assert_soft(Equals(1, 2), "recorded first")
            raise RuntimeError("page crashed")

        result = await run_case(FixtureRegistry(), Case("crash", body))

        assert result.error_type == "RuntimeError"
        assert result.error == "page crashed"
        assert result.soft_failures == ["recorded first (actual: 1, expected: 2)"]

    @pytest.mark.asyncio
    async def test_teardown_failure_is_a_warning(self) -> None:
        """
        Given: A passing body whose fixture teardown raises
        When: run_case is called
        Then: The case still passes and the failure is a teardown warning
        """
        registry = FixtureRegistry()

        @registry.fixture
        async def flaky():
            yield "value"
            raise OSError("socket already closed")

        async def body(flaky):
            pass

        result = await run_case(registry, Case("warns", body))

        assert result.passed is True
        assert result.teardown_warnings == ["flaky: OSError: socket already closed"]

    @pytest.mark.asyncio
    async def test_factory_failure_tears_down_built_dependencies(self) -> None:
        """
        Given: A fixture whose factory raises after its dependency was built
        When: run_case resolves it
        Then: The case fails with FactoryError and the dependency is torn down
        """
        events: list[str] = []
        registry = tracking_registry(events)

        @registry.fixture
        async def broken(client):
            raise ConnectionError("refused")
            yield  # pragma: no cover

        body_ran = False

        async def body(broken):
            nonlocal body_ran
            body_ran = True

        result = await run_case(registry, Case("broken", body))

        assert body_ran is False
        assert result.error_type == "FactoryError"
        assert "refused" in result.error
        assert events[-2:] == ["teardown:client", "teardown:store"]

    @pytest.mark.asyncio
    async def test_explicit_fixture_names(self) -> None:
        registry = FixtureRegistry()
        registry.register("number", (), lambda: 42)

        async def body(**fixtures):
            assert fixtures == {"number": 42}

        result = await run_case(registry, Case("explicit", body, fixtures=("number",)))

        assert result.passed is True

    @pytest.mark.asyncio
    async def test_optional_body_parameters_are_not_fixtures(self) -> None:
        """
        Given: A body with a defaulted parameter and **kwargs
        When: run_case resolves its fixtures
        Then: Only the required parameters are requested
        """
        registry = FixtureRegistry()
        registry.register("number", (), lambda: 42)
        seen = {}

        async def body(number, retries=3, **extra):
            seen.update(number=number, retries=retries, extra=extra)

        case = Case("optional", body)
        result = await run_case(registry, case)

        assert case.fixture_names() == ("number",)
        assert result.passed is True
        assert seen == {"number": 42, "retries": 3, "extra": {}}

    @pytest.mark.asyncio
    async def test_logs_case_outcome(self, captured_logs) -> None:
        async def body(ledger):
            ledger.assert_hard(Equals("a", "b"), "mismatch")

        await run_case(FixtureRegistry(), Case("logged", body))

        events = {log["event"]: log for log in captured_logs}
        assert "case_started" in events
        assert events["case_failed"]["error_type"] == "HardAssertionFailure"
        assert events["case_failed"]["log_level"] == "error"


class TestRunCases:
    """Tests for running many cases."""

    @pytest.mark.asyncio
    async def test_results_keep_case_order(self) -> None:
        async def fast(ledger):
            ledger.assert_hard(Equals(1, 1))

        async def slow(ledger):
            await asyncio.sleep(0.01)
            ledger.assert_hard(Equals(1, 2))

        results = await run_cases(
            FixtureRegistry(),
            [Case("slow", slow), Case("fast", fast)],
            max_concurrency=2,
        )

        assert [result.name for result in results] == ["slow", "fast"]
        assert [result.passed for result in results] == [False, True]

    @pytest.mark.asyncio
    async def test_concurrent_cases_get_isolated_instances(self) -> None:
        """
        Given: Two cases running concurrently that share a fixture name
        When: Both mutate their instance
        Then: Neither sees the other's mutation
        """
        registry = FixtureRegistry()

        @registry.fixture
        def cart():
            return []

        async def add_apple(cart, ledger):
            cart.append("apple")
            await asyncio.sleep(0.01)
            ledger.assert_hard(Equals(cart, ["apple"]))

        async def add_pear(cart, ledger):
            cart.append("pear")
            await asyncio.sleep(0.01)
            ledger.assert_hard(Equals(cart, ["pear"]))

        results = await run_cases(
            registry,
            [Case("apple", add_apple), Case("pear", add_pear)],
            max_concurrency=2,
        )

        assert all(result.passed for result in results)

    @pytest.mark.asyncio
    async def test_concurrency_limit(self) -> None:
        active = 0
        peak = 0

        async def body(ledger):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        await run_cases(
            FixtureRegistry(),
            [Case(f"case-{i}", body) for i in range(5)],
            max_concurrency=2,
        )

        assert peak == 2

    @pytest.mark.asyncio
    async def test_graph_validated_before_running(self) -> None:
        registry = FixtureRegistry()
        registry.register("a", ("b",), lambda b: b)
        registry.register("b", ("a",), lambda a: a)
        ran = False

        async def body(ledger):
            nonlocal ran
            ran = True

        with pytest.raises(CyclicDependencyError):
            await run_cases(registry, [Case("never", body)])

        assert ran is False

    @pytest.mark.asyncio
    async def test_ledger_dependency_is_known(self) -> None:
        registry = FixtureRegistry()
        registry.register("reporter", ("ledger",), lambda ledger: ledger)
        registry.register("orphan", ("missing",), lambda missing: missing)

        with pytest.raises(UnknownFixtureError, match="missing"):
            await run_cases(registry, [])

    @pytest.mark.asyncio
    async def test_rejects_zero_concurrency(self) -> None:
        with pytest.raises(ValueError, match="at least 1"):
            await run_cases(FixtureRegistry(), [], max_concurrency=0)
