"""Tests for Playwise exception hierarchy."""

import pytest

from playwise.assertions import AssertionKind, AssertionOutcome, AssertionRecord
from playwise.core.exceptions import (
    ActionError,
    AggregatedSoftAssertionFailure,
    ConfigurationError,
    CyclicDependencyError,
    ElementNotFoundError,
    FactoryError,
    FixtureConflictError,
    FixtureError,
    HardAssertionFailure,
    InteractionError,
    LedgerClosedError,
    PlaywiseError,
    UnknownFixtureError,
    WaitTimeoutError,
)


class TestPlaywiseError:
    """Tests for base PlaywiseError exception."""

    def test_playwise_error_can_be_raised(self) -> None:
        """
        Given: PlaywiseError
        When: Raised with a message
        Then: Message is accessible via str()
        """
        with pytest.raises(PlaywiseError, match="Test error message"):
            raise PlaywiseError("Test error message")

    @pytest.mark.parametrize(
        "error_class",
        [
            ConfigurationError,
            FixtureError,
            ActionError,
            LedgerClosedError,
            HardAssertionFailure,
            AggregatedSoftAssertionFailure,
        ],
    )
    def test_all_errors_inherit_from_playwise_error(self, error_class: type) -> None:
        assert issubclass(error_class, PlaywiseError)


class TestFixtureErrors:
    """Tests for fixture graph errors."""

    def test_conflict_names_fixture(self) -> None:
        error = FixtureConflictError("page")

        assert error.fixture == "page"
        assert str(error) == "Fixture 'page' is already registered"

    def test_unknown_with_and_without_requirer(self) -> None:
        assert str(UnknownFixtureError("db")) == "Unknown fixture 'db'"
        error = UnknownFixtureError("db", required_by="repo")
        assert error.required_by == "repo"
        assert str(error) == "Unknown fixture 'db' required by 'repo'"

    def test_cycle_carries_path(self) -> None:
        """
        Given: A resolution path closing on itself
        When: CyclicDependencyError is built
        Then: The path is kept as a tuple and rendered with arrows
        """
        error = CyclicDependencyError(["a", "b", "a"])

        assert error.path == ("a", "b", "a")
        assert str(error) == "Cyclic fixture dependency: a -> b -> a"

    def test_factory_error_is_fixture_error(self) -> None:
        with pytest.raises(FixtureError, match="Fixture 'browser' failed: launch refused"):
            raise FactoryError("browser", "launch refused")


class TestActionErrors:
    """Tests for interaction errors."""

    def test_element_not_found_message(self) -> None:
        error = ElementNotFoundError("click", "selector '#submit'", 30_000)

        assert error.action == "click"
        assert error.timeout_ms == 30_000
        assert str(error) == "click on selector '#submit': no element found within 30000ms"

    def test_wait_timeout_detail(self) -> None:
        error = WaitTimeoutError("click", "#submit", 500, "element did not become visible")

        assert str(error) == "click on #submit: element did not become visible within 500ms"

    def test_interaction_error_catchable_as_action_error(self) -> None:
        with pytest.raises(ActionError):
            raise InteractionError("drag_and_drop", "#a", "element detached")


class TestAssertionErrors:
    """Tests for assertion failures."""

    def test_assertion_failures_are_assertion_errors(self) -> None:
        assert issubclass(HardAssertionFailure, AssertionError)
        assert issubclass(AggregatedSoftAssertionFailure, AssertionError)

    def test_aggregate_lists_records_in_order(self) -> None:
        records = [
            AssertionRecord(
                kind=AssertionKind.SOFT,
                comparison="equals",
                actual=1,
                expected=2,
                message="status",
                outcome=AssertionOutcome.FAIL,
            ),
            AssertionRecord(
                kind=AssertionKind.SOFT,
                comparison="contains",
                actual="Jane",
                expected="John",
                outcome=AssertionOutcome.FAIL,
            ),
        ]

        error = AggregatedSoftAssertionFailure(records)

        assert str(error).splitlines() == [
            "2 soft assertion(s) failed:",
            "  1. status (actual: 1, expected: 2)",
            "  2. contains (actual: 'Jane', expected: 'John')",
        ]
