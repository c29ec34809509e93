"""pytest bridge for the assertion ledger.

Enable in a conftest.py:

    pytest_plugins = ["playwise.pytest_plugin"]

Then request ``soft_assertions`` in a test. Soft failures are raised once,
aggregated, after the test body returns; a test that already failed keeps
its own error and is not reported twice.
"""

from collections.abc import Generator
from typing import Any

import pytest

from playwise.assertions.ledger import AssertionLedger


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "e2e: mark test as end-to-end browser test")
    config.addinivalue_line("markers", "api: mark test as API test")


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[Any]) -> Generator[None, Any, None]:
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


@pytest.fixture
def soft_assertions(request: pytest.FixtureRequest) -> Generator[AssertionLedger, None, None]:
    """Per-test assertion ledger, finalized after the test body.

    Usage:
        def test_profile(soft_assertions):
            soft_assertions.assert_soft(Equals(body["status"], 200), "status")
            soft_assertions.assert_soft(Equals(body["name"], "John Doe"), "name")
    """
    ledger = AssertionLedger(request.node.nodeid)
    yield ledger

    call_report = getattr(request.node, "rep_call", None)
    if call_report is None or call_report.passed:
        ledger.finalize()
