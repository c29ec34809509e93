"""
Fixture Package

Per-test resources composed as a dependency graph:
- registry.py: FixtureRegistry / FixtureSession (resolution, memoization, teardown)
- browser.py: default playwright -> browser -> context -> page -> actions graph

Pattern:
    1. Register factories once per suite
    2. Open one session per test
    3. Teardown runs in reverse construction order on every exit path
"""

from playwise.fixtures.browser import build_default_registry, launch_browser
from playwise.fixtures.registry import (
    FixtureDescriptor,
    FixtureRegistry,
    FixtureSession,
    FixtureState,
    TeardownFailure,
    dependency_names,
)

__all__ = [
    "FixtureDescriptor",
    "FixtureRegistry",
    "FixtureSession",
    "FixtureState",
    "TeardownFailure",
    "build_default_registry",
    "dependency_names",
    "launch_browser",
]
