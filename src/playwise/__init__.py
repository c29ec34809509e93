"""Playwise

An async browser/API test-automation harness built on Playwright.
It composes per-test fixtures as a dependency graph with guaranteed
teardown, wraps UI interactions with wait semantics, and separates
fail-fast assertions from deferred, aggregated ones.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
