"""Fixture registry: a dependency graph of per-test resources.

This module provides:
- FixtureDescriptor, the immutable registration of one fixture
- FixtureRegistry, the suite-wide set of descriptors
- FixtureSession, the per-test memo of constructed instances with
  reverse-order teardown

Factories follow the pytest yield-fixture shape: code before ``yield``
builds the instance, the yielded value is handed to dependents, and code
after ``yield`` is the teardown. Async generators, sync generators,
coroutine functions and plain functions are all accepted; the last two
have no teardown.

Example:
    registry = FixtureRegistry()

    @registry.fixture
    async def browser(playwright):
        browser = await playwright.chromium.launch()
        yield browser
        await browser.close()

    async with registry.session() as session:
        page = await session.resolve("page")
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

import structlog

from playwise.core.exceptions import (
    CyclicDependencyError,
    FactoryError,
    FixtureConflictError,
    FixtureError,
    UnknownFixtureError,
    WaitTimeoutError,
)

log = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

Teardown = Callable[[], Awaitable[None]]


def dependency_names(func: Callable[..., Any]) -> tuple[str, ...]:
    """Names of the parameters of ``func`` that are filled by fixtures.

    Like pytest, parameters with a default and *args/**kwargs are not
    dependencies.
    """
    return tuple(
        name
        for name, parameter in inspect.signature(func).parameters.items()
        if parameter.default is inspect.Parameter.empty
        and parameter.kind
        not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    )


class FixtureState(str, Enum):
    """Lifecycle of one fixture within a session."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"  # Re-entry here means a cycle
    RESOLVED = "resolved"
    TORN_DOWN = "torn_down"


@dataclass(frozen=True)
class FixtureDescriptor:
    """Registration of a named fixture.

    Attributes:
        name: Unique fixture name.
        dependencies: Names of fixtures passed to the factory as keyword arguments.
        factory: Generator, coroutine or plain function building the instance.
        timeout_ms: Budget for awaited setup and teardown, None for unbounded.
            Async generators are bounded in both phases, coroutine factories
            in setup. Sync generators cannot be bounded and reject a budget.
    """

    name: str
    dependencies: tuple[str, ...]
    factory: Callable[..., Any]
    timeout_ms: float | None = None


@dataclass(frozen=True)
class TeardownFailure:
    """A teardown that raised. Reported as a warning, never raised."""

    fixture: str
    error: Exception

    def describe(self) -> str:
        return f"{self.fixture}: {type(self.error).__name__}: {self.error}"


class FixtureRegistry:
    """Suite-wide registry of fixture descriptors.

    Descriptors are immutable once registered. Each test gets its own
    FixtureSession from ``session()``; sessions never share instances.
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, FixtureDescriptor] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def names(self) -> list[str]:
        return list(self._descriptors)

    def get(self, name: str) -> FixtureDescriptor:
        """Return the descriptor for ``name``.

        Raises:
            UnknownFixtureError: If nothing is registered under ``name``.
        """
        try:
            return self._descriptors[name]
        except KeyError:
            raise UnknownFixtureError(name) from None

    def register(
        self,
        name: str,
        depends: Iterable[str],
        factory: Callable[..., Any],
        *,
        timeout_ms: float | None = None,
    ) -> FixtureDescriptor:
        """Register a fixture.

        Args:
            name: Unique fixture name.
            depends: Dependency names; each is passed to ``factory`` as a keyword.
            factory: Builds the instance (see module docstring for accepted forms).
            timeout_ms: Optional budget for awaited setup and teardown.

        Raises:
            FixtureConflictError: If ``name`` is already registered.
            CyclicDependencyError: If the fixture depends on itself.
            ValueError: If ``timeout_ms`` is given for a sync generator factory.
        """
        if name in self._descriptors:
            raise FixtureConflictError(name)

        dependencies = tuple(depends)
        if name in dependencies:
            raise CyclicDependencyError((name, name))

        if timeout_ms is not None and inspect.isgeneratorfunction(factory):
            raise ValueError(
                f"Fixture '{name}': timeout_ms needs an async factory, "
                "a sync generator cannot be interrupted"
            )

        descriptor = FixtureDescriptor(name, dependencies, factory, timeout_ms)
        self._descriptors[name] = descriptor
        log.debug("fixture_registered", fixture=name, depends=list(dependencies))
        return descriptor

    def fixture(
        self,
        func: F | None = None,
        *,
        name: str | None = None,
        timeout_ms: float | None = None,
    ) -> Any:
        """Decorator registering a function; dependencies are its required parameters.

        Usage:
            @registry.fixture
            async def page(context): ...

            @registry.fixture(name="api", timeout_ms=10_000)
            async def api_request(playwright, settings): ...
        """

        def decorator(factory: F) -> F:
            self.register(
                name or factory.__name__,
                dependency_names(factory),
                factory,
                timeout_ms=timeout_ms,
            )
            return factory

        if func is not None:
            return decorator(func)
        return decorator

    def validate(self, known: Iterable[str] = ()) -> None:
        """Check the whole graph before any test runs.

        Args:
            known: Names supplied at session level instead of by a factory.

        Raises:
            UnknownFixtureError: If a dependency is not registered or known.
            CyclicDependencyError: If the graph contains a cycle.
        """
        known = set(known)
        for descriptor in self._descriptors.values():
            for dependency in descriptor.dependencies:
                if dependency not in self._descriptors and dependency not in known:
                    raise UnknownFixtureError(dependency, required_by=descriptor.name)

        done: set[str] = set()
        path: list[str] = []

        def visit(name: str) -> None:
            if name in done or name not in self._descriptors:
                return
            if name in path:
                raise CyclicDependencyError([*path[path.index(name) :], name])
            path.append(name)
            for dependency in self._descriptors[name].dependencies:
                visit(dependency)
            path.pop()
            done.add(name)

        for name in self._descriptors:
            visit(name)

    def session(
        self,
        extras: Mapping[str, Any] | None = None,
        test_name: str = "",
    ) -> FixtureSession:
        """Open a fresh per-test session."""
        return FixtureSession(self, extras=extras, test_name=test_name)


class FixtureSession:
    """Constructed fixtures of a single test.

    Instances are memoized by name. ``teardown_all()`` runs teardowns in
    strict reverse construction order and keeps going past failures.
    Use as ``async with`` so teardown runs on every exit path.

    Attributes:
        test_name: Name used in log events.
        teardown_failures: Every teardown that raised, in teardown order.
    """

    def __init__(
        self,
        registry: FixtureRegistry,
        extras: Mapping[str, Any] | None = None,
        test_name: str = "",
    ) -> None:
        self._registry = registry
        self._extras = dict(extras or {})
        self.test_name = test_name
        self._states: dict[str, FixtureState] = {}
        self._instances: dict[str, Any] = {}
        self._teardowns: list[tuple[str, Teardown | None]] = []
        self._order: list[str] = []
        self._teardown_order: list[str] = []
        self._closed = False
        self.teardown_failures: list[TeardownFailure] = []

    async def __aenter__(self) -> FixtureSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.teardown_all()

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def state(self, name: str) -> FixtureState:
        return self._states.get(name, FixtureState.UNRESOLVED)

    @property
    def construction_order(self) -> list[str]:
        """Names of constructed fixtures, dependencies first."""
        return list(self._order)

    @property
    def teardown_order(self) -> list[str]:
        """Names of torn down fixtures, in the order teardown ran."""
        return list(self._teardown_order)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    async def resolve(self, name: str) -> Any:
        """Return the instance for ``name``, constructing its graph on first use.

        Raises:
            UnknownFixtureError: ``name`` or a dependency is not registered.
            CyclicDependencyError: Resolution re-entered a fixture in progress.
            FactoryError: A factory raised or did not yield.
            WaitTimeoutError: A factory overran its timeout.
        """
        if self._closed:
            raise FixtureError(name, f"Session for '{self.test_name}' is already torn down")
        return await self._resolve(name, ())

    async def _resolve(self, name: str, path: tuple[str, ...]) -> Any:
        if name in self._extras:
            return self._extras[name]

        state = self.state(name)
        if state == FixtureState.RESOLVED:
            return self._instances[name]
        if state == FixtureState.RESOLVING:
            raise CyclicDependencyError((*path, name))

        if name not in self._registry:
            raise UnknownFixtureError(name, required_by=path[-1] if path else None)
        descriptor = self._registry.get(name)

        self._states[name] = FixtureState.RESOLVING
        try:
            kwargs = {}
            for dependency in descriptor.dependencies:
                kwargs[dependency] = await self._resolve(dependency, (*path, name))
            value, teardown = await self._construct(descriptor, kwargs)
        except BaseException:
            self._states[name] = FixtureState.UNRESOLVED
            raise

        self._instances[name] = value
        self._teardowns.append((name, teardown))
        self._order.append(name)
        self._states[name] = FixtureState.RESOLVED
        log.debug(
            "fixture_resolved",
            test=self.test_name,
            fixture=name,
            position=len(self._teardowns),
        )
        return value

    async def _construct(
        self, descriptor: FixtureDescriptor, kwargs: dict[str, Any]
    ) -> tuple[Any, Teardown | None]:
        name = descriptor.name
        factory = descriptor.factory
        try:
            if inspect.isasyncgenfunction(factory):
                agen = factory(**kwargs)
                try:
                    value = await self._bounded(descriptor, "setup", agen.__anext__())
                except StopAsyncIteration:
                    raise FactoryError(name, "factory finished without yielding") from None
                return value, lambda: self._bounded(
                    descriptor, "teardown", self._finish_async(name, agen)
                )

            if inspect.isgeneratorfunction(factory):
                gen = factory(**kwargs)
                try:
                    value = next(gen)
                except StopIteration:
                    raise FactoryError(name, "factory finished without yielding") from None
                return value, lambda: self._finish_sync(name, gen)

            value = factory(**kwargs)
            if inspect.isawaitable(value):
                value = await self._bounded(descriptor, "setup", value)
            return value, None
        except (FactoryError, WaitTimeoutError):
            raise
        except Exception as e:
            log.error(
                "fixture_factory_failed",
                test=self.test_name,
                fixture=name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise FactoryError(name, f"{type(e).__name__}: {e}") from e

    @staticmethod
    async def _bounded(descriptor: FixtureDescriptor, phase: str, awaitable: Awaitable[Any]) -> Any:
        if descriptor.timeout_ms is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, descriptor.timeout_ms / 1000)
        except TimeoutError:
            raise WaitTimeoutError(
                f"fixture {phase}",
                descriptor.name,
                descriptor.timeout_ms,
                f"fixture {phase} did not finish",
            ) from None

    @staticmethod
    async def _finish_async(name: str, agen: Any) -> None:
        try:
            await agen.__anext__()
        except StopAsyncIteration:
            return
        await agen.aclose()
        raise FactoryError(name, "factory yielded more than once")

    @staticmethod
    async def _finish_sync(name: str, gen: Any) -> None:
        try:
            next(gen)
        except StopIteration:
            return
        gen.close()
        raise FactoryError(name, "factory yielded more than once")

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    async def teardown_all(self) -> list[TeardownFailure]:
        """Tear down every constructed fixture, last constructed first.

        Failures are logged and returned; every remaining teardown still runs.
        Calling again after the first pass is a no-op.

        Returns:
            Teardown failures from this pass.
        """
        self._closed = True
        failures: list[TeardownFailure] = []

        while self._teardowns:
            name, teardown = self._teardowns.pop()
            try:
                if teardown is not None:
                    await teardown()
            except Exception as e:
                failures.append(TeardownFailure(name, e))
                log.warning(
                    "fixture_teardown_failed",
                    test=self.test_name,
                    fixture=name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                log.debug("fixture_torn_down", test=self.test_name, fixture=name)
            finally:
                self._states[name] = FixtureState.TORN_DOWN
                self._teardown_order.append(name)
                self._instances.pop(name, None)

        self.teardown_failures.extend(failures)
        return failures
