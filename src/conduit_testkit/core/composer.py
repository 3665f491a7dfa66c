"""Declarative composition of capability providers.

A capability provider supplies one named value to a test (an API client, a
resource tracker, a pre-created article) together with the code that tears it
down. Providers are grouped into sets, sets are merged into a Composition once
per process, and every test invocation gets its own Resolution with fresh
values.

Two provider shapes are supported:

    # setup/teardown pair
    client = CapabilityProvider("api_client", setup=open_client, teardown=close_client)

    # async generator: code after the yield is the teardown
    @provider("cleanup", depends_on=("article_api",))
    async def cleanup(ctx):
        tracker = ResourceTracker(ctx["article_api"])
        yield tracker
        await tracker.flush()

Merging is first-registration-wins: when two sources define the same name the
provider from the earlier source is kept, so overlapping sets compose safely.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Iterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

import structlog

from conduit_testkit.core.exceptions import (
    CircularDependencyError,
    CompositionError,
    SetupFailure,
    TeardownFailure,
    UnknownCapabilityError,
)

log = structlog.get_logger(__name__)


class InvocationState(Enum):
    """Lifecycle of one Resolution."""

    IDLE = "idle"  # Created, nothing resolved yet
    RESOLVING = "resolving"  # Running provider setups
    ACTIVE = "active"  # Values available to the test body
    TEARING_DOWN = "tearing_down"  # Running teardowns in reverse order
    DONE = "done"  # Terminal state


@dataclass(frozen=True)
class CapabilityProvider:
    """Supplies one named value with setup/teardown semantics.

    Attributes:
        name: Key under which the value is exposed to a test.
        setup: Callable taking a ProviderContext and returning the value
            (sync, async, or an async generator yielding once).
        teardown: Optional callable taking the value. Not allowed together
            with an async generator setup.
        depends_on: Names of providers that must be resolved first.
    """

    name: str
    setup: Callable[[ProviderContext], Any]
    teardown: Callable[[Any], Any] | None = None
    depends_on: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "depends_on", tuple(self.depends_on))
        if self.teardown is not None and self.is_generator:
            raise ValueError(
                f"Provider '{self.name}' is an async generator; "
                "put its teardown after the yield"
            )

    @property
    def is_generator(self) -> bool:
        return inspect.isasyncgenfunction(self.setup)


def provider(
    name: str | None = None,
    *,
    depends_on: Iterable[str] = (),
    teardown: Callable[[Any], Any] | None = None,
) -> Callable[[Callable[[ProviderContext], Any]], CapabilityProvider]:
    """Build a CapabilityProvider from a setup function.

    The provider is named after the function unless ``name`` is given.
    """

    def decorator(setup: Callable[[ProviderContext], Any]) -> CapabilityProvider:
        return CapabilityProvider(
            name=name or setup.__name__,
            setup=setup,
            teardown=teardown,
            depends_on=tuple(depends_on),
        )

    return decorator


class ProviderContext(Mapping[str, Any]):
    """What a provider's setup sees: the config plus its declared dependencies."""

    def __init__(self, name: str, config: Any, dependencies: Mapping[str, Any]) -> None:
        self.name = name
        self.config = config
        self._dependencies = dict(dependencies)

    def __getitem__(self, key: str) -> Any:
        return self._dependencies[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._dependencies)

    def __len__(self) -> int:
        return len(self._dependencies)


Finalizer = Callable[[], Awaitable[None]]


@dataclass
class _ResolvedCapability:
    name: str
    value: Any
    finalizer: Finalizer | None


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


async def _start(capability: CapabilityProvider, context: ProviderContext) -> _ResolvedCapability:
    """Run a provider's setup and capture how to tear it down."""
    if capability.is_generator:
        generator = capability.setup(context)
        try:
            value = await anext(generator)
        except StopAsyncIteration:
            raise RuntimeError(f"Provider '{capability.name}' did not yield a value") from None

        async def finish() -> None:
            try:
                await anext(generator)
            except StopAsyncIteration:
                return
            await generator.aclose()
            raise RuntimeError(f"Provider '{capability.name}' yielded more than once")

        return _ResolvedCapability(capability.name, value, finish)

    value = await _maybe_await(capability.setup(context))
    teardown = capability.teardown
    if teardown is None:
        return _ResolvedCapability(capability.name, value, None)

    async def finalize() -> None:
        await _maybe_await(teardown(value))

    return _ResolvedCapability(capability.name, value, finalize)


class Resolution(Mapping[str, Any]):
    """Concrete capability values for one test invocation.

    Values are exposed read-only by name. ``resolved`` lists names in the
    order their setups completed; teardown runs in exactly the reverse order.
    """

    def __init__(self, providers: Mapping[str, CapabilityProvider], config: Any = None) -> None:
        self._providers = providers
        self.config = config
        self._capabilities: dict[str, _ResolvedCapability] = {}
        self._state = InvocationState.IDLE

    def __getitem__(self, name: str) -> Any:
        return self._capabilities[name].value

    def __iter__(self) -> Iterator[str]:
        return iter(self._capabilities)

    def __len__(self) -> int:
        return len(self._capabilities)

    @property
    def state(self) -> InvocationState:
        return self._state

    @property
    def resolved(self) -> tuple[str, ...]:
        """Names resolved so far, in resolution order."""
        return tuple(self._capabilities)

    async def resolve(self, *names: str) -> None:
        """Resolve the named capabilities and their dependencies.

        On any failure, everything resolved so far is torn down in reverse
        order and the failure propagates.

        Raises:
            SetupFailure: A provider's setup raised.
            UnknownCapabilityError: A name has no provider.
            CircularDependencyError: Dependencies form a cycle.
        """
        if self._state not in (InvocationState.IDLE, InvocationState.ACTIVE):
            raise CompositionError(f"Cannot resolve capabilities while {self._state.value}")

        self._state = InvocationState.RESOLVING
        try:
            for name in names:
                await self._resolve(name, ())
        except BaseException as e:
            log.warning(
                "resolution_aborted",
                requested=list(names),
                resolved=list(self._capabilities),
                error=str(e),
            )
            await self.teardown(primary=e)
            raise

        self._state = InvocationState.ACTIVE

    async def _resolve(
        self,
        name: str,
        chain: tuple[str, ...],
        requested_by: str | None = None,
    ) -> None:
        if name in self._capabilities:
            return
        if name in chain:
            raise CircularDependencyError((*chain[chain.index(name):], name))

        capability = self._providers.get(name)
        if capability is None:
            raise UnknownCapabilityError(name, requested_by)

        for dependency in capability.depends_on:
            await self._resolve(dependency, (*chain, name), requested_by=name)

        context = ProviderContext(
            name,
            self.config,
            {dependency: self[dependency] for dependency in capability.depends_on},
        )
        try:
            resolved = await _start(capability, context)
        except Exception as e:
            log.error("capability_setup_failed", capability=name, error=str(e))
            raise SetupFailure(name, e) from e

        self._capabilities[name] = resolved
        log.debug("capability_resolved", capability=name)

    async def teardown(self, primary: BaseException | None = None) -> None:
        """Tear down every resolved capability, last resolved first.

        Each teardown is isolated. With no ``primary`` failure, collected
        teardown errors are raised together as TeardownFailure once all
        teardowns ran; otherwise they are attached to ``primary`` as notes.
        Calling teardown again is a no-op.
        """
        if self._state in (InvocationState.TEARING_DOWN, InvocationState.DONE):
            return

        self._state = InvocationState.TEARING_DOWN
        failures: list[tuple[str, BaseException]] = []
        try:
            for capability in reversed(list(self._capabilities.values())):
                if capability.finalizer is None:
                    continue
                try:
                    await capability.finalizer()
                    log.debug("capability_torn_down", capability=capability.name)
                except Exception as e:
                    failures.append((capability.name, e))
                    log.error("capability_teardown_failed", capability=capability.name, error=str(e))
        finally:
            self._capabilities.clear()
            self._state = InvocationState.DONE

        if not failures:
            return
        if primary is None:
            raise TeardownFailure(failures) from failures[0][1]
        for name, error in failures:
            primary.add_note(f"Teardown of '{name}' also failed: {error!r}")


ProviderSource = Union["Composition", Mapping[str, CapabilityProvider], Iterable[CapabilityProvider]]


def _iter_source(source: ProviderSource | CapabilityProvider) -> Iterator[tuple[str, CapabilityProvider]]:
    if isinstance(source, Composition):
        yield from source.providers.items()
    elif isinstance(source, CapabilityProvider):
        yield source.name, source
    elif isinstance(source, Mapping):
        yield from source.items()
    else:
        for item in source:
            yield item.name, item


def merge_providers(*sources: ProviderSource | CapabilityProvider) -> dict[str, CapabilityProvider]:
    """Merge provider sources in order, keeping the first provider per name."""
    merged: dict[str, CapabilityProvider] = {}
    for source in sources:
        for name, candidate in _iter_source(source):
            existing = merged.get(name)
            if existing is None:
                merged[name] = candidate
            elif existing is not candidate:
                log.debug("provider_shadowed", capability=name)
    return merged


class Composition:
    """Immutable, process-wide set of providers usable by a family of tests.

    Example:
        composition = Composition(API_PROVIDERS, CLEANUP_PROVIDERS)
        async with composition.activate(["cleanup"], config=settings) as values:
            values["cleanup"].register("article", slug)
    """

    def __init__(self, *sources: ProviderSource | CapabilityProvider) -> None:
        self._providers: Mapping[str, CapabilityProvider] = MappingProxyType(
            merge_providers(*sources)
        )

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"Composition({', '.join(self._providers)})"

    @property
    def providers(self) -> Mapping[str, CapabilityProvider]:
        return self._providers

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._providers)

    def extend(self, *sources: ProviderSource | CapabilityProvider) -> Composition:
        """Return a new composition with extra sources merged after this one."""
        return Composition(self, *sources)

    def resolution(self, config: Any = None) -> Resolution:
        """Create a fresh, IDLE resolution for one invocation."""
        return Resolution(self._providers, config)

    @asynccontextmanager
    async def activate(
        self,
        names: Iterable[str] = (),
        config: Any = None,
    ) -> AsyncIterator[Resolution]:
        """Resolve ``names``, yield the active resolution, then tear it down.

        Teardown also runs when the body raises or is cancelled; teardown
        errors are then attached to the body's exception instead of
        replacing it.
        """
        resolution = self.resolution(config)
        await resolution.resolve(*names)
        try:
            yield resolution
        except BaseException as e:
            await resolution.teardown(primary=e)
            raise
        await resolution.teardown()


def compose(*sources: ProviderSource | CapabilityProvider) -> Composition:
    """Merge provider sets into a Composition (first registration wins)."""
    return Composition(*sources)
