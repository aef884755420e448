# src/formprefill/providers/registry.py
"""Provider registry and pluggy-based construction.

The registry is an explicitly constructed object owned by whoever composes
the providers (normally PrefillSession). There is no module-level instance.
build_registry() registers every provider at construction time, so a
registry it returns is ready before anyone calls providers_for().
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Any

import pluggy

from formprefill.contracts import SourceKind
from formprefill.core.graph import GraphModel, TraversalEngine
from formprefill.core.logging import get_logger
from formprefill.providers.direct import DirectDependencyProvider
from formprefill.providers.global_properties import GlobalPropertiesProvider
from formprefill.providers.hookspecs import PROJECT_NAME, FormPrefillProviderSpec, hookimpl
from formprefill.providers.protocols import DataSourceProviderProtocol
from formprefill.providers.transitive import TransitiveDependencyProvider

logger = get_logger(__name__)

REQUIRED_KINDS: frozenset[str] = frozenset(kind.value for kind in SourceKind)


class ProviderRegistry:
    """Lookup table from source kind to provider instance.

    Registering a kind twice replaces the earlier provider. all() and
    providers_for() return providers in first-registration order of their
    kind.

    Usage:
        registry = ProviderRegistry()
        registry.register(DirectDependencyProvider(graph))
        registry.get("direct")
    """

    def __init__(self, lock: threading.RLock | None = None) -> None:
        self._providers: dict[str, DataSourceProviderProtocol] = {}
        self._lock = lock if lock is not None else threading.RLock()

    def register(self, provider: DataSourceProviderProtocol) -> None:
        """Store the provider under its source_kind.

        Raises:
            TypeError: If provider does not implement DataSourceProviderProtocol
        """
        if not isinstance(provider, DataSourceProviderProtocol):
            raise TypeError(f"{type(provider).__name__} does not implement DataSourceProviderProtocol")
        kind = str(provider.source_kind)
        with self._lock:
            replaced = self._providers.get(kind)
            self._providers[kind] = provider
        logger.debug(
            "provider_registered",
            source_kind=kind,
            provider=type(provider).__name__,
            replaced=type(replaced).__name__ if replaced is not None else None,
        )

    def get(self, source_kind: str) -> DataSourceProviderProtocol | None:
        with self._lock:
            return self._providers.get(str(source_kind))

    def all(self) -> list[DataSourceProviderProtocol]:
        with self._lock:
            return list(self._providers.values())

    def providers_for(self, target_form_id: str) -> list[DataSourceProviderProtocol]:
        """Providers whose can_handle_form() is true for the target form."""
        with self._lock:
            return [provider for provider in self._providers.values() if provider.can_handle_form(target_form_id)]

    @property
    def kinds(self) -> list[str]:
        with self._lock:
            return list(self._providers)

    @property
    def ready(self) -> bool:
        """Whether the direct, transitive and global kinds are all registered."""
        with self._lock:
            return REQUIRED_KINDS.issubset(self._providers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)

    def __contains__(self, source_kind: object) -> bool:
        with self._lock:
            return str(source_kind) in self._providers


class BuiltinProviders:
    """Hook implementation contributing the three built-in providers."""

    @hookimpl
    def formprefill_get_providers(
        self,
        graph: GraphModel,
        engine: TraversalEngine,
    ) -> list[DataSourceProviderProtocol]:
        return [
            DirectDependencyProvider(graph, engine),
            TransitiveDependencyProvider(graph, engine),
            GlobalPropertiesProvider(),
        ]


def build_registry(
    graph: GraphModel,
    plugins: Iterable[Any] = (),
    *,
    engine: TraversalEngine | None = None,
    lock: threading.RLock | None = None,
) -> ProviderRegistry:
    """Create a registry populated from the built-in and extra provider plugins.

    Built-ins register first, then each extra plugin in the order given, so
    an extra plugin may add a new kind or replace a built-in one.

    Args:
        graph: Graph the providers read
        plugins: Objects implementing formprefill_get_providers via @hookimpl
        engine: Traversal engine to share; built from graph if omitted
        lock: Lock to guard the registry (shared with the mapping store by PrefillSession)

    Returns:
        A ready ProviderRegistry
    """
    pm = pluggy.PluginManager(PROJECT_NAME)
    pm.add_hookspecs(FormPrefillProviderSpec)
    pm.register(BuiltinProviders())
    for plugin in plugins:
        pm.register(plugin)

    shared_engine = engine if engine is not None else TraversalEngine.from_graph(graph)
    # pluggy calls implementations last-registered-first
    results = pm.hook.formprefill_get_providers(graph=graph, engine=shared_engine)

    registry = ProviderRegistry(lock=lock)
    for providers in reversed(results):
        for provider in providers:
            registry.register(provider)

    logger.info("provider_registry_built", kinds=registry.kinds, ready=registry.ready)
    return registry
