# src/formprefill/providers/hookspecs.py
"""pluggy hook specifications for data source providers.

Plugins implement these hooks to contribute providers to a registry built
by build_registry().

Usage (implementing a plugin):
    from formprefill.providers.hookspecs import hookimpl

    class CRMPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def formprefill_get_providers(self, graph, engine):
            return [CRMProvider(graph)]

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks plugin implementations of those hooks.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from formprefill.core.graph import GraphModel, TraversalEngine
    from formprefill.providers.protocols import DataSourceProviderProtocol

PROJECT_NAME = "formprefill"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FormPrefillProviderSpec:
    """Hook specifications for provider plugins."""

    @hookspec
    def formprefill_get_providers(
        self,
        graph: "GraphModel",
        engine: "TraversalEngine",
    ) -> list["DataSourceProviderProtocol"]:  # type: ignore[empty-body]
        """Return provider instances bound to the given graph.

        Args:
            graph: Read-only graph for the session
            engine: Traversal engine over the same graph (shared, stateless)

        Returns:
            List of provider instances
        """
