# src/formprefill/session.py
"""PrefillSession: composition root and UI-facing surface.

Owns one GraphModel, the ProviderRegistry built over it and the
PrefillMappingStore. Registry and mapping store share a single RLock so a
multithreaded host gets one mutual-exclusion boundary around every public
operation.

Stored mappings are trusted as created. Rewiring the graph (reload())
does not re-check them; find_stale_mappings() is the explicit audit for
callers that want it.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from typing import Any

from formprefill.contracts import (
    FieldID,
    FieldOption,
    Form,
    FormID,
    MappingValidationError,
    PrefillError,
    PrefillMapping,
    SourceKind,
    UnknownSourceKindError,
)
from formprefill.core.graph import GraphConsistencyWarning, GraphModel, TraversalEngine
from formprefill.core.logging import get_logger
from formprefill.core.mapping_backends import MappingBackend
from formprefill.core.mappings import PrefillMappingStore
from formprefill.core.sources import GraphSource
from formprefill.providers import DataSourceProviderProtocol, ProviderRegistry, build_registry

logger = get_logger(__name__)


class PrefillSession:
    """One operator session over one blueprint graph.

    Example:
        session = PrefillSession.from_source(FileGraphSource(path), InMemoryMappingBackend())
        session.select("f_form_d")
        for provider in session.providers_for("f_form_d"):
            print(provider.name, provider.get_available_fields("f_form_d"))
        session.map_field("f_form_d", "email", "direct", "f_form_b", "email")
    """

    def __init__(
        self,
        graph: GraphModel,
        backend: MappingBackend,
        *,
        source: GraphSource | None = None,
        plugins: Iterable[Any] = (),
        initial_mappings: Mapping[str, Mapping[str, PrefillMapping]] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._source = source
        self._plugins = tuple(plugins)
        self._mappings = PrefillMappingStore(backend, initial=initial_mappings, lock=self._lock)
        self._warnings: list[GraphConsistencyWarning] = []
        self._install_graph(graph)

    @classmethod
    def from_source(
        cls,
        source: GraphSource,
        backend: MappingBackend,
        *,
        plugins: Iterable[Any] = (),
        initial_mappings: Mapping[str, Mapping[str, PrefillMapping]] | None = None,
    ) -> PrefillSession:
        """Fetch the graph from source and build a session over it.

        Raises:
            GraphSourceError: If the source cannot produce a valid document
        """
        graph = GraphModel(source.fetch())
        return cls(graph, backend, source=source, plugins=plugins, initial_mappings=initial_mappings)

    def _install_graph(self, graph: GraphModel) -> None:
        engine = TraversalEngine.from_graph(graph)
        registry = build_registry(graph, self._plugins, engine=engine, lock=self._lock)
        if not registry.ready:
            raise PrefillError(f"Provider registry is missing built-in kinds; registered: {registry.kinds}")
        with self._lock:
            self._graph = graph
            self._engine = engine
            self._registry = registry
            self._warnings = graph.log_consistency_warnings()

    # === Components ===

    @property
    def graph(self) -> GraphModel:
        with self._lock:
            return self._graph

    @property
    def engine(self) -> TraversalEngine:
        with self._lock:
            return self._engine

    @property
    def registry(self) -> ProviderRegistry:
        with self._lock:
            return self._registry

    @property
    def mapping_store(self) -> PrefillMappingStore:
        return self._mappings

    @property
    def consistency_warnings(self) -> list[GraphConsistencyWarning]:
        with self._lock:
            return list(self._warnings)

    # === Forms ===

    def get_forms(self) -> list[Form]:
        return self.graph.get_forms()

    def get_form_by_id(self, form_id: str) -> Form | None:
        return self.graph.get_form_by_id(FormID(form_id))

    def select(self, form_id: str) -> None:
        self._mappings.select(form_id)

    @property
    def selected_form_id(self) -> str | None:
        return self._mappings.selected_form_id

    # === Providers ===

    def providers_for(self, form_id: str) -> list[DataSourceProviderProtocol]:
        return self.registry.providers_for(form_id)

    def available_fields(self, form_id: str) -> dict[str, list[FieldOption]]:
        """Candidate fields per source kind, for every provider that can handle the form."""
        with self._lock:
            return {
                str(provider.source_kind): provider.get_available_fields(form_id)
                for provider in self._registry.providers_for(form_id)
            }

    def preview_value(self, mapping: PrefillMapping) -> object | None:
        """Placeholder value the mapping's provider reports for its source."""
        provider = self.registry.get(mapping.source_type)
        if provider is None:
            return None
        return provider.get_field_value(mapping.source_type, mapping.source_id, mapping.source_field_id)

    # === Mappings ===

    def map_field(
        self,
        form_id: str,
        target_field_id: str,
        source_kind: str,
        source_id: str,
        source_field_id: str,
    ) -> PrefillMapping:
        """Create and store a mapping after checking the provider offers the source.

        The recorded source_type is therefore the live classification of
        source_id relative to form_id at creation time.

        Raises:
            UnknownSourceKindError: If source_kind is not a known, registered kind
            MappingValidationError: If the target field or the source is not available
            MappingPersistenceError: If the backend fails (mapping is kept in memory)
        """
        try:
            kind = SourceKind(source_kind)
        except ValueError as e:
            raise UnknownSourceKindError(source_kind) from e

        with self._lock:
            if target_field_id not in self._graph.get_form_fields(FormID(form_id)):
                raise MappingValidationError(f"Form '{form_id}' has no field '{target_field_id}'")

            provider = self._registry.get(kind)
            if provider is None:
                raise UnknownSourceKindError(kind)
            offered = {option.key for option in provider.get_available_fields(form_id)}
            if (source_id, source_field_id) not in offered:
                raise MappingValidationError(
                    f"'{source_id}.{source_field_id}' is not a {kind.value} source for form '{form_id}'"
                )

            mapping = PrefillMapping(
                target_field_id=FieldID(target_field_id),
                source_type=kind,
                source_id=source_id,
                source_field_id=FieldID(source_field_id),
            )
        self._mappings.set_mapping(form_id, target_field_id, mapping)
        return mapping

    def set_mapping(self, form_id: str, target_field_id: str, mapping: PrefillMapping) -> None:
        self._mappings.set_mapping(form_id, target_field_id, mapping)

    def remove_mapping(self, form_id: str, target_field_id: str) -> None:
        self._mappings.remove_mapping(form_id, target_field_id)

    def mappings_for(self, form_id: str) -> dict[str, PrefillMapping]:
        return self._mappings.mappings_for(form_id)

    def has_mapping(self, form_id: str, field_id: str) -> bool:
        return self._mappings.has_mapping(form_id, field_id)

    def find_stale_mappings(self, form_id: str) -> list[PrefillMapping]:
        """Mappings whose source is no longer offered under their recorded kind.

        Re-runs classification against the current graph. Never called
        implicitly; mappings_for() returns stored mappings as created.
        """
        stale: list[PrefillMapping] = []
        with self._lock:
            offered: dict[str, set[tuple[str, str]]] = {}
            for mapping in self._mappings.mappings_for(form_id).values():
                kind = str(mapping.source_type)
                if kind not in offered:
                    provider = self._registry.get(kind)
                    offered[kind] = (
                        {option.key for option in provider.get_available_fields(form_id)} if provider else set()
                    )
                if (mapping.source_id, mapping.source_field_id) not in offered[kind]:
                    stale.append(mapping)
        return stale

    # === Lifecycle ===

    def reload(self) -> None:
        """Re-fetch the graph from the session's source and rebuild providers.

        Stored mappings are kept as they are.

        Raises:
            PrefillError: If the session was built without a source
            GraphSourceError: If the source fails
        """
        if self._source is None:
            raise PrefillError("Session has no graph source to reload from")
        graph = GraphModel(self._source.fetch())
        self._install_graph(graph)
        logger.info("graph_reloaded", blueprint_id=graph.document.id)
