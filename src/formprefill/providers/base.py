# src/formprefill/providers/base.py
"""Base class for providers that draw fields from ancestor forms.

Subclasses pick which related nodes to scan (related_node_ids) and may
exclude field keys already claimed by another classification
(excluded_keys). Everything else is shared:

1. Resolve the target node by component_id == target form id.
2. Map each related node to its form by component_id, skipping nodes or
   forms that do not exist.
3. Emit one FieldOption per schema field in declaration order.
4. Deduplicate on (form_id, field_id): the first node in traversal order
   wins, since one reusable form may back several related nodes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import ClassVar

from formprefill.contracts import FieldID, FieldOption, Form, FormID, NodeID, SourceKind
from formprefill.core.graph import GraphModel, TraversalEngine


def field_options_for_form(form: Form) -> list[FieldOption]:
    """One FieldOption per field of a form, in schema declaration order."""
    return [
        FieldOption(
            field_id=field_id,
            label=definition.label_for(field_id),
            form_id=form.id,
            form_name=form.name,
            field_type=definition.avantos_type,
            path=f"{form.name}.{field_id}",
        )
        for field_id, definition in form.field_schema.properties.items()
    ]


class BaseGraphProvider(ABC):
    """Provider whose candidates come from forms related to the target in the graph."""

    source_kind: ClassVar[SourceKind]
    name: ClassVar[str]

    def __init__(self, graph: GraphModel, engine: TraversalEngine | None = None) -> None:
        self._graph = graph
        self._engine = engine if engine is not None else TraversalEngine.from_graph(graph)

    @property
    def graph(self) -> GraphModel:
        return self._graph

    @abstractmethod
    def related_node_ids(self, target_node_id: NodeID) -> list[NodeID]:
        """Node ids this provider scans for the target node, in traversal order."""
        ...

    def excluded_keys(self, target_node_id: NodeID) -> set[tuple[str, FieldID]]:
        """(form_id, field_id) keys to drop even if a related node produces them."""
        return set()

    def _target_node_id(self, target_form_id: str) -> NodeID | None:
        node = self._graph.get_node_by_component_id(FormID(target_form_id))
        return node.id if node is not None else None

    def _collect_fields(
        self,
        node_ids: Iterable[NodeID],
        exclude: set[tuple[str, FieldID]] | None = None,
    ) -> list[FieldOption]:
        seen: set[tuple[str, FieldID]] = set(exclude) if exclude else set()
        fields: list[FieldOption] = []

        for node_id in node_ids:
            node = self._graph.get_node_by_id(node_id)
            if node is None:
                continue
            form = self._graph.get_form_by_id(node.component_id)
            if form is None:
                continue
            for option in field_options_for_form(form):
                if option.key in seen:
                    continue
                seen.add(option.key)
                fields.append(option)

        return fields

    def get_available_fields(self, target_form_id: str) -> list[FieldOption]:
        target_node_id = self._target_node_id(target_form_id)
        if target_node_id is None:
            return []
        return self._collect_fields(
            self.related_node_ids(target_node_id),
            exclude=self.excluded_keys(target_node_id),
        )

    def get_field_value(self, source_kind: str, source_id: str, source_field_id: str) -> object | None:
        """Placeholder preview; live submission data is resolved downstream."""
        if source_kind != self.source_kind:
            return None
        if source_field_id not in self._graph.get_form_fields(FormID(source_id)):
            return None
        return f"Value from {source_id}.{source_field_id}"

    def can_handle_form(self, target_form_id: str) -> bool:
        target_node_id = self._target_node_id(target_form_id)
        if target_node_id is None:
            return False
        return len(self.related_node_ids(target_node_id)) > 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source_kind={self.source_kind.value!r}, graph={self._graph!r})"
