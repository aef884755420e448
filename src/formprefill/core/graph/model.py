# src/formprefill/core/graph/model.py
"""GraphModel: read-only view over one blueprint document.

GraphModel is the single owner of node, edge and form data for a session.
Providers and the traversal engine read it; nothing writes it.

Prerequisites are authoritative: when a document ships nodes with
prerequisites but no edges, the edge set is derived from them. Consistency
problems (dangling prerequisites, nodes pointing at missing forms, edges
disagreeing with prerequisites) are reported as warnings, never raised.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from formprefill.contracts import (
    BlueprintEdge,
    BlueprintGraph,
    BlueprintNode,
    FieldDefinition,
    FieldID,
    Form,
    FormID,
    NodeID,
    WarningCode,
)
from formprefill.core.logging import get_logger

logger = get_logger(__name__)

_EMPTY_FIELDS: Mapping[FieldID, FieldDefinition] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class GraphConsistencyWarning:
    """Non-fatal finding about the blueprint document.

    The prefill core skips the offending reference and continues.
    """

    code: WarningCode
    message: str
    node_ids: tuple[NodeID, ...]


def derive_edges(nodes: Sequence[BlueprintNode]) -> list[BlueprintEdge]:
    """Build the edge set as the inverse of each node's prerequisites.

    For every node N and every P in N.prerequisites, yields edge (P, N), in
    node order then prerequisite order.
    """
    return [BlueprintEdge(source=prereq, target=node.id) for node in nodes for prereq in node.prerequisites]


class GraphModel:
    """Read-only in-memory view of nodes, edges and forms.

    Example:
        graph = GraphModel(BlueprintGraph.from_raw(document))
        node = graph.get_node_by_component_id("f_abc")
        fields = graph.get_form_fields("f_abc")
    """

    def __init__(self, document: BlueprintGraph) -> None:
        self._document = document
        self._nodes: tuple[BlueprintNode, ...] = tuple(document.nodes)
        self._forms: tuple[Form, ...] = tuple(document.forms)

        self._edges_derived = not document.edges and any(node.prerequisites for node in self._nodes)
        edges = derive_edges(self._nodes) if self._edges_derived else document.edges
        self._edges: tuple[BlueprintEdge, ...] = tuple(edges)

        node_by_id: dict[NodeID, BlueprintNode] = {}
        node_by_component: dict[FormID, BlueprintNode] = {}
        for node in self._nodes:
            node_by_id.setdefault(node.id, node)
            # First node in document order wins for a reused form
            node_by_component.setdefault(node.component_id, node)
        form_by_id: dict[FormID, Form] = {}
        for form in self._forms:
            form_by_id.setdefault(form.id, form)

        self._node_by_id: Mapping[NodeID, BlueprintNode] = MappingProxyType(node_by_id)
        self._node_by_component: Mapping[FormID, BlueprintNode] = MappingProxyType(node_by_component)
        self._form_by_id: Mapping[FormID, Form] = MappingProxyType(form_by_id)

        logger.debug(
            "graph_model_built",
            blueprint_id=document.id,
            nodes=len(self._nodes),
            edges=len(self._edges),
            forms=len(self._forms),
            edges_derived=self._edges_derived,
        )

    # === Raw collections ===

    @property
    def document(self) -> BlueprintGraph:
        return self._document

    @property
    def nodes(self) -> tuple[BlueprintNode, ...]:
        return self._nodes

    @property
    def edges(self) -> tuple[BlueprintEdge, ...]:
        return self._edges

    @property
    def forms(self) -> tuple[Form, ...]:
        return self._forms

    @property
    def edges_derived(self) -> bool:
        """Whether edges were derived from prerequisites rather than read from the document."""
        return self._edges_derived

    # === Lookups ===

    def get_forms(self) -> list[Form]:
        return list(self._forms)

    def get_form_by_id(self, form_id: FormID) -> Form | None:
        return self._form_by_id.get(form_id)

    def get_node_by_id(self, node_id: NodeID) -> BlueprintNode | None:
        return self._node_by_id.get(node_id)

    def get_node_by_component_id(self, component_id: FormID) -> BlueprintNode | None:
        """Resolve the node instantiating a form (first in document order)."""
        return self._node_by_component.get(component_id)

    def get_form_fields(self, form_id: FormID) -> Mapping[FieldID, FieldDefinition]:
        """Field schema of a form in declaration order; empty if the form is unknown."""
        form = self._form_by_id.get(form_id)
        if form is None:
            return _EMPTY_FIELDS
        return MappingProxyType(form.field_schema.properties)

    # === Consistency ===

    def consistency_warnings(self) -> list[GraphConsistencyWarning]:
        """Report references the prefill core will skip.

        Cycles are not detected here; the graph is assumed acyclic upstream.
        """
        warnings: list[GraphConsistencyWarning] = []

        for node in self._nodes:
            for prereq in node.prerequisites:
                if prereq not in self._node_by_id:
                    warnings.append(
                        GraphConsistencyWarning(
                            code=WarningCode.DANGLING_PREREQUISITE,
                            message=f"Node '{node.id}' lists unknown prerequisite '{prereq}'",
                            node_ids=(node.id, prereq),
                        )
                    )
            if node.component_id not in self._form_by_id:
                warnings.append(
                    GraphConsistencyWarning(
                        code=WarningCode.MISSING_FORM,
                        message=f"Node '{node.id}' references missing form '{node.component_id}'",
                        node_ids=(node.id,),
                    )
                )

        if not self._edges_derived:
            warnings.extend(self._edge_prerequisite_mismatches())

        return warnings

    def _edge_prerequisite_mismatches(self) -> list[GraphConsistencyWarning]:
        expected = {(edge.source, edge.target) for edge in derive_edges(self._nodes)}
        actual = {(edge.source, edge.target) for edge in self._edges}
        warnings = [
            GraphConsistencyWarning(
                code=WarningCode.EDGE_WITHOUT_PREREQUISITE,
                message=f"Edge '{source}' -> '{target}' has no matching prerequisite",
                node_ids=(source, target),
            )
            for source, target in sorted(actual - expected)
        ]
        warnings.extend(
            GraphConsistencyWarning(
                code=WarningCode.PREREQUISITE_WITHOUT_EDGE,
                message=f"Prerequisite '{source}' of '{target}' has no matching edge",
                node_ids=(source, target),
            )
            for source, target in sorted(expected - actual)
        )
        return warnings

    def log_consistency_warnings(self) -> list[GraphConsistencyWarning]:
        """Log every consistency warning and return them."""
        warnings = self.consistency_warnings()
        for warning in warnings:
            logger.warning(
                "graph_consistency_warning",
                code=warning.code.value,
                detail=warning.message,
                node_ids=list(warning.node_ids),
            )
        return warnings

    def __repr__(self) -> str:
        return (
            f"GraphModel(id={self._document.id!r}, nodes={len(self._nodes)}, "
            f"edges={len(self._edges)}, forms={len(self._forms)})"
        )
