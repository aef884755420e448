# src/formprefill/core/graph/traversal.py
"""TraversalEngine: pure parent/ancestor/reachability queries.

Operates on an explicit (nodes, edges) pair and never mutates either.
Adjacency is indexed once at construction, preserving edge order, so
results come back in discovery order even though callers should treat them
as sets.

Unknown node ids are not errors: every query degrades to an empty result
(or False). Callers that need existence must check the GraphModel.

BFS walks use a deque worklist plus a visited set. The visited set makes
every walk terminate even if the graph is not a strict DAG.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from formprefill.contracts import AncestorClassification, BlueprintEdge, BlueprintNode, NodeID

if TYPE_CHECKING:
    from formprefill.core.graph.model import GraphModel


def _index(pairs: Iterable[tuple[NodeID, NodeID]]) -> Mapping[NodeID, tuple[NodeID, ...]]:
    """Group pair[1] by pair[0], dropping repeats but keeping first-seen order."""
    grouped: dict[NodeID, dict[NodeID, None]] = {}
    for key, value in pairs:
        grouped.setdefault(key, {})[value] = None
    return MappingProxyType({key: tuple(values) for key, values in grouped.items()})


class TraversalEngine:
    """Pure topology queries over a node/edge set.

    Example:
        engine = TraversalEngine.from_graph(graph)
        engine.classify_ancestors("form-f")
        # AncestorClassification(direct=('form-d', 'form-e'), transitive=('form-b', 'form-c', 'form-a'))
    """

    def __init__(self, nodes: Iterable[BlueprintNode], edges: Iterable[BlueprintEdge]) -> None:
        self._node_ids: frozenset[NodeID] = frozenset(node.id for node in nodes)
        edge_list = tuple(edges)
        self._parents = _index((edge.target, edge.source) for edge in edge_list)
        self._children = _index((edge.source, edge.target) for edge in edge_list)

    @classmethod
    def from_graph(cls, graph: GraphModel) -> TraversalEngine:
        return cls(graph.nodes, graph.edges)

    @property
    def node_ids(self) -> frozenset[NodeID]:
        return self._node_ids

    def get_direct_parents(self, node_id: NodeID) -> list[NodeID]:
        """Sources of every edge targeting node_id."""
        return list(self._parents.get(node_id, ()))

    def get_direct_dependents(self, node_id: NodeID) -> list[NodeID]:
        """Targets of every edge leaving node_id (the node's children)."""
        return list(self._children.get(node_id, ()))

    def get_all_ancestors(self, node_id: NodeID) -> list[NodeID]:
        """Every node with a path into node_id, excluding node_id itself.

        Breadth-first, walking backwards over direct parents. Order is queue
        order (insertion order of discovered parents); no duplicates.
        """
        ancestors: list[NodeID] = []
        visited: set[NodeID] = set()
        queue: deque[NodeID] = deque([node_id])

        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            if current != node_id:
                ancestors.append(current)
            queue.extend(self._parents.get(current, ()))

        return ancestors

    def has_path(self, source_id: NodeID, target_id: NodeID) -> bool:
        """Whether target_id is reachable from source_id. Reflexive."""
        visited: set[NodeID] = set()
        queue: deque[NodeID] = deque([source_id])

        while queue:
            current = queue.popleft()
            if current == target_id:
                return True
            if current in visited:
                continue
            visited.add(current)
            queue.extend(self._children.get(current, ()))

        return False

    def classify_ancestors(self, node_id: NodeID) -> AncestorClassification:
        """Split ancestors into direct parents and transitive-only ancestors."""
        direct = self.get_direct_parents(node_id)
        direct_set = set(direct)
        transitive = [ancestor for ancestor in self.get_all_ancestors(node_id) if ancestor not in direct_set]
        return AncestorClassification(direct=tuple(direct), transitive=tuple(transitive))

    # Name used by the form builder UI for the same query
    get_available_prefill_forms = classify_ancestors

    def get_transitive_ancestors(self, node_id: NodeID) -> list[NodeID]:
        """Ancestors that are not direct parents."""
        return list(self.classify_ancestors(node_id).transitive)
