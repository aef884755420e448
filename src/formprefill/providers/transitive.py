# src/formprefill/providers/transitive.py
"""Fields from forms that feed into the target form through other forms."""

from formprefill.contracts import FieldID, NodeID, SourceKind
from formprefill.providers.base import BaseGraphProvider


class TransitiveDependencyProvider(BaseGraphProvider):
    """Scans ancestors that are not direct parents.

    Direct parents are recomputed here rather than taken from the direct
    provider, so the two field lists are disjoint by (form_id, field_id) on
    their own. When a reusable form backs both a direct parent and a deeper
    ancestor, its fields belong to the direct list only.
    """

    source_kind = SourceKind.TRANSITIVE
    name = "Transitive Dependencies"

    def related_node_ids(self, target_node_id: NodeID) -> list[NodeID]:
        return self._engine.get_transitive_ancestors(target_node_id)

    def excluded_keys(self, target_node_id: NodeID) -> set[tuple[str, FieldID]]:
        direct_fields = self._collect_fields(self._engine.get_direct_parents(target_node_id))
        return {option.key for option in direct_fields}
