# src/formprefill/providers/direct.py
"""Fields from forms that feed directly into the target form."""

from formprefill.contracts import NodeID, SourceKind
from formprefill.providers.base import BaseGraphProvider


class DirectDependencyProvider(BaseGraphProvider):
    """Scans the target node's direct parents."""

    source_kind = SourceKind.DIRECT
    name = "Direct Dependencies"

    def related_node_ids(self, target_node_id: NodeID) -> list[NodeID]:
        return self._engine.get_direct_parents(target_node_id)
