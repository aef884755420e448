"""Blueprint graph view and traversal.

Split into:
- model.py: GraphModel (read-only document view, consistency warnings)
- traversal.py: TraversalEngine (parents, ancestors, reachability)
"""

from formprefill.core.graph.model import GraphConsistencyWarning, GraphModel, derive_edges
from formprefill.core.graph.traversal import TraversalEngine

__all__ = [
    "GraphConsistencyWarning",
    "GraphModel",
    "TraversalEngine",
    "derive_edges",
]
