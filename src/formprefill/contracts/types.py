# src/formprefill/contracts/types.py
"""Identifier types for the three id namespaces of a blueprint document.

Node ids, form ids and field ids are all plain strings on the wire, and a
node's component_id is a form id, not a node id. Keeping them as distinct
NewTypes lets the type checker catch a node id passed where a form id is
expected. At runtime they are str.
"""

from typing import NewType

NodeID = NewType("NodeID", str)
"""Graph-local node id (e.g., 'form-47c61d17-...'). Edges and prerequisites hold these."""

FormID = NewType("FormID", str)
"""Form id, as referenced by node.data.component_id (e.g., 'f_01jk7ap2r3ewf9gx6a9r09gzjv')."""

FieldID = NewType("FieldID", str)
"""Key of a field in a form's field_schema.properties (e.g., 'email')."""
