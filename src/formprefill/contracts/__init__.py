"""Shared contracts: wire models, prefill records, enums and errors.

Leaf package: no imports from formprefill.core or formprefill.providers.
"""

from formprefill.contracts.blueprint import (
    BlueprintEdge,
    BlueprintGraph,
    BlueprintNode,
    BlueprintNodeData,
    FieldDefinition,
    FieldSchema,
    Form,
)
from formprefill.contracts.enums import SourceKind, WarningCode
from formprefill.contracts.errors import (
    GraphSourceError,
    MappingPersistenceError,
    MappingValidationError,
    PrefillError,
    UnknownSourceKindError,
)
from formprefill.contracts.prefill import (
    AncestorClassification,
    FieldOption,
    FormPrefillConfig,
    PrefillMapping,
)
from formprefill.contracts.types import FieldID, FormID, NodeID

__all__ = [
    "AncestorClassification",
    "BlueprintEdge",
    "BlueprintGraph",
    "BlueprintNode",
    "BlueprintNodeData",
    "FieldDefinition",
    "FieldID",
    "FieldOption",
    "FieldSchema",
    "Form",
    "FormID",
    "FormPrefillConfig",
    "GraphSourceError",
    "MappingPersistenceError",
    "MappingValidationError",
    "NodeID",
    "PrefillError",
    "PrefillMapping",
    "SourceKind",
    "UnknownSourceKindError",
    "WarningCode",
]
