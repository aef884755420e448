"""Prefill contracts: field candidates, mappings and per-form configs.

FieldOption is derived and disposable (never persisted). PrefillMapping is
the persisted record; it round-trips through to_dict()/from_dict() for
mapping backends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from formprefill.contracts.enums import SourceKind
from formprefill.contracts.types import FieldID, FormID, NodeID


@dataclass(frozen=True, slots=True)
class FieldOption:
    """A candidate prefill source field offered by a provider."""

    field_id: FieldID
    label: str
    form_id: str
    form_name: str
    field_type: str
    path: str

    @property
    def key(self) -> tuple[str, FieldID]:
        """Deduplication key: (form_id, field_id)."""
        return (self.form_id, self.field_id)


@dataclass(frozen=True, slots=True)
class PrefillMapping:
    """Association of one target field to one candidate source field.

    source_type is the classification of source_id relative to the target
    form at the moment the mapping was created. It is not re-validated when
    the graph later changes.
    """

    target_field_id: FieldID
    source_type: SourceKind
    source_id: str
    source_field_id: FieldID

    def to_dict(self) -> dict[str, str]:
        return {
            "target_field_id": self.target_field_id,
            "source_type": self.source_type.value,
            "source_id": self.source_id,
            "source_field_id": self.source_field_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PrefillMapping:
        """Rebuild a mapping from its persisted form.

        Raises:
            KeyError: If a required key is missing
            ValueError: If source_type is not a known SourceKind
        """
        return cls(
            target_field_id=FieldID(data["target_field_id"]),
            source_type=SourceKind(data["source_type"]),
            source_id=data["source_id"],
            source_field_id=FieldID(data["source_field_id"]),
        )


@dataclass(slots=True)
class FormPrefillConfig:
    """All mappings configured for one target form, keyed by target field id."""

    form_id: FormID
    mappings: dict[FieldID, PrefillMapping] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AncestorClassification:
    """Ancestors of a node split by distance.

    direct and transitive are disjoint; their union is every ancestor.
    """

    direct: tuple[NodeID, ...]
    transitive: tuple[NodeID, ...]

    @property
    def all(self) -> tuple[NodeID, ...]:
        return self.direct + self.transitive
