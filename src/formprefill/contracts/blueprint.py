"""Wire models for the action-blueprint graph document.

These validate the document returned by a graph data source at the trust
boundary. Unknown keys (branches, triggers, ui_schema, $schema, ...) are
ignored: the prefill core only reads nodes, edges and form field schemas.

Models are frozen after validation. GraphModel wraps them read-only.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from formprefill.contracts.types import FieldID, FormID, NodeID


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class FieldDefinition(_WireModel):
    """One entry of a form's field_schema.properties."""

    avantos_type: str = "unknown"
    type: str = "string"
    title: str | None = None
    format: str | None = None

    def label_for(self, field_id: FieldID) -> str:
        """Display label: the title when present, else the field id."""
        return self.title or field_id


class FieldSchema(_WireModel):
    type: str = "object"
    properties: dict[FieldID, FieldDefinition] = Field(default_factory=dict)
    required: list[FieldID] = Field(default_factory=list)


class Form(_WireModel):
    """Reusable field-schema definition. One form may back many nodes."""

    id: FormID
    name: str
    description: str = ""
    is_reusable: bool = False
    field_schema: FieldSchema = Field(default_factory=FieldSchema)


class BlueprintNodeData(_WireModel):
    component_id: FormID
    name: str = ""
    component_key: str = ""
    component_type: str = "form"
    prerequisites: list[NodeID] = Field(default_factory=list)


class BlueprintNode(_WireModel):
    """A graph vertex instantiating one form at one point in the workflow."""

    id: NodeID
    type: str = "form"
    data: BlueprintNodeData

    @property
    def component_id(self) -> FormID:
        return self.data.component_id

    @property
    def prerequisites(self) -> list[NodeID]:
        return self.data.prerequisites

    @property
    def name(self) -> str:
        return self.data.name


class BlueprintEdge(_WireModel):
    """Directed edge: source is a prerequisite of target."""

    source: NodeID
    target: NodeID


class BlueprintGraph(_WireModel):
    """Root document for one tenant/blueprint pair."""

    id: str = ""
    tenant_id: str = ""
    name: str = ""
    description: str = ""
    nodes: list[BlueprintNode] = Field(default_factory=list)
    edges: list[BlueprintEdge] = Field(default_factory=list)
    forms: list[Form] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> BlueprintGraph:
        """Validate a decoded JSON/YAML document.

        Raises:
            pydantic.ValidationError: If the document does not match the schema
        """
        return cls.model_validate(raw)
