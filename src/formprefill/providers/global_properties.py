# src/formprefill/providers/global_properties.py
"""Graph-independent sources: action and client organisation properties.

Global source ids carry the GLOBAL_ID_PREFIX so they can never collide with
a real form id in a mapping's source_id.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from formprefill.contracts import FieldOption, SourceKind

GLOBAL_ID_PREFIX = "global_"


@dataclass(frozen=True, slots=True)
class GlobalField:
    id: str
    label: str
    type: str


@dataclass(frozen=True, slots=True)
class GlobalSource:
    """A built-in source with a hard-coded field list."""

    key: str
    name: str
    fields: tuple[GlobalField, ...]

    @property
    def source_id(self) -> str:
        return f"{GLOBAL_ID_PREFIX}{self.key}"

    def get_field(self, field_id: str) -> GlobalField | None:
        for candidate in self.fields:
            if candidate.id == field_id:
                return candidate
        return None


BUILTIN_GLOBAL_SOURCES: tuple[GlobalSource, ...] = (
    GlobalSource(
        key="action",
        name="Action Properties",
        fields=(
            GlobalField("name", "Name", "string"),
            GlobalField("description", "Description", "string"),
            GlobalField("status", "Status", "string"),
            GlobalField("created_at", "Created At", "datetime"),
        ),
    ),
    GlobalSource(
        key="client",
        name="Client Organisation Properties",
        fields=(
            GlobalField("org_name", "Organisation Name", "string"),
            GlobalField("industry", "Industry", "string"),
            GlobalField("contact_email", "Contact Email", "string"),
            GlobalField("region", "Region", "string"),
        ),
    ),
)


class GlobalPropertiesProvider:
    """Offers the same fixed field list for every target form."""

    source_kind: str = SourceKind.GLOBAL
    name: str = "Global Properties"

    def __init__(self, sources: tuple[GlobalSource, ...] = BUILTIN_GLOBAL_SOURCES) -> None:
        by_id = {source.source_id: source for source in sources}
        if len(by_id) != len(sources):
            raise ValueError("Duplicate global source keys")
        self._sources: Mapping[str, GlobalSource] = MappingProxyType(by_id)

    @property
    def sources(self) -> tuple[GlobalSource, ...]:
        return tuple(self._sources.values())

    def get_available_fields(self, target_form_id: str) -> list[FieldOption]:
        fields: list[FieldOption] = []
        seen: set[tuple[str, str]] = set()
        for source in self._sources.values():
            for global_field in source.fields:
                option = FieldOption(
                    field_id=global_field.id,
                    label=global_field.label,
                    form_id=source.source_id,
                    form_name=source.name,
                    field_type=global_field.type,
                    path=f"{source.name}.{global_field.id}",
                )
                if option.key in seen:
                    continue
                seen.add(option.key)
                fields.append(option)
        return fields

    def get_field_value(self, source_kind: str, source_id: str, source_field_id: str) -> object | None:
        """Placeholder preview for a global source field."""
        if source_kind != self.source_kind:
            return None
        source = self._sources.get(source_id)
        if source is None or source.get_field(source_field_id) is None:
            return None
        return f"Global value from {source.key}.{source_field_id}"

    def can_handle_form(self, target_form_id: str) -> bool:
        return True

    def __repr__(self) -> str:
        return f"GlobalPropertiesProvider(sources={list(self._sources)!r})"
