# src/formprefill/core/mapping_backends.py
"""Persistence backends for prefill mappings.

A backend receives the complete mapping set for one form on every change
and raises on failure. PrefillMappingStore owns the in-memory state; the
backend only mirrors it.

Structure of FilesystemMappingBackend: base_path/<form_id>.json containing
{"form_id": ..., "mappings": {target_field_id: mapping_dict}}.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from formprefill.contracts import PrefillMapping
from formprefill.core.logging import get_logger

__all__ = [
    "FilesystemMappingBackend",
    "InMemoryMappingBackend",
    "MappingBackend",
]

logger = get_logger(__name__)

# Form ids become file names; restrict to a safe alphabet
_FORM_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


@runtime_checkable
class MappingBackend(Protocol):
    """External mapping store collaborator."""

    def persist(self, form_id: str, mappings: Mapping[str, PrefillMapping]) -> None:
        """Persist the full mapping set for a form.

        Raises:
            Exception: Any failure; the caller reports it as MappingPersistenceError
        """
        ...


class InMemoryMappingBackend:
    """Keeps the last persisted mapping set per form.

    Used for sessions without durable storage and in tests.
    """

    def __init__(self) -> None:
        self._saved: dict[str, dict[str, PrefillMapping]] = {}
        self.persist_count = 0

    def persist(self, form_id: str, mappings: Mapping[str, PrefillMapping]) -> None:
        self._saved[form_id] = dict(mappings)
        self.persist_count += 1

    def saved(self, form_id: str) -> dict[str, PrefillMapping] | None:
        saved = self._saved.get(form_id)
        return dict(saved) if saved is not None else None

    def load_all(self) -> dict[str, dict[str, PrefillMapping]]:
        return {form_id: dict(mappings) for form_id, mappings in self._saved.items()}


class FilesystemMappingBackend:
    """Stores each form's mapping set as a JSON file."""

    def __init__(self, base_path: Path) -> None:
        """Initialize filesystem backend.

        Args:
            base_path: Directory holding one JSON file per form
        """
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path_for_form(self, form_id: str) -> Path:
        """Get the JSON file path for a form.

        Raises:
            ValueError: If form_id is not a safe file name or escapes base_path
        """
        if not _FORM_ID_PATTERN.match(form_id) or form_id in {".", ".."}:
            raise ValueError(f"Invalid form_id for filesystem storage: {form_id!r}")

        path = self.base_path / f"{form_id}.json"
        if not path.resolve().is_relative_to(self.base_path.resolve()):
            raise ValueError(f"Invalid form_id: path {path} is not under {self.base_path}")
        return path

    def persist(self, form_id: str, mappings: Mapping[str, PrefillMapping]) -> None:
        path = self._path_for_form(form_id)
        payload = {
            "form_id": form_id,
            "mappings": {field_id: mapping.to_dict() for field_id, mapping in mappings.items()},
        }
        # Write-then-rename so readers never see a half-written file
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(path)

    def load(self, form_id: str) -> dict[str, PrefillMapping] | None:
        """Load one form's mappings, or None if nothing was persisted.

        Raises:
            ValueError: If the file is not a valid mapping document
        """
        path = self._path_for_form(form_id)
        if not path.exists():
            return None
        return self._read(path)

    def load_all(self) -> dict[str, dict[str, PrefillMapping]]:
        """Load every persisted form's mappings, keyed by form id."""
        loaded: dict[str, dict[str, PrefillMapping]] = {}
        for path in sorted(self.base_path.glob("*.json")):
            loaded[path.stem] = self._read(path)
        logger.debug("mappings_loaded", path=str(self.base_path), forms=len(loaded))
        return loaded

    def _read(self, path: Path) -> dict[str, PrefillMapping]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return {field_id: PrefillMapping.from_dict(raw) for field_id, raw in payload["mappings"].items()}
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Corrupt mapping file {path}: {e}") from e
