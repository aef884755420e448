# tests/conftest.py
"""Shared test fixtures and helpers.

Blueprint fixtures:
- spec_document / spec_graph: the six-form reference DAG

      A -> B -> D -> F
      A -> C -> E -> F

  F has prerequisites [D, E]; D has [B]; E has [C]; B and C have [A].
  Node ids are "form-a" .. "form-f", backing forms "f_a" .. "f_f".

- build_document: builds a raw blueprint document from compact node/form
  descriptions, for tests that need their own topology (reused forms, dangling
  references, ...).

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from formprefill.contracts import BlueprintGraph
from formprefill.core.graph import GraphModel
from formprefill.core.mapping_backends import InMemoryMappingBackend

# node_id -> (form_id, prerequisites)
NodeSpec = Mapping[str, tuple[str, Sequence[str]]]
# form_id -> (form_name, field ids)
FormSpec = Mapping[str, tuple[str, Sequence[str]]]


def build_document(
    nodes: NodeSpec,
    forms: FormSpec,
    edges: Sequence[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    """Build a raw blueprint document.

    When edges is None they are derived from prerequisites, matching what the
    blueprint API ships.
    """
    if edges is None:
        edges = [(prereq, node_id) for node_id, (_, prereqs) in nodes.items() for prereq in prereqs]
    return {
        "$schema": "https://example.invalid/blueprint.schema.json",
        "id": "bp_test",
        "tenant_id": "123",
        "name": "Test Blueprint",
        "description": "",
        "nodes": [
            {
                "id": node_id,
                "type": "form",
                "position": {"x": 0, "y": 0},
                "data": {
                    "id": f"bp_c_{node_id}",
                    "component_key": node_id,
                    "component_type": "form",
                    "component_id": form_id,
                    "name": node_id.replace("-", " ").title(),
                    "prerequisites": list(prereqs),
                    "input_mapping": {},
                },
            }
            for node_id, (form_id, prereqs) in nodes.items()
        ],
        "edges": [{"source": source, "target": target} for source, target in edges],
        "forms": [
            {
                "id": form_id,
                "name": name,
                "description": "",
                "is_reusable": False,
                "field_schema": {
                    "type": "object",
                    "properties": {
                        field_id: {
                            "avantos_type": "short-text",
                            "title": field_id.replace("_", " ").title(),
                            "type": "string",
                        }
                        for field_id in field_ids
                    },
                    "required": [],
                },
                "ui_schema": {"type": "VerticalLayout", "elements": []},
            }
            for form_id, (name, field_ids) in forms.items()
        ],
        "branches": [],
        "triggers": [],
    }


SPEC_NODES: dict[str, tuple[str, list[str]]] = {
    "form-a": ("f_a", []),
    "form-b": ("f_b", ["form-a"]),
    "form-c": ("f_c", ["form-a"]),
    "form-d": ("f_d", ["form-b"]),
    "form-e": ("f_e", ["form-c"]),
    "form-f": ("f_f", ["form-d", "form-e"]),
}

SPEC_FORMS: dict[str, tuple[str, list[str]]] = {
    "f_a": ("Form A", ["email", "name"]),
    "f_b": ("Form B", ["email", "phone"]),
    "f_c": ("Form C", ["dob"]),
    "f_d": ("Form D", ["address"]),
    "f_e": ("Form E", ["notes"]),
    "f_f": ("Form F", ["email", "name", "address"]),
}

SPEC_EDGES: list[tuple[str, str]] = [
    ("form-a", "form-b"),
    ("form-a", "form-c"),
    ("form-b", "form-d"),
    ("form-c", "form-e"),
    ("form-d", "form-f"),
    ("form-e", "form-f"),
]


@pytest.fixture
def blueprint_factory() -> Callable[..., dict[str, Any]]:
    return build_document


@pytest.fixture
def spec_document() -> dict[str, Any]:
    return build_document(SPEC_NODES, SPEC_FORMS, SPEC_EDGES)


@pytest.fixture
def spec_graph(spec_document: dict[str, Any]) -> GraphModel:
    return GraphModel(BlueprintGraph.from_raw(spec_document))


@pytest.fixture
def memory_backend() -> InMemoryMappingBackend:
    return InMemoryMappingBackend()


class FailingBackend:
    """Mapping backend whose persist() always raises."""

    def __init__(self) -> None:
        self.attempts = 0

    def persist(self, form_id: str, mappings: Mapping[str, Any]) -> None:
        self.attempts += 1
        raise OSError("disk full")


@pytest.fixture
def failing_backend() -> FailingBackend:
    return FailingBackend()


class ConcurrentReadBackend(InMemoryMappingBackend):
    """Memory backend that runs a reader on another thread during each persist().

    read_blocked records, per persist, whether the reader was still waiting
    when the timeout expired.
    """

    def __init__(self, timeout: float = 2.0) -> None:
        super().__init__()
        self.reader: Callable[[str], object] | None = None
        self.read_blocked: list[bool] = []
        self._timeout = timeout

    def persist(self, form_id: str, mappings: Mapping[str, Any]) -> None:
        if self.reader is not None:
            thread = threading.Thread(target=self.reader, args=(form_id,), daemon=True)
            thread.start()
            thread.join(self._timeout)
            self.read_blocked.append(thread.is_alive())
        super().persist(form_id, mappings)


@pytest.fixture
def concurrent_read_backend() -> ConcurrentReadBackend:
    return ConcurrentReadBackend()


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
