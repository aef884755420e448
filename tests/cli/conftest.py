# tests/cli/conftest.py
"""Shared fixtures for CLI tests."""

import json
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def graph_file(tmp_path: Path, spec_document: dict[str, Any]) -> Path:
    """Reference DAG written to a JSON file."""
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(spec_document))
    return path


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    return tmp_path / "mappings"
