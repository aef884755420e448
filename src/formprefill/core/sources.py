# src/formprefill/core/sources.py
"""Graph data sources: where blueprint documents come from.

Every source returns a validated BlueprintGraph or raises GraphSourceError.
This is the trust boundary: anything wrong with the transport, the HTTP
status, the encoding or the document shape surfaces here, never inside the
traversal core.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import httpx
import yaml
from pydantic import ValidationError

from formprefill.contracts import BlueprintGraph, GraphSourceError
from formprefill.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class GraphSource(Protocol):
    """Supplies one immutable blueprint document."""

    def fetch(self) -> BlueprintGraph:
        """Load and validate the document.

        Raises:
            GraphSourceError: If the document cannot be loaded or is invalid
        """
        ...


def _validate(raw: Any, origin: str) -> BlueprintGraph:
    try:
        return BlueprintGraph.from_raw(raw)
    except ValidationError as e:
        raise GraphSourceError(f"Invalid blueprint document from {origin}: {e}") from e


class FileGraphSource:
    """Reads a blueprint document from a JSON or YAML file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def fetch(self) -> BlueprintGraph:
        origin = str(self.path)
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise GraphSourceError(f"Cannot read blueprint file {origin}: {e}") from e

        try:
            if self.path.suffix.lower() in {".yaml", ".yml"}:
                raw = yaml.safe_load(text)
            else:
                raw = json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise GraphSourceError(f"Cannot parse blueprint file {origin}: {e}") from e

        graph = _validate(raw, origin)
        logger.info("graph_loaded", source="file", path=origin, blueprint_id=graph.id)
        return graph


class HTTPGraphSource:
    """Fetches the blueprint graph from the action-blueprint API.

    GET {base_url}/api/v1/{tenant_id}/actions/blueprints/{blueprint_id}/graph

    Example:
        source = HTTPGraphSource("http://localhost:3000", tenant_id="123", blueprint_id="bp_456")
        graph = source.fetch()
    """

    def __init__(
        self,
        base_url: str,
        *,
        tenant_id: str,
        blueprint_id: str,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.tenant_id = tenant_id
        self.blueprint_id = blueprint_id
        self.timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/v1/{self.tenant_id}/actions/blueprints/{self.blueprint_id}/graph"

    def fetch(self) -> BlueprintGraph:
        url = self.url
        try:
            if self._client is not None:
                response = self._client.get(url, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url)
            response.raise_for_status()
            raw = response.json()
        except httpx.HTTPStatusError as e:
            raise GraphSourceError(f"Blueprint API returned {e.response.status_code} for {url}") from e
        except httpx.HTTPError as e:
            raise GraphSourceError(f"Blueprint API request failed for {url}: {e}") from e
        except json.JSONDecodeError as e:
            raise GraphSourceError(f"Blueprint API returned invalid JSON for {url}: {e}") from e

        graph = _validate(raw, url)
        logger.info(
            "graph_loaded",
            source="http",
            url=url,
            tenant_id=self.tenant_id,
            blueprint_id=graph.id or self.blueprint_id,
        )
        return graph
