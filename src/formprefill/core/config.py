# src/formprefill/core/config.py
"""
Configuration schema and loading for formprefill.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from formprefill.core.mapping_backends import FilesystemMappingBackend, InMemoryMappingBackend, MappingBackend
from formprefill.core.sources import FileGraphSource, GraphSource, HTTPGraphSource


class GraphSourceSettings(BaseModel):
    """Where the blueprint graph document comes from.

    Exactly one of path or url must be set.

    Example YAML (file):
        graph:
          path: data/graph.json

    Example YAML (API):
        graph:
          url: http://localhost:3000
          tenant_id: "123"
          blueprint_id: bp_456
    """

    model_config = {"frozen": True}

    path: Path | None = Field(default=None, description="JSON or YAML blueprint document on disk")
    url: str | None = Field(default=None, description="Base URL of the action-blueprint API")
    tenant_id: str = Field(default="123", description="Tenant the blueprint belongs to")
    blueprint_id: str = Field(default="bp_456", description="Blueprint to fetch")
    timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP request timeout")

    @field_validator("url")
    @classmethod
    def validate_url_scheme(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError(f"graph.url must start with http:// or https://, got {v!r}")
        return v

    @model_validator(mode="after")
    def validate_exactly_one_location(self) -> "GraphSourceSettings":
        if (self.path is None) == (self.url is None):
            raise ValueError("exactly one of graph.path or graph.url must be configured")
        return self


class MappingStoreSettings(BaseModel):
    """Where prefill mappings are persisted.

    Backends:
    - memory: kept for the life of the process only
    - filesystem: one JSON file per form under path
    """

    model_config = {"frozen": True}

    backend: Literal["memory", "filesystem"] = "memory"
    path: Path | None = Field(default=None, description="Directory for the filesystem backend")

    @model_validator(mode="after")
    def validate_filesystem_path(self) -> "MappingStoreSettings":
        if self.backend == "filesystem" and self.path is None:
            raise ValueError("mapping_store.path is required for the filesystem backend")
        return self


class LoggingSettings(BaseModel):
    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


class PrefillSettings(BaseModel):
    """Top-level settings.

    Example YAML:
        graph:
          path: graph.json
        mapping_store:
          backend: filesystem
          path: .prefill
        logging:
          level: INFO
    """

    model_config = {"frozen": True}

    graph: GraphSourceSettings
    mapping_store: MappingStoreSettings = Field(default_factory=MappingStoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: Path) -> PrefillSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (FORMPREFILL_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: FORMPREFILL_GRAPH__URL for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is not a valid YAML mapping
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        document = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in settings file {config_path}: {e}") from e
    if document is not None and not isinstance(document, dict):
        raise ValueError(f"Settings file {config_path} must contain a mapping, got {type(document).__name__}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="FORMPREFILL",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase top-level keys and its own bookkeeping keys
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return PrefillSettings(**raw_config)


def create_graph_source(settings: GraphSourceSettings) -> GraphSource:
    if settings.path is not None:
        return FileGraphSource(settings.path)
    # validate_exactly_one_location guarantees url is set here
    assert settings.url is not None
    return HTTPGraphSource(
        settings.url,
        tenant_id=settings.tenant_id,
        blueprint_id=settings.blueprint_id,
        timeout=settings.timeout_seconds,
    )


def create_mapping_backend(settings: MappingStoreSettings) -> MappingBackend:
    if settings.backend == "filesystem":
        assert settings.path is not None
        return FilesystemMappingBackend(settings.path)
    return InMemoryMappingBackend()
