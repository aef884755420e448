# src/formprefill/core/__init__.py
"""Core infrastructure: Graph, Mappings, Sources, Configuration, Logging."""

from formprefill.core.config import (
    GraphSourceSettings,
    LoggingSettings,
    MappingStoreSettings,
    PrefillSettings,
    create_graph_source,
    create_mapping_backend,
    load_settings,
)
from formprefill.core.graph import (
    GraphConsistencyWarning,
    GraphModel,
    TraversalEngine,
    derive_edges,
)
from formprefill.core.logging import (
    configure_logging,
    get_logger,
)
from formprefill.core.mapping_backends import (
    FilesystemMappingBackend,
    InMemoryMappingBackend,
    MappingBackend,
)
from formprefill.core.mappings import PrefillMappingStore
from formprefill.core.sources import (
    FileGraphSource,
    GraphSource,
    HTTPGraphSource,
)

__all__ = [
    "FileGraphSource",
    "FilesystemMappingBackend",
    "GraphConsistencyWarning",
    "GraphModel",
    "GraphSource",
    "GraphSourceSettings",
    "HTTPGraphSource",
    "InMemoryMappingBackend",
    "LoggingSettings",
    "MappingBackend",
    "MappingStoreSettings",
    "PrefillMappingStore",
    "PrefillSettings",
    "TraversalEngine",
    "configure_logging",
    "create_graph_source",
    "create_mapping_backend",
    "derive_edges",
    "get_logger",
    "load_settings",
]
