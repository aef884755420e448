"""Data source providers and their registry."""

from formprefill.providers.base import BaseGraphProvider, field_options_for_form
from formprefill.providers.direct import DirectDependencyProvider
from formprefill.providers.global_properties import (
    BUILTIN_GLOBAL_SOURCES,
    GLOBAL_ID_PREFIX,
    GlobalField,
    GlobalPropertiesProvider,
    GlobalSource,
)
from formprefill.providers.hookspecs import hookimpl
from formprefill.providers.protocols import DataSourceProviderProtocol
from formprefill.providers.registry import BuiltinProviders, ProviderRegistry, build_registry
from formprefill.providers.transitive import TransitiveDependencyProvider

__all__ = [
    "BUILTIN_GLOBAL_SOURCES",
    "GLOBAL_ID_PREFIX",
    "BaseGraphProvider",
    "BuiltinProviders",
    "DataSourceProviderProtocol",
    "DirectDependencyProvider",
    "GlobalField",
    "GlobalPropertiesProvider",
    "GlobalSource",
    "ProviderRegistry",
    "TransitiveDependencyProvider",
    "build_registry",
    "field_options_for_form",
    "hookimpl",
]
