"""Kinds and codes used across subsystem boundaries."""

from enum import StrEnum


class SourceKind(StrEnum):
    """Where a prefill value comes from, relative to the target form.

    Stored in persisted mappings (mapping.source_type).
    """

    DIRECT = "direct"
    TRANSITIVE = "transitive"
    GLOBAL = "global"


class WarningCode(StrEnum):
    """Codes for non-fatal graph consistency warnings."""

    DANGLING_PREREQUISITE = "dangling_prerequisite"
    MISSING_FORM = "missing_form"
    EDGE_WITHOUT_PREREQUISITE = "edge_without_prerequisite"
    PREREQUISITE_WITHOUT_EDGE = "prerequisite_without_edge"
