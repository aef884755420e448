"""Exception hierarchy for formprefill.

Lookups never raise: unknown forms, nodes and dangling references degrade to
empty results. The exceptions below cover the boundaries where a caller must
be told something went wrong.
"""


class PrefillError(Exception):
    """Base class for all formprefill errors."""


class GraphSourceError(PrefillError):
    """Raised when a graph data source cannot produce a valid blueprint document."""


class MappingPersistenceError(PrefillError):
    """Raised when the mapping backend fails to persist a form's mappings.

    The in-memory mapping change has already been committed when this is
    raised. It is not rolled back.

    Attributes:
        form_id: Form whose mapping set failed to persist
    """

    def __init__(self, form_id: str, message: str) -> None:
        super().__init__(message)
        self.form_id = form_id


class MappingValidationError(PrefillError):
    """Raised when a requested mapping does not match what the providers offer."""


class UnknownSourceKindError(PrefillError):
    """Raised when no provider is registered for a source kind."""

    def __init__(self, source_kind: str) -> None:
        super().__init__(f"No data source provider registered for kind '{source_kind}'")
        self.source_kind = source_kind
