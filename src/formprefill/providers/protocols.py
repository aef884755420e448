# src/formprefill/providers/protocols.py
"""Protocol defining the data source provider contract.

Used for type checking and for isinstance() checks in the registry.
Built-in providers subclass BaseGraphProvider or implement the protocol
directly (GlobalPropertiesProvider); third-party providers only need to
satisfy this protocol and be returned from a formprefill_get_providers hook.
"""

from typing import Protocol, runtime_checkable

from formprefill.contracts import FieldOption


@runtime_checkable
class DataSourceProviderProtocol(Protocol):
    """Supplies candidate prefill fields for a target form.

    Variants differ only in which part of the graph they scan (or, for
    global sources, that they ignore the graph entirely).

    Example:
        class CRMProvider:
            source_kind = "crm"
            name = "CRM Records"

            def get_available_fields(self, target_form_id: str) -> list[FieldOption]:
                return [...]

            def get_field_value(self, source_kind: str, source_id: str, source_field_id: str) -> object | None:
                return None

            def can_handle_form(self, target_form_id: str) -> bool:
                return True
    """

    source_kind: str
    name: str

    def get_available_fields(self, target_form_id: str) -> list[FieldOption]:
        """List candidate fields for the target form, deduplicated by (form_id, field_id).

        Unknown target forms yield an empty list.
        """
        ...

    def get_field_value(self, source_kind: str, source_id: str, source_field_id: str) -> object | None:
        """Resolve a preview value for a source reference.

        Returns None only when the reference cannot be resolved. Never raises
        for a well-formed reference.
        """
        ...

    def can_handle_form(self, target_form_id: str) -> bool:
        """Whether this provider can contribute any source for the target form."""
        ...
