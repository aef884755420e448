# src/formprefill/core/mappings.py
"""PrefillMappingStore: the session's mapping state.

The in-memory map is the source of truth for the running session. Every
change is committed in memory first and only then handed to the backend,
so mappings_for() reflects the change even if persistence fails. A backend
failure is logged and re-raised as MappingPersistenceError; there is no
retry and no rollback.

Backend writes run outside the state lock. Each write carries a per-form
version, and a write older than one already persisted is dropped.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping

from formprefill.contracts import FormPrefillConfig, MappingPersistenceError, PrefillMapping
from formprefill.core.logging import get_logger
from formprefill.core.mapping_backends import MappingBackend

logger = get_logger(__name__)


class PrefillMappingStore:
    """Holds the chosen mapping per (target form, target field).

    Usage:
        store = PrefillMappingStore(InMemoryMappingBackend())
        store.select("f_abc")
        store.set_mapping("f_abc", "email", mapping)
        store.has_mapping("f_abc", "email")  # True
    """

    def __init__(
        self,
        backend: MappingBackend,
        *,
        initial: Mapping[str, Mapping[str, PrefillMapping]] | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self._backend = backend
        self._lock = lock if lock is not None else threading.RLock()
        self._configs: dict[str, FormPrefillConfig] = {}
        self._selected_form_id: str | None = None
        self._versions: dict[str, int] = {}
        self._persist_lock = threading.Lock()
        self._persisted_versions: dict[str, int] = {}
        for form_id, mappings in (initial or {}).items():
            self._configs[form_id] = FormPrefillConfig(form_id=form_id, mappings=dict(mappings))

    @property
    def selected_form_id(self) -> str | None:
        with self._lock:
            return self._selected_form_id

    def select(self, form_id: str) -> None:
        """Mark form_id as the active target, creating an empty config if needed."""
        with self._lock:
            self._selected_form_id = form_id
            if form_id not in self._configs:
                self._configs[form_id] = FormPrefillConfig(form_id=form_id)

    def set_mapping(self, form_id: str, target_field_id: str, mapping: PrefillMapping) -> None:
        """Insert or overwrite the mapping for a target field, then persist the form's mappings.

        Raises:
            MappingPersistenceError: If the backend fails (in-memory change is kept)
        """
        with self._lock:
            config = self._configs.setdefault(form_id, FormPrefillConfig(form_id=form_id))
            config.mappings[target_field_id] = mapping
            snapshot, version = self._snapshot(form_id, config)
            logger.info(
                "mapping_set",
                form_id=form_id,
                target_field_id=target_field_id,
                source_type=mapping.source_type.value,
                source_id=mapping.source_id,
                source_field_id=mapping.source_field_id,
            )
        self._persist(form_id, snapshot, version)

    def remove_mapping(self, form_id: str, target_field_id: str) -> None:
        """Delete the mapping for a target field and persist the rest.

        No-op if no config exists for form_id.

        Raises:
            MappingPersistenceError: If the backend fails (in-memory change is kept)
        """
        with self._lock:
            config = self._configs.get(form_id)
            if config is None:
                return
            config.mappings.pop(target_field_id, None)
            snapshot, version = self._snapshot(form_id, config)
            logger.info("mapping_removed", form_id=form_id, target_field_id=target_field_id)
        self._persist(form_id, snapshot, version)

    def mappings_for(self, form_id: str) -> dict[str, PrefillMapping]:
        with self._lock:
            config = self._configs.get(form_id)
            return dict(config.mappings) if config is not None else {}

    def has_mapping(self, form_id: str, field_id: str) -> bool:
        with self._lock:
            config = self._configs.get(form_id)
            return config is not None and field_id in config.mappings

    def configs(self) -> dict[str, FormPrefillConfig]:
        """Snapshot of every form's config."""
        with self._lock:
            return {
                form_id: FormPrefillConfig(form_id=form_id, mappings=dict(config.mappings))
                for form_id, config in self._configs.items()
            }

    def _snapshot(self, form_id: str, config: FormPrefillConfig) -> tuple[dict[str, PrefillMapping], int]:
        # Caller holds self._lock
        version = self._versions.get(form_id, 0) + 1
        self._versions[form_id] = version
        return dict(config.mappings), version

    def _persist(self, form_id: str, mappings: dict[str, PrefillMapping], version: int) -> None:
        with self._persist_lock:
            if version <= self._persisted_versions.get(form_id, 0):
                logger.debug("mapping_persist_superseded", form_id=form_id, version=version)
                return
            try:
                self._backend.persist(form_id, mappings)
            except Exception as e:
                logger.error(
                    "mapping_persist_failed",
                    form_id=form_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise MappingPersistenceError(
                    form_id, f"Failed to persist mappings for form '{form_id}': {e}"
                ) from e
            self._persisted_versions[form_id] = version
