# tests/providers/test_global_provider.py
"""Tests for the global properties provider."""

import pytest

from formprefill.contracts import SourceKind
from formprefill.providers import (
    BUILTIN_GLOBAL_SOURCES,
    DataSourceProviderProtocol,
    GlobalField,
    GlobalPropertiesProvider,
    GlobalSource,
)


class TestGlobalPropertiesProvider:
    def test_satisfies_protocol(self) -> None:
        provider = GlobalPropertiesProvider()

        assert isinstance(provider, DataSourceProviderProtocol)
        assert provider.source_kind == SourceKind.GLOBAL
        assert provider.name == "Global Properties"

    def test_builtin_sources(self) -> None:
        source_ids = [source.source_id for source in GlobalPropertiesProvider().sources]

        assert source_ids == ["global_action", "global_client"]

    @pytest.mark.parametrize("form_id", ["f_a", "f_f", "f_does_not_exist", ""])
    def test_same_fields_for_every_form(self, form_id: str) -> None:
        provider = GlobalPropertiesProvider()

        assert provider.get_available_fields(form_id) == provider.get_available_fields("f_a")
        assert provider.can_handle_form(form_id) is True

    def test_field_option_shape(self) -> None:
        first = GlobalPropertiesProvider().get_available_fields("f_a")[0]

        assert first.form_id == "global_action"
        assert first.form_name == "Action Properties"
        assert first.field_id == "name"
        assert first.path == "Action Properties.name"

    def test_field_count(self) -> None:
        expected = sum(len(source.fields) for source in BUILTIN_GLOBAL_SOURCES)

        assert len(GlobalPropertiesProvider().get_available_fields("f_a")) == expected

    def test_custom_sources(self) -> None:
        source = GlobalSource(key="tenant", name="Tenant", fields=(GlobalField("plan", "Plan", "string"),))
        provider = GlobalPropertiesProvider(sources=(source,))

        fields = provider.get_available_fields("f_a")
        assert [option.key for option in fields] == [("global_tenant", "plan")]

    def test_duplicate_source_keys_rejected(self) -> None:
        source = GlobalSource(key="dup", name="Dup", fields=())

        with pytest.raises(ValueError, match="Duplicate"):
            GlobalPropertiesProvider(sources=(source, source))

    def test_repeated_field_listed_once(self) -> None:
        field = GlobalField("plan", "Plan", "string")
        provider = GlobalPropertiesProvider(sources=(GlobalSource(key="tenant", name="Tenant", fields=(field, field)),))

        assert len(provider.get_available_fields("f_a")) == 1


class TestGlobalFieldValue:
    def test_known_field(self) -> None:
        provider = GlobalPropertiesProvider()

        assert provider.get_field_value("global", "global_client", "region") == "Global value from client.region"

    def test_unknown_source_or_field(self) -> None:
        provider = GlobalPropertiesProvider()

        assert provider.get_field_value("global", "global_weather", "region") is None
        assert provider.get_field_value("global", "global_client", "shoe_size") is None

    def test_kind_mismatch(self) -> None:
        assert GlobalPropertiesProvider().get_field_value("direct", "global_client", "region") is None
