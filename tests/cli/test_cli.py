# tests/cli/test_cli.py
"""Tests for the formprefill CLI."""

import json
from pathlib import Path
from typing import Any

from typer.testing import CliRunner

from formprefill.cli import app

# Errors go to stderr; result.output carries both streams on every Click version.
runner = CliRunner()


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "formprefill" in result.stdout.lower()

    def test_help_flag(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("forms", "fields", "map", "unmap", "mappings", "check"):
            assert command in result.stdout

    def test_requires_graph_or_settings(self) -> None:
        result = runner.invoke(app, ["forms"])
        assert result.exit_code == 1
        assert "either --settings or --graph is required" in result.output

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--settings", str(tmp_path / "absent.yaml"), "forms"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_unreadable_graph(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--graph", str(tmp_path / "absent.json"), "forms"])
        assert result.exit_code == 1
        assert "Cannot read" in result.output

    def test_malformed_settings_file(self, tmp_path: Path) -> None:
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text("graph: [unclosed\n")

        result = runner.invoke(app, ["--settings", str(settings_file), "forms"])

        assert result.exit_code == 1
        assert "Error: Invalid YAML in settings file" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_store_path_is_a_file(self, tmp_path: Path, graph_file: Path) -> None:
        not_a_dir = tmp_path / "mappings"
        not_a_dir.write_text("occupied")

        result = runner.invoke(app, ["--graph", str(graph_file), "--store", str(not_a_dir), "forms"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert str(not_a_dir) in result.output
        assert isinstance(result.exception, SystemExit)


class TestBrowseCommands:
    def test_forms(self, graph_file: Path) -> None:
        result = runner.invoke(app, ["--graph", str(graph_file), "forms"])

        assert result.exit_code == 0
        assert "f_a\tForm A\t2 fields\tForm A" in result.stdout
        assert "f_f\tForm F\t3 fields\tForm F" in result.stdout

    def test_fields_grouped_by_provider(self, graph_file: Path) -> None:
        result = runner.invoke(app, ["--graph", str(graph_file), "fields", "f_f"])

        assert result.exit_code == 0
        assert "Direct Dependencies (direct)" in result.stdout
        assert "Transitive Dependencies (transitive)" in result.stdout
        assert "Global Properties (global)" in result.stdout
        assert "  f_d\tForm D.address\t[short-text]" in result.stdout
        assert "  f_a\tForm A.email\t[short-text]" in result.stdout
        assert "  global_client\tClient Organisation Properties.region\t[string]" in result.stdout

    def test_fields_for_root_form(self, graph_file: Path) -> None:
        result = runner.invoke(app, ["--graph", str(graph_file), "fields", "f_a"])

        assert result.exit_code == 0
        assert "Direct Dependencies" not in result.stdout
        assert "Global Properties (global)" in result.stdout

    def test_fields_unknown_form(self, graph_file: Path) -> None:
        result = runner.invoke(app, ["--graph", str(graph_file), "fields", "f_nope"])

        assert result.exit_code == 1
        assert "unknown form 'f_nope'" in result.output


class TestMappingCommands:
    def _invoke(self, graph_file: Path, store_dir: Path, *args: str) -> Any:
        return runner.invoke(app, ["--graph", str(graph_file), "--store", str(store_dir), *args])

    def test_map_persists_across_invocations(self, graph_file: Path, store_dir: Path) -> None:
        result = self._invoke(graph_file, store_dir, "map", "f_f", "address", "direct", "f_d", "address")
        assert result.exit_code == 0
        assert "Mapped f_f.address <- direct:f_d.address" in result.stdout

        result = self._invoke(graph_file, store_dir, "mappings", "f_f")
        assert result.exit_code == 0
        assert "address <- direct:f_d.address" in result.stdout

        saved = json.loads((store_dir / "f_f.json").read_text())
        assert saved["mappings"]["address"]["source_id"] == "f_d"

    def test_map_rejects_wrong_kind(self, graph_file: Path, store_dir: Path) -> None:
        result = self._invoke(graph_file, store_dir, "map", "f_f", "email", "direct", "f_a", "email")

        assert result.exit_code == 1
        assert "not a direct source" in result.output
        assert not (store_dir / "f_f.json").exists()

    def test_map_rejects_unknown_kind(self, graph_file: Path, store_dir: Path) -> None:
        result = self._invoke(graph_file, store_dir, "map", "f_f", "email", "crm", "acct", "email")

        assert result.exit_code == 1
        assert "No data source provider registered for kind 'crm'" in result.output

    def test_mappings_empty(self, graph_file: Path, store_dir: Path) -> None:
        result = self._invoke(graph_file, store_dir, "mappings", "f_f")

        assert result.exit_code == 0
        assert "No mappings for f_f" in result.stdout

    def test_unmap(self, graph_file: Path, store_dir: Path) -> None:
        self._invoke(graph_file, store_dir, "map", "f_f", "email", "transitive", "f_b", "email")

        result = self._invoke(graph_file, store_dir, "unmap", "f_f", "email")
        assert result.exit_code == 0
        assert "Removed mapping for f_f.email" in result.stdout

        result = self._invoke(graph_file, store_dir, "unmap", "f_f", "email")
        assert result.exit_code == 0
        assert "No mapping for f_f.email" in result.stdout

    def test_settings_file(self, tmp_path: Path, graph_file: Path, store_dir: Path) -> None:
        settings_file = tmp_path / "settings.yaml"
        settings_file.write_text(f"""
graph:
  path: "{graph_file}"
mapping_store:
  backend: "filesystem"
  path: "{store_dir}"
logging:
  level: "ERROR"
""")
        result = runner.invoke(
            app, ["--settings", str(settings_file), "map", "f_f", "name", "global", "global_action", "name"]
        )

        assert result.exit_code == 0
        assert (store_dir / "f_f.json").exists()


class TestCheckCommand:
    def test_consistent(self, graph_file: Path) -> None:
        result = runner.invoke(app, ["--graph", str(graph_file), "check"])

        assert result.exit_code == 0
        assert "Graph and mappings are consistent." in result.stdout

    def test_reports_graph_warnings(self, tmp_path: Path, blueprint_factory: Any) -> None:
        document = blueprint_factory(
            nodes={"a": ("f_a", ["ghost"]), "b": ("f_missing", [])},
            forms={"f_a": ("Form A", ["email"])},
            edges=[],
        )
        path = tmp_path / "broken.json"
        path.write_text(json.dumps(document))

        result = runner.invoke(app, ["--graph", str(path), "check"])

        assert result.exit_code == 1
        assert "[dangling_prerequisite]" in result.stdout
        assert "[missing_form]" in result.stdout

    def test_reports_stale_mappings(
        self,
        tmp_path: Path,
        graph_file: Path,
        store_dir: Path,
        spec_document: dict[str, Any],
    ) -> None:
        runner.invoke(
            app,
            ["--graph", str(graph_file), "--store", str(store_dir), "map", "f_f", "address", "direct", "f_d", "address"],
        )

        # Drop the form-d -> form-f dependency
        rewired = dict(spec_document)
        rewired["edges"] = [edge for edge in spec_document["edges"] if edge != {"source": "form-d", "target": "form-f"}]
        rewired["nodes"] = [
            {**node, "data": {**node["data"], "prerequisites": ["form-e"]}} if node["id"] == "form-f" else node
            for node in spec_document["nodes"]
        ]
        rewired_file = tmp_path / "rewired.json"
        rewired_file.write_text(json.dumps(rewired))

        result = runner.invoke(app, ["--graph", str(rewired_file), "--store", str(store_dir), "check"])

        assert result.exit_code == 1
        assert "[stale_mapping] f_f.address <- direct:f_d.address" in result.stdout
