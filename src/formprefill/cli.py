# src/formprefill/cli.py
"""formprefill Command Line Interface.

Entry point for the formprefill CLI tool. Browses a blueprint graph and
manages prefill mappings from a terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import ValidationError

from formprefill import __version__
from formprefill.contracts import PrefillError
from formprefill.core.config import (
    GraphSourceSettings,
    LoggingSettings,
    MappingStoreSettings,
    PrefillSettings,
    create_graph_source,
    create_mapping_backend,
    load_settings,
)
from formprefill.core.logging import configure_logging
from formprefill.core.mapping_backends import FilesystemMappingBackend
from formprefill.session import PrefillSession

__all__ = ["app"]

app = typer.Typer(
    name="formprefill",
    help="Configure prefill mappings for forms in a blueprint graph.",
    no_args_is_help=True,
)


@dataclass
class CLIState:
    settings_path: Path | None = None
    graph_path: Path | None = None
    store_path: Path | None = None
    verbose: bool = False
    json_logs: bool = False


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"formprefill version {__version__}")
        raise typer.Exit()


def _fail(message: str) -> typer.Exit:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    graph: Path | None = typer.Option(
        None,
        "--graph",
        "-g",
        help="Blueprint graph JSON/YAML file (overrides the settings graph source).",
    ),
    store: Path | None = typer.Option(
        None,
        "--store",
        help="Directory for persisted mappings (overrides the settings mapping store).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """formprefill: prefill mapping for form-dependency graphs."""
    ctx.obj = CLIState(
        settings_path=settings,
        graph_path=graph,
        store_path=store,
        verbose=verbose,
        json_logs=json_logs,
    )


def _resolve_settings(state: CLIState) -> PrefillSettings:
    if state.settings_path is not None:
        base = load_settings(state.settings_path)
    elif state.graph_path is not None:
        base = PrefillSettings(
            graph=GraphSourceSettings(path=state.graph_path),
            logging=LoggingSettings(level="WARNING"),
        )
    else:
        raise _fail("either --settings or --graph is required")

    updates: dict[str, object] = {}
    if state.graph_path is not None:
        updates["graph"] = GraphSourceSettings(path=state.graph_path)
    if state.store_path is not None:
        updates["mapping_store"] = MappingStoreSettings(backend="filesystem", path=state.store_path)
    return base.model_copy(update=updates) if updates else base


def _build_session(ctx: typer.Context) -> PrefillSession:
    state: CLIState = ctx.obj
    try:
        settings = _resolve_settings(state)
    except FileNotFoundError as e:
        raise _fail(str(e)) from e
    except ValidationError as e:
        raise _fail(f"invalid settings: {e}") from e
    except ValueError as e:
        raise _fail(str(e)) from e

    configure_logging(
        json_output=state.json_logs or settings.logging.json_output,
        level="DEBUG" if state.verbose else settings.logging.level,
    )

    try:
        backend = create_mapping_backend(settings.mapping_store)
        initial = backend.load_all() if isinstance(backend, FilesystemMappingBackend) else None
        return PrefillSession.from_source(
            create_graph_source(settings.graph),
            backend,
            initial_mappings=initial,
        )
    except (PrefillError, ValueError, OSError) as e:
        raise _fail(str(e)) from e


@app.command()
def forms(ctx: typer.Context) -> None:
    """List the forms in the blueprint graph."""
    session = _build_session(ctx)
    for form in session.get_forms():
        node = session.graph.get_node_by_component_id(form.id)
        node_label = node.name if node is not None and node.name else "-"
        typer.echo(f"{form.id}\t{form.name}\t{len(form.field_schema.properties)} fields\t{node_label}")


@app.command()
def fields(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Target form id."),
) -> None:
    """List candidate prefill fields for a form, grouped by source kind."""
    session = _build_session(ctx)
    if session.get_form_by_id(form_id) is None:
        raise _fail(f"unknown form '{form_id}'")

    session.select(form_id)
    for provider in session.providers_for(form_id):
        typer.secho(f"{provider.name} ({provider.source_kind})", bold=True)
        for option in provider.get_available_fields(form_id):
            typer.echo(f"  {option.form_id}\t{option.path}\t[{option.field_type}]")


@app.command("map")
def map_field(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Target form id."),
    target_field: str = typer.Argument(..., help="Field of the target form to prefill."),
    source_kind: str = typer.Argument(..., help="direct, transitive or global."),
    source_id: str = typer.Argument(..., help="Source form id or global source id."),
    source_field: str = typer.Argument(..., help="Field of the source to copy from."),
) -> None:
    """Map a target field to a source field."""
    session = _build_session(ctx)
    session.select(form_id)
    try:
        mapping = session.map_field(form_id, target_field, source_kind, source_id, source_field)
    except PrefillError as e:
        raise _fail(str(e)) from e
    typer.secho(
        f"Mapped {form_id}.{target_field} <- {mapping.source_type}:{mapping.source_id}.{mapping.source_field_id}",
        fg=typer.colors.GREEN,
    )


@app.command()
def unmap(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Target form id."),
    target_field: str = typer.Argument(..., help="Field whose mapping to remove."),
) -> None:
    """Remove the mapping for a target field."""
    session = _build_session(ctx)
    if not session.has_mapping(form_id, target_field):
        typer.echo(f"No mapping for {form_id}.{target_field}")
        return
    try:
        session.remove_mapping(form_id, target_field)
    except PrefillError as e:
        raise _fail(str(e)) from e
    typer.secho(f"Removed mapping for {form_id}.{target_field}", fg=typer.colors.GREEN)


@app.command()
def mappings(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Target form id."),
) -> None:
    """Show the mappings configured for a form."""
    session = _build_session(ctx)
    current = session.mappings_for(form_id)
    if not current:
        typer.echo(f"No mappings for {form_id}")
        return
    for field_id, mapping in sorted(current.items()):
        typer.echo(f"{field_id} <- {mapping.source_type}:{mapping.source_id}.{mapping.source_field_id}")


@app.command()
def check(ctx: typer.Context) -> None:
    """Report graph consistency warnings and stale mappings."""
    session = _build_session(ctx)
    problems = 0

    for warning in session.consistency_warnings:
        typer.secho(f"[{warning.code}] {warning.message}", fg=typer.colors.YELLOW)
        problems += 1

    for form_id in sorted(session.mapping_store.configs()):
        for mapping in session.find_stale_mappings(form_id):
            typer.secho(
                f"[stale_mapping] {form_id}.{mapping.target_field_id} <- "
                f"{mapping.source_type}:{mapping.source_id}.{mapping.source_field_id}",
                fg=typer.colors.YELLOW,
            )
            problems += 1

    if problems:
        raise typer.Exit(1)
    typer.secho("Graph and mappings are consistent.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
