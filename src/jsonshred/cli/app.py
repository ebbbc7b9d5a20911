"""
Root Typer application for the jsonshred CLI.

    jsonshred shred events.jsonl --output out/ --repo ./iglu
    jsonshred validate instance.json --repo ./iglu
    jsonshred table iglu:com.acme/click/jsonschema/1-0-0 --repo ./iglu
"""

from __future__ import annotations

import json
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from jsonshred.cli.utils import console, err_console, load_settings, make_repository, print_errors
from jsonshred.core.errors import (
    InvalidSchemaKeyError,
    SchemaResolutionError,
    ShredError,
    categorize_error,
)
from jsonshred.core.logging import configure_logging
from jsonshred.core.result import Err, Ok
from jsonshred.core.settings import get_settings
from jsonshred.iglu.schema_key import SchemaKey
from jsonshred.job.runner import shred_file
from jsonshred.shredder.extractor import extract_json
from jsonshred.shredder.tables import columns, table_name
from jsonshred.shredder.validator import JsonValidator

app = typer.Typer(
    name="jsonshred",
    help="jsonshred: validate and shred self-describing JSON out of canonical events.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("jsonshred")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"jsonshred {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """jsonshred CLI: shred events, validate instances, inspect tables."""
    try:
        settings = get_settings()
    except ValidationError as e:
        err_console.print(f"[bold red]Invalid configuration[/bold red]:\n{escape(str(e))}")
        raise typer.Exit(code=2) from e
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("shred")
def shred_command(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON-lines events."),
    output: Path = typer.Option(..., "--output", "-o", file_okay=False, help="Output directory."),
    repo: list[Path] | None = typer.Option(None, "--repo", "-r", help="Iglu repository root."),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1),
    fail_on_error: bool = typer.Option(False, "--fail-on-error", help="Exit 1 if any event failed."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Shred a JSON-lines file into per-table good output and a failed-events file."""
    settings = load_settings(repo)
    repository = make_repository(settings)

    try:
        summary = shred_file(
            input_path,
            output,
            repository,
            workers=workers or settings.workers,
            ref_root=settings.ref_root,
            table_schema=settings.table_schema or None,
        )
    except (ShredError, OSError, UnicodeDecodeError) as e:
        message = e.message if isinstance(e, ShredError) else str(e)
        err_console.print(
            f"[bold red]Error[/bold red] ({categorize_error(e).value}): {escape(message)}"
        )
        raise typer.Exit(code=1) from e

    if json_out:
        console.print_json(json.dumps(summary.to_dict()))
    else:
        table = Table(title="Shredded tables", pad_edge=False)
        table.add_column("table", style="cyan")
        table.add_column("rows", justify="right")
        for name, rows in summary.tables.items():
            table.add_row(name, str(rows))
        console.print(table)
        console.print(
            f"events: {summary.events}  shredded: {summary.shredded_events}  "
            f"failed: {summary.failed_events}  documents: {summary.documents}"
        )

    if fail_on_error and summary.failed_events:
        raise typer.Exit(code=1)


@app.command("validate")
def validate_command(
    instance_path: Path = typer.Argument(..., exists=True, dir_okay=False),
    repo: list[Path] | None = typer.Option(None, "--repo", "-r", help="Iglu repository root."),
) -> None:
    """Validate one self-describing JSON instance against its schema."""
    repository = make_repository(load_settings(repo))
    field = instance_path.name

    extracted = extract_json(field, instance_path.read_text(encoding="utf-8"))
    if extracted is None:
        err_console.print(f"[bold red]Error[/bold red]: {escape(str(instance_path))} is empty")
        raise typer.Exit(code=1)

    validator = JsonValidator(repository)
    match extracted.flat_map(lambda value: validator.validate(value, field=field)):
        case Ok(document):
            console.print(f"[green]valid[/green] {document.schema}")
        case Err(errors):
            print_errors(list(errors), title=f"{instance_path} is invalid")
            raise typer.Exit(code=1)


@app.command("table")
def table_command(
    schema_uri: str = typer.Argument(..., help="iglu:vendor/name/format/version"),
    repo: list[Path] | None = typer.Option(None, "--repo", "-r", help="Iglu repository root."),
) -> None:
    """Show the table name and columns a schema's documents shred into."""
    settings = load_settings(repo)

    try:
        key = SchemaKey.parse(schema_uri)
    except InvalidSchemaKeyError as e:
        err_console.print(f"[bold red]Error[/bold red]: {escape(e.message)}")
        raise typer.Exit(code=2) from e

    repository = make_repository(settings)
    try:
        schema = repository.resolve(key)
    except SchemaResolutionError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {escape(e.message)}")
        raise typer.Exit(code=1) from e

    console.print(f"[bold]{table_name(key, settings.table_schema or None)}[/bold]")
    for column in columns(schema):
        console.print(f"  {column}")


@app.command("config")
def config_command() -> None:
    """Show the effective configuration as JSON."""
    console.print_json(get_settings().model_dump_json())
