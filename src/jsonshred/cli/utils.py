"""
CLI utility helpers: repository wiring and output formatting.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jsonshred.core.errors import ConfigError
from jsonshred.core.result import ProcessingMessage
from jsonshred.core.settings import ShredderSettings, get_settings
from jsonshred.iglu.repository import SchemaRepository, build_repository

console = Console()
err_console = Console(stderr=True)


def load_settings(repos: list[Path] | None = None) -> ShredderSettings:
    """Current settings, with ``--repo`` options replacing the configured roots."""
    settings = get_settings()
    if repos:
        settings = settings.model_copy(update={"schema_repositories": list(repos)})
    return settings


def make_repository(settings: ShredderSettings) -> SchemaRepository:
    """Build the repository chain or exit with a readable error."""
    try:
        return build_repository(settings)
    except ConfigError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {escape(e.message)}")
        raise typer.Exit(code=2) from e


def print_errors(errors: list[ProcessingMessage], *, title: str = "Errors") -> None:
    """Render processing messages as a Rich table on stderr."""
    table = Table(title=title, show_lines=False, pad_edge=False)
    table.add_column("field", style="cyan")
    table.add_column("category")
    table.add_column("message", overflow="fold")
    for message in errors:
        table.add_row(escape(message.field), message.category.value, escape(message.message))
    err_console.print(table)
