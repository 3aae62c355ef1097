"""
GenStudio CLI - Export, import and reset of the local store.
"""

import json
from enum import Enum
from pathlib import Path

import typer
import yaml
from rich.console import Console

from genstudio.cli.context import open_store
from genstudio.cli.errors import ExitCode, print_error, print_studio_error
from genstudio.core.errors import GenStudioError
from genstudio.core.store.schema import COLLECTIONS
from genstudio.core.store.service import strip_secrets

console = Console()


class ExportFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"


def _check_collections(names: list[str] | None) -> list[str] | None:
    if not names:
        return None
    unknown = [n for n in names if n not in COLLECTIONS]
    if unknown:
        print_error(
            f"Unknown collection: {', '.join(unknown)}",
            reason=f"Known collections: {', '.join(COLLECTIONS)}",
        )
        raise typer.Exit(ExitCode.USER_ERROR)
    return names


def export_cmd(
    out: Path | None = typer.Option(
        None,
        "--out",
        "-o",
        help="Write to this file instead of stdout",
    ),
    fmt: ExportFormat = typer.Option(
        ExportFormat.JSON,
        "--format",
        "-f",
        help="Output format",
    ),
    collection: list[str] | None = typer.Option(
        None,
        "--collection",
        "-c",
        help="Export only this collection (repeatable)",
    ),
    no_secrets: bool = typer.Option(
        False,
        "--strip-secrets",
        help="Blank the API key in exported settings",
    ),
) -> None:
    """
    Export stored data.

    Soft-deleted records are included. The output can be restored with
    `genstudio import`.

    Examples:
        genstudio export --out backup.json
        genstudio export -c messages -c songs --format yaml
    """
    names = _check_collections(collection)
    snapshot = open_store().export(names)
    if no_secrets:
        snapshot = strip_secrets(snapshot)

    if fmt == ExportFormat.YAML:
        text = yaml.safe_dump(snapshot, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(snapshot, indent=2, ensure_ascii=False)

    if out is None:
        typer.echo(text)
        return
    out.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    console.print(f"[green]Exported {len(snapshot)} collections to {out}[/green]")


def import_cmd(
    path: Path = typer.Argument(..., help="Export file (JSON or YAML)"),
) -> None:
    """
    Import a previous export.

    Every collection present in the file replaces the stored one; collections
    missing from the file are left alone. Nothing is written if any part of
    the file is malformed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        print_error(f"Cannot read {path}", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            payload = yaml.safe_load(text)
        else:
            payload = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        print_error("Import failed: invalid format", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        imported = open_store().import_data(payload)
    except GenStudioError as e:
        raise typer.Exit(print_studio_error(e))

    console.print(f"[green]Imported {len(imported)} collections[/green]")
    for name in imported:
        console.print(f"  {name}")


def reset_cmd(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt",
    ),
    collection: list[str] | None = typer.Option(
        None,
        "--collection",
        "-c",
        help="Clear only this collection (repeatable)",
    ),
) -> None:
    """Delete stored data permanently."""
    names = _check_collections(collection)
    target = ", ".join(names) if names else "all stored data"
    if not yes and not typer.confirm(f"Permanently delete {target}?"):
        console.print("[dim]Aborted[/dim]")
        raise typer.Exit(ExitCode.SUCCESS)

    open_store().reset(names)
    console.print(f"[green]Cleared {target}[/green]")
