"""
GenStudio CLI - Listing, pinning and deleting stored records.
"""

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from genstudio.cli.context import open_store
from genstudio.cli.errors import ExitCode, print_error
from genstudio.core.store.schema import COLLECTIONS, CollectionSpec

console = Console()

# Columns shown per collection, after the key column
_COLUMNS: dict[str, tuple[str, ...]] = {
    "messages": ("role", "title", "parent_id"),
    "songs": ("title", "message_id", "audio_url"),
    "image-sessions": ("title",),
    "image-generations": ("session_id", "step_id", "prompt"),
    "image-items": ("generation_id", "model", "url"),
    "video-scripts": ("title",),
    "video-global-templates": ("value",),
    "video-clips": ("script_id", "shot_id", "url"),
}


def _list_spec(collection: str) -> CollectionSpec:
    spec = COLLECTIONS.get(collection)
    if spec is None or not spec.is_list:
        names = [name for name, s in COLLECTIONS.items() if s.is_list]
        print_error(
            f"Unknown collection: {collection}",
            reason=f"Listable collections: {', '.join(names)}",
        )
        raise typer.Exit(ExitCode.USER_ERROR)
    return spec


def _cell(value: Any) -> str:
    if value is None:
        return "[dim]-[/dim]"
    text = str(value)
    return text if len(text) <= 48 else text[:45] + "..."


def list_cmd(
    collection: str = typer.Argument(..., help="Collection name (e.g. messages, songs)"),
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Include soft-deleted records",
    ),
    pinned: bool = typer.Option(
        False,
        "--pinned",
        "-p",
        help="Only pinned artifacts",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    List records in a collection.

    Examples:
        genstudio list messages
        genstudio list songs --pinned
        genstudio list image-items --all --json
    """
    spec = _list_spec(collection)
    store = open_store()
    where = (lambda r: getattr(r, "pinned", False)) if pinned else None
    records = store.list(collection, include_deleted=show_all, where=where)

    if json_output:
        typer.echo(json.dumps([r.to_storage() for r in records], indent=2, ensure_ascii=False))
        return

    if not records:
        console.print(f"[dim]No records in {collection}[/dim]")
        return

    key_field = spec.key_field or "id"
    columns = _COLUMNS.get(collection, ())
    table = Table(title=f"{collection} ({len(records)})")
    table.add_column(key_field, style="cyan", no_wrap=True)
    for column in columns:
        table.add_column(column)
    if "pinned" in spec.model.model_fields:
        table.add_column("pinned")
    if show_all and "deleted" in spec.model.model_fields:
        table.add_column("deleted")

    for record in records:
        row = [str(getattr(record, key_field))]
        row.extend(_cell(getattr(record, column, None)) for column in columns)
        if "pinned" in spec.model.model_fields:
            row.append("[green]yes[/green]" if record.pinned else "")
        if show_all and "deleted" in spec.model.model_fields:
            row.append("[red]yes[/red]" if record.deleted else "")
        table.add_row(*row)

    console.print(table)


def _set_pinned(collection: str, record_id: str, value: bool) -> None:
    spec = _list_spec(collection)
    if "pinned" not in spec.model.model_fields:
        print_error(f"{collection} records cannot be pinned")
        raise typer.Exit(ExitCode.USER_ERROR)

    if open_store().set_pinned(collection, record_id, value) is None:
        print_error(f"No record '{record_id}' in {collection}")
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print(f"[green]{'Pinned' if value else 'Unpinned'} {record_id}[/green]")


def pin_cmd(
    collection: str = typer.Argument(..., help="Artifact collection (songs, image-items, video-clips)"),
    record_id: str = typer.Argument(..., help="Record ID"),
) -> None:
    """Pin an artifact."""
    _set_pinned(collection, record_id, True)


def unpin_cmd(
    collection: str = typer.Argument(..., help="Artifact collection (songs, image-items, video-clips)"),
    record_id: str = typer.Argument(..., help="Record ID"),
) -> None:
    """Unpin an artifact."""
    _set_pinned(collection, record_id, False)


def delete_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    record_id: str = typer.Argument(..., help="Record ID"),
) -> None:
    """
    Soft-delete a record.

    The record is hidden from listings but kept in storage and exports.
    """
    spec = _list_spec(collection)
    if "deleted" not in spec.model.model_fields:
        print_error(f"{collection} records cannot be deleted")
        raise typer.Exit(ExitCode.USER_ERROR)

    if not open_store().soft_delete(collection, record_id):
        print_error(f"No record '{record_id}' in {collection}")
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print(f"[green]Deleted {record_id}[/green]")
