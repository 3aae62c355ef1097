"""
GenStudio CLI - Run generation batches.

Each command fans one prompt out into N concurrent slots, persists every
successful result, and reports per-slot outcomes. Failed slots can be
retried in place with --retries.
"""

import asyncio
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from genstudio.cli.context import get_config, open_capability, open_store
from genstudio.cli.errors import ExitCode, print_error, print_studio_error
from genstudio.core.errors import GenStudioError
from genstudio.core.orchestrator.batch import Batch, SlotCall, SlotOrchestrator, capability_call
from genstudio.core.orchestrator.prompts import build_shot_prompt, build_style_prompt
from genstudio.core.orchestrator.slots import Slot, SlotStatus
from genstudio.core.orchestrator.targets import (
    IMAGE_TARGET,
    SONG_TARGET,
    VIDEO_TARGET,
    GenerationTarget,
)
from genstudio.core.store.models import ImageSettings, Settings
from genstudio.core.store.service import LocalStore
from genstudio.core.video.library import VideoLibrary

console = Console()
app = typer.Typer(help="Generate songs, images and video clips")

_STATUS_STYLE = {
    SlotStatus.LOADING: "[yellow]loading[/yellow]",
    SlotStatus.SUCCESS: "[green]success[/green]",
    SlotStatus.ERROR: "[red]error[/red]",
}


def _print_slot(batch: Batch, slot: Slot) -> None:
    if slot.status == SlotStatus.SUCCESS:
        console.print(f"  [green]✓[/green] slot {slot.index + 1} → {slot.artifact.id}")
    elif slot.status == SlotStatus.ERROR:
        console.print(f"  [red]✗[/red] slot {slot.index + 1}: {slot.error}")


def _print_batch(batch: Batch, target: GenerationTarget) -> None:
    table = Table(title=f"{target.name} for {batch.parent_id}")
    table.add_column("#", justify="right")
    table.add_column("Slot", style="dim", no_wrap=True)
    table.add_column("Status")
    table.add_column("Result")
    table.add_column("Attempts", justify="right")
    for slot in batch.slots.values():
        if slot.status == SlotStatus.SUCCESS:
            result = getattr(slot.artifact, "url", None) or getattr(slot.artifact, "audio_url", "")
        else:
            result = slot.error or ""
        table.add_row(
            str(slot.index + 1),
            slot.id[:8],
            _STATUS_STYLE[slot.status],
            result,
            str(slot.attempts),
        )
    console.print(table)


async def _run(
    store: LocalStore,
    target: GenerationTarget,
    parent_id: str,
    count: int,
    call: SlotCall,
    retries: int,
    fields: dict[str, Any] | None = None,
) -> Batch:
    orchestrator = SlotOrchestrator(store, target)
    batch = orchestrator.start_batch(parent_id, count, call, fields=fields)
    batch.subscribe(_print_slot)
    console.print(f"[dim]Started {count} {target.name} slots...[/dim]")
    await batch.wait()

    for attempt in range(retries):
        failed = batch.by_status(SlotStatus.ERROR)
        if not failed:
            break
        console.print(f"[dim]Retrying {len(failed)} failed slot(s) (round {attempt + 1})...[/dim]")
        for slot in failed:
            orchestrator.retry_slot(batch, slot.id, call)
        await batch.wait()

    return batch


def _execute(
    store: LocalStore,
    target: GenerationTarget,
    parent_id: str,
    count: int,
    call: SlotCall,
    retries: int,
    fields: dict[str, Any] | None = None,
) -> None:
    try:
        batch = asyncio.run(_run(store, target, parent_id, count, call, retries, fields))
    except GenStudioError as e:
        raise typer.Exit(print_studio_error(e))

    _print_batch(batch, target)
    if batch.by_status(SlotStatus.ERROR):
        raise typer.Exit(ExitCode.GENERAL_ERROR)


def _capability_or_exit(store: LocalStore) -> Any:
    try:
        return open_capability(store, get_config())
    except GenStudioError as e:
        raise typer.Exit(print_studio_error(e))
    except ValueError as e:
        print_error(str(e), solution="Set generation.capability to 'mock' in .genstudio.json")
        raise typer.Exit(ExitCode.USER_ERROR)


@app.command("songs")
def songs(
    message_id: str = typer.Argument(..., help="Assistant message holding the lyrics"),
    count: int | None = typer.Option(None, "--count", "-n", help="Number of songs (default: settings)"),
    retries: int = typer.Option(0, "--retries", min=0, help="Retry rounds for failed slots"),
) -> None:
    """
    Generate songs from a lyrics message.

    Examples:
        genstudio generate songs <message-id>
        genstudio generate songs <message-id> -n 5 --retries 1
    """
    store = open_store()
    message = store.get("messages", message_id)
    if message is None or message.deleted:
        print_error(f"Message '{message_id}' not found", solution="genstudio list messages")
        raise typer.Exit(ExitCode.USER_ERROR)

    if count is None:
        count = (store.get_settings("settings") or Settings()).num_songs
    capability = _capability_or_exit(store)
    call = capability_call(capability, build_style_prompt(message), duration=message.duration)
    _execute(store, SONG_TARGET, message_id, count, call, retries)


@app.command("images")
def images(
    session_id: str = typer.Argument(..., help="Image session"),
    prompt: str | None = typer.Option(None, "--prompt", help="Prompt for this step (default: session prompt)"),
    count: int | None = typer.Option(None, "--count", "-n", help="Number of images (default: settings)"),
    model: str | None = typer.Option(None, "--model", help="Model name recorded on each image"),
    retries: int = typer.Option(0, "--retries", min=0, help="Retry rounds for failed slots"),
) -> None:
    """Generate images for a new prompt step in a session."""
    store = open_store()
    session = store.get("image-sessions", session_id)
    if session is None or session.deleted:
        print_error(f"Image session '{session_id}' not found", solution="genstudio list image-sessions")
        raise typer.Exit(ExitCode.USER_ERROR)

    if count is None:
        count = (store.get_settings("image-settings") or ImageSettings()).num_images
    text = prompt or session.prompt
    capability = _capability_or_exit(store)
    params: dict[str, Any] = {"model": model} if model else {}
    call = capability_call(capability, text, **params)
    _execute(store, IMAGE_TARGET, session_id, count, call, retries, {"prompt": text, "model": model})


@app.command("clips")
def clips(
    script_id: str = typer.Argument(..., help="Video script"),
    shot_id: str = typer.Option(..., "--shot", "-s", help="Shot within the script"),
    count: int = typer.Option(3, "--count", "-n", help="Number of clips"),
    retries: int = typer.Option(0, "--retries", min=0, help="Retry rounds for failed slots"),
) -> None:
    """Generate video clips for one shot of a script."""
    store = open_store()
    library = VideoLibrary(store)
    script = library.get_script(script_id)
    if script is None or script.deleted:
        print_error(f"Script '{script_id}' not found", solution="genstudio list video-scripts")
        raise typer.Exit(ExitCode.USER_ERROR)
    shot = script.get_shot(shot_id)
    if shot is None:
        print_error(f"Shot '{shot_id}' not found in script '{script_id}'")
        raise typer.Exit(ExitCode.USER_ERROR)

    capability = _capability_or_exit(store)
    text = build_shot_prompt(script, shot, library.list_global_templates())
    call = capability_call(capability, text, duration=shot.duration)
    _execute(store, VIDEO_TARGET, script_id, count, call, retries, {"shot_id": shot_id})
