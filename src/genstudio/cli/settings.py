"""
GenStudio CLI - User settings stored in the local store.
"""

import typer
from rich.console import Console
from rich.table import Table

from genstudio.cli.context import open_store
from genstudio.cli.errors import ExitCode, print_error
from genstudio.core.store.models import ImageSettings, Settings

console = Console()
app = typer.Typer(help="Show and change stored settings")


def _mask(secret: str) -> str:
    if not secret:
        return "[dim](not set)[/dim]"
    return "*" * 8 + secret[-4:] if len(secret) > 4 else "*" * len(secret)


@app.command("show")
def show() -> None:
    """Show current settings (defaults apply where nothing was saved)."""
    store = open_store()
    settings = store.get_settings("settings") or Settings()
    image_settings = store.get_settings("image-settings") or ImageSettings()

    table = Table(title="Settings", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("api key", _mask(settings.poe_api_key))
    table.add_row("songs per batch", str(settings.num_songs))
    table.add_row("images per batch", str(image_settings.num_images))
    table.add_row("images per model", str(image_settings.images_per_model))
    console.print(table)


@app.command("set")
def set_settings(
    api_key: str | None = typer.Option(None, "--api-key", help="Provider API key"),
    num_songs: int | None = typer.Option(
        None, "--num-songs", min=1, max=10, help="Songs generated per batch"
    ),
    num_images: int | None = typer.Option(
        None, "--num-images", min=1, max=10, help="Images generated per batch"
    ),
) -> None:
    """
    Change settings.

    Examples:
        genstudio settings set --num-songs 5
        genstudio settings set --api-key sk-...
    """
    if api_key is None and num_songs is None and num_images is None:
        print_error("Nothing to change", solution="genstudio settings set --num-songs 5")
        raise typer.Exit(ExitCode.USER_ERROR)

    store = open_store()
    if api_key is not None or num_songs is not None:
        settings = store.get_settings("settings") or Settings()
        patch: dict[str, object] = {}
        if api_key is not None:
            patch["poe_api_key"] = api_key
        if num_songs is not None:
            patch["num_songs"] = num_songs
        store.save_settings(settings.model_copy(update=patch), "settings")

    if num_images is not None:
        image_settings = store.get_settings("image-settings") or ImageSettings()
        store.save_settings(
            image_settings.model_copy(update={"num_images": num_images}), "image-settings"
        )

    console.print("[green]Settings saved[/green]")
