"""
GenStudio CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging

import typer
from rich.console import Console

from genstudio import __version__
from genstudio.cli import data, generate, new, records, settings

# Help panel names for command grouping
PANEL_CREATE = "Create and Generate"
PANEL_LIBRARY = "Browse Your Library"
PANEL_DATA = "Back Up and Restore"

app = typer.Typer(
    name="genstudio",
    help="Local-first studio for songs, images and video clips",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    GenStudio - generate songs, images and video clips in parallel slots.

    Quick Start:
        1. genstudio new message "A song about rain" --title Rain --style folk
        2. genstudio generate songs <message-id> --count 3
        3. genstudio list songs

    Data stays on this machine; use `genstudio export` to back it up.
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG)

    ctx.obj = {"debug": debug}


# =============================================================================
# Create and Generate
# =============================================================================

app.add_typer(new.app, name="new", rich_help_panel=PANEL_CREATE)
app.add_typer(generate.app, name="generate", rich_help_panel=PANEL_CREATE)


# =============================================================================
# Browse Your Library
# =============================================================================

app.command(name="list", rich_help_panel=PANEL_LIBRARY)(records.list_cmd)
app.command(name="pin", rich_help_panel=PANEL_LIBRARY)(records.pin_cmd)
app.command(name="unpin", rich_help_panel=PANEL_LIBRARY)(records.unpin_cmd)
app.command(name="delete", rich_help_panel=PANEL_LIBRARY)(records.delete_cmd)
app.add_typer(settings.app, name="settings", rich_help_panel=PANEL_LIBRARY)


# =============================================================================
# Back Up and Restore
# =============================================================================

app.command(name="export", rich_help_panel=PANEL_DATA)(data.export_cmd)
app.command(name="import", rich_help_panel=PANEL_DATA)(data.import_cmd)
app.command(name="reset", rich_help_panel=PANEL_DATA)(data.reset_cmd)


@app.command()
def version() -> None:
    """Show genstudio version and exit."""
    console.print(f"genstudio version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
