"""
GenStudio CLI - Create parent entities to generate from.

Messages (lyrics), image sessions, video scripts, shots and templates.
"""

import typer
from rich.console import Console

from genstudio.cli.context import open_store
from genstudio.cli.errors import ExitCode, print_error
from genstudio.core.image.library import ImageLibrary
from genstudio.core.music.library import MusicLibrary
from genstudio.core.video.library import VideoLibrary

console = Console()
app = typer.Typer(help="Create messages, sessions, scripts and shots")


@app.command("message")
def new_message(
    content: str = typer.Argument("", help="Message text"),
    role: str = typer.Option("assistant", "--role", "-r", help="user or assistant"),
    parent: str | None = typer.Option(None, "--parent", help="Parent message ID"),
    title: str | None = typer.Option(None, "--title", help="Song title"),
    style: str | None = typer.Option(None, "--style", help="Musical style"),
    lyrics: str | None = typer.Option(None, "--lyrics", help="Lyrics body"),
    commentary: str | None = typer.Option(None, "--commentary", help="Commentary"),
) -> None:
    """
    Add a lyrics message.

    Examples:
        genstudio new message "A song about rain" --role user
        genstudio new message --parent <id> --title Dawn --style folk --lyrics "..."
    """
    if role not in ("user", "assistant"):
        print_error(f"Invalid role '{role}'", solution="--role user  # or assistant")
        raise typer.Exit(ExitCode.USER_ERROR)

    library = MusicLibrary(open_store())
    if parent is not None and library.get_message(parent) is None:
        print_error(f"Parent message '{parent}' not found")
        raise typer.Exit(ExitCode.USER_ERROR)

    message = library.create_message(
        role,
        content,
        parent_id=parent,
        title=title,
        style=style,
        lyrics_body=lyrics,
        commentary=commentary,
    )
    console.print(f"[green]Created message {message.id}[/green]")


@app.command("session")
def new_session(
    prompt: str = typer.Argument(..., help="Image prompt"),
) -> None:
    """Start an image session."""
    session = ImageLibrary(open_store()).create_session(prompt)
    console.print(f"[green]Created image session {session.id}[/green]")


@app.command("script")
def new_script(
    title: str = typer.Argument(..., help="Script title"),
) -> None:
    """Start a video script."""
    script = VideoLibrary(open_store()).create_script(title)
    console.print(f"[green]Created video script {script.id}[/green]")


@app.command("shot")
def new_shot(
    script_id: str = typer.Argument(..., help="Script ID"),
    prompt: str = typer.Argument(..., help="Shot prompt (may use {{name}} templates)"),
    title: str = typer.Option("", "--title", help="Shot title"),
) -> None:
    """Append a shot to a video script."""
    shot = VideoLibrary(open_store()).add_shot(script_id, prompt, title=title)
    if shot is None:
        print_error(f"Script '{script_id}' not found")
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print(f"[green]Added shot {shot.id} ({shot.title})[/green]")


@app.command("template")
def new_template(
    name: str = typer.Argument(..., help="Template name, used as {{name}}"),
    value: str = typer.Argument(..., help="Replacement text"),
    script: str | None = typer.Option(
        None, "--script", help="Store on this script instead of globally"
    ),
) -> None:
    """
    Define a prompt template.

    Global templates apply to every script; script templates shadow them.
    """
    library = VideoLibrary(open_store())
    if script is None:
        library.create_global_template(name, value)
        usages = library.template_usage(name)
        console.print(f"[green]Saved global template {{{{{name}}}}}[/green]")
        for usage in usages:
            shots = "all shots" if usage.all_shots else "shots " + ", ".join(map(str, usage.shot_indices))
            console.print(f"  used in {usage.script_title or usage.script_id}: {shots}")
        return

    if library.set_local_template(script, name, value) is None:
        print_error(f"Script '{script}' not found")
        raise typer.Exit(ExitCode.USER_ERROR)
    console.print(f"[green]Saved template {{{{{name}}}}} on {script}[/green]")
