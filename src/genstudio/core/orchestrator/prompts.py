"""
Prompt builders for each generation target.
"""

import re
from collections.abc import Iterable, Mapping

from genstudio.core.store.models import GlobalTemplate, Message, Script, Shot

# Matches {{name}} placeholders; whitespace inside the braces is part of the name
TEMPLATE_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")


def build_style_prompt(message: Message) -> str:
    """
    Build the song prompt from an assistant message's lyrics fields.

    Each part is included only when present.

    Example:
        >>> msg = Message(id="m1", role="assistant", title="Dawn", style="folk",
        ...               created_at=now, updated_at=now)
        >>> print(build_style_prompt(msg))
        Title: Dawn
        Style: folk
    """
    parts: list[str] = []
    if message.title:
        parts.append(f"Title: {message.title}")
    if message.style:
        parts.append(f"Style: {message.style}")
    if message.commentary:
        parts.append(f"Commentary: {message.commentary}")
    if message.lyrics_body:
        parts.append(f"\nLyrics:\n{message.lyrics_body}")
    return "\n".join(parts)


def resolve_templates(text: str, *scopes: Mapping[str, str]) -> str:
    """
    Replace {{name}} placeholders with template values.

    Scopes are searched in order, so earlier scopes shadow later ones.
    Unknown names are left untouched.
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        for scope in scopes:
            if name in scope:
                return scope[name]
        return match.group(0)

    return TEMPLATE_PATTERN.sub(substitute, text)


def build_shot_prompt(
    script: Script,
    shot: Shot,
    global_templates: Iterable[GlobalTemplate] = (),
) -> str:
    """
    Build the video prompt for one shot.

    The script's global prompt is prepended to the shot prompt, and
    placeholders resolve against local templates before global ones.
    """
    local = {t.name: t.value for t in script.templates.values()}
    shared = {t.name: t.value for t in global_templates}

    parts = []
    if script.settings.global_prompt.strip():
        parts.append(resolve_templates(script.settings.global_prompt, local, shared))
    parts.append(resolve_templates(shot.prompt, local, shared))
    return "\n\n".join(parts)
