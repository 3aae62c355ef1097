"""
Video library: scripts, shots, template variables and generated clips.

A script is the parent entity. Shots live inside the script record; each
generated clip is its own artifact referencing the script and the shot.

Template variables (``{{name}}`` in prompts) come in two scopes:
- Local templates, stored on the script
- Global templates, stored in their own collection and shared by all scripts
"""

import re
from dataclasses import dataclass, field

from genstudio.core.store.models import (
    GlobalTemplate,
    Script,
    Shot,
    ShotNarration,
    VideoClip,
    generate_id,
    utcnow,
)
from genstudio.core.store.service import LocalStore

SCRIPTS = "video-scripts"
GLOBAL_TEMPLATES = "video-global-templates"
CLIPS = "video-clips"


@dataclass
class ScriptTemplateUsage:
    """Where one template is referenced inside a single script."""

    script_id: str
    script_title: str
    shot_indices: list[int] = field(default_factory=list)  # 1-based
    all_shots: bool = False


class VideoLibrary:
    """Video-domain view over the local store."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store

    # Scripts

    def create_script(self, title: str) -> Script:
        return self.store.create(SCRIPTS, {"title": title})

    def get_script(self, script_id: str) -> Script | None:
        return self.store.get(SCRIPTS, script_id)

    def update_script(self, script_id: str, **patch: object) -> Script | None:
        return self.store.update(SCRIPTS, script_id, patch)

    def delete_script(self, script_id: str) -> bool:
        return self.store.soft_delete(SCRIPTS, script_id)

    def list_scripts(self) -> list[Script]:
        """Non-deleted scripts, most recently updated first."""
        return sorted(self.store.list(SCRIPTS), key=lambda s: s.updated_at, reverse=True)

    def add_shot(self, script_id: str, prompt: str, title: str = "") -> Shot | None:
        """
        Append a shot to a script.

        New shots inherit the script's subtitle and narration settings.

        Returns:
            The new shot, or None if the script does not exist
        """

        def append(scripts: list[Script]) -> Shot | None:
            for index, script in enumerate(scripts):
                if script.id != script_id:
                    continue
                shot = Shot(
                    id=generate_id(),
                    title=title or f"Shot {len(script.shots) + 1}",
                    prompt=prompt,
                    subtitles=script.settings.subtitles,
                    narration=ShotNarration(
                        enabled=script.settings.narration_enabled,
                        audio_source=script.settings.default_audio,
                    ),
                )
                scripts[index] = script.model_copy(
                    update={"shots": [*script.shots, shot], "updated_at": utcnow()}
                )
                return shot
            return None

        if self.get_script(script_id) is None:
            return None
        return self.store.mutate(SCRIPTS, append)

    def set_local_template(self, script_id: str, name: str, value: str) -> Script | None:
        script = self.get_script(script_id)
        if script is None:
            return None
        templates = {k: t.model_dump(by_alias=True) for k, t in script.templates.items()}
        templates[name] = {"name": name, "value": value, "global": False}
        return self.store.update(SCRIPTS, script_id, {"templates": templates})

    # Global templates

    def create_global_template(self, name: str, value: str) -> GlobalTemplate:
        """Create a global template; an existing template with that name is replaced."""
        template = GlobalTemplate(name=name, value=value)

        def upsert(templates: list[GlobalTemplate]) -> GlobalTemplate:
            for index, existing in enumerate(templates):
                if existing.name == name:
                    templates[index] = template
                    return template
            templates.append(template)
            return template

        return self.store.mutate(GLOBAL_TEMPLATES, upsert)

    def list_global_templates(self) -> list[GlobalTemplate]:
        return self.store.all(GLOBAL_TEMPLATES)

    def update_global_template(self, name: str, value: str) -> GlobalTemplate | None:
        return self.store.update(GLOBAL_TEMPLATES, name, {"value": value})

    def delete_global_template(self, name: str) -> bool:
        """Remove a global template. Templates carry no history, so this is a real removal."""

        def remove(templates: list[GlobalTemplate]) -> bool:
            before = len(templates)
            templates[:] = [t for t in templates if t.name != name]
            return len(templates) != before

        return self.store.mutate(GLOBAL_TEMPLATES, remove)

    def template_usage(self, name: str) -> list[ScriptTemplateUsage]:
        """
        Find the scripts and shots whose prompts reference ``{{name}}``.

        Only the exact placeholder matches; ``{{ name }}`` does not.
        """
        pattern = re.compile(r"\{\{" + re.escape(name) + r"\}\}")
        usages: list[ScriptTemplateUsage] = []
        for script in self.list_scripts():
            indices = [i + 1 for i, shot in enumerate(script.shots) if pattern.search(shot.prompt)]
            if indices:
                usages.append(
                    ScriptTemplateUsage(
                        script_id=script.id,
                        script_title=script.title,
                        shot_indices=indices,
                        all_shots=len(indices) == len(script.shots),
                    )
                )
        return usages

    # Clips

    def clips_for_shot(self, shot_id: str, include_deleted: bool = False) -> list[VideoClip]:
        return self.store.list(
            CLIPS,
            include_deleted=include_deleted,
            where=lambda c: c.shot_id == shot_id,
        )

    def pinned_clips(self) -> list[VideoClip]:
        return self.store.list(CLIPS, where=lambda c: c.pinned)

    def select_clip(self, script_id: str, shot_id: str, url: str | None) -> Script | None:
        """Mark a clip URL as the chosen take for a shot."""
        script = self.get_script(script_id)
        if script is None or script.get_shot(shot_id) is None:
            return None
        shots = [
            s.model_copy(update={"selected_url": url}) if s.id == shot_id else s
            for s in script.shots
        ]
        return self.store.update(SCRIPTS, script_id, {"shots": [s.model_dump() for s in shots]})
