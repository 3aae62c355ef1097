"""
Record models for the local store.

Every persisted entity is a Pydantic model. Python code uses snake_case
attribute names; the persisted JSON uses camelCase keys (``createdAt``,
``messageId``) so exports stay compatible with the browser-era data files.

Entity families:
- ParentEntity: the thing a batch generates *for* (lyrics message, image
  session, video script). Soft-deleted, never removed.
- Artifact: one generated result (song, image, video clip). Carries
  ``pinned`` and ``deleted`` flags, both always serialized.
- Settings records: a single object per domain, not a list.
"""

import secrets
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Characters for the random part of generated IDs (lowercase base36)
ID_CHARS = string.ascii_lowercase + string.digits
ID_SUFFIX_LENGTH = 7

# Clip duration in seconds for shots that do not set one
DEFAULT_SHOT_DURATION = 8


def generate_id() -> str:
    """
    Generate a record ID: millisecond timestamp plus a random suffix.

    Returns:
        ID such as "1760875200123-k3x9a0q"
    """
    suffix = "".join(secrets.choice(ID_CHARS) for _ in range(ID_SUFFIX_LENGTH))
    return f"{int(time.time() * 1000)}-{suffix}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreModel(BaseModel):
    """Base for persisted models: camelCase on disk, unknown keys preserved."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_storage(self) -> dict[str, object]:
        """Serialize to the JSON-ready dict written to the medium."""
        return self.model_dump(mode="json", by_alias=True)


class ParentEntity(StoreModel):
    """An entity that owns generated artifacts."""

    id: str
    created_at: datetime
    updated_at: datetime
    deleted: bool = False


class Artifact(StoreModel):
    """A persisted generation result."""

    id: str
    created_at: datetime
    pinned: bool = False
    pinned_at: datetime | None = None
    deleted: bool = False


# ==============================================================================
# Music
# ==============================================================================


class Settings(StoreModel):
    """Provider credentials and song generation parameters."""

    poe_api_key: str = ""
    num_songs: int = Field(default=3, ge=1, le=10)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(ParentEntity):
    """
    A node in the lyrics conversation tree.

    Lyrics fields are populated only on assistant messages.
    """

    role: MessageRole
    content: str = ""
    parent_id: str | None = None
    title: str | None = None
    style: str | None = None
    commentary: str | None = None
    lyrics_body: str | None = None
    duration: int | None = Field(default=None, ge=1, description="Duration in seconds")


class Song(Artifact):
    """A generated song for an assistant message."""

    message_id: str
    title: str
    audio_url: str


# ==============================================================================
# Image
# ==============================================================================


class ImageSettings(StoreModel):
    num_images: int = Field(default=3, ge=1, le=10)
    images_per_model: int = Field(default=3, ge=1, le=10)


class ImageSession(ParentEntity):
    title: str
    prompt: str = ""


class ImageGeneration(StoreModel):
    """One prompt step within an image session."""

    id: str
    session_id: str
    step_id: int = Field(ge=1)
    prompt: str
    created_at: datetime


class ImageItem(Artifact):
    generation_id: str
    url: str
    model: str | None = None


# ==============================================================================
# Video
# ==============================================================================


class AudioSource(str, Enum):
    VIDEO = "video"
    ELEVENLABS = "elevenlabs"


class ScriptSettings(StoreModel):
    subtitles: bool = False
    default_audio: AudioSource = AudioSource.VIDEO
    narration_enabled: bool = False
    global_prompt: str = ""


class ShotNarration(StoreModel):
    enabled: bool = False
    text: str = ""
    audio_source: AudioSource = AudioSource.VIDEO
    audio_url: str | None = None


class Shot(StoreModel):
    id: str
    title: str = ""
    prompt: str = ""
    narration: ShotNarration = Field(default_factory=ShotNarration)
    subtitles: bool = False
    duration: int = DEFAULT_SHOT_DURATION
    selected_url: str | None = None


class LocalTemplate(StoreModel):
    """A template variable scoped to one script."""

    name: str
    value: str
    global_: Literal[False] = Field(default=False, alias="global")


class GlobalTemplate(StoreModel):
    """A template variable shared by all scripts."""

    name: str
    value: str
    global_: Literal[True] = Field(default=True, alias="global")


class Script(ParentEntity):
    title: str
    settings: ScriptSettings = Field(default_factory=ScriptSettings)
    shots: list[Shot] = Field(default_factory=list)
    templates: dict[str, LocalTemplate] = Field(default_factory=dict)

    def get_shot(self, shot_id: str) -> Shot | None:
        for shot in self.shots:
            if shot.id == shot_id:
                return shot
        return None


class VideoClip(Artifact):
    """A generated candidate clip for one shot of a script."""

    script_id: str
    shot_id: str
    url: str
    audio_url: str | None = None
