"""
Generation targets.

A target tells the orchestrator which collection holds the parent entity,
which collection receives artifacts, and how to turn one capability result
into an artifact record. Songs, images and video clips differ only here;
the slot machinery is shared.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from genstudio.core.capability.base import GenerationResult
from genstudio.core.errors import BatchRejectedError, GenerationError
from genstudio.core.image.library import ImageLibrary
from genstudio.core.store.service import LocalStore

BuildArtifact = Callable[[Any, int, GenerationResult, dict[str, Any]], dict[str, Any]]
Prepare = Callable[[LocalStore, Any, dict[str, Any]], dict[str, Any]]


def first_url(result: GenerationResult) -> str:
    """
    Extract the result URL from a capability response.

    Raises:
        GenerationError: If the response carries no URL
    """
    if isinstance(result, str):
        url = result.strip()
    else:
        url = next((u.strip() for u in result if u and u.strip()), "")
    if not url:
        raise GenerationError("No result URL returned")
    return url


def _no_prepare(store: LocalStore, parent: Any, fields: dict[str, Any]) -> dict[str, Any]:
    return dict(fields)


@dataclass(frozen=True)
class GenerationTarget:
    """
    How one kind of artifact is produced and stored.

    Attributes:
        name: Target name ("songs", "images", "clips")
        parent_collection: Collection holding parent entities
        artifact_collection: Collection receiving artifacts
        build_artifact: (parent, slot_index, result, context) -> record fields
        prepare: Runs once per batch before slots exist; returns the batch
            context passed to build_artifact. Raising rejects the batch.
    """

    name: str
    parent_collection: str
    artifact_collection: str
    build_artifact: BuildArtifact
    prepare: Prepare = _no_prepare


# ==============================================================================
# Songs
# ==============================================================================


def _build_song(parent: Any, index: int, result: GenerationResult, context: dict[str, Any]) -> dict[str, Any]:
    return {
        "message_id": parent.id,
        "title": f"{parent.title or 'Song'} (Take {index + 1})",
        "audio_url": first_url(result),
    }


SONG_TARGET = GenerationTarget(
    name="songs",
    parent_collection="messages",
    artifact_collection="songs",
    build_artifact=_build_song,
)


# ==============================================================================
# Images
# ==============================================================================


def _prepare_images(store: LocalStore, parent: Any, fields: dict[str, Any]) -> dict[str, Any]:
    """Record the prompt step that this batch's images belong to."""
    context = dict(fields)
    if "generation_id" not in context:
        prompt = context.get("prompt") or parent.prompt
        generation = ImageLibrary(store).create_generation(parent.id, prompt)
        context["generation_id"] = generation.id
    return context


def _build_image(parent: Any, index: int, result: GenerationResult, context: dict[str, Any]) -> dict[str, Any]:
    return {
        "generation_id": context["generation_id"],
        "url": first_url(result),
        "model": context.get("model"),
    }


IMAGE_TARGET = GenerationTarget(
    name="images",
    parent_collection="image-sessions",
    artifact_collection="image-items",
    build_artifact=_build_image,
    prepare=_prepare_images,
)


# ==============================================================================
# Video clips
# ==============================================================================


def _prepare_clips(store: LocalStore, parent: Any, fields: dict[str, Any]) -> dict[str, Any]:
    shot_id = fields.get("shot_id")
    if not shot_id:
        raise BatchRejectedError("A shot_id is required to generate clips")
    if parent.get_shot(shot_id) is None:
        raise BatchRejectedError(
            f"Shot '{shot_id}' not found in script '{parent.id}'",
            shot_id=shot_id,
            parent_id=parent.id,
        )
    return dict(fields)


def _build_clip(parent: Any, index: int, result: GenerationResult, context: dict[str, Any]) -> dict[str, Any]:
    return {
        "script_id": parent.id,
        "shot_id": context["shot_id"],
        "url": first_url(result),
        "audio_url": context.get("audio_url"),
    }


VIDEO_TARGET = GenerationTarget(
    name="clips",
    parent_collection="video-scripts",
    artifact_collection="video-clips",
    build_artifact=_build_clip,
    prepare=_prepare_clips,
)

TARGETS = {target.name: target for target in (SONG_TARGET, IMAGE_TARGET, VIDEO_TARGET)}
