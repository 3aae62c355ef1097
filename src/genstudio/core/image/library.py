"""
Image library: sessions, prompt steps and generated images.

A session is the parent entity. Each prompt submitted in a session creates
an ImageGeneration step (numbered 1, 2, 3, ... within the session); the
images produced for that step reference it.
"""

from genstudio.core.store.models import (
    ImageGeneration,
    ImageItem,
    ImageSession,
    ImageSettings,
    generate_id,
    utcnow,
)
from genstudio.core.store.service import LocalStore

SESSIONS = "image-sessions"
GENERATIONS = "image-generations"
ITEMS = "image-items"

# Session titles are the prompt truncated to this many characters
TITLE_LENGTH = 60


class ImageLibrary:
    """Image-domain view over the local store."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store

    # Sessions

    def create_session(self, prompt: str) -> ImageSession:
        return self.store.create(SESSIONS, {"title": prompt[:TITLE_LENGTH], "prompt": prompt})

    def get_session(self, session_id: str) -> ImageSession | None:
        return self.store.get(SESSIONS, session_id)

    def list_sessions(self) -> list[ImageSession]:
        """Non-deleted sessions, most recently created first."""
        sessions = self.store.list(SESSIONS)
        return sorted(sessions, key=lambda s: s.created_at, reverse=True)

    def delete_session(self, session_id: str) -> bool:
        return self.store.soft_delete(SESSIONS, session_id)

    # Generations

    def create_generation(self, session_id: str, prompt: str) -> ImageGeneration:
        """
        Record a new prompt step in a session.

        The step number is one more than the session's highest existing
        step, computed inside the same write cycle that appends it.
        """

        def append(generations: list[ImageGeneration]) -> ImageGeneration:
            step_id = 1 + max(
                (g.step_id for g in generations if g.session_id == session_id),
                default=0,
            )
            generation = ImageGeneration(
                id=generate_id(),
                session_id=session_id,
                step_id=step_id,
                prompt=prompt,
                created_at=utcnow(),
            )
            generations.append(generation)
            return generation

        return self.store.mutate(GENERATIONS, append)

    def generations_for_session(self, session_id: str) -> list[ImageGeneration]:
        generations = self.store.all(GENERATIONS)
        return sorted(
            (g for g in generations if g.session_id == session_id),
            key=lambda g: g.step_id,
        )

    # Items

    def items_for_generation(self, generation_id: str) -> list[ImageItem]:
        return self.store.list(ITEMS, where=lambda i: i.generation_id == generation_id)

    def items_for_session(self, session_id: str, include_deleted: bool = False) -> list[ImageItem]:
        generation_ids = {g.id for g in self.generations_for_session(session_id)}
        return self.store.list(
            ITEMS,
            include_deleted=include_deleted,
            where=lambda i: i.generation_id in generation_ids,
        )

    def pinned_items(self) -> list[ImageItem]:
        return self.store.list(ITEMS, where=lambda i: i.pinned)

    # Settings

    def get_settings(self) -> ImageSettings:
        return self.store.get_settings("image-settings") or ImageSettings()
