"""
Collection registry for the local store.

Each collection is persisted under one fixed namespaced key
(``{namespace}:{name}``). List collections hold an array of records;
record collections hold a single object (settings).
"""

from dataclasses import dataclass
from enum import Enum

from genstudio.core.errors import UnknownCollectionError
from genstudio.core.store.models import (
    GlobalTemplate,
    ImageGeneration,
    ImageItem,
    ImageSession,
    ImageSettings,
    Message,
    Script,
    Settings,
    Song,
    StoreModel,
    VideoClip,
)


class CollectionKind(str, Enum):
    LIST = "list"
    RECORD = "record"


class Domain(str, Enum):
    MUSIC = "music"
    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class CollectionSpec:
    """Static description of one persisted collection."""

    name: str
    model: type[StoreModel]
    domain: Domain
    kind: CollectionKind = CollectionKind.LIST
    # Field that identifies a record; None for record collections and for
    # lists keyed by something other than "id"
    key_field: str | None = "id"

    def storage_key(self, namespace: str) -> str:
        return f"{namespace}:{self.name}"

    @property
    def is_list(self) -> bool:
        return self.kind == CollectionKind.LIST


COLLECTIONS: dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec("settings", Settings, Domain.MUSIC, CollectionKind.RECORD, None),
        CollectionSpec("messages", Message, Domain.MUSIC),
        CollectionSpec("songs", Song, Domain.MUSIC),
        CollectionSpec("image-sessions", ImageSession, Domain.IMAGE),
        CollectionSpec("image-generations", ImageGeneration, Domain.IMAGE),
        CollectionSpec("image-items", ImageItem, Domain.IMAGE),
        CollectionSpec("image-settings", ImageSettings, Domain.IMAGE, CollectionKind.RECORD, None),
        CollectionSpec("video-scripts", Script, Domain.VIDEO),
        CollectionSpec("video-global-templates", GlobalTemplate, Domain.VIDEO, key_field="name"),
        CollectionSpec("video-clips", VideoClip, Domain.VIDEO),
    )
}


def get_collection_spec(name: str) -> CollectionSpec:
    """
    Look up a collection by name.

    Raises:
        UnknownCollectionError: If no collection has that name
    """
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise UnknownCollectionError(name) from None


def collections_for_domain(domain: Domain) -> list[str]:
    return [name for name, spec in COLLECTIONS.items() if spec.domain == domain]
