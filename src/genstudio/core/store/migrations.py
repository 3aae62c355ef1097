"""
Read-side schema migration.

Older data files lack fields that newer code expects. Rather than rewriting
storage when the code is upgraded, every read passes raw records through
``migrate_on_read`` which fills absent fields with defaults. The stored
bytes are never touched, so an export taken before and after an upgrade
(with no writes in between) is identical on disk while the typed view is
fully populated.

Rules:
- Purely additive: a field that is present is never changed
- Pure: the raw input is copied, never mutated
- Legacy keys that no longer exist are dropped from the typed view only

Defaults per collection:
    settings                numSongs=3
    messages                deleted=false, updatedAt=createdAt, parentId=null
    songs / image-items /
      video-clips           pinned=false, deleted=false
    image-sessions          prompt=title, deleted=false, updatedAt=createdAt
    image-settings          imagesPerModel=3
    video-scripts           settings.{narrationEnabled=false, globalPrompt="",
                            subtitles=false, defaultAudio="video"},
                            shot.subtitles=<script subtitles>, shot.duration=8,
                            templates={} (legacy "category" dropped),
                            deleted=false, updatedAt=createdAt
    video-global-templates  legacy "category" dropped, global=true
"""

import copy
from collections.abc import Callable
from typing import Any

from genstudio.core.store.models import DEFAULT_SHOT_DURATION

RawRecord = dict[str, Any]
Migration = Callable[[RawRecord], RawRecord]


def _defaults(raw: RawRecord, **defaults: Any) -> RawRecord:
    """Return a copy of raw with defaults applied for absent keys only."""
    result = dict(defaults)
    result.update(raw)
    return result


def _backfill_updated_at(record: RawRecord) -> RawRecord:
    if "updatedAt" not in record and "createdAt" in record:
        record["updatedAt"] = record["createdAt"]
    return record


def migrate_settings(raw: RawRecord) -> RawRecord:
    return _defaults(raw, numSongs=3)


def migrate_message(raw: RawRecord) -> RawRecord:
    return _backfill_updated_at(_defaults(raw, deleted=False, parentId=None))


def migrate_artifact(raw: RawRecord) -> RawRecord:
    return _defaults(raw, pinned=False, deleted=False)


def migrate_image_session(raw: RawRecord) -> RawRecord:
    record = _defaults(raw, deleted=False)
    if "prompt" not in record:
        record["prompt"] = record.get("title", "")
    return _backfill_updated_at(record)


def migrate_image_settings(raw: RawRecord) -> RawRecord:
    return _defaults(raw, imagesPerModel=3)


def _require(value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind):
        raise ValueError(f"{what} must be a {kind.__name__}, got {type(value).__name__}")
    return value


def migrate_script(raw: RawRecord) -> RawRecord:
    """
    Backfill script settings, shot fields and templates.

    Shots inherit the script's subtitle setting when they have none. Shots
    written by the browser-era editor keep their selected clip under
    ``video.selectedUrl``; that value is surfaced as ``selectedUrl``.

    Raises:
        ValueError: If settings, shots or templates have the wrong shape
    """
    record = _backfill_updated_at(_defaults(copy.deepcopy(raw), deleted=False))

    settings = _defaults(
        _require(record.get("settings") or {}, dict, "settings"),
        narrationEnabled=False,
        globalPrompt="",
        subtitles=False,
        defaultAudio="video",
    )
    record["settings"] = settings

    shots = []
    for shot in _require(record.get("shots") or [], list, "shots"):
        _require(shot, dict, "shot")
        migrated = _defaults(
            shot,
            subtitles=settings["subtitles"],
            duration=DEFAULT_SHOT_DURATION,
        )
        legacy_video = shot.get("video")
        if "selectedUrl" not in migrated and isinstance(legacy_video, dict):
            migrated["selectedUrl"] = legacy_video.get("selectedUrl")
        shots.append(migrated)
    record["shots"] = shots

    templates = {}
    for key, template in _require(record.get("templates") or {}, dict, "templates").items():
        _require(template, dict, f"template '{key}'")
        templates[key] = {
            "name": template.get("name", key),
            "value": template.get("value", ""),
            "global": False,
        }
    record["templates"] = templates
    return record


def migrate_global_template(raw: RawRecord) -> RawRecord:
    return {"name": raw.get("name"), "value": raw.get("value"), "global": True}


def identity(raw: RawRecord) -> RawRecord:
    return dict(raw)


MIGRATIONS: dict[str, Migration] = {
    "settings": migrate_settings,
    "messages": migrate_message,
    "songs": migrate_artifact,
    "image-sessions": migrate_image_session,
    "image-generations": identity,
    "image-items": migrate_artifact,
    "image-settings": migrate_image_settings,
    "video-scripts": migrate_script,
    "video-global-templates": migrate_global_template,
    "video-clips": migrate_artifact,
}


def migrate_on_read(collection: str, raw: RawRecord) -> RawRecord:
    """
    Bring one raw record up to the current schema.

    Args:
        collection: Collection name the record was read from
        raw: Record exactly as parsed from storage

    Returns:
        A new dict with defaults filled in; raw is left untouched
    """
    return MIGRATIONS.get(collection, identity)(raw)
