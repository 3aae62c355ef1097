"""Tests for read-side migration of legacy records."""

import json

from genstudio.core.store.migrations import MIGRATIONS, migrate_on_read
from genstudio.core.store.models import DEFAULT_SHOT_DURATION
from genstudio.core.store.schema import COLLECTIONS

LEGACY_SCRIPT = {
    "id": "sc1",
    "title": "Old script",
    "createdAt": "2024-03-01T09:00:00Z",
    "settings": {"subtitles": True},
    "shots": [
        {"id": "sh1", "title": "One", "prompt": "a {{place}}", "video": {"selectedUrl": "https://v/1"}},
        {"id": "sh2", "title": "Two", "prompt": "b", "subtitles": False, "duration": 4},
    ],
    "templates": {"place": {"name": "place", "value": "harbor", "category": "location"}},
}


class TestMigrateOnRead:
    """Tests for individual migrations."""

    def test_every_collection_has_a_migration(self) -> None:
        """Test the migration table covers the schema."""
        assert set(MIGRATIONS) == set(COLLECTIONS)

    def test_present_fields_are_never_changed(self) -> None:
        """Test migrations only add absent fields."""
        raw = {"numSongs": 7, "poeApiKey": "k"}
        assert migrate_on_read("settings", raw) == raw

    def test_input_is_not_mutated(self) -> None:
        """Test the raw dict is left untouched."""
        raw = json.loads(json.dumps(LEGACY_SCRIPT))
        migrate_on_read("video-scripts", raw)
        assert raw == LEGACY_SCRIPT

    def test_settings_defaults(self) -> None:
        """Test numSongs is backfilled."""
        assert migrate_on_read("settings", {"poeApiKey": ""})["numSongs"] == 3

    def test_message_backfills_updated_at(self) -> None:
        """Test messages written before updatedAt existed."""
        migrated = migrate_on_read("messages", {"id": "m", "role": "user", "createdAt": "2024-01-01T00:00:00Z"})
        assert migrated["updatedAt"] == "2024-01-01T00:00:00Z"
        assert migrated["deleted"] is False
        assert migrated["parentId"] is None

    def test_artifact_flags(self) -> None:
        """Test pinned and deleted default to False."""
        migrated = migrate_on_read("image-items", {"id": "i"})
        assert migrated["pinned"] is False
        assert migrated["deleted"] is False

    def test_image_session_prompt_from_title(self) -> None:
        """Test sessions without a prompt reuse their title."""
        migrated = migrate_on_read("image-sessions", {"id": "s", "title": "A cat"})
        assert migrated["prompt"] == "A cat"

    def test_script_settings_and_shots(self) -> None:
        """Test script settings and shot fields are backfilled."""
        migrated = migrate_on_read("video-scripts", LEGACY_SCRIPT)
        settings = migrated["settings"]
        assert settings["subtitles"] is True
        assert settings["narrationEnabled"] is False
        assert settings["globalPrompt"] == ""
        assert settings["defaultAudio"] == "video"

        first, second = migrated["shots"]
        assert first["subtitles"] is True
        assert first["duration"] == DEFAULT_SHOT_DURATION
        assert first["selectedUrl"] == "https://v/1"
        assert second["subtitles"] is False
        assert second["duration"] == 4

    def test_script_templates_drop_category(self) -> None:
        """Test legacy template categories are removed from the typed view."""
        migrated = migrate_on_read("video-scripts", LEGACY_SCRIPT)
        assert migrated["templates"]["place"] == {"name": "place", "value": "harbor", "global": False}

    def test_global_template(self) -> None:
        """Test global templates gain the global flag."""
        migrated = migrate_on_read("video-global-templates", {"name": "mood", "value": "calm", "category": "x"})
        assert migrated == {"name": "mood", "value": "calm", "global": True}


class TestStoredBytesUnchanged:
    """Reading legacy data must never rewrite it."""

    def test_reads_do_not_rewrite_storage(self, store, medium) -> None:
        """Test stored bytes are identical before and after typed reads."""
        payload = json.dumps([LEGACY_SCRIPT])
        medium.set_item("genstudio:video-scripts", payload)

        scripts = store.list("video-scripts")
        store.export()

        assert medium.get_item("genstudio:video-scripts") == payload
        script = scripts[0]
        assert script.updated_at == script.created_at
        assert script.shots[0].selected_url == "https://v/1"
        assert script.templates["place"].value == "harbor"

    def test_export_shows_migrated_view(self, store, medium) -> None:
        """Test exports carry the fully populated records."""
        medium.set_item(
            "genstudio:songs",
            json.dumps([{"id": "s", "messageId": "m", "title": "t", "audioUrl": "u", "createdAt": "2024-01-01T00:00:00Z"}]),
        )
        exported = store.export(["songs"])["songs"][0]
        assert exported["pinned"] is False
        assert exported["deleted"] is False
