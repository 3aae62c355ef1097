"""Tests for the music, image and video domain libraries."""

import time

from genstudio.core.store.models import ImageSettings, Settings


class TestMusicLibrary:
    """Tests for the lyrics tree and songs."""

    def test_ancestors_root_first(self, music) -> None:
        """Test the path runs from root to the message."""
        root = music.create_message("user", "start")
        reply = music.create_message("assistant", parent_id=root.id, title="A")
        follow = music.create_message("user", "again", parent_id=reply.id)
        assert [m.id for m in music.get_ancestors(follow.id)] == [root.id, reply.id, follow.id]

    def test_ancestors_unknown_message(self, music) -> None:
        """Test an unknown id gives an empty path."""
        assert music.get_ancestors("missing") == []

    def test_ancestors_stop_at_cycle(self, store, music) -> None:
        """Test corrupt parent links do not loop forever."""
        a = music.create_message("user", "a")
        b = music.create_message("user", "b", parent_id=a.id)
        store.update("messages", a.id, {"parent_id": b.id})
        path = music.get_ancestors(b.id)
        assert {m.id for m in path} == {a.id, b.id}

    def test_latest_leaf(self, music) -> None:
        """Test the newest leaf below a message is found."""
        root = music.create_message("user", "root")
        older = music.create_message("assistant", parent_id=root.id)
        time.sleep(0.002)
        branch = music.create_message("assistant", parent_id=root.id)
        time.sleep(0.002)
        newest = music.create_message("user", parent_id=branch.id)
        assert music.get_latest_leaf(root.id).id == newest.id
        assert music.get_latest_leaf(older.id).id == older.id
        assert music.get_latest_leaf("missing") is None

    def test_songs_for_message_and_pins(self, store, music, lyrics_message) -> None:
        """Test song queries, pinning and deletion."""
        song = store.create("songs", {"message_id": lyrics_message.id, "title": "t", "audio_url": "u"})
        store.create("songs", {"message_id": "other", "title": "t", "audio_url": "u"})
        assert [s.id for s in music.songs_for_message(lyrics_message.id)] == [song.id]

        assert music.pin_song(song.id) is True
        assert [s.id for s in music.pinned_songs()] == [song.id]
        assert music.pin_song("missing") is False

        assert music.delete_song(song.id) is True
        assert music.songs_for_message(lyrics_message.id) == []
        assert len(music.songs_for_message(lyrics_message.id, include_deleted=True)) == 1

    def test_settings_default(self, store, music) -> None:
        """Test defaults apply until settings are saved."""
        assert music.get_settings() == Settings()
        store.save_settings(Settings(num_songs=6))
        assert music.get_settings().num_songs == 6


class TestImageLibrary:
    """Tests for sessions, prompt steps and items."""

    def test_session_title_is_truncated_prompt(self, images) -> None:
        """Test the title is derived from the prompt."""
        session = images.create_session("x" * 100)
        assert session.title == "x" * 60
        assert session.prompt == "x" * 100

    def test_step_ids_increase_per_session(self, images) -> None:
        """Test step numbers count up independently per session."""
        a = images.create_session("a")
        b = images.create_session("b")
        steps_a = [images.create_generation(a.id, f"p{i}").step_id for i in range(3)]
        step_b = images.create_generation(b.id, "q").step_id
        assert steps_a == [1, 2, 3]
        assert step_b == 1
        assert [g.step_id for g in images.generations_for_session(a.id)] == [1, 2, 3]

    def test_items_for_session(self, store, images, image_session) -> None:
        """Test items are grouped by their generation's session."""
        generation = images.create_generation(image_session.id, "p")
        item = store.create("image-items", {"generation_id": generation.id, "url": "u"})
        store.create("image-items", {"generation_id": "elsewhere", "url": "u"})
        assert [i.id for i in images.items_for_session(image_session.id)] == [item.id]
        assert [i.id for i in images.items_for_generation(generation.id)] == [item.id]

    def test_list_sessions_newest_first(self, images) -> None:
        """Test sessions are ordered by creation, newest first."""
        first = images.create_session("first")
        time.sleep(0.002)
        second = images.create_session("second")
        assert [s.id for s in images.list_sessions()] == [second.id, first.id]
        images.delete_session(second.id)
        assert [s.id for s in images.list_sessions()] == [first.id]

    def test_settings_default(self, images) -> None:
        """Test image settings defaults."""
        assert images.get_settings() == ImageSettings()


class TestVideoLibrary:
    """Tests for scripts, shots, templates and clips."""

    def test_shot_inherits_script_settings(self, video) -> None:
        """Test new shots copy subtitle and narration settings."""
        script = video.create_script("S")
        video.update_script(
            script.id,
            settings={"subtitles": True, "narration_enabled": True, "default_audio": "elevenlabs"},
        )
        shot = video.add_shot(script.id, "prompt")
        assert shot.subtitles is True
        assert shot.narration.enabled is True
        assert shot.narration.audio_source.value == "elevenlabs"
        assert shot.title == "Shot 1"
        assert video.get_script(script.id).shots[0].id == shot.id

    def test_add_shot_unknown_script(self, video) -> None:
        """Test adding to a missing script returns None."""
        assert video.add_shot("missing", "p") is None

    def test_global_template_upsert_and_delete(self, video) -> None:
        """Test creating twice replaces, and delete removes."""
        video.create_global_template("mood", "calm")
        video.create_global_template("mood", "tense")
        assert [(t.name, t.value) for t in video.list_global_templates()] == [("mood", "tense")]
        assert video.update_global_template("mood", "dark").value == "dark"
        assert video.delete_global_template("mood") is True
        assert video.delete_global_template("mood") is False
        assert video.list_global_templates() == []

    def test_local_template(self, video, script_with_shot) -> None:
        """Test templates stored on a script."""
        script, _ = script_with_shot
        updated = video.set_local_template(script.id, "time", "dawn")
        assert updated.templates["time"].value == "dawn"
        assert video.set_local_template("missing", "time", "dawn") is None

    def test_template_usage(self, video) -> None:
        """Test usage reports 1-based shot indices and the all-shots flag."""
        s1 = video.create_script("One")
        video.add_shot(s1.id, "a {{mood}} scene")
        video.add_shot(s1.id, "plain")
        video.add_shot(s1.id, "more {{mood}}")
        s2 = video.create_script("Two")
        video.add_shot(s2.id, "{{mood}}")
        s3 = video.create_script("Three")
        video.add_shot(s3.id, "{{ mood }}")

        usage = {u.script_id: u for u in video.template_usage("mood")}
        assert usage[s1.id].shot_indices == [1, 3]
        assert usage[s1.id].all_shots is False
        assert usage[s2.id].all_shots is True
        assert s3.id not in usage

    def test_select_clip(self, store, video, script_with_shot) -> None:
        """Test choosing a clip for a shot."""
        script, shot = script_with_shot
        clip = store.create("video-clips", {"script_id": script.id, "shot_id": shot.id, "url": "https://v/c"})
        updated = video.select_clip(script.id, shot.id, clip.url)
        assert updated.get_shot(shot.id).selected_url == "https://v/c"
        assert video.select_clip(script.id, "missing", clip.url) is None
        assert [c.id for c in video.clips_for_shot(shot.id)] == [clip.id]

    def test_delete_script_is_soft(self, video) -> None:
        """Test deleted scripts leave listings but remain readable."""
        script = video.create_script("gone")
        assert video.delete_script(script.id) is True
        assert video.list_scripts() == []
        assert video.get_script(script.id).deleted is True
