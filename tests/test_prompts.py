"""Tests for prompt builders."""

from genstudio.core.orchestrator.prompts import build_shot_prompt, build_style_prompt, resolve_templates
from genstudio.core.store.models import GlobalTemplate, Message, MessageRole, utcnow


def _message(**fields) -> Message:
    now = utcnow()
    return Message(id="m1", role=MessageRole.ASSISTANT, created_at=now, updated_at=now, **fields)


class TestBuildStylePrompt:
    """Tests for the song prompt."""

    def test_full_message(self) -> None:
        """Test all parts appear in order."""
        prompt = build_style_prompt(
            _message(title="Dawn", style="folk", commentary="gentle", lyrics_body="la la")
        )
        assert prompt == "Title: Dawn\nStyle: folk\nCommentary: gentle\n\nLyrics:\nla la"

    def test_missing_parts_are_omitted(self) -> None:
        """Test absent fields leave no empty lines."""
        assert build_style_prompt(_message(title="Dawn")) == "Title: Dawn"
        assert build_style_prompt(_message()) == ""


class TestResolveTemplates:
    """Tests for {{name}} substitution."""

    def test_first_scope_wins(self) -> None:
        """Test earlier scopes shadow later ones."""
        assert resolve_templates("{{a}} {{b}}", {"a": "1"}, {"a": "x", "b": "2"}) == "1 2"

    def test_unknown_left_as_is(self) -> None:
        """Test unresolved placeholders stay in the text."""
        assert resolve_templates("{{missing}}", {"a": "1"}) == "{{missing}}"


class TestBuildShotPrompt:
    """Tests for the video prompt."""

    def test_global_prompt_and_templates(self, video, script_with_shot) -> None:
        """Test the global prompt is prepended and templates resolve."""
        script, shot = script_with_shot
        video.update_script(script.id, settings={"global_prompt": "Cinematic, {{time}}"})
        video.set_local_template(script.id, "time", "dusk")
        script = video.get_script(script.id)

        prompt = build_shot_prompt(script, script.get_shot(shot.id), [GlobalTemplate(name="time", value="noon")])
        assert prompt == "Cinematic, dusk\n\nBoats leaving the harbor at dusk"

    def test_global_template_used_without_local(self, script_with_shot) -> None:
        """Test global templates fill in when no local one exists."""
        script, shot = script_with_shot
        prompt = build_shot_prompt(script, shot, [GlobalTemplate(name="time", value="noon")])
        assert prompt == "Boats leaving the harbor at noon"
