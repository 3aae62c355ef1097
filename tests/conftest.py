"""
Pytest configuration and shared fixtures.

Provides fixtures for in-memory and file-backed stores, sample parent
entities, and isolation of configuration from the developer's machine.
"""

import pytest

from genstudio.core.config import clear_cache
from genstudio.core.image.library import ImageLibrary
from genstudio.core.music.library import MusicLibrary
from genstudio.core.store.events import QuotaEventBus
from genstudio.core.store.medium import FileMedium, MemoryMedium
from genstudio.core.store.service import LocalStore
from genstudio.core.video.library import VideoLibrary

# ==============================================================================
# Environment Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """
    Keep every test away from real user config, .env files and data.

    Points XDG directories into tmp_path, runs the test from an empty
    working directory and clears the config cache on both sides.
    """
    home = tmp_path / "home"
    workdir = tmp_path / "work"
    home.mkdir()
    workdir.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    for var in (
        "GENSTUDIO_DATA_DIR",
        "GENSTUDIO_NAMESPACE",
        "GENSTUDIO_QUOTA_BYTES",
        "GENSTUDIO_STRICT_WRITES",
        "GENSTUDIO_CAPABILITY",
        "GENSTUDIO_MOCK_DELAY",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(workdir)
    clear_cache()
    yield
    clear_cache()


# ==============================================================================
# Store Fixtures
# ==============================================================================


@pytest.fixture
def quota_bus():
    """Provide a fresh quota event bus."""
    return QuotaEventBus()


@pytest.fixture
def quota_events(quota_bus):
    """Record every quota event published on the bus."""
    events: list[bool] = []
    quota_bus.subscribe(lambda: events.append(True))
    return events


@pytest.fixture
def medium():
    """Provide an unlimited in-memory medium."""
    return MemoryMedium()


@pytest.fixture
def store(medium, quota_bus):
    """Provide a LocalStore over an in-memory medium."""
    return LocalStore(medium, quota_bus)


@pytest.fixture
def file_store(tmp_path, quota_bus):
    """Provide a LocalStore over a file medium in a temp directory."""
    return LocalStore(FileMedium(tmp_path / "data"), quota_bus)


# ==============================================================================
# Sample Parents
# ==============================================================================


@pytest.fixture
def music(store):
    return MusicLibrary(store)


@pytest.fixture
def images(store):
    return ImageLibrary(store)


@pytest.fixture
def video(store):
    return VideoLibrary(store)


@pytest.fixture
def lyrics_message(music):
    """An assistant message with full lyrics fields."""
    root = music.create_message("user", "Write a song about the sea")
    return music.create_message(
        "assistant",
        "Here is a song",
        parent_id=root.id,
        title="Tidal",
        style="folk, acoustic",
        commentary="Slow build",
        lyrics_body="Waves on the shore\nCalling once more",
    )


@pytest.fixture
def image_session(images):
    return images.create_session("A lighthouse at dusk, oil painting")


@pytest.fixture
def script_with_shot(video):
    """A script holding one shot; returns (script, shot)."""
    script = video.create_script("Harbor")
    shot = video.add_shot(script.id, "Boats leaving the harbor at {{time}}")
    return video.get_script(script.id), shot
