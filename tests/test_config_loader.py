"""
Unit tests for configuration loading.

Tests multi-layer config merging, environment variable overrides, caching,
validation and layered .env loading.
"""

import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from genstudio.core.config import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
    read_env_settings,
    resolve_environment,
)
from genstudio.core.config.loader import apply_env_overrides, deep_merge, load_json_file
from genstudio.core.config.models import DEFAULT_QUOTA_BYTES, StorageConfig, StudioConfig


class TestDeepMerge:
    """Test the deep_merge helper function."""

    def test_nested_merge(self) -> None:
        """Test merging nested dicts."""
        base = {"a": 1, "b": {"x": 10, "y": 20}}
        override = {"b": {"y": 30, "z": 40}, "c": 3}
        assert deep_merge(base, override) == {"a": 1, "b": {"x": 10, "y": 30, "z": 40}, "c": 3}

    def test_override_replaces_non_dict(self) -> None:
        """Test that non-dict values are replaced, not merged."""
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}


class TestLoadJsonFile:
    """Test JSON file loading."""

    def test_missing_file(self, tmp_path) -> None:
        """Test a missing file returns None."""
        assert load_json_file(tmp_path / "nope.json") is None

    def test_invalid_json_logs_warning(self, tmp_path, caplog) -> None:
        """Test invalid JSON returns None and logs a warning."""
        path = tmp_path / "bad.json"
        path.write_text("{ invalid")
        assert load_json_file(path) is None
        assert "Failed to parse config" in caplog.text

    def test_non_object_is_ignored(self, tmp_path) -> None:
        """Test a JSON list is not treated as config."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        assert load_json_file(path) is None


class TestApplyEnvOverrides:
    """Test environment variable override logic."""

    def test_storage_overrides(self, monkeypatch) -> None:
        """Test GENSTUDIO_* storage variables."""
        monkeypatch.setenv("GENSTUDIO_DATA_DIR", "/tmp/gs")
        monkeypatch.setenv("GENSTUDIO_NAMESPACE", "demo")
        monkeypatch.setenv("GENSTUDIO_QUOTA_BYTES", "1000")
        monkeypatch.setenv("GENSTUDIO_STRICT_WRITES", "true")
        result = apply_env_overrides({})
        assert result["storage"] == {
            "data_dir": "/tmp/gs",
            "namespace": "demo",
            "quota_bytes": 1000,
            "strict_writes": True,
        }

    @pytest.mark.parametrize("value", ["0", "none", "NONE"])
    def test_quota_can_be_disabled(self, monkeypatch, value) -> None:
        """Test the quota is removed by '0' or 'none'."""
        monkeypatch.setenv("GENSTUDIO_QUOTA_BYTES", value)
        assert apply_env_overrides({})["storage"]["quota_bytes"] is None

    def test_invalid_numbers_are_ignored(self, monkeypatch, caplog) -> None:
        """Test bad numeric values are logged and skipped."""
        monkeypatch.setenv("GENSTUDIO_QUOTA_BYTES", "lots")
        monkeypatch.setenv("GENSTUDIO_MOCK_DELAY", "slow")
        assert apply_env_overrides({}) == {}
        assert "GENSTUDIO_QUOTA_BYTES" in caplog.text

    def test_generation_overrides(self, monkeypatch) -> None:
        """Test GENSTUDIO_* generation variables."""
        monkeypatch.setenv("GENSTUDIO_CAPABILITY", "provider")
        monkeypatch.setenv("GENSTUDIO_MOCK_DELAY", "0.5")
        result = apply_env_overrides({})
        assert result["generation"] == {"capability": "provider", "mock_delay": 0.5}


class TestLoadConfig:
    """Test the full precedence chain."""

    def test_defaults(self) -> None:
        """Test defaults apply with no files or env."""
        config = load_config(use_cache=False)
        assert config.storage.namespace == "genstudio"
        assert config.storage.quota_bytes == DEFAULT_QUOTA_BYTES
        assert config.generation.capability == "mock"
        assert config.storage.data_dir == Path(os.environ["XDG_DATA_HOME"]) / "genstudio"

    def test_precedence(self, monkeypatch) -> None:
        """Test env > project > user > defaults."""
        user_path = get_user_config_path()
        user_path.parent.mkdir(parents=True)
        user_path.write_text(json.dumps({"storage": {"namespace": "user", "strict_writes": True}}))
        get_project_config_path().write_text(json.dumps({"storage": {"namespace": "project"}}))

        config = load_config(use_cache=False)
        assert config.storage.namespace == "project"
        assert config.storage.strict_writes is True

        monkeypatch.setenv("GENSTUDIO_NAMESPACE", "env")
        assert load_config(use_cache=False).storage.namespace == "env"

    def test_cache(self) -> None:
        """Test the cached config is reused until cleared."""
        first = load_config()
        assert load_config() is first
        clear_cache()
        assert load_config() is not first

    def test_invalid_namespace_rejected(self) -> None:
        """Test namespaces cannot contain the key separator."""
        with pytest.raises(ValidationError):
            StorageConfig(namespace="a:b")

    def test_extra_fields_allowed(self) -> None:
        """Test unknown top-level keys are kept for forward compatibility."""
        config = StudioConfig(**{"future": {"x": 1}})
        assert config.model_extra == {"future": {"x": 1}}


class TestEnvFiles:
    """Test GENSTUDIO_* settings read from .env files."""

    def test_later_files_win_and_other_keys_ignored(self, tmp_path) -> None:
        """Test precedence between files and the GENSTUDIO_ prefix filter."""
        user_env = tmp_path / "user.env"
        project_env = tmp_path / "project.env"
        user_env.write_text("GENSTUDIO_NAMESPACE=user\nGENSTUDIO_CAPABILITY=user\nOTHER=1\n")
        project_env.write_text("GENSTUDIO_NAMESPACE=project\nGENSTUDIO_MOCK_DELAY\n")

        settings = read_env_settings([user_env, tmp_path / "missing.env", project_env])

        assert settings == {"GENSTUDIO_NAMESPACE": "project", "GENSTUDIO_CAPABILITY": "user"}

    def test_process_env_wins_over_files(self) -> None:
        """Test OS env > .env.local > project .env > user .env."""
        user_dir = Path(os.environ["XDG_CONFIG_HOME"]) / "genstudio"
        user_dir.mkdir(parents=True)
        (user_dir / ".env").write_text(
            "GENSTUDIO_NAMESPACE=user\nGENSTUDIO_CAPABILITY=user\nGENSTUDIO_MOCK_DELAY=9\n"
        )
        Path(".env").write_text("GENSTUDIO_NAMESPACE=project\nGENSTUDIO_MOCK_DELAY=1\n")
        Path(".env.local").write_text("GENSTUDIO_MOCK_DELAY=2\n")

        resolved = resolve_environment(environ={"GENSTUDIO_CAPABILITY": "os", "PATH": "/bin"})

        assert resolved == {
            "GENSTUDIO_NAMESPACE": "project",
            "GENSTUDIO_CAPABILITY": "os",
            "GENSTUDIO_MOCK_DELAY": "2",
        }

    def test_load_config_reads_project_env(self, monkeypatch) -> None:
        """Test .env values reach the config without touching os.environ."""
        Path(".env").write_text("GENSTUDIO_NAMESPACE=fromfile\nGENSTUDIO_QUOTA_BYTES=none\n")

        config = load_config(use_cache=False)

        assert config.storage.namespace == "fromfile"
        assert config.storage.quota_bytes is None
        assert "GENSTUDIO_NAMESPACE" not in os.environ

        monkeypatch.setenv("GENSTUDIO_NAMESPACE", "shell")
        assert load_config(use_cache=False).storage.namespace == "shell"

    def test_env_file_for_other_project_dir(self, tmp_path) -> None:
        """Test the project .env follows the project_dir passed to load_config."""
        project = tmp_path / "elsewhere"
        project.mkdir()
        (project / ".env").write_text("GENSTUDIO_CAPABILITY=provider\n")

        assert load_config(project, use_cache=False).generation.capability == "provider"
        assert load_config(use_cache=False).generation.capability == "mock"
