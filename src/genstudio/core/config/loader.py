"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .env import get_xdg_config_home, resolve_environment
from .models import StudioConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: StudioConfig | None = None


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/genstudio/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "genstudio" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .genstudio.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".genstudio.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`. Nested
    dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 20}})
        {'a': 1, 'b': {'x': 10, 'y': 20}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        # Config system should be resilient to a broken file
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None


def _set_nested(config: dict[str, Any], section: str, key: str, value: Any) -> None:
    config.setdefault(section, {})
    config[section][key] = value


def apply_env_overrides(
    config_dict: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        GENSTUDIO_DATA_DIR - overrides storage.data_dir
        GENSTUDIO_NAMESPACE - overrides storage.namespace
        GENSTUDIO_QUOTA_BYTES - overrides storage.quota_bytes ("0" or "none" disables it)
        GENSTUDIO_STRICT_WRITES - overrides storage.strict_writes
        GENSTUDIO_CAPABILITY - overrides generation.capability
        GENSTUDIO_MOCK_DELAY - overrides generation.mock_delay

    Args:
        config_dict: Configuration dictionary to override
        environ: Variables to read (defaults to os.environ)

    Returns:
        Configuration dictionary with env var overrides applied
    """
    if environ is None:
        environ = os.environ
    result = config_dict.copy()

    if data_dir := environ.get("GENSTUDIO_DATA_DIR"):
        _set_nested(result, "storage", "data_dir", data_dir)

    if namespace := environ.get("GENSTUDIO_NAMESPACE"):
        _set_nested(result, "storage", "namespace", namespace)

    if quota_str := environ.get("GENSTUDIO_QUOTA_BYTES"):
        if quota_str.lower() in ("0", "none"):
            _set_nested(result, "storage", "quota_bytes", None)
        else:
            try:
                _set_nested(result, "storage", "quota_bytes", int(quota_str))
            except ValueError:
                logger.warning(f"Invalid GENSTUDIO_QUOTA_BYTES value '{quota_str}', ignoring")

    if strict_str := environ.get("GENSTUDIO_STRICT_WRITES"):
        _set_nested(
            result, "storage", "strict_writes", strict_str.lower() not in ("false", "0", "")
        )

    if capability := environ.get("GENSTUDIO_CAPABILITY"):
        _set_nested(result, "generation", "capability", capability)

    if delay_str := environ.get("GENSTUDIO_MOCK_DELAY"):
        try:
            _set_nested(result, "generation", "mock_delay", float(delay_str))
        except ValueError:
            logger.warning(f"Invalid GENSTUDIO_MOCK_DELAY value '{delay_str}', ignoring")

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "storage": {"namespace": "genstudio", "strict_writes": False},
        "generation": {"capability": "mock"},
    }


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> StudioConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (GENSTUDIO_*), then the same keys in .env files
        2. Project config (.genstudio.json)
        3. User config (~/.config/genstudio/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .genstudio.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated StudioConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged, resolve_environment(project_dir))

    config = StudioConfig(**merged)
    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
