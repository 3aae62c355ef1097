"""
GENSTUDIO_* settings read from .env files.

Any setting that can come from the process environment may also live in a
.env file, either per user (``~/.config/genstudio/.env``) or per project
(``.env`` and ``.env.local`` next to ``.genstudio.json``). Only keys with
the ``GENSTUDIO_`` prefix are read; everything else in those files belongs
to other tools and is ignored. Nothing is written to ``os.environ``.

Precedence (highest first):
    process environment > .env.local > project .env > user .env
"""

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_PREFIX = "GENSTUDIO_"


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_env_path() -> Path:
    return get_xdg_config_home() / "genstudio" / ".env"


def get_project_env_paths(project_dir: Path | None = None) -> list[Path]:
    """Project .env files, lowest precedence first."""
    base = project_dir if project_dir is not None else Path.cwd()
    return [base / ".env", base / ".env.local"]


def read_env_settings(paths: Iterable[Path]) -> dict[str, str]:
    """
    Collect GENSTUDIO_* values from .env files.

    Later paths win over earlier ones. Missing files are skipped, and keys
    declared without a value (``GENSTUDIO_X`` alone on a line) are ignored.

    Args:
        paths: .env files, lowest precedence first

    Returns:
        Mapping of GENSTUDIO_* variable names to values
    """
    settings: dict[str, str] = {}
    for path in paths:
        if not path.is_file():
            continue
        found = {
            key: value
            for key, value in dotenv_values(path).items()
            if key.startswith(ENV_PREFIX) and value is not None
        }
        if found:
            logger.debug(f"Loaded {', '.join(sorted(found))} from {path}")
        settings.update(found)
    return settings


def resolve_environment(
    project_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Build the GENSTUDIO_* view used for config overrides.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)
        environ: Process environment (defaults to os.environ)

    Returns:
        .env values overlaid by the process environment
    """
    if environ is None:
        environ = os.environ
    resolved = read_env_settings([get_user_env_path(), *get_project_env_paths(project_dir)])
    resolved.update({k: v for k, v in environ.items() if k.startswith(ENV_PREFIX)})
    return resolved
