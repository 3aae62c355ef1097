"""
Configuration models and loading.

Pydantic models for genstudio configuration with multi-layer merging:
defaults < user < project < env vars (GENSTUDIO_* from the process or .env files).
"""

from .env import get_xdg_config_home, read_env_settings, resolve_environment
from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    load_config,
)
from .models import GenerationConfig, StorageConfig, StudioConfig

__all__ = [
    # Models
    "GenerationConfig",
    "StorageConfig",
    "StudioConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    # .env settings
    "read_env_settings",
    "resolve_environment",
]
