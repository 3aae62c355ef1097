"""
Configuration data models for genstudio.

These models define the structure of .genstudio.json and
~/.config/genstudio/config.json files, validated via Pydantic.

Application configuration (where data lives, which capability to call) is
separate from the user Settings record kept inside the store.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Roughly the per-origin localStorage budget of a desktop browser
DEFAULT_QUOTA_BYTES = 5_000_000


def get_xdg_data_home() -> Path:
    if xdg_home := os.environ.get("XDG_DATA_HOME"):
        return Path(xdg_home)
    return Path.home() / ".local" / "share"


def default_data_dir() -> Path:
    return get_xdg_data_home() / "genstudio"


class StorageConfig(BaseModel):
    """Where and how the local store persists data."""

    data_dir: Path = Field(
        default_factory=default_data_dir,
        description="Directory holding one file per storage key",
    )
    namespace: str = Field(
        default="genstudio",
        min_length=1,
        description="Prefix for every storage key",
    )
    quota_bytes: Optional[int] = Field(
        default=DEFAULT_QUOTA_BYTES,
        ge=1,
        description="Capacity limit across all keys (None disables it)",
    )
    strict_writes: bool = Field(
        default=False,
        description="Raise instead of silently dropping writes that exceed the quota",
    )

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if ":" in v:
            raise ValueError("namespace must not contain ':'")
        return v


class GenerationConfig(BaseModel):
    """Which capability runs generations and how."""

    capability: str = Field(
        default="mock",
        description="Registered capability name",
    )
    mock_delay: float = Field(
        default=0.2,
        ge=0.0,
        description="Simulated latency of the mock capability in seconds",
    )


class StudioConfig(BaseModel):
    """
    Top-level genstudio configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = StudioConfig(storage=StorageConfig(quota_bytes=None))
        >>> config.generation.capability
        'mock'
    """

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Local store settings",
    )
    generation: GenerationConfig = Field(
        default_factory=GenerationConfig,
        description="Generation capability settings",
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
    )
