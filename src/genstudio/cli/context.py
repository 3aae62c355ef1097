"""
Shared wiring for CLI commands: config, store and capability construction.
"""

from pathlib import Path

from genstudio.cli.errors import print_quota_warning
from genstudio.core.capability.base import GenerationCapability
from genstudio.core.capability.factory import create_capability
from genstudio.core.config.loader import load_config
from genstudio.core.config.models import StudioConfig
from genstudio.core.store.events import QuotaEventBus
from genstudio.core.store.medium import FileMedium
from genstudio.core.store.service import LocalStore


def get_config() -> StudioConfig:
    return load_config()


def open_store(config: StudioConfig | None = None, data_dir: Path | None = None) -> LocalStore:
    """
    Open the file-backed store described by the config.

    A console warning is printed every time a write is dropped for capacity.

    Args:
        config: Configuration (loaded from disk if None)
        data_dir: Override for config.storage.data_dir

    Returns:
        A LocalStore writing one file per collection under the data dir
    """
    if config is None:
        config = get_config()
    storage = config.storage
    medium = FileMedium(data_dir or storage.data_dir, quota_bytes=storage.quota_bytes)
    bus = QuotaEventBus()
    bus.subscribe(print_quota_warning)
    return LocalStore(medium, bus, namespace=storage.namespace, strict=storage.strict_writes)


def open_capability(store: LocalStore, config: StudioConfig | None = None) -> GenerationCapability:
    """Build the configured capability using the stored Settings for credentials."""
    if config is None:
        config = get_config()
    return create_capability(config, store.get_settings("settings"))
