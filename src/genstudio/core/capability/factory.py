"""
Capability construction from configuration.
"""

from genstudio.core.capability.base import GenerationCapability, get_capability
from genstudio.core.capability.instrumented import LoggingCapability
from genstudio.core.config.models import StudioConfig
from genstudio.core.errors import MissingApiKeyError
from genstudio.core.store.models import Settings


def create_capability(
    config: StudioConfig,
    settings: Settings | None = None,
) -> GenerationCapability:
    """
    Build the configured capability, wrapped for logging.

    The mock capability needs no credentials. Any other capability is
    constructed with the API key from the user's Settings record.

    Args:
        config: Application configuration
        settings: Stored user settings (may be None if never saved)

    Returns:
        A LoggingCapability around the configured implementation

    Raises:
        MissingApiKeyError: If a provider capability is selected without a key
        ValueError: If the capability name is not registered
    """
    name = config.generation.capability
    if name == "mock":
        inner = get_capability("mock", delay=config.generation.mock_delay)
    else:
        api_key = settings.poe_api_key if settings is not None else ""
        if not api_key:
            raise MissingApiKeyError(name)
        inner = get_capability(name, api_key=api_key)
    return LoggingCapability(inner)
