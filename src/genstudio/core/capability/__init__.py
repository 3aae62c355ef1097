"""
Generation capabilities.

The orchestrator consumes capabilities only through the
GenerationCapability protocol. Implementations register themselves by name.
"""

from .base import (
    GenerationCapability,
    GenerationResult,
    get_capability,
    list_capabilities,
    register_capability,
)
from .factory import create_capability
from .instrumented import LoggingCapability

# Import implementations to trigger registration
from .mock import MockCapability

__all__ = [
    "GenerationCapability",
    "GenerationResult",
    "LoggingCapability",
    "MockCapability",
    "create_capability",
    "get_capability",
    "list_capabilities",
    "register_capability",
]
