"""
Generation capability protocol and registry.

A capability turns a prompt into one or more result URLs. It is a pure
function of its input with no shared state; the orchestrator calls it once
per slot (and once per retry). Timeouts, backoff and provider transport
belong to the capability, not to the orchestrator.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

_T = TypeVar("_T")

GenerationResult = str | list[str]


@runtime_checkable
class GenerationCapability(Protocol):
    """
    Protocol for generation capability implementations.

    Implementations raise GenerationError (or any exception carrying a
    readable message) when a call fails.
    """

    @property
    def name(self) -> str:
        """
        Capability name (e.g., 'mock').

        Returns:
            Lowercase capability identifier
        """
        ...

    async def generate(self, prompt: str, **params: Any) -> GenerationResult:
        """
        Run one generation.

        Args:
            prompt: Text prompt
            **params: Provider-specific parameters (duration, model, ...)

        Returns:
            A result URL, or a list of URLs
        """
        ...


# Capability registry
_capabilities: dict[str, type[GenerationCapability]] = {}


def register_capability(name: str) -> Callable[[type[_T]], type[_T]]:
    """
    Decorator to register a capability implementation.

    Usage:
        @register_capability('mock')
        class MockCapability:
            ...

    Args:
        name: Capability name

    Returns:
        Decorator function
    """

    def decorator(capability_class: type[_T]) -> type[_T]:
        _capabilities[name] = capability_class  # type: ignore[assignment]
        return capability_class

    return decorator


def get_capability(name: str, **kwargs: Any) -> GenerationCapability:
    """
    Instantiate a registered capability.

    Args:
        name: Capability name
        **kwargs: Constructor arguments

    Returns:
        Capability instance

    Raises:
        ValueError: If no capability is registered under that name
    """
    capability_class = _capabilities.get(name)
    if capability_class is None:
        raise ValueError(
            f"Capability '{name}' not registered. "
            f"Available capabilities: {', '.join(_capabilities.keys())}"
        )
    return capability_class(**kwargs)


def list_capabilities() -> list[str]:
    """List all registered capability names."""
    return list(_capabilities.keys())
