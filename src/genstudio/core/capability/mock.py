"""
Fixture-based capability for tests and offline use.

Returns canned URLs after a simulated delay. ``fail_next`` makes the next N
calls fail, which is how failed slots (and their retries) are exercised.
"""

import asyncio
import itertools
from typing import Any

from genstudio.core.capability.base import GenerationResult, register_capability
from genstudio.core.errors import GenerationError

DEFAULT_URLS = (
    "https://example.com/genstudio/mock/result-1",
    "https://example.com/genstudio/mock/result-2",
    "https://example.com/genstudio/mock/result-3",
)


@register_capability("mock")
class MockCapability:
    """
    Mock capability cycling round-robin through fixture URLs.

    Example:
        >>> capability = MockCapability(delay=0, fail_next=1)
        >>> await capability.generate("a prompt")
        Traceback (most recent call last):
        ...
        genstudio.core.errors.GenerationError: Mock generation failure
        >>> await capability.generate("a prompt")
        'https://example.com/genstudio/mock/result-1'
    """

    def __init__(
        self,
        delay: float = 0.2,
        urls: tuple[str, ...] | list[str] = DEFAULT_URLS,
        fail_next: int = 0,
    ) -> None:
        if not urls:
            raise ValueError("MockCapability needs at least one URL")
        self.delay = delay
        self.fail_next = fail_next
        self._urls = itertools.cycle(urls)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    @property
    def name(self) -> str:
        return "mock"

    async def generate(self, prompt: str, **params: Any) -> GenerationResult:
        self.calls.append((prompt, params))
        await asyncio.sleep(self.delay)
        if self.fail_next > 0:
            self.fail_next -= 1
            raise GenerationError("Mock generation failure")

        count = params.get("count")
        if count is None:
            return next(self._urls)
        return [next(self._urls) for _ in range(int(count))]
