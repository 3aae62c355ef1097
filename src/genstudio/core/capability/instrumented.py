"""
Logging decorator for capabilities.

Wraps any capability and logs every call's start, completion and failure,
so individual call sites need no instrumentation of their own.
"""

import logging
import time
from typing import Any

from genstudio.core.capability.base import GenerationCapability, GenerationResult

logger = logging.getLogger(__name__)


class LoggingCapability:
    """Capability decorator that logs each generate() call."""

    def __init__(self, inner: GenerationCapability) -> None:
        self.inner = inner

    @property
    def name(self) -> str:
        return self.inner.name

    async def generate(self, prompt: str, **params: Any) -> GenerationResult:
        logger.debug(f"{self.name}: generate start ({len(prompt)} chars, params={params})")
        started = time.monotonic()
        try:
            result = await self.inner.generate(prompt, **params)
        except Exception as e:
            logger.warning(f"{self.name}: generate failed after {time.monotonic() - started:.2f}s: {e}")
            raise
        logger.info(f"{self.name}: generate complete in {time.monotonic() - started:.2f}s")
        return result
