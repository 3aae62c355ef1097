"""Tests for generation capabilities, the registry and the factory."""

import logging

import pytest

from genstudio.core.capability import (
    GenerationCapability,
    LoggingCapability,
    MockCapability,
    create_capability,
    get_capability,
    list_capabilities,
    register_capability,
)
from genstudio.core.capability.mock import DEFAULT_URLS
from genstudio.core.config.models import GenerationConfig, StudioConfig
from genstudio.core.errors import GenerationError, MissingApiKeyError
from genstudio.core.store.models import Settings


class TestMockCapability:
    """Tests for the mock capability."""

    @pytest.mark.asyncio
    async def test_round_robin_urls(self) -> None:
        """Test results cycle through the fixture URLs."""
        capability = MockCapability(delay=0)
        results = [await capability.generate("p") for _ in range(4)]
        assert results == [*DEFAULT_URLS, DEFAULT_URLS[0]]

    @pytest.mark.asyncio
    async def test_count_returns_list(self) -> None:
        """Test the count parameter asks for several URLs."""
        capability = MockCapability(delay=0, urls=["a", "b"])
        assert await capability.generate("p", count=3) == ["a", "b", "a"]

    @pytest.mark.asyncio
    async def test_fail_next(self) -> None:
        """Test scheduled failures then recovery."""
        capability = MockCapability(delay=0, fail_next=1)
        with pytest.raises(GenerationError, match="Mock generation failure"):
            await capability.generate("p")
        assert await capability.generate("p") == DEFAULT_URLS[0]
        assert len(capability.calls) == 2

    def test_requires_urls(self) -> None:
        """Test an empty URL list is rejected."""
        with pytest.raises(ValueError):
            MockCapability(urls=[])

    def test_satisfies_protocol(self) -> None:
        """Test the mock is a GenerationCapability."""
        assert isinstance(MockCapability(), GenerationCapability)


class TestRegistry:
    """Tests for capability registration."""

    def test_mock_registered(self) -> None:
        """Test the mock registers itself on import."""
        assert "mock" in list_capabilities()
        assert isinstance(get_capability("mock", delay=0), MockCapability)

    def test_unknown_capability(self) -> None:
        """Test unknown names raise ValueError."""
        with pytest.raises(ValueError, match="not registered"):
            get_capability("does-not-exist")

    def test_register_custom(self) -> None:
        """Test third-party capabilities can register."""

        @register_capability("echo-test")
        class EchoCapability:
            def __init__(self, api_key: str = "") -> None:
                self.api_key = api_key

            @property
            def name(self) -> str:
                return "echo-test"

            async def generate(self, prompt: str, **params):
                return f"https://echo/{prompt}"

        assert isinstance(get_capability("echo-test", api_key="k"), EchoCapability)


class TestLoggingCapability:
    """Tests for the logging wrapper."""

    @pytest.mark.asyncio
    async def test_passes_result_through(self, caplog) -> None:
        """Test results are returned unchanged and completion is logged."""
        capability = LoggingCapability(MockCapability(delay=0))
        with caplog.at_level(logging.INFO):
            assert await capability.generate("p") == DEFAULT_URLS[0]
        assert capability.name == "mock"
        assert "generate complete" in caplog.text

    @pytest.mark.asyncio
    async def test_failure_logged_and_reraised(self, caplog) -> None:
        """Test failures are logged at warning level and propagate."""
        capability = LoggingCapability(MockCapability(delay=0, fail_next=1))
        with caplog.at_level(logging.WARNING):
            with pytest.raises(GenerationError):
                await capability.generate("p")
        assert "generate failed" in caplog.text


class TestCreateCapability:
    """Tests for building the configured capability."""

    def test_mock_needs_no_key(self) -> None:
        """Test the mock is built from config alone."""
        config = StudioConfig(generation=GenerationConfig(mock_delay=0))
        capability = create_capability(config)
        assert isinstance(capability, LoggingCapability)
        assert capability.inner.delay == 0

    def test_provider_requires_api_key(self) -> None:
        """Test a provider capability without a key is refused."""
        config = StudioConfig(generation=GenerationConfig(capability="provider"))
        with pytest.raises(MissingApiKeyError):
            create_capability(config, Settings())
        with pytest.raises(MissingApiKeyError):
            create_capability(config, None)

    def test_provider_receives_api_key(self) -> None:
        """Test the stored key is passed to the capability."""

        @register_capability("keyed-test")
        class KeyedCapability:
            def __init__(self, api_key: str) -> None:
                self.api_key = api_key

            @property
            def name(self) -> str:
                return "keyed-test"

            async def generate(self, prompt: str, **params):
                return "u"

        config = StudioConfig(generation=GenerationConfig(capability="keyed-test"))
        capability = create_capability(config, Settings(poe_api_key="secret"))
        assert capability.inner.api_key == "secret"
