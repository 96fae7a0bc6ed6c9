# tests/unit/test_provider_factory.py
"""Unit tests for LLM provider selection and fallback."""

from unittest.mock import AsyncMock

import pytest

from newsdigest.integrations.openai_client import OpenAIClient
from newsdigest.integrations.provider_factory import (
    PROVIDER_BASE_URLS,
    FallbackLLMClient,
    LLMProvider,
    ProviderFactory,
    parse_candidates,
)
from newsdigest.utils.exceptions import AIServiceError, RateLimitError


def fake_client(label, reply=None, error=None):
    client = AsyncMock()
    client.label = label
    client.complete = AsyncMock(return_value=reply, side_effect=error)
    return client


@pytest.mark.unit
class TestParseCandidates:
    """Tests for parse_candidates."""

    def test_pairs(self):
        """Should split provider from model at the first colon."""
        assert parse_candidates("openai:gpt-4o, zai:glm-4.7,ollama:llama3:8b") == [
            ("openai", "gpt-4o"),
            ("zai", "glm-4.7"),
            ("ollama", "llama3:8b"),
        ]

    def test_drops_incomplete(self):
        """Should skip entries missing a provider or model."""
        assert parse_candidates("openai,:gpt-4o,google:") == []
        assert parse_candidates(None) == []


@pytest.mark.unit
class TestProviderFactory:
    """Tests for ProviderFactory."""

    def test_candidate_chain_starts_with_primary(self, test_config):
        """Should put the primary model first and drop repeats."""
        config = test_config.model_copy(
            update={"llm_provider": "openai", "llm_model": "gpt-4o", "llm_candidates": "openai:gpt-4o,zai:glm-4.7"}
        )

        assert ProviderFactory(config).candidate_chain() == [("openai", "gpt-4o"), ("zai", "glm-4.7")]

    def test_missing_key_gives_no_client(self, test_config):
        """Should skip providers without credentials."""
        factory = ProviderFactory(test_config)

        assert factory.create_client("openai", "gpt-4o") is None
        assert factory.create_client("unknown", "model") is None

    def test_deepseek_model_uses_deepseek_endpoint(self, test_config):
        """Should route deepseek-* models to DeepSeek."""
        config = test_config.model_copy(update={"deepseek_api_key": "ds-key"})

        client = ProviderFactory(config).create_client("openai", "deepseek-chat")

        assert isinstance(client, OpenAIClient)
        assert client.label == "openai:deepseek-chat"
        assert str(client.client.base_url).startswith("https://api.deepseek.com")

    def test_compatible_endpoint(self, test_config):
        """Should point non-OpenAI providers at their compatible endpoints."""
        config = test_config.model_copy(update={"zai_api_key": "zai-key"})

        client = ProviderFactory(config).create_client("zai", "glm-4.7")

        assert str(client.client.base_url) == PROVIDER_BASE_URLS[LLMProvider.ZAI]

    def test_fallback_client_only_configured(self, test_config):
        """Should include only candidates with keys, in chain order."""
        config = test_config.model_copy(
            update={
                "llm_provider": "openai",
                "llm_model": "deepseek-chat",
                "llm_candidates": "zai:glm-4.7,openai:gpt-4o,google:gemini-2.5-flash",
                "deepseek_api_key": "ds-key",
                "google_api_key": "g-key",
            }
        )

        client = ProviderFactory(config).create_fallback_client()

        assert [c.label for c in client.clients] == ["openai:deepseek-chat", "google:gemini-2.5-flash"]

    def test_no_keys_gives_empty_chain(self, test_config):
        """Should build an empty fallback client."""
        assert ProviderFactory(test_config).create_fallback_client().clients == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestFallbackLLMClient:
    """Tests for FallbackLLMClient."""

    async def test_first_success_wins(self):
        """Should not call later clients once one answers."""
        first = fake_client("a", reply="from a")
        second = fake_client("b", reply="from b")

        assert await FallbackLLMClient([first, second]).complete("s", "u") == "from a"
        second.complete.assert_not_called()

    async def test_falls_through_failures(self):
        """Should try the next client after an API error."""
        first = fake_client("a", error=RateLimitError("429"))
        second = fake_client("b", reply="from b")

        assert await FallbackLLMClient([first, second]).complete("s", "u") == "from b"
        first.complete.assert_awaited_once_with("s", "u")

    async def test_all_fail(self):
        """Should raise once every candidate failed."""
        clients = [fake_client("a", error=AIServiceError("x")), fake_client("b", error=AIServiceError("y"))]

        with pytest.raises(AIServiceError, match="All LLM candidates failed"):
            await FallbackLLMClient(clients).complete("s", "u")

    async def test_empty(self):
        """Should raise when nothing is configured."""
        with pytest.raises(AIServiceError, match="No LLM provider configured"):
            await FallbackLLMClient([]).complete("s", "u")
