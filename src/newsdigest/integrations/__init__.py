"""LLM provider integrations."""

from newsdigest.integrations.openai_client import OpenAIClient
from newsdigest.integrations.provider_factory import (
    FallbackLLMClient,
    LLMClient,
    LLMProvider,
    ProviderFactory,
)

__all__ = ["FallbackLLMClient", "LLMClient", "LLMProvider", "OpenAIClient", "ProviderFactory"]
