"""LLM provider factory with fallback support."""

from enum import Enum
from typing import List, Optional, Protocol, Tuple

from newsdigest.core.config import Config
from newsdigest.integrations.openai_client import OpenAIClient
from newsdigest.utils.exceptions import AIServiceError, APIError
from newsdigest.utils.logging import get_logger
from newsdigest.utils.text_utils import split_csv

logger = get_logger(__name__)


class LLMProvider(str, Enum):
    """Available LLM providers."""

    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    GOOGLE = "google"
    ZAI = "zai"
    ANTHROPIC = "anthropic"


PROVIDER_BASE_URLS = {
    LLMProvider.GOOGLE: "https://generativelanguage.googleapis.com/v1beta/openai/",
    LLMProvider.ZAI: "https://open.bigmodel.cn/api/paas/v4/",
    LLMProvider.ANTHROPIC: "https://api.anthropic.com/v1/",
}


class LLMClient(Protocol):
    """Protocol for LLM clients - the pipeline only needs text in, text out."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


def parse_candidates(raw: Optional[str]) -> List[Tuple[str, str]]:
    """Parse ``provider:model,provider:model`` into pairs.

    Model names may themselves contain colons; entries missing either part
    are dropped.
    """
    candidates = []
    for item in split_csv(raw):
        provider, _, model = item.partition(":")
        provider, model = provider.strip(), model.strip()
        if provider and model:
            candidates.append((provider, model))
    return candidates


class ProviderFactory:
    """Factory for creating LLM clients from configuration."""

    def __init__(self, config: Config):
        """Initialize factory.

        Args:
            config: Application configuration.
        """
        self.config = config

    def create_client(self, provider: str, model: str) -> Optional[OpenAIClient]:
        """Create client for a provider/model pair.

        Args:
            provider: Provider name.
            model: Model name.

        Returns:
            Client instance, or None if the provider is unknown or has no key.
        """
        try:
            llm_provider = LLMProvider(provider.lower())
        except ValueError:
            logger.warning("llm_provider_unknown", provider=provider)
            return None

        api_key, base_url = self._credentials(llm_provider, model)
        if not api_key:
            logger.debug("llm_provider_not_configured", provider=provider, model=model)
            return None

        return OpenAIClient(
            api_key=api_key,
            model=model,
            provider=llm_provider.value,
            base_url=base_url,
            timeout=self.config.llm_timeout_sec,
        )

    def _credentials(self, provider: LLMProvider, model: str) -> Tuple[Optional[str], Optional[str]]:
        config = self.config

        if provider == LLMProvider.DEEPSEEK or (
            provider == LLMProvider.OPENAI and model.startswith("deepseek")
        ):
            # deepseek-* models are served from DeepSeek's OpenAI-compatible API
            return (
                config.deepseek_api_key or config.openai_api_key,
                config.openai_base_url or config.deepseek_base_url,
            )

        if provider == LLMProvider.OPENAI:
            return config.openai_api_key, config.openai_base_url

        keys = {
            LLMProvider.GOOGLE: config.google_api_key,
            LLMProvider.ZAI: config.zai_api_key,
            LLMProvider.ANTHROPIC: config.anthropic_api_key,
        }
        return keys[provider], PROVIDER_BASE_URLS[provider]

    def candidate_chain(self) -> List[Tuple[str, str]]:
        """Primary provider/model first, then configured candidates without repeats."""
        chain = [(self.config.llm_provider, self.config.llm_model)]
        for candidate in parse_candidates(self.config.llm_candidates):
            if candidate not in chain:
                chain.append(candidate)
        return chain

    def create_fallback_client(self) -> "FallbackLLMClient":
        """Build a client that walks the whole candidate chain."""
        clients = []
        for provider, model in self.candidate_chain():
            client = self.create_client(provider, model)
            if client is not None:
                clients.append(client)

        logger.info(
            "llm_fallback_chain_ready",
            candidates=[client.label for client in clients],
        )
        return FallbackLLMClient(clients)


class FallbackLLMClient:
    """Try each client in order until one answers."""

    def __init__(self, clients: List[LLMClient]):
        self.clients = list(clients)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Complete with the first client that succeeds.

        Raises:
            AIServiceError: If no client is configured or all of them failed.
        """
        if not self.clients:
            raise AIServiceError("No LLM provider configured")

        last_error: Optional[APIError] = None
        for client in self.clients:
            try:
                return await client.complete(system_prompt, user_prompt)
            except APIError as e:
                last_error = e
                logger.warning(
                    "llm_candidate_failed",
                    candidate=getattr(client, "label", type(client).__name__),
                    error=str(e),
                )

        raise AIServiceError(f"All LLM candidates failed: {last_error}") from last_error
