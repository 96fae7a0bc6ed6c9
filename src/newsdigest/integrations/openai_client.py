"""Chat-completion client for OpenAI and OpenAI-compatible endpoints."""

from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from newsdigest.utils.exceptions import AIServiceError, RateLimitError
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)


class OpenAIClient:
    """Text-in/text-out completion over the OpenAI SDK.

    DeepSeek, Gemini, Zhipu GLM and Anthropic all expose OpenAI-compatible
    endpoints, so one client covers every provider; only ``base_url`` differs.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        provider: str = "openai",
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
    ):
        """Initialize client.

        Args:
            api_key: Provider API key.
            model: Model name sent with each request.
            provider: Provider label used in logs.
            base_url: Endpoint override (None for api.openai.com).
            timeout: Request timeout in seconds.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens in response.
        """
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.model = model
        self.provider = provider
        self.temperature = temperature
        self.max_tokens = max_tokens

        logger.debug("llm_client_initialized", provider=provider, model=model, base_url=base_url)

    @property
    def label(self) -> str:
        return f"{self.provider}:{self.model}"

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run one chat completion.

        Args:
            system_prompt: System message.
            user_prompt: User message.

        Returns:
            Response text.

        Raises:
            RateLimitError: If the provider throttled the request.
            AIServiceError: If the call failed or returned no text.
        """
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
        }
        if self.max_tokens:
            params["max_tokens"] = self.max_tokens

        logger.info("llm_request", provider=self.provider, model=self.model)

        try:
            response = await self.client.chat.completions.create(**params)
        except openai.RateLimitError as e:
            raise RateLimitError(f"{self.label} rate limited: {e}") from e
        except openai.OpenAIError as e:
            raise AIServiceError(f"{self.label} request failed: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise AIServiceError(f"Empty response from {self.label}")

        text = response.choices[0].message.content.strip()

        usage = response.usage
        logger.info(
            "llm_response",
            provider=self.provider,
            model=self.model,
            input_tokens=usage.prompt_tokens if usage else None,
            output_tokens=usage.completion_tokens if usage else None,
        )
        return text
