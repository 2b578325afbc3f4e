"""OpenAI LLM provider implementation.

Uses the official OpenAI Python SDK for async chat completions.
Reference: https://github.com/openai/openai-python
"""

from typing import Any

import openai
from openai import AsyncOpenAI

from ...errors import InvalidUpstreamResponse, ProviderUnavailable, RateLimited, UpstreamError
from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse


def map_openai_error(error: openai.OpenAIError, provider: str) -> UpstreamError:
    """Translate an OpenAI SDK exception into the upstream error taxonomy.

    Also used by OpenAI-compatible backends (DeepSeek) that share the SDK.
    """
    if isinstance(error, openai.RateLimitError):
        return RateLimited(f"{provider} rate limit exceeded", provider=provider)
    if isinstance(error, openai.APIConnectionError):
        return ProviderUnavailable(f"{provider} unreachable: {error}", provider=provider)
    if isinstance(error, openai.APIStatusError):
        return ProviderUnavailable(
            f"{provider} returned HTTP {error.status_code}", provider=provider
        )
    return ProviderUnavailable(f"{provider} request failed: {error}", provider=provider)


class OpenAIProvider(LLMProvider):
    """OpenAI LLM provider implementation.

    Hidden design decisions:
    - OpenAI API client initialization
    - Message format conversion
    - Error mapping onto the upstream taxonomy
    - Authentication mechanism
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        organization: str | None = None,
        **client_kwargs: Any
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Default model to use
            base_url: Optional custom API base URL
            organization: Optional organization ID
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using the Chat Completions API.

        Args:
            messages: Conversation history
            model: Model to use (overrides default)
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            **kwargs: Additional OpenAI-specific parameters

        Returns:
            LLMResponse with generated content
        """
        model_to_use = model or self._model

        request_params: dict[str, Any] = {
            "model": model_to_use,
            "messages": [{"role": msg.role, "content": msg.content} for msg in messages],
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            request_params["max_tokens"] = max_tokens

        try:
            completion = await self._client.chat.completions.create(**request_params)
        except openai.OpenAIError as e:
            raise map_openai_error(e, self.name) from e

        if not completion.choices:
            raise InvalidUpstreamResponse(f"{self.name} returned no choices", provider=self.name)

        usage = None
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens
            }

        return LLMResponse(
            content=completion.choices[0].message.content or "",
            model=completion.model,
            usage=usage
        )

    async def close(self) -> None:
        """Close the OpenAI client."""
        await self._client.close()
