from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ..errors import InvalidUpstreamResponse
from .models import ChatMessage, ContextTurn, LLMResponse, ProviderResponse


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    This module hides the design decision of which LLM backend answers a
    prompt. ``complete`` is the completion operation every caller uses; the
    backend-specific part is ``chat_completion``, which implementations must
    write so that:
    - API client setup and authentication stay inside the provider
    - Request/response formats are converted to ``ChatMessage``/``LLMResponse``
    - SDK exceptions are mapped onto ``RateLimited``, ``ProviderUnavailable``
      and ``InvalidUpstreamResponse``

    Supports async context manager protocol for proper resource cleanup:
        async with provider:
            response = await provider.complete("Hello", [])
        # Automatically cleaned up
    """

    #: Registry name of the backend, e.g. "gemini".
    name: str = ""

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion.

        Args:
            messages: List of chat messages forming the conversation history
            model: Model to use (None uses provider's default)
            temperature: Sampling temperature (0.0 to 2.0)
            max_tokens: Maximum tokens to generate
            **kwargs: Provider-specific parameters

        Returns:
            LLMResponse containing generated content and metadata

        Raises:
            UpstreamError: Mapped provider-specific errors during generation
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def complete(
        self,
        prompt: str,
        context: Sequence[ContextTurn] = (),
        **kwargs: Any
    ) -> ProviderResponse:
        """Answer ``prompt`` given the prior ``context`` turns.

        Args:
            prompt: The user's new message
            context: Earlier turns, oldest first
            **kwargs: Forwarded to ``chat_completion``

        Returns:
            ProviderResponse with the reply text and total token count

        Raises:
            InvalidUpstreamResponse: If the backend returned no text
            UpstreamError: Any other mapped backend failure
        """
        messages = [ChatMessage(role=turn.role, content=turn.content) for turn in context]
        messages.append(ChatMessage(role="user", content=prompt))

        response = await self.chat_completion(messages, **kwargs)

        if not response.content.strip():
            raise InvalidUpstreamResponse(
                f"{self.name} returned an empty completion", provider=self.name
            )

        return ProviderResponse(
            text=response.content,
            token_count=response.total_tokens,
            provider_name=self.name,
        )

    async def __aenter__(self) -> "LLMProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
