"""Google Gemini LLM provider implementation.

Uses the official Google GenAI SDK (``client.aio``) for async chat completions.
Reference: https://github.com/googleapis/python-genai

Gemini occasionally answers with no text at all (blocked candidate or a
transient service issue). Such answers are retried a few times; if every
attempt comes back empty the caller sees an empty completion, which
``LLMProvider.complete`` reports as InvalidUpstreamResponse.
"""

import asyncio
from typing import Any

import httpx
from google import genai
from google.genai import errors, types

from ...errors import InvalidUpstreamResponse, ProviderUnavailable, RateLimited, UpstreamError
from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

WIRE_ROLES = {"user": "user", "assistant": "model"}


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Role names on the wire ("assistant" is "model")
    - Retry on empty answers
    - Error mapping onto the upstream taxonomy
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        max_retries: int = 3,
        retry_delay: float = 0.5,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash, gemini-2.5-pro)
            max_retries: Attempts made when Gemini answers with no text
            retry_delay: Base delay in seconds between those attempts
            **client_kwargs: Additional kwargs for genai.Client
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._model = model
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @staticmethod
    def _to_contents(messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        system_instruction = None
        contents = []
        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
            elif msg.role in WIRE_ROLES:
                contents.append(
                    types.Content(role=WIRE_ROLES[msg.role], parts=[types.Part(text=msg.content)])
                )
        return system_instruction, contents

    @staticmethod
    def _reply_text(response: types.GenerateContentResponse) -> str:
        """Concatenate the text parts of the first candidate ("" if none)."""
        if not response.candidates:
            return ""
        content = response.candidates[0].content
        if content is None or not content.parts:
            return ""
        return "".join(part.text for part in content.parts if getattr(part, "text", None))

    @staticmethod
    def _usage(response: types.GenerateContentResponse) -> dict[str, int] | None:
        metadata = response.usage_metadata
        if metadata is None:
            return None
        return {
            "prompt_tokens": metadata.prompt_token_count or 0,
            "completion_tokens": metadata.candidates_token_count or 0,
            "total_tokens": metadata.total_token_count or 0,
        }

    def _map_error(self, error: Exception) -> UpstreamError:
        if isinstance(error, errors.UnknownApiResponseError):
            return InvalidUpstreamResponse(f"{self.name} sent an unreadable response", provider=self.name)
        if isinstance(error, errors.APIError) and error.code == 429:
            return RateLimited(f"{self.name} rate limit exceeded", provider=self.name)
        if isinstance(error, errors.APIError):
            return ProviderUnavailable(f"{self.name} returned HTTP {error.code}", provider=self.name)
        return ProviderUnavailable(f"{self.name} unreachable: {error}", provider=self.name)

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate a chat completion using Google Gemini.

        Raises:
            RateLimited: HTTP 429 from the API
            ProviderUnavailable: Other API status errors or transport failures
            InvalidUpstreamResponse: The SDK could not parse the response
        """
        model_to_use = model or self._model
        system_instruction, contents = self._to_contents(messages)
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=system_instruction,
            max_output_tokens=max_tokens,
            **kwargs
        )

        text, usage = "", None
        for attempt in range(1, self._max_retries + 1):
            try:
                response = await self._client.aio.models.generate_content(
                    model=model_to_use, contents=contents, config=config
                )
            except (errors.APIError, errors.UnknownApiResponseError, httpx.TransportError) as e:
                raise self._map_error(e) from e

            text, usage = self._reply_text(response), self._usage(response)
            if text or attempt == self._max_retries:
                break
            await asyncio.sleep(self._retry_delay * attempt)

        return LLMResponse(content=text, model=model_to_use, usage=usage)

    async def close(self) -> None:
        """Nothing to release; genai.Client holds no open connection between calls."""
