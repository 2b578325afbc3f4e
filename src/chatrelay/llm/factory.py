from enum import StrEnum
from typing import Any

from ..errors import UnsupportedProvider
from .base import LLMProvider
from .providers import AnthropicProvider, DeepSeekProvider, GeminiProvider, OpenAIProvider


class ProviderName(StrEnum):
    """Completion backends chatrelay knows how to build."""

    GEMINI = "gemini"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    DEEPSEEK = "deepseek"

    @classmethod
    def parse(cls, value: str) -> "ProviderName":
        """Normalize a caller-supplied provider name.

        Raises:
            UnsupportedProvider: If the name matches no known backend
        """
        normalized = value.strip().lower()
        if normalized == "claude":
            return cls.ANTHROPIC
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(f"'{p.value}'" for p in cls)
            raise UnsupportedProvider(
                f"Unsupported provider: {value}. Supported providers: {supported}"
            ) from None


_PROVIDER_CLASSES: dict[ProviderName, type[LLMProvider]] = {
    ProviderName.GEMINI: GeminiProvider,
    ProviderName.OPENAI: OpenAIProvider,
    ProviderName.ANTHROPIC: AnthropicProvider,
    ProviderName.DEEPSEEK: DeepSeekProvider,
}


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Create an LLM provider instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('gemini', 'openai', 'anthropic'/'claude', 'deepseek')
        **config: Provider-specific configuration
            For every provider:
                - api_key: str (required)
                - model: str (optional, provider default otherwise)
            For OpenAI and DeepSeek:
                - base_url: str | None
            For Gemini:
                - max_retries: int (default: 3)
                - retry_delay: float (default: 0.5)

    Returns:
        Initialized LLM provider instance

    Raises:
        UnsupportedProvider: If provider type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> provider = create_llm_provider("gemini", api_key="...", model="gemini-2.5-flash")
    """
    name = ProviderName.parse(provider)

    if "api_key" not in config:
        raise TypeError(f"{name.value} provider requires 'api_key' in config")

    if config.get("model") is None:
        config.pop("model", None)

    return _PROVIDER_CLASSES[name](**config)
