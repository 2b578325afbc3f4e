from .base import LLMProvider
from .factory import ProviderName, create_llm_provider
from .models import ChatMessage, ContextTurn, LLMResponse, ProviderResponse
from .providers import AnthropicProvider, DeepSeekProvider, GeminiProvider, OpenAIProvider
from .registry import ProviderRegistry

__all__ = [
    "LLMProvider",
    "ProviderName",
    "ProviderRegistry",
    "create_llm_provider",
    "ChatMessage",
    "ContextTurn",
    "LLMResponse",
    "ProviderResponse",
    "AnthropicProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "OpenAIProvider",
]
