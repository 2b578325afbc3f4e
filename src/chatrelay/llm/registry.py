"""Provider registry.

Maps a provider name to the completion operation that serves it. Callers
(the chat session) only ever see ``resolve``; which backends exist and how
they were configured stays here.
"""

from collections.abc import Iterable

from loguru import logger

from ..config import Settings
from ..errors import UnsupportedProvider
from .base import LLMProvider
from .factory import ProviderName, create_llm_provider


class ProviderRegistry:
    """Explicit, enumerated set of completion providers with a default."""

    def __init__(
        self,
        providers: Iterable[LLMProvider] = (),
        default: str = ProviderName.GEMINI,
    ):
        self._providers: dict[ProviderName, LLMProvider] = {}
        self._default = ProviderName.parse(default)
        for provider in providers:
            self.register(provider)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        """Register every provider that has an API key configured."""
        registry = cls(default=settings.default_provider)
        for name, credentials in settings.providers.items():
            if not credentials.api_key:
                logger.debug("Provider {} has no API key, not registering", name)
                continue
            registry.register(
                create_llm_provider(name, api_key=credentials.api_key, model=credentials.model)
            )
        if registry.default not in registry.names:
            logger.warning("Default provider {} is not configured", registry.default.value)
        return registry

    @property
    def default(self) -> ProviderName:
        return self._default

    @property
    def names(self) -> list[ProviderName]:
        return list(self._providers)

    def register(self, provider: LLMProvider) -> None:
        self._providers[ProviderName.parse(provider.name)] = provider

    def resolve(self, name: str | None = None) -> LLMProvider:
        """Return the provider for ``name``, or the default when ``name`` is empty.

        Raises:
            UnsupportedProvider: Unknown name, or a known one that is not configured
        """
        key = ProviderName.parse(name) if name else self._default
        try:
            return self._providers[key]
        except KeyError:
            raise UnsupportedProvider(f"Provider '{key.value}' is not configured") from None

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()
