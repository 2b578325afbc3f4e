"""Pytest configuration and shared fixtures."""
import asyncio
from typing import Any

import pytest
from loguru import logger

from chatrelay.auth import JWTAuthGate
from chatrelay.chat import ChatSession
from chatrelay.config import Settings
from chatrelay.llm import ChatMessage, LLMProvider, LLMResponse, ProviderRegistry
from chatrelay.store import InMemoryMessageStore

TEST_SECRET = "test-secret-with-enough-bytes-for-hs256"
FALLBACK = "The assistant is unavailable."


class FakeProvider(LLMProvider):
    """In-process provider that answers from a script instead of an API."""

    def __init__(
        self,
        name: str = "gemini",
        reply: str = "Hi there",
        error: Exception | None = None,
        delay: float = 0.0,
        usage: dict[str, int] | None = None,
    ):
        self.name = name
        self.reply = reply
        self.error = error
        self.delay = delay
        self.usage = usage if usage is not None else {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7}
        self.calls: list[list[ChatMessage]] = []
        self.closed = False

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.reply, model=f"{self.name}-test", usage=self.usage)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_provider():
    """Return the FakeProvider class so tests can build scripted providers."""
    return FakeProvider


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def registry(provider):
    return ProviderRegistry([provider], default="gemini")


@pytest.fixture
def store():
    return InMemoryMessageStore()


@pytest.fixture
def session(registry, store):
    return ChatSession(registry, store, timeout=1.0, fallback_reply=FALLBACK)


@pytest.fixture
def gate():
    return JWTAuthGate(TEST_SECRET)


@pytest.fixture
def settings():
    return Settings(jwt_secret=TEST_SECRET, app_env="test", store_backend="memory", log_level="WARNING")


@pytest.fixture
def log_messages():
    """Collect formatted loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(handler_id)
