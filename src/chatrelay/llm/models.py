from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class ContextTurn(BaseModel):
    """A prior turn supplied by the caller as provider context."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class LLMResponse(BaseModel):
    """Raw response from an LLM backend."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage information"
    )

    @property
    def total_tokens(self) -> int:
        if not self.usage:
            return 0
        if "total_tokens" in self.usage:
            return self.usage["total_tokens"]
        return self.usage.get("prompt_tokens", 0) + self.usage.get("completion_tokens", 0)


class ProviderResponse(BaseModel):
    """Normalized result of a completion operation, independent of backend."""

    model_config = ConfigDict(frozen=True)

    text: str
    token_count: int = Field(default=0, ge=0)
    provider_name: str
