from enum import StrEnum

from pydantic import BaseModel, Field

from ..llm.models import ContextTurn


class SessionStage(StrEnum):
    """Stages a single message exchange moves through, in order."""

    RECEIVED = "received"
    VALIDATING = "validating"
    DISPATCHING = "dispatching"
    PERSISTING = "persisting"
    RESPONDING = "responding"


class MessageRequest(BaseModel):
    """Body of a send-message request."""

    prompt: str = ""
    provider: str | None = Field(default=None, description="Provider name; default when omitted")
    context: list[ContextTurn] = Field(default_factory=list, description="Prior turns, oldest first")


class ChatReply(BaseModel):
    """Reply to a send-message request.

    ``reply`` is always renderable text: either the provider's answer or the
    configured fallback when the provider failed (``success`` is False then).
    """

    success: bool
    provider: str
    tokens: int = 0
    reply: str
