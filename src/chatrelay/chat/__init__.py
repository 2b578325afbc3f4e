from .models import ChatReply, MessageRequest, SessionStage
from .session import ChatSession

__all__ = ["ChatReply", "ChatSession", "MessageRequest", "SessionStage"]
