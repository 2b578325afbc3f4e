from datetime import datetime

from pydantic import BaseModel

from ..store.models import Message, Role


class HistoryItem(BaseModel):
    id: str
    role: Role
    content: str
    timestamp: datetime

    @classmethod
    def from_message(cls, message: Message) -> "HistoryItem":
        return cls(id=message.id, role=message.role, content=message.content, timestamp=message.timestamp)


class StatusMessage(BaseModel):
    message: str
