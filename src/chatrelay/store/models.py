"""Data models for stored chat turns.

These models define the structure of persisted messages, independent of
the storage backend used.
"""

from datetime import datetime
from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One immutable turn half, owned by exactly one user."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    role: Role
    content: str
    timestamp: datetime
