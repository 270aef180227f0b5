"""Chat message schemas for display and history re-submission."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Origin(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single exchanged chat message. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: int
    text: str
    origin: Origin
    timestamp: datetime

    @property
    def is_user(self) -> bool:
        return self.origin == Origin.USER


class ConversationHistoryItem(BaseModel):
    """Wire form of a message inside ``conversationHistory``."""

    model_config = ConfigDict(frozen=True)

    timestamp: str
    message: str
    type: Origin
