"""
Append-only, ordered log of chat messages.

The same order is used for display and for the ``conversationHistory``
re-submitted to the webhook on every turn, so nothing is ever removed or
reordered. A reset replaces the log rather than clearing it in place.
"""

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import Optional

from leadchat.schemas.conversation_schema import ConversationHistoryItem, Message, Origin
from leadchat.utils import to_iso_timestamp, utc_now

logger = logging.getLogger(__name__)


class ConversationLog:
    """Ordered message sequence with monotonically increasing ordinals."""

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._last_id = 0

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def next_id(self) -> int:
        return self._last_id + 1

    def append(self, message: Message) -> None:
        """Append a message; ids must keep increasing."""
        if message.id <= self._last_id:
            raise ValueError(f"Message id {message.id} does not follow {self._last_id}")
        self._messages.append(message)
        self._last_id = message.id
        logger.debug("Logged %s message #%d", message.origin.value, message.id)

    def add(self, origin: Origin, text: str, timestamp: Optional[datetime] = None) -> Message:
        """Create the next message and append it."""
        message = Message(
            id=self.next_id(),
            text=text,
            origin=origin,
            timestamp=timestamp or utc_now(),
        )
        self.append(message)
        return message

    def to_history(self) -> list[ConversationHistoryItem]:
        return [
            ConversationHistoryItem(
                timestamp=to_iso_timestamp(m.timestamp),
                message=m.text,
                type=m.origin,
            )
            for m in self._messages
        ]
