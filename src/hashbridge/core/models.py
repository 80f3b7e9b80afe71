"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

MESSAGE_KIND = "message"


class EntityKind:
    """Entity categories as named by the Bot API."""

    HASHTAG = "hashtag"
    CASHTAG = "cashtag"
    MENTION = "mention"
    URL = "url"
    BOT_COMMAND = "bot_command"


@dataclass(frozen=True)
class Entity:
    """A tagged sub-range of a message's text."""

    kind: str
    offset: int
    length: int


@dataclass(frozen=True)
class Message:
    """Minimal message view used by matchers and the dispatcher.

    Both ``text`` and ``entities`` may be empty; that is a valid message with
    no taggable content, not an error.
    """

    text: Optional[str]
    entities: Tuple[Entity, ...] = ()
    chat_id: Optional[int] = None
    message_id: Optional[int] = None


@dataclass(frozen=True)
class Update:
    """One unit of data delivered by the messaging source."""

    id: int
    kind: str
    message: Optional[Message] = None

    @property
    def is_message(self) -> bool:
        return self.kind == MESSAGE_KIND and self.message is not None
