"""Message matchers (core domain)."""

from __future__ import annotations

import logging
from typing import Protocol

from hashbridge.core.entities import extract_entity_text
from hashbridge.core.errors import ExtractionError
from hashbridge.core.models import EntityKind, Message

LOGGER = logging.getLogger(__name__)


class Matcher(Protocol):
    """Decide whether a message satisfies a forwarding rule.

    Implementations must be pure and must return False instead of raising for
    malformed messages.
    """

    def matches(self, message: Message) -> bool:
        ...


class HashtagMatcher:
    """Match messages carrying a hashtag entity equal to ``tag``.

    Comparison is exact: no case folding and no trimming, so ``#Standup`` and
    ``#standupmeeting`` do not match ``#standup``.
    """

    def __init__(self, tag: str) -> None:
        self._tag = tag

    @property
    def tag(self) -> str:
        return self._tag

    def matches(self, message: Message) -> bool:
        text = message.text
        if not text or not message.entities:
            return False

        for entity in message.entities:
            if entity.kind != EntityKind.HASHTAG:
                continue
            try:
                candidate = extract_entity_text(text, entity)
            except ExtractionError as exc:
                LOGGER.debug("Skipping unusable entity: %s", exc)
                continue
            if candidate == self._tag:
                return True
        return False

    def __str__(self) -> str:
        return f"hashtag {self._tag} matcher"

    def __repr__(self) -> str:
        return f"HashtagMatcher(tag={self._tag!r})"
