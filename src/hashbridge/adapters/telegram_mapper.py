"""Bot API JSON to core model mapping adapter.

This keeps Telegram payload details out of the core pipeline.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from hashbridge.core.errors import ProtocolError
from hashbridge.core.models import MESSAGE_KIND, Entity, Message, Update

UNKNOWN_KIND = "unknown"


def _update_kind(raw: dict) -> str:
    # Every Bot API update carries update_id plus exactly one payload key.
    for key in raw:
        if key != "update_id":
            return key
    return UNKNOWN_KIND


def _build_entities(raw_entities: Any) -> Tuple[Entity, ...]:
    if not isinstance(raw_entities, list):
        return ()
    entities = []
    for raw in raw_entities:
        if not isinstance(raw, dict):
            continue
        kind = raw.get("type")
        offset = raw.get("offset")
        length = raw.get("length")
        if not isinstance(kind, str) or not isinstance(offset, int) or not isinstance(length, int):
            continue
        entities.append(Entity(kind=kind, offset=offset, length=length))
    return tuple(entities)


def build_message(raw: Any) -> Optional[Message]:
    """Build a core Message from a Bot API Message object."""

    if not isinstance(raw, dict):
        return None
    text = raw.get("text")
    if not isinstance(text, str):
        text = None
    chat = raw.get("chat")
    chat_id = chat.get("id") if isinstance(chat, dict) else None
    return Message(
        text=text,
        entities=_build_entities(raw.get("entities")),
        chat_id=chat_id,
        message_id=raw.get("message_id"),
    )


def build_update(raw: Any) -> Update:
    """Build a core Update from a Bot API Update object.

    A missing or non-integer update_id is a protocol error: without it the
    cursor cannot be advanced past the update.
    """

    if not isinstance(raw, dict):
        raise ProtocolError(f"Update is not an object: {raw!r}")
    update_id = raw.get("update_id")
    if not isinstance(update_id, int) or isinstance(update_id, bool):
        raise ProtocolError(f"Update without a valid update_id: {raw!r}")

    kind = _update_kind(raw)
    message = build_message(raw.get(kind)) if kind == MESSAGE_KIND else None
    return Update(id=update_id, kind=kind, message=message)
