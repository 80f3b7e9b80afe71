from __future__ import annotations

import pytest

from hashbridge.adapters.telegram_mapper import build_update
from hashbridge.core.errors import ProtocolError
from hashbridge.core.models import Entity


def test_build_message_update() -> None:
    raw = {
        "update_id": 1001,
        "message": {
            "message_id": 7,
            "chat": {"id": -100123, "type": "supergroup"},
            "text": "daily #standup update",
            "entities": [{"type": "hashtag", "offset": 6, "length": 8}],
        },
    }

    update = build_update(raw)

    assert update.id == 1001
    assert update.is_message
    assert update.message.text == "daily #standup update"
    assert update.message.entities == (Entity(kind="hashtag", offset=6, length=8),)
    assert update.message.chat_id == -100123
    assert update.message.message_id == 7


def test_message_without_text_or_entities() -> None:
    raw = {"update_id": 5, "message": {"message_id": 1, "chat": {"id": 1}, "photo": []}}

    update = build_update(raw)

    assert update.is_message
    assert update.message.text is None
    assert update.message.entities == ()


def test_other_update_kinds_carry_no_message() -> None:
    update = build_update({"update_id": 6, "edited_message": {"text": "#standup"}})

    assert update.kind == "edited_message"
    assert update.message is None
    assert not update.is_message


def test_malformed_entities_are_dropped() -> None:
    raw = {
        "update_id": 9,
        "message": {
            "text": "#a #b",
            "entities": [{"type": "hashtag", "offset": "0", "length": 2}, "junk", {"type": "hashtag", "offset": 3, "length": 2}],
        },
    }

    update = build_update(raw)

    assert update.message.entities == (Entity(kind="hashtag", offset=3, length=2),)


@pytest.mark.parametrize("raw", [{"message": {}}, {"update_id": "12"}, {"update_id": True}, ["update_id", 1]])
def test_update_without_valid_id_is_protocol_error(raw) -> None:
    with pytest.raises(ProtocolError):
        build_update(raw)
