from __future__ import annotations

import pytest

from hashbridge.core.entities import extract_entity_text, utf16_length
from hashbridge.core.errors import ExtractionError
from hashbridge.core.models import Entity, EntityKind


def _hashtag(offset: int, length: int) -> Entity:
    return Entity(kind=EntityKind.HASHTAG, offset=offset, length=length)


def test_extracts_ascii_range() -> None:
    assert extract_entity_text("daily #standup update", _hashtag(6, 8)) == "#standup"


def test_offsets_count_utf16_units_after_emoji() -> None:
    # The party emoji is outside the BMP: one code point, two UTF-16 units.
    text = "🎉 #standup"
    assert utf16_length(text) == 11
    assert extract_entity_text(text, _hashtag(3, 8)) == "#standup"


def test_code_point_offsets_would_miss_after_emoji() -> None:
    text = "🎉 #standup"
    # Offset 2 is correct in code points but wrong in Telegram's unit.
    assert extract_entity_text(text, _hashtag(2, 8)) != "#standup"


def test_cyrillic_hashtag() -> None:
    text = "итоги #стендап"
    assert extract_entity_text(text, _hashtag(6, 8)) == "#стендап"


def test_range_past_end_raises() -> None:
    with pytest.raises(ExtractionError):
        extract_entity_text("#std", _hashtag(0, 10))


def test_negative_offset_raises() -> None:
    with pytest.raises(ExtractionError):
        extract_entity_text("#standup", _hashtag(-1, 3))


def test_range_splitting_surrogate_pair_raises() -> None:
    with pytest.raises(ExtractionError):
        extract_entity_text("🎉#x", _hashtag(1, 2))


def test_empty_range_is_empty_string() -> None:
    assert extract_entity_text("abc", _hashtag(3, 0)) == ""


def test_lone_surrogate_in_text_raises() -> None:
    with pytest.raises(ExtractionError):
        extract_entity_text("\ud83c #standup", _hashtag(2, 8))
