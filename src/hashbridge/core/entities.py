"""Entity text extraction (core domain).

Telegram measures entity offsets and lengths in UTF-16 code units, so the
text is sliced in that unit rather than by Python code points. Characters
outside the BMP (most emoji) count as two units.
"""

from __future__ import annotations

from hashbridge.core.errors import ExtractionError
from hashbridge.core.models import Entity

_CODEC = "utf-16-le"
_UNIT_BYTES = 2


def utf16_length(text: str) -> int:
    """Return the length of ``text`` in UTF-16 code units."""

    return len(text.encode(_CODEC)) // _UNIT_BYTES


def extract_entity_text(text: str, entity: Entity) -> str:
    """Return the substring of ``text`` covered by ``entity``.

    Raises ExtractionError when the range is negative, runs past the end of
    the text, cuts a surrogate pair in half, or the text itself holds an
    unpaired surrogate.
    """

    if entity.offset < 0 or entity.length < 0:
        raise ExtractionError(f"Negative entity range: offset={entity.offset} length={entity.length}")

    try:
        encoded = text.encode(_CODEC)
    except UnicodeEncodeError as exc:
        # Lone surrogates survive JSON decoding but have no UTF-16 encoding.
        raise ExtractionError(f"Text is not encodable as UTF-16: {exc.reason}") from exc
    start = entity.offset * _UNIT_BYTES
    end = start + entity.length * _UNIT_BYTES
    if end > len(encoded):
        raise ExtractionError(
            f"Entity range {entity.offset}+{entity.length} exceeds text length {len(encoded) // _UNIT_BYTES}"
        )

    try:
        return encoded[start:end].decode(_CODEC)
    except UnicodeDecodeError as exc:
        raise ExtractionError(f"Entity range {entity.offset}+{entity.length} splits a character") from exc
