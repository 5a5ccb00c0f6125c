"""Entity decoding and markup stripping for feed text fields.

The description cleanup order matters: entities are decoded exactly once,
tags are stripped until the text stops changing, and nothing is decoded
afterwards. Decoding again would turn ``&lt;script&gt;`` that survived the
strip back into a live tag.
"""
from __future__ import annotations

import re

DESCRIPTION_LIMIT = 200

_NAMED_ENTITIES = {
    "nbsp": " ",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}

_ENTITY_RE = re.compile(r"&(#x?[0-9a-fA-F]+|[a-zA-Z]+);")
_TAG_RE = re.compile(r"<[^>]*>")
_UNTERMINATED_TAG_RE = re.compile(r"<[A-Za-z/!?][^>]*$")
# "<" or ">" followed by whitespace, "=" or a digit reads as a comparison ("&lt; 2.3", "&lt;=17")
_STRAY_BRACKET_RE = re.compile(r"[<>](?![\s=\d])")
_WHITESPACE_RE = re.compile(r"\s+")


def _code_point(value: int) -> str | None:
    if value <= 0 or value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        return None
    return chr(value)


def _replace_entity(match: re.Match) -> str:
    entity = match.group(1).lower()
    if entity.startswith("#x"):
        char = _code_point(int(entity[2:], 16))
        return char if char is not None else match.group(0)
    if entity.startswith("#"):
        digits = entity[1:]
        if not digits.isdigit():
            return match.group(0)
        char = _code_point(int(digits))
        return char if char is not None else match.group(0)
    return _NAMED_ENTITIES.get(entity, match.group(0))


def decode_entities(text: str) -> str:
    """Replace numeric and the common named character references in one pass."""
    if not text:
        return ""
    return _ENTITY_RE.sub(_replace_entity, text)


def strip_tags(text: str) -> str:
    """Remove tag-like spans until a pass makes no change or no ``<`` is left."""
    while True:
        stripped = _TAG_RE.sub("", text)
        if stripped == text or "<" not in stripped:
            text = stripped
            break
        text = stripped
    # malformed leftovers such as "<<b>Hi</b>>" or a dangling "<img src=..."
    text = _UNTERMINATED_TAG_RE.sub("", text)
    return _STRAY_BRACKET_RE.sub("", text)


def clean_description(html: str, limit: int = DESCRIPTION_LIMIT) -> str:
    if not html:
        return ""
    cleaned = strip_tags(decode_entities(str(html)))
    return cleaned.strip()[:limit]


def clean_text(value: str) -> str:
    """Plain-text version of a short field such as a title."""
    if not value:
        return ""
    cleaned = strip_tags(decode_entities(str(value)))
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


__all__ = [
    "DESCRIPTION_LIMIT",
    "clean_description",
    "clean_text",
    "decode_entities",
    "strip_tags",
]
