"""Field value encoding, display helpers and field type detection.

A stored field value is either plain text or, when the source XML element
carried attributes, a JSON object ``{"text": ..., "attributes": {...}}``.
"""

import json
from typing import Literal

from rssfeed_editor.models import FeedItem, FieldValue

MAX_PREVIEW_LENGTH = 200

FieldType = Literal[
    "title", "description", "date", "link", "image", "author", "category", "default"
]

# Checked in order; the first category whose patterns match wins.
FIELD_TYPE_PATTERNS: list[tuple[FieldType, tuple[str, ...]]] = [
    ("title", ("title", "name")),
    ("description", ("description", "content", "summary")),
    ("date", ("date", "time")),
    ("link", ("link", "url", "guid")),
    ("image", ("image", "img", "enclosure", "thumbnail", "media")),
    ("author", ("author", "creator")),
    ("category", ("category", "tag")),
]


def decode_field_value(raw: str | None) -> FieldValue:
    """Decode a stored field value into text and optional attributes.

    Anything that is not a JSON object with a string ``text`` member is
    treated as plain text, so literal text starting with ``{`` survives.
    """
    if not raw or not isinstance(raw, str):
        return FieldValue(text="")

    trimmed = raw.strip()
    if not trimmed:
        return FieldValue(text="")

    if trimmed.startswith("{") and trimmed.endswith("}"):
        try:
            parsed = json.loads(trimmed)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict) and isinstance(parsed.get("text"), str):
            attributes = parsed.get("attributes")
            if isinstance(attributes, dict) and attributes:
                return FieldValue(
                    text=parsed["text"],
                    attributes={str(k): str(v) for k, v in attributes.items()},
                )
            return FieldValue(text=parsed["text"])

    return FieldValue(text=trimmed)


def encode_field_value(text: str, attributes: dict | None = None) -> str:
    """Encode text and optional attributes into a stored field value."""
    clean_text = str(text or "").strip()
    if attributes:
        clean_attrs = {str(k): str(v) for k, v in attributes.items()}
        return json.dumps(
            {"text": clean_text, "attributes": clean_attrs}, ensure_ascii=False
        )
    return clean_text


def has_attributes(raw: str | None) -> bool:
    """True if the stored value carries at least one attribute."""
    return bool(decode_field_value(raw).attributes)


def extract_text_content(raw: str | None) -> str:
    return decode_field_value(raw).text


def extract_link_url(raw: str | None) -> str | None:
    """Best-effort URL for a link-like field: ``href`` first, then the text."""
    if not raw:
        return None

    parsed = decode_field_value(raw)
    href = (parsed.attributes or {}).get("href", "").strip()
    if href:
        return href

    return parsed.text.strip() or None


def display_value(raw: str | None, field_name: str = "") -> str:
    """Text to show for a field; link fields show their ``href`` when present."""
    if not raw:
        return ""

    parsed = decode_field_value(raw)
    if "link" in field_name.lower() and parsed.attributes and parsed.attributes.get("href"):
        return parsed.attributes["href"]
    return parsed.text


def preview(text: str, limit: int = MAX_PREVIEW_LENGTH) -> str:
    """Shorten long text for listings."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def get_field_type(field_name: str) -> FieldType:
    """Classify a field by its name, e.g. ``pubDate`` -> ``date``."""
    normalized = field_name.lower()
    for field_type, patterns in FIELD_TYPE_PATTERNS:
        if any(pattern in normalized for pattern in patterns):
            return field_type
    return "default"


def collect_field_names(items: list[FeedItem]) -> list[str]:
    """Sorted names of all fields with a non-blank value in any item."""
    names: set[str] = set()
    for item in items:
        if not item:
            continue
        for key, value in item.items():
            if isinstance(value, str) and value.strip():
                names.add(key)
    return sorted(names)
