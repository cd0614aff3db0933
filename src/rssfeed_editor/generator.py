"""Generate RSS 2.0 / Atom XML from the flat feed model."""

import logging
import re
from pathlib import Path

from rssfeed_editor.fields import decode_field_value
from rssfeed_editor.models import Feed, FieldValue

logger = logging.getLogger(__name__)

ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "  "

MAX_FILENAME_LENGTH = 100

_XML_ESCAPES = [
    ("&", "&amp;"),  # must run first
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
]


def escape_xml(value: str) -> str:
    """Escape the five XML special characters."""
    if not value:
        return ""
    escaped = str(value)
    for char, entity in _XML_ESCAPES:
        escaped = escaped.replace(char, entity)
    return escaped


def generate_xml_element(key: str, value: FieldValue, indent: str) -> str:
    """Render one field as ``<key attr="v">text</key>``."""
    tag = escape_xml(key)
    text = escape_xml(value.text)
    if value.attributes:
        attrs = " ".join(
            f'{escape_xml(name)}="{escape_xml(str(attr_value))}"'
            for name, attr_value in value.attributes.items()
        )
        return f"{indent}<{tag} {attrs}>{text}</{tag}>"
    return f"{indent}<{tag}>{text}</{tag}>"


def _field_lines(fields: dict, depth: int, reserved: str | None = None) -> list[str]:
    indent = INDENT * depth
    lines = []
    for key, value in fields.items():
        if key == reserved or not value:
            continue
        lines.append(generate_xml_element(key, decode_field_value(value), indent))
    return lines


def generate_feed_xml(feed: Feed) -> str:
    """Generate an RSS 2.0 or Atom document from a Feed, keeping every field.

    Args:
        feed: The feed to serialize.

    Returns:
        The XML document as a string.

    Raises:
        ValueError: If feed is missing or its items are not a list.
    """
    if feed is None or not isinstance(feed.items, list):
        raise ValueError("Invalid feed data: feed and items are required")

    lines = [XML_DECLARATION]

    if feed.feed_type == "atom":
        lines.append(f'<feed xmlns="{ATOM_NAMESPACE}">')
        lines.extend(_field_lines(feed.channel_fields, 1, reserved="entry"))
        for item in feed.items:
            lines.append(f"{INDENT}<entry>")
            lines.extend(_field_lines(item, 2))
            lines.append(f"{INDENT}</entry>")
        lines.append("</feed>")
    else:
        lines.append(f'<rss version="2.0" xmlns:atom="{ATOM_NAMESPACE}">')
        lines.append(f"{INDENT}<channel>")
        lines.extend(_field_lines(feed.channel_fields, 2, reserved="item"))
        for item in feed.items:
            lines.append(f"{INDENT * 2}<item>")
            lines.extend(_field_lines(item, 3))
            lines.append(f"{INDENT * 2}</item>")
        lines.append(f"{INDENT}</channel>")
        lines.append("</rss>")

    return "\n".join(lines)


def sanitize_filename(name: str, max_length: int = MAX_FILENAME_LENGTH) -> str:
    """Make a filesystem-safe, lowercase name; ``feed`` if nothing is left."""
    if not name or not isinstance(name, str):
        return "feed"
    sanitized = re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()
    return sanitized[:max_length] or "feed"


def generate_xml_filename(
    feed_title: str | None,
    fallback: str = "feed",
    max_length: int = MAX_FILENAME_LENGTH,
) -> str:
    """Build a ``.xml`` filename from a feed title."""
    return f"{sanitize_filename(feed_title or fallback, max_length)}.xml"


def write_xml_file(xml_content: str, directory: str | Path, filename: str = "feed.xml") -> Path:
    """Write generated XML to ``directory/filename`` and return the path."""
    if not xml_content:
        raise ValueError("XML content cannot be empty")

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / filename
    path.write_text(xml_content, encoding="utf-8")
    logger.info("Wrote %d bytes of XML to %s", len(xml_content.encode("utf-8")), path)
    return path
