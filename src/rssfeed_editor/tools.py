"""Agent tool implementations for RSS Feed Editor."""

import asyncio
import json

from langchain_core.tools import tool

from rssfeed_editor.models import RssError
from rssfeed_editor.session import EditSession

MAX_XML_PREVIEW = 4000

# Module-level session reference, set during agent initialization
_session: EditSession | None = None


def set_session(session: EditSession) -> None:
    """Set the editing session used by all tools."""
    global _session
    _session = session


def _get_session() -> EditSession:
    """Get the editing session, raising if not set."""
    if _session is None:
        raise RuntimeError("Session not initialized. Call set_session() first.")
    return _session


def _error(error: RssError) -> str:
    return json.dumps({"status": "error", "error": error.to_dict()})


@tool
def load_feed(url: str) -> str:
    """Fetch an RSS or Atom feed by URL and make it the feed being edited.

    Args:
        url: The URL of the RSS or Atom feed.
    """
    session = _get_session()

    try:
        loaded = asyncio.run(session.load(url))
    except RssError as e:
        return _error(e)

    if loaded.error:
        result = {"status": "error", "error": loaded.error.to_dict()}
        # Show what could be read so the user can see what went wrong
        if loaded.feed.channel_fields:
            result["channel"] = session.describe_fields(loaded.feed.channel_fields)
        return json.dumps(result)

    return json.dumps({"status": "loaded", "feed": session.summary()})


@tool
def show_feed_info() -> str:
    """Show the loaded feed's title, description, link, format and item count."""
    session = _get_session()
    try:
        return json.dumps({"feed": session.summary(), "channel": session.get_channel()})
    except RssError as e:
        return _error(e)


@tool
def list_items(offset: int = 0, limit: int = 20) -> str:
    """List feed items with a short preview of each field.

    Args:
        offset: Index of the first item to list (default 0).
        limit: Maximum number of items to return (default 20).
    """
    session = _get_session()
    offset = max(0, offset)
    limit = max(0, limit)
    try:
        rows = session.list_items(offset=offset, limit=limit)
    except RssError as e:
        return _error(e)

    total = len(session.feed.items)
    return json.dumps({
        "items": rows,
        "total": total,
        "has_more": offset + len(rows) < total,
    })


@tool
def get_item(index: int) -> str:
    """Show every field of one item in full, including XML attributes.

    Args:
        index: The item's position in the feed, starting at 0.
    """
    session = _get_session()
    try:
        return json.dumps({"index": index, "fields": session.get_item(index)})
    except RssError as e:
        return _error(e)


@tool
def update_item_field(index: int, field: str, value: str) -> str:
    """Change the text of a field on one item. Attributes on the field are kept.

    An empty value removes the field unless it carries attributes.

    Args:
        index: The item's position in the feed, starting at 0.
        field: Field name, e.g. "title", "description" or "pubDate".
        value: The new text.
    """
    session = _get_session()
    try:
        stored = session.update_item_field(index, field, value)
    except RssError as e:
        return _error(e)

    return json.dumps({
        "status": "updated" if stored is not None else "removed",
        "index": index,
        "field": field,
        "fields": session.get_item(index),
    })


@tool
def update_channel_field(field: str, value: str) -> str:
    """Change the text of a feed-level (channel) field such as the title.

    Args:
        field: Field name, e.g. "title", "description" or "language".
        value: The new text. An empty value removes the field.
    """
    session = _get_session()
    try:
        stored = session.update_channel_field(field, value)
    except RssError as e:
        return _error(e)

    return json.dumps({
        "status": "updated" if stored is not None else "removed",
        "field": field,
        "channel": session.get_channel(),
    })


@tool
def delete_item(index: int) -> str:
    """Remove an item from the feed.

    Args:
        index: The item's position in the feed, starting at 0.
    """
    session = _get_session()
    try:
        removed = session.delete_item(index)
    except RssError as e:
        return _error(e)

    return json.dumps({
        "status": "deleted",
        "index": index,
        "removed": session.describe_fields(removed),
        "remaining": len(session.feed.items),
    })


@tool
def reset_edits() -> str:
    """Discard all edits and go back to the feed as it was loaded."""
    session = _get_session()
    try:
        session.reset()
    except RssError as e:
        return _error(e)
    return json.dumps({"status": "reset", "feed": session.summary()})


@tool
def preview_xml() -> str:
    """Show the XML that would be exported for the edited feed."""
    session = _get_session()
    try:
        xml_content = session.generate_xml()
    except RssError as e:
        return _error(e)

    return json.dumps({
        "xml": xml_content[:MAX_XML_PREVIEW],
        "truncated": len(xml_content) > MAX_XML_PREVIEW,
        "length": len(xml_content),
    })


@tool
def export_feed(directory: str = "", filename: str = "") -> str:
    """Save the edited feed as an XML file.

    Args:
        directory: Optional directory to write to (defaults to the configured export dir).
        filename: Optional file name; by default it is derived from the feed title.
    """
    session = _get_session()
    try:
        path = session.export(directory=directory or None, filename=filename or None)
    except RssError as e:
        return _error(e)

    return json.dumps({"status": "exported", "path": str(path)})
