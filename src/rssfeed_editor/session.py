"""Editing session: holds the loaded feed and applies field-level edits."""

import copy
import logging
import re
from pathlib import Path

import httpx

from rssfeed_editor.config import Settings
from rssfeed_editor.fetcher import load_feed
from rssfeed_editor.fields import (
    collect_field_names,
    decode_field_value,
    display_value,
    encode_field_value,
    extract_link_url,
    extract_text_content,
    get_field_type,
    preview,
)
from rssfeed_editor.generator import generate_feed_xml, generate_xml_filename, write_xml_file
from rssfeed_editor.models import ErrorType, Feed, FeedItem, LoadedFeed, RssError
from rssfeed_editor.retry import RetryOptions

logger = logging.getLogger(__name__)

# Field names must stay valid XML element names once serialized.
FIELD_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")


class EditSession:
    """The feed currently being edited.

    ``original`` is the feed as loaded and is never modified; ``feed`` is
    an independent copy that edits are applied to.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or Settings()
        self.url: str | None = None
        self.raw_xml: str | None = None
        self.original: Feed | None = None
        self.feed: Feed | None = None

    async def load(self, url: str, client: httpx.AsyncClient | None = None) -> LoadedFeed:
        """Fetch and parse a feed, replacing the current one on success."""
        loaded = await load_feed(
            url,
            client=client,
            timeout=self.settings.request_timeout,
            retry_options=RetryOptions(
                max_attempts=self.settings.max_attempts,
                base_delay_ms=self.settings.retry_base_delay_ms,
            ),
        )
        if not loaded.error:
            self.open(loaded)
        return loaded

    def open(self, loaded: LoadedFeed) -> None:
        """Start editing a loaded feed."""
        self.url = loaded.url
        self.raw_xml = loaded.raw_xml
        self.original = loaded.feed
        self.feed = copy.deepcopy(loaded.feed)

    def reset(self) -> None:
        """Discard all edits."""
        self._require_feed()
        self.feed = copy.deepcopy(self.original)

    def _require_feed(self) -> Feed:
        if self.feed is None:
            raise RssError(
                "No feed loaded. Load a feed URL first.", ErrorType.VALIDATION_ERROR
            )
        return self.feed

    def _require_item(self, index: int) -> FeedItem:
        feed = self._require_feed()
        if not 0 <= index < len(feed.items):
            raise RssError(
                f"Item {index} does not exist. The feed has {len(feed.items)} items "
                f"(0 to {len(feed.items) - 1}).",
                ErrorType.VALIDATION_ERROR,
            )
        return feed.items[index]

    # --- Display ---

    def summary(self) -> dict:
        feed = self._require_feed()
        fields = feed.channel_fields
        title = display_value(fields.get("title") or fields.get("name"))
        description = display_value(fields.get("description") or fields.get("subtitle"))
        link = extract_link_url(fields.get("link") or fields.get("id"))
        count = len(feed.items)

        return {
            "url": self.url,
            "title": title or "Untitled Feed",
            "description": description or None,
            "link": link,
            "format": feed.feed_type.upper(),
            "item_count": count,
            "items_found": f"{count} {'item' if count == 1 else 'items'} found",
            "item_fields": collect_field_names(feed.items),
            "channel_fields": list(fields),
        }

    def list_items(self, offset: int = 0, limit: int = 20) -> list[dict]:
        """Compact rows: index plus a preview of every field."""
        feed = self._require_feed()
        offset = max(0, offset)
        limit = max(0, limit)
        rows = []
        for index, item in enumerate(feed.items[offset:offset + limit], start=offset):
            row = {"index": index}
            for name, value in item.items():
                row[name] = preview(display_value(value, name))
            rows.append(row)
        return rows

    def describe_fields(self, fields: dict[str, str]) -> dict:
        """Full detail of a field dict: text, attributes and detected type."""
        described = {}
        for name, value in fields.items():
            parsed = decode_field_value(value)
            entry = {"text": parsed.text, "type": get_field_type(name)}
            if parsed.attributes:
                entry["attributes"] = parsed.attributes
            described[name] = entry
        return described

    def get_item(self, index: int) -> dict:
        return self.describe_fields(self._require_item(index))

    def get_channel(self) -> dict:
        return self.describe_fields(self._require_feed().channel_fields)

    # --- Editing ---

    def update_item_field(self, index: int, field_name: str, value: str) -> str | None:
        """Set the text of an item field, keeping any attributes it has.

        Returns the stored value, or None if a blank value removed the field.
        """
        item = self._require_item(index)
        return _apply_edit(item, field_name, value)

    def update_channel_field(self, field_name: str, value: str) -> str | None:
        """Set the text of a channel field, keeping any attributes it has."""
        feed = self._require_feed()
        if field_name in ("item", "entry"):
            raise RssError(
                f"'{field_name}' is reserved for feed items and cannot be a channel field.",
                ErrorType.VALIDATION_ERROR,
            )
        return _apply_edit(feed.channel_fields, field_name, value)

    def delete_item(self, index: int) -> FeedItem:
        feed = self._require_feed()
        self._require_item(index)
        if len(feed.items) == 1:
            raise RssError(
                "A feed must keep at least one item.", ErrorType.VALIDATION_ERROR
            )
        removed = feed.items.pop(index)
        logger.info("Deleted item %d", index)
        return removed

    # --- Output ---

    def generate_xml(self) -> str:
        feed = self._require_feed()
        try:
            return generate_feed_xml(feed)
        except (ValueError, TypeError, AttributeError) as e:
            logger.error("XML generation failed: %s", e)
            raise RssError(
                str(e) or "Failed to generate XML file", ErrorType.GENERATION_ERROR
            ) from e

    def export(self, directory: str | None = None, filename: str | None = None) -> Path:
        """Write the edited feed to an XML file named after its title."""
        feed = self._require_feed()
        xml_content = self.generate_xml()

        if not filename:
            title = extract_text_content(
                feed.channel_fields.get("title") or feed.channel_fields.get("name")
            )
            filename = generate_xml_filename(
                title, max_length=self.settings.max_filename_length
            )

        try:
            return write_xml_file(
                xml_content, directory or self.settings.export_dir, filename
            )
        except (OSError, ValueError) as e:
            logger.error("Could not write %s: %s", filename, e)
            raise RssError(
                f"Failed to write XML file: {e}", ErrorType.GENERATION_ERROR
            ) from e


def _apply_edit(fields: dict[str, str], field_name: str, value: str) -> str | None:
    if not field_name or not FIELD_NAME_RE.match(field_name):
        raise RssError(
            f"'{field_name}' is not a valid field name.", ErrorType.VALIDATION_ERROR
        )

    current = decode_field_value(fields.get(field_name))
    new_value = encode_field_value(value or "", current.attributes)

    if not new_value:
        fields.pop(field_name, None)
        return None

    fields[field_name] = new_value
    return new_value
