"""RSS/Atom feed parsing into flat field dicts."""

import logging
import xml.etree.ElementTree as ET  # for ET.ParseError only
from urllib.parse import urlparse

import defusedxml.ElementTree as defused_ET
from defusedxml import DefusedXmlException

from rssfeed_editor.extraction import child_elements, extract_element_fields, local_name
from rssfeed_editor.models import ErrorType, Feed, FeedType, ParseResult, RssError

logger = logging.getLogger(__name__)

CHANNEL_TAG = "channel"
ITEM_TAG = "item"
FEED_TAG = "feed"
ENTRY_TAG = "entry"

INVALID_XML_MESSAGE = "Invalid XML format. Please check the RSS feed structure."
UNRECOGNIZED_MESSAGE = "Feed format not recognized. Expected RSS 2.0 or Atom format."


def is_valid_url(url: str) -> bool:
    """Check that a string is an absolute http or https URL."""
    if not url or not isinstance(url, str):
        return False
    try:
        result = urlparse(url.strip())
        # Raises ValueError for a non-numeric or out-of-range port
        result.port
    except ValueError:
        return False
    if result.scheme not in ("http", "https"):
        return False
    host = result.hostname
    return bool(host) and not any(char.isspace() for char in host)


def parse_feed_xml(xml_string: str) -> ParseResult:
    """Parse an RSS 2.0 or Atom document into a Feed.

    Never raises for bad input: malformed XML, forbidden DTD constructs
    and validation failures are all reported through ``ParseResult.error``,
    with a best-effort feed alongside.

    Args:
        xml_string: Raw XML text of the feed.

    Returns:
        ParseResult with the feed and an optional RssError.
    """
    try:
        root = defused_ET.fromstring(xml_string)
    except ET.ParseError as e:
        logger.warning("Feed XML parse error: %s", e)
        return _parse_error(INVALID_XML_MESSAGE)
    except DefusedXmlException as e:
        logger.warning("Feed XML rejected: %s", e)
        return _parse_error(INVALID_XML_MESSAGE)
    except Exception as e:
        logger.warning("Unexpected error parsing feed XML: %s", e)
        return _parse_error(str(e) or "Failed to parse RSS XML")

    try:
        return resolve_feed(root)
    except Exception as e:
        logger.warning("Unexpected error reading feed structure: %s", e)
        return _parse_error(str(e) or "Failed to parse RSS XML")


def resolve_feed(root) -> ParseResult:
    """Detect the feed format of a parsed document and extract its fields.

    RSS is tried first: any ``<channel>`` reachable from the root makes the
    document RSS. Otherwise a ``<feed>`` root element makes it Atom.
    """
    channel = _find_descendant(root, CHANNEL_TAG)
    if channel is not None:
        return _extract_feed(channel, ITEM_TAG, "rss", "RSS feed contains no items.")

    if local_name(root) == FEED_TAG:
        return _extract_feed(root, ENTRY_TAG, "atom", "Atom feed contains no entries.")

    logger.info("Unrecognized feed root element: %s", root.tag)
    return ParseResult(
        feed=Feed(),
        error=RssError(UNRECOGNIZED_MESSAGE, ErrorType.VALIDATION_ERROR),
    )


def _extract_feed(container, item_tag: str, feed_type: FeedType, empty_message: str) -> ParseResult:
    """Extract container-level fields and each repeating item child."""
    channel_fields = extract_element_fields(container, exclude=(item_tag,))
    items = [
        extract_element_fields(child)
        for child in child_elements(container)
        if local_name(child) == item_tag
    ]

    if not items:
        return ParseResult(
            feed=Feed(channel_fields=channel_fields, items=[], feed_type=feed_type),
            error=RssError(empty_message, ErrorType.VALIDATION_ERROR),
        )

    return ParseResult(
        feed=Feed(channel_fields=channel_fields, items=items, feed_type=feed_type)
    )


def _find_descendant(root, tag_name: str):
    """First element (root included) whose local name matches, in document order."""
    for element in root.iter():
        if isinstance(element.tag, str) and local_name(element) == tag_name:
            return element
    return None


def _parse_error(message: str) -> ParseResult:
    return ParseResult(
        feed=Feed(),
        error=RssError(message, ErrorType.PARSE_ERROR),
    )
