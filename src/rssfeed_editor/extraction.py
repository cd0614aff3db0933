"""Flatten XML elements into field dicts.

Works on any tree exposing the ElementTree element API (``tag``,
``attrib``, child iteration and ``itertext``), so the same code serves
trees built by ``xml.etree``/``defusedxml`` and by ``lxml``.
"""

from collections.abc import Iterable, Iterator

from rssfeed_editor.fields import encode_field_value


def strip_namespace(name: str) -> str:
    """Remove a namespace prefix from a tag or attribute name.

    Handles both ``prefix:local`` and ElementTree's ``{uri}local`` forms:
    ``media:content`` and ``{http://search.yahoo.com/mrss/}content`` both
    become ``content``.
    """
    if not name:
        return name
    if name.startswith("{"):
        _, _, name = name.partition("}")
    return name.rsplit(":", 1)[-1]


def child_elements(element) -> Iterator:
    """Yield direct child elements, skipping comments and processing instructions."""
    for child in element:
        # Comments and PIs carry a callable, not a string, as their tag
        if isinstance(child.tag, str):
            yield child


def local_name(element) -> str:
    return strip_namespace(element.tag)


def text_of(element) -> str:
    """Full trimmed text content of an element, including descendants."""
    return "".join(element.itertext()).strip()


def extract_attributes(element) -> dict[str, str]:
    """Collect an element's attributes with namespace-stripped names."""
    attributes: dict[str, str] = {}
    for name, value in element.attrib.items():
        attr_name = strip_namespace(name)
        if attr_name and value is not None:
            attributes[attr_name] = str(value)
    return attributes


def extract_element_fields(element, exclude: Iterable[str] = ()) -> dict[str, str]:
    """Extract the direct children of an element as a flat field dict.

    Children with attributes are stored in the JSON ``{"text", "attributes"}``
    form; children with only text are stored as plain text; empty children
    without attributes are left out. Repeated tag names keep the last value.

    Args:
        element: Element whose children to extract (channel, item, feed, entry).
        exclude: Local tag names to skip, e.g. the repeating ``item`` children
            of an RSS channel.

    Returns:
        Dict of field name to encoded value, in document order.
    """
    skipped = set(exclude)
    fields: dict[str, str] = {}

    for child in child_elements(element):
        tag_name = local_name(child)
        if not tag_name or tag_name in skipped:
            continue

        text = text_of(child)
        attributes = extract_attributes(child)

        if attributes:
            fields[tag_name] = encode_field_value(text, attributes)
        elif text:
            fields[tag_name] = text

    return fields
