"""Data models for RSS Feed Editor."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

FeedType = Literal["rss", "atom"]

# Field name -> encoded value (plain text or JSON {"text", "attributes"}).
FeedItem = dict[str, str]
ChannelFields = dict[str, str]


class ErrorType(str, Enum):
    """Error categories surfaced to the user."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_URL = "INVALID_URL"
    FETCH_ERROR = "FETCH_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    GENERATION_ERROR = "GENERATION_ERROR"


class RssError(Exception):
    """A classified failure from fetching, parsing or generating a feed.

    ``status_code`` is set by the fetcher when the failure came from an
    HTTP response, so retry decisions never have to read it back out of
    the message.
    """

    def __init__(
        self,
        message: str,
        type: ErrorType,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.type = ErrorType(type)
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message, "type": self.type.value}

    def __repr__(self) -> str:
        return f"RssError({self.message!r}, {self.type.value})"


@dataclass(frozen=True)
class FieldValue:
    """Decoded form of a stored field value."""

    text: str
    attributes: dict[str, str] | None = None


@dataclass
class Feed:
    """A parsed RSS or Atom document: channel metadata plus ordered items."""

    channel_fields: ChannelFields = field(default_factory=dict)
    items: list[FeedItem] = field(default_factory=list)
    feed_type: FeedType = "rss"

    def to_dict(self) -> dict:
        return {
            "channelFields": dict(self.channel_fields),
            "items": [dict(item) for item in self.items],
            "feedType": self.feed_type,
        }


@dataclass
class ParseResult:
    """Result of parsing feed XML. ``feed`` is always present."""

    feed: Feed
    error: RssError | None = None


@dataclass
class LoadedFeed:
    """A feed fetched from a URL along with its raw XML.

    ``error`` is set when the content was fetched but is not a usable feed;
    ``feed`` then holds whatever could be extracted.
    """

    url: str
    feed: Feed
    raw_xml: str
    error: RssError | None = None
