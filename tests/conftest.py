"""Shared test fixtures for RSS Feed Editor tests."""

import pytest

from rssfeed_editor.config import Settings
from rssfeed_editor.feed_parser import parse_feed_xml
from rssfeed_editor.models import LoadedFeed
from rssfeed_editor.session import EditSession


SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>A test RSS feed</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <guid>article-1</guid>
      <description>Description of the first article</description>
      <pubDate>Thu, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <guid>article-2</guid>
      <description>Description of the second article</description>
      <pubDate>Thu, 13 Feb 2026 09:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""

SAMPLE_NAMESPACED_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Media Feed</title>
    <language>en-us</language>
    <item>
      <title>Photo Story</title>
      <dc:creator>Jane Doe</dc:creator>
      <media:content url="https://example.com/photo.jpg" medium="image"/>
      <enclosure url="https://example.com/a.mp3" length="1234" type="audio/mpeg"/>
      <guid isPermaLink="false">photo-1</guid>
      <comments></comments>
    </item>
  </channel>
</rss>"""

SAMPLE_ATOM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <link href="https://example.com"/>
  <subtitle>A test Atom feed</subtitle>
  <entry>
    <title>Atom Entry 1</title>
    <link href="https://example.com/entry-1"/>
    <id>urn:uuid:entry-1</id>
    <summary>Summary of entry 1</summary>
    <updated>2026-02-13T10:00:00Z</updated>
  </entry>
</feed>"""

SAMPLE_MALFORMED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Malformed Feed</title>
    <link>https://example.com</link>
    <item>
      <title>Good Item</title>
      <guid>good-item</guid>
    </item>
    <item>
      <title>Bad Item</title>
      <!-- Missing closing tags intentionally -->
"""

SAMPLE_NOT_A_FEED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<html>
  <body>This is not a feed</body>
</html>"""

FEED_URL = "https://example.com/feed.xml"


@pytest.fixture
def sample_rss_xml():
    """Sample valid RSS 2.0 XML."""
    return SAMPLE_RSS_XML


@pytest.fixture
def sample_namespaced_rss_xml():
    """RSS with media:, dc: and attribute-only elements."""
    return SAMPLE_NAMESPACED_RSS_XML


@pytest.fixture
def sample_atom_xml():
    """Sample valid Atom XML."""
    return SAMPLE_ATOM_XML


@pytest.fixture
def sample_malformed_xml():
    """Sample malformed RSS XML."""
    return SAMPLE_MALFORMED_XML


@pytest.fixture
def sample_not_a_feed_xml():
    """Sample XML that is not a feed."""
    return SAMPLE_NOT_A_FEED_XML


@pytest.fixture
def settings(tmp_path):
    """Settings with no retry delay and exports going to a temp dir."""
    return Settings(max_attempts=1, retry_base_delay_ms=0, export_dir=str(tmp_path))


@pytest.fixture
def rss_session(settings):
    """An editing session with SAMPLE_RSS_XML loaded."""
    session = EditSession(settings)
    result = parse_feed_xml(SAMPLE_RSS_XML)
    session.open(LoadedFeed(url=FEED_URL, feed=result.feed, raw_xml=SAMPLE_RSS_XML))
    return session


@pytest.fixture
def atom_session(settings):
    """An editing session with SAMPLE_ATOM_XML loaded."""
    session = EditSession(settings)
    result = parse_feed_xml(SAMPLE_ATOM_XML)
    session.open(LoadedFeed(url=FEED_URL, feed=result.feed, raw_xml=SAMPLE_ATOM_XML))
    return session
