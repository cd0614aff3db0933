"""Fetch feed XML over HTTP and turn it into a parsed Feed."""

import logging

import httpx

from rssfeed_editor.config import DEFAULT_REQUEST_TIMEOUT
from rssfeed_editor.feed_parser import is_valid_url, parse_feed_xml
from rssfeed_editor.models import ErrorType, LoadedFeed, RssError
from rssfeed_editor.retry import RetryOptions, retry_with_backoff

logger = logging.getLogger(__name__)

RSS_USER_AGENT = "Mozilla/5.0 (compatible; RSS Reader)"
RSS_ACCEPT_HEADERS = "application/rss+xml, application/xml, text/xml, */*"


async def fetch_feed_xml(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> str:
    """Fetch the raw XML text of a feed.

    Args:
        url: Feed URL, already validated.
        client: Optional client to reuse; a short-lived one is created otherwise.
        timeout: Request timeout in seconds.

    Returns:
        The response body as text.

    Raises:
        RssError: FETCH_ERROR for timeouts, transport failures, non-2xx
            responses and empty bodies. HTTP failures carry ``status_code``.
    """
    headers = {"User-Agent": RSS_USER_AGENT, "Accept": RSS_ACCEPT_HEADERS}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
                response = await own_client.get(url, headers=headers)
        else:
            response = await client.get(url, headers=headers, timeout=timeout)
    except httpx.TimeoutException as e:
        raise RssError(
            "Request timeout. The RSS feed took too long to respond.",
            ErrorType.FETCH_ERROR,
        ) from e
    except httpx.HTTPError as e:
        raise RssError(f"Network error: {e}", ErrorType.FETCH_ERROR) from e

    if not response.is_success:
        raise RssError(
            f"Failed to fetch RSS feed: {response.status_code} {response.reason_phrase}",
            ErrorType.FETCH_ERROR,
            status_code=response.status_code,
        )

    xml_text = response.text
    if not xml_text or not xml_text.strip():
        # No failing status to carry, so retries treat it as transient
        raise RssError("RSS feed returned empty content.", ErrorType.FETCH_ERROR)

    return xml_text


async def load_feed(
    url: str,
    client: httpx.AsyncClient | None = None,
    timeout: float = DEFAULT_REQUEST_TIMEOUT,
    retry_options: RetryOptions | None = None,
) -> LoadedFeed:
    """Validate a URL, fetch it with retries and parse the feed.

    Content that is fetched but does not parse as a usable feed is not
    raised: it comes back on ``LoadedFeed.error`` with the partial feed.

    Raises:
        RssError: VALIDATION_ERROR or INVALID_URL for bad input, FETCH_ERROR
            when the feed cannot be retrieved.
    """
    if not url or not isinstance(url, str) or not url.strip():
        raise RssError("Please provide a valid RSS feed URL.", ErrorType.VALIDATION_ERROR)

    trimmed_url = url.strip()
    if not is_valid_url(trimmed_url):
        raise RssError("Please enter a valid HTTP or HTTPS URL.", ErrorType.INVALID_URL)

    logger.info("Fetching feed %s", trimmed_url)
    xml_text = await retry_with_backoff(
        lambda: fetch_feed_xml(trimmed_url, client=client, timeout=timeout),
        retry_options,
    )

    result = parse_feed_xml(xml_text)
    if result.error:
        logger.warning("Feed %s rejected: %s", trimmed_url, result.error.message)
        return LoadedFeed(url=trimmed_url, feed=result.feed, raw_xml=xml_text, error=result.error)

    logger.info(
        "Loaded %s feed %s with %d items",
        result.feed.feed_type, trimmed_url, len(result.feed.items),
    )
    return LoadedFeed(url=trimmed_url, feed=result.feed, raw_xml=xml_text)
