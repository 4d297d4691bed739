"""
RSS Feed Fetcher Service

Fetches feed documents with httpx and parses them with feedparser into
candidate items, in the order the source publishes them.
"""

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import feedparser
import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Configuration
RSS_FETCH_TIMEOUT = float(os.environ.get('RSS_FETCH_TIMEOUT', '20'))  # seconds
RSS_USER_AGENT = 'Mozilla/5.0 (compatible; FeedCurator/1.0)'
RSS_ACCEPT = 'application/rss+xml, application/atom+xml, application/xml, text/xml'


class FeedFetchError(Exception):
    """A feed could not be retrieved or parsed; the whole feed is skipped."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


@dataclass
class CandidateItem:
    """One entry parsed from a feed document, not yet persisted."""
    link: str
    title: str
    published_at: Optional[datetime] = None
    content: str = ''

    @property
    def is_complete(self) -> bool:
        return bool(self.link) and bool(self.title)


def _short(url: str) -> str:
    return url[:60] + "..." if len(url) > 60 else url


def _download(url: str, timeout: float) -> dict:
    """GET a feed URL and parse the body, raising FeedFetchError on failure."""
    try:
        response = httpx.get(
            url,
            timeout=timeout,
            follow_redirects=True,
            headers={
                'User-Agent': RSS_USER_AGENT,
                'Accept': RSS_ACCEPT,
            }
        )
        response.raise_for_status()
    except httpx.TimeoutException:
        raise FeedFetchError(url, f"Timeout: feed took longer than {timeout:g} seconds to respond")
    except httpx.HTTPStatusError as e:
        raise FeedFetchError(url, f"HTTP {e.response.status_code}")
    except httpx.HTTPError as e:
        raise FeedFetchError(url, f"Error fetching URL: {e}")

    result = feedparser.parse(response.content)

    if result.get('bozo'):
        bozo_exc = result.get('bozo_exception')
        if not result.get('entries') and not result.get('feed'):
            raise FeedFetchError(url, f"Invalid RSS/Atom feed: {bozo_exc}")
        # feedparser often recovers partial data
        logger.warning(f"RSS parsing issue for {url}: {bozo_exc}")

    return result


def html_to_text(html: str) -> str:
    """Reduce an HTML fragment to plain text."""
    if not html:
        return ''
    if '<' not in html:
        return html.strip()
    return BeautifulSoup(html, 'html.parser').get_text(separator=' ', strip=True)


def _parse_date(entry) -> Optional[datetime]:
    for key in ('published_parsed', 'updated_parsed'):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return None


def _parse_entry(entry) -> CandidateItem:
    """
    Parse a feedparser entry into a candidate item.

    Missing title or link are kept as empty strings; the caller decides
    what to do with incomplete items.
    """
    content = ''
    entry_content = entry.get('content')
    if entry_content and len(entry_content) > 0:
        content = entry_content[0].get('value', '')
    elif 'summary' in entry:
        content = entry.get('summary', '')
    elif 'description' in entry:
        content = entry.get('description', '')

    return CandidateItem(
        link=(entry.get('link') or '').strip(),
        title=(entry.get('title') or '').strip(),
        published_at=_parse_date(entry),
        content=html_to_text(content),
    )


def fetch_feed(url: str, timeout: float = RSS_FETCH_TIMEOUT) -> list[CandidateItem]:
    """
    Fetch and parse a single feed.

    Args:
        url: Feed URL
        timeout: Request timeout in seconds

    Returns:
        Candidate items in the source's own order

    Raises:
        FeedFetchError: network error, HTTP error or malformed document
    """
    fetch_start = time.time()
    result = _download(url, timeout)
    items = [_parse_entry(entry) for entry in result.get('entries', [])]
    logger.info(f"Fetched {len(items)} items from {_short(url)} in {time.time() - fetch_start:.1f}s")
    return items


def feed_title(url: str, timeout: float = RSS_FETCH_TIMEOUT) -> str:
    """
    Validate a feed URL and return a display name for it.

    Uses the document's title, falling back to the URL's hostname.

    Raises:
        FeedFetchError: the URL does not serve a usable feed
    """
    result = _download(url, timeout)
    if not result.get('feed') and not result.get('entries'):
        raise FeedFetchError(url, "URL does not contain a valid RSS/Atom feed")
    title = (result.get('feed', {}).get('title') or '').strip()
    return title or urlparse(url).hostname or url
