"""
Feed management for a single user: list, add (with validation), remove.
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from curator.models import Feed
from curator.services.rss_fetcher import feed_title, FeedFetchError

logger = logging.getLogger(__name__)


def list_feeds(session, user_id: str) -> list[Feed]:
    """Return the user's feeds, newest first."""
    return session.query(Feed).filter(
        Feed.user_id == user_id
    ).order_by(Feed.created_at.desc()).all()


def add_feed(
    session,
    user_id: str,
    url: str,
    category: Optional[str] = None,
    name: Optional[str] = None,
    fetch_title: Callable[[str], str] = feed_title,
) -> dict:
    """
    Validate a feed URL and subscribe the user to it.

    The URL is fetched once to make sure it serves an RSS/Atom document;
    the feed's own title is used as the name unless one is given.

    Returns:
        {'success': True, 'feed_id': str} or {'success': False, 'error': str}
    """
    url = (url or '').strip()
    if not url:
        return {'success': False, 'error': 'Feed URL is required'}

    existing = session.query(Feed).filter(
        Feed.user_id == user_id,
        Feed.url == url
    ).first()
    if existing:
        return {'success': False, 'error': f'You already follow this feed as "{existing.name}"'}

    try:
        title = fetch_title(url)
    except FeedFetchError as e:
        logger.warning(f"Feed validation failed for {url}: {e.message}")
        return {'success': False, 'error': 'Failed to parse or add feed.'}

    feed = Feed(
        user_id=user_id,
        url=url,
        name=(name or title)[:200],
        category=category,
        is_active=True,
    )
    session.add(feed)
    session.commit()

    logger.info(f"Feed added for user {user_id}: {feed.name} ({url})")
    return {'success': True, 'feed_id': str(feed.id)}


def remove_feed(session, user_id: str, feed_id: UUID) -> bool:
    """
    Delete a feed the user owns.

    Articles from the feed are kept; their feed reference is cleared.

    Returns:
        False if the user has no such feed
    """
    feed = session.query(Feed).filter(
        Feed.id == feed_id,
        Feed.user_id == user_id
    ).first()
    if not feed:
        return False

    session.delete(feed)
    session.commit()
    logger.info(f"Feed removed for user {user_id}: {feed_id}")
    return True
