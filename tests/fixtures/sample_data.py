"""
Test data factories for creating sample database records and feed items

Provides factory functions with sensible defaults and a fake feed fetcher
"""
from datetime import datetime, timezone
from uuid import uuid4

from curator.models import Article, ArticleStatus, Feed, Post, PostPlatform, PostStatus
from curator.services.rss_fetcher import CandidateItem, FeedFetchError


def create_feed(
    user_id="user_a",
    url=None,
    name="Test Feed",
    category=None,
    is_active=True,
    **kwargs
):
    """
    Create a Feed instance with default test values

    Args:
        url: Feed URL (generates unique URL if None)
        **kwargs: Additional field overrides

    Returns:
        Feed instance (not committed to database)
    """
    if url is None:
        url = f"https://example.com/feed/{uuid4()}.xml"

    return Feed(
        user_id=user_id,
        url=url,
        name=name,
        category=category,
        is_active=is_active,
        **kwargs
    )


def create_article(
    user_id="user_a",
    feed_id=None,
    url=None,
    title="Test Article Title",
    content="Test article content.",
    summary="A short test summary.",
    viral_score=5,
    published_at=None,
    status=ArticleStatus.REVIEW,
    **kwargs
):
    """
    Create an Article instance with default test values

    Returns:
        Article instance (not committed to database)
    """
    if url is None:
        url = f"https://example.com/article/{uuid4()}"
    if published_at is None:
        published_at = datetime.now(timezone.utc)

    return Article(
        user_id=user_id,
        feed_id=feed_id,
        url=url,
        title=title,
        content=content,
        summary=summary,
        viral_score=viral_score,
        published_at=published_at,
        status=status,
        **kwargs
    )


def create_post(
    user_id="user_a",
    article_id=None,
    platform=PostPlatform.TWITTER,
    content="Test post content.",
    scheduled_for=None,
    status=PostStatus.DRAFT,
    **kwargs
):
    """Create a Post instance (not committed to database)"""
    return Post(
        user_id=user_id,
        article_id=article_id,
        platform=platform,
        content=content,
        scheduled_for=scheduled_for,
        status=status,
        **kwargs
    )


def make_item(link, title="Item", content="Item content.", published_at=None):
    return CandidateItem(link=link, title=title, published_at=published_at, content=content)


def make_items(count, prefix="https://example.com/post"):
    """Items in source order: post/0 first."""
    return [make_item(f"{prefix}/{i}", title=f"Post {i}") for i in range(count)]


class StaticFetcher:
    """
    Fake fetch function: url -> items, or url -> exception.

    Records every URL it was asked for, in order.
    """

    def __init__(self, feeds=None):
        self.feeds = dict(feeds or {})
        self.calls = []

    def set(self, url, items_or_error):
        self.feeds[url] = items_or_error

    def __call__(self, url):
        self.calls.append(url)
        value = self.feeds.get(url, [])
        if isinstance(value, Exception):
            raise value
        return list(value)


def fetch_error(url, message="HTTP 500"):
    return FeedFetchError(url, message)
