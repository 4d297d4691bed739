"""
Deduplication Gate

Read-only lookup deciding whether an article was already ingested for a user.
"""

from curator.models import Article


def article_exists(session, user_id: str, link: str) -> bool:
    """Return True if `user_id` already has an article with this link."""
    return session.query(Article.id).filter(
        Article.user_id == user_id,
        Article.url == link
    ).first() is not None
