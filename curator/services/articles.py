"""
Article queries and updates for a single user.
"""

from uuid import UUID

from sqlalchemy.orm import joinedload

from curator.models import Article


def list_articles(session, user_id: str) -> list[Article]:
    """Return the user's articles, most recently published first."""
    return session.query(Article).options(
        joinedload(Article.feed)
    ).filter(
        Article.user_id == user_id
    ).order_by(Article.published_at.desc()).all()


def toggle_article_like(session, user_id: str, article_id: UUID) -> bool:
    """
    Flip the like flag on one of the user's articles.

    Returns:
        The new is_liked value

    Raises:
        LookupError: no such article for this user
    """
    article = session.query(Article).filter(
        Article.id == article_id,
        Article.user_id == user_id
    ).first()
    if not article:
        raise LookupError("Article not found")

    article.is_liked = not article.is_liked
    session.commit()
    return article.is_liked
