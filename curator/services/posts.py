"""
Social post management for a single user: list, save, edit, delete.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import joinedload

from curator.models import Article, Post, PostPlatform, PostStatus

logger = logging.getLogger(__name__)

# Max posts returned by list_posts
POST_LIST_LIMIT = 50


def _owned(session, user_id: str, post_id: UUID) -> Optional[Post]:
    return session.query(Post).filter(
        Post.id == post_id,
        Post.user_id == user_id
    ).first()


def list_posts(session, user_id: str, platform: Optional[PostPlatform] = None, limit: int = POST_LIST_LIMIT) -> list[Post]:
    """The user's posts, newest first, optionally for one platform."""
    query = session.query(Post).options(
        joinedload(Post.article).joinedload(Article.feed)
    ).filter(Post.user_id == user_id)
    if platform is not None:
        query = query.filter(Post.platform == platform)
    return query.order_by(Post.created_at.desc()).limit(limit).all()


def list_upcoming_posts(session, user_id: str) -> list[Post]:
    """Drafts and scheduled posts, soonest first; undated drafts last."""
    return session.query(Post).options(
        joinedload(Post.article)
    ).filter(
        Post.user_id == user_id,
        Post.status.in_([PostStatus.SCHEDULED, PostStatus.DRAFT])
    ).order_by(Post.scheduled_for.is_(None), Post.scheduled_for.asc()).all()


def save_post(
    session,
    user_id: str,
    platform: PostPlatform,
    content: str,
    article_id: Optional[UUID] = None,
    scheduled_for: Optional[datetime] = None,
    status: Optional[PostStatus] = None,
    post_id: Optional[UUID] = None,
) -> Post:
    """
    Create a post, or update one when post_id is given.

    Status defaults to SCHEDULED when a date is given, DRAFT otherwise.
    An update changes content, date and status only.

    Raises:
        ValueError: blank content
        LookupError: post_id or article_id not found for this user
    """
    if not isinstance(content, str) or not content.strip():
        raise ValueError("Post content is required")
    if status is None:
        status = PostStatus.SCHEDULED if scheduled_for else PostStatus.DRAFT

    if post_id is not None:
        post = _owned(session, user_id, post_id)
        if not post:
            raise LookupError("Post not found")
        post.content = content
        post.scheduled_for = scheduled_for
        post.status = status
    else:
        if article_id is not None:
            owned = session.query(Article.id).filter(
                Article.id == article_id,
                Article.user_id == user_id
            ).first()
            if not owned:
                raise LookupError("Article not found")
        post = Post(
            user_id=user_id,
            article_id=article_id,
            platform=platform,
            content=content,
            scheduled_for=scheduled_for,
            status=status,
        )
        session.add(post)

    session.commit()
    return post


def update_post(session, user_id: str, post_id: UUID, changes: dict) -> bool:
    """
    Apply `content`, `scheduled_for` and/or `status` changes.

    Returns:
        False if the user has no such post
    """
    post = _owned(session, user_id, post_id)
    if not post:
        return False

    if 'content' in changes:
        if not isinstance(changes['content'], str) or not changes['content'].strip():
            raise ValueError("Post content is required")
        post.content = changes['content']
    if 'scheduled_for' in changes:
        post.scheduled_for = changes['scheduled_for']
    if 'status' in changes:
        post.status = changes['status']
    session.commit()
    return True


def delete_post(session, user_id: str, post_id: UUID) -> bool:
    post = _owned(session, user_id, post_id)
    if not post:
        return False
    session.delete(post)
    session.commit()
    logger.info(f"Post deleted for user {user_id}: {post_id}")
    return True
