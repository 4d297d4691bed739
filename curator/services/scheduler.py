"""
Post scheduling and the monthly content calendar.

Months are calendar months in UTC. Scheduling operations only touch posts
the user owns and report False when there is no such post.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import joinedload

from curator.models import Article, Post, PostPlatform, PostStatus

# Max posts returned by get_all_posts
ALL_POSTS_LIMIT = 100


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """
    Start of the month and start of the next month, in UTC.

    Raises:
        ValueError: month outside 1-12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def _in_month(query, year: int, month: int):
    start, end = month_bounds(year, month)
    return query.filter(Post.scheduled_for >= start, Post.scheduled_for < end)


def get_scheduled_posts(session, user_id: str, year: int, month: int) -> list[Post]:
    """Posts dated within the month, in date order."""
    query = session.query(Post).options(
        joinedload(Post.article).joinedload(Article.feed)
    ).filter(Post.user_id == user_id)
    return _in_month(query, year, month).order_by(Post.scheduled_for.asc()).all()


def get_all_posts(
    session,
    user_id: str,
    status: Optional[PostStatus] = None,
    platform: Optional[PostPlatform] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    limit: int = ALL_POSTS_LIMIT,
) -> list[Post]:
    """Posts filtered by status, platform and (when both given) month."""
    query = session.query(Post).options(
        joinedload(Post.article).joinedload(Article.feed)
    ).filter(Post.user_id == user_id)
    if status is not None:
        query = query.filter(Post.status == status)
    if platform is not None:
        query = query.filter(Post.platform == platform)
    if year and month:
        query = _in_month(query, year, month)
    return query.order_by(Post.scheduled_for.is_(None), Post.scheduled_for.asc()).limit(limit).all()


def _update_owned(session, user_id: str, post_id: UUID, **values) -> bool:
    updated = session.query(Post).filter(
        Post.id == post_id,
        Post.user_id == user_id
    ).update(values, synchronize_session=False)
    session.commit()
    return updated > 0


def schedule_post(session, user_id: str, post_id: UUID, scheduled_for: datetime) -> bool:
    return _update_owned(session, user_id, post_id, scheduled_for=scheduled_for, status=PostStatus.SCHEDULED)


def reschedule_post(session, user_id: str, post_id: UUID, scheduled_for: datetime) -> bool:
    """Move the date only; the status is kept."""
    return _update_owned(session, user_id, post_id, scheduled_for=scheduled_for)


def cancel_scheduled_post(session, user_id: str, post_id: UUID) -> bool:
    """Clear the date and return the post to DRAFT."""
    return _update_owned(session, user_id, post_id, scheduled_for=None, status=PostStatus.DRAFT)


def mark_post_published(session, user_id: str, post_id: UUID) -> bool:
    return _update_owned(session, user_id, post_id, status=PostStatus.PUBLISHED)


def get_calendar_stats(session, user_id: str, year: int, month: int) -> dict[int, int]:
    """Number of posts dated on each day of the month, keyed by day number."""
    query = session.query(Post.scheduled_for).filter(Post.user_id == user_id)
    days = Counter()
    for (scheduled_for,) in _in_month(query, year, month):
        if scheduled_for.tzinfo is not None:
            scheduled_for = scheduled_for.astimezone(timezone.utc)
        days[scheduled_for.day] += 1
    return dict(days)
