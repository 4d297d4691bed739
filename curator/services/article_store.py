"""
Article persistence step for ingestion.

Inserts one article per transaction and reports the outcome as a value
instead of an exception, so the ingestion loop can tell a benign
duplicate (another run got there first) from a real storage failure.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from curator.models import Article, ArticleStatus
from curator.services.dedup import article_exists

# Stored snippet length
MAX_CONTENT_LENGTH = 10000


class SaveOutcome(enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


@dataclass
class SaveResult:
    outcome: SaveOutcome
    article_id: Optional[UUID] = None
    reason: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.outcome is SaveOutcome.CREATED


def save_article(
    session,
    user_id: str,
    feed_id: Optional[UUID],
    title: str,
    url: str,
    content: str,
    summary: str,
    viral_score: int,
    published_at: datetime,
    status: ArticleStatus = ArticleStatus.REVIEW,
) -> SaveResult:
    """
    Insert and commit a single article.

    Returns:
        SaveResult with CREATED, ALREADY_EXISTS (unique (user_id, url)
        violated by a concurrent insert) or FAILED with the reason
    """
    article_id = uuid4()
    article = Article(
        id=article_id,
        user_id=user_id,
        feed_id=feed_id,
        title=title,
        url=url,
        content=(content or '')[:MAX_CONTENT_LENGTH],
        summary=summary,
        viral_score=viral_score,
        published_at=published_at,
        status=status,
    )
    try:
        session.add(article)
        session.commit()
        return SaveResult(SaveOutcome.CREATED, article_id=article_id)
    except IntegrityError as e:
        session.rollback()
        reason = str(e.orig) if e.orig else str(e)
        try:
            exists = article_exists(session, user_id, url)
        except SQLAlchemyError as lookup_error:
            session.rollback()
            return SaveResult(SaveOutcome.FAILED, reason=f"{reason}; duplicate check failed: {lookup_error}")
        if exists:
            return SaveResult(SaveOutcome.ALREADY_EXISTS, reason="duplicate (user_id, url)")
        return SaveResult(SaveOutcome.FAILED, reason=reason)
    except SQLAlchemyError as e:
        session.rollback()
        return SaveResult(SaveOutcome.FAILED, reason=str(e))
