"""
Feed Ingestion Orchestrator

Refreshes feeds into articles:

1. List active feeds in scope (one user, or everyone)
2. Fetch each feed; a failing feed is recorded and skipped
3. Take the newest ITEM_WINDOW items in the source's own order
4. Drop incomplete items and items the user already has
5. Enrich (summary + viral score) and store each new item

Runs sequentially in a single process. Concurrent runs only coordinate
through the unique (user_id, url) constraint on articles.
"""

import json
import logging
import os
import sys
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from curator.auth import AuthorizationError
from curator.models import Feed, ArticleStatus
from curator.services.article_store import save_article, SaveOutcome, SaveResult
from curator.services.dedup import article_exists
from curator.services.enrichment import ArticleEnricher
from curator.services.rss_fetcher import fetch_feed, CandidateItem

logger = logging.getLogger(__name__)

# Items considered per feed per run
ITEM_WINDOW = int(os.environ.get('INGEST_ITEM_WINDOW', '5'))


def _log_ingest(msg: str):
    """Log ingestion progress with immediate flush."""
    full_msg = f"INGEST: {msg}"
    logger.info(full_msg)
    print(full_msg, file=sys.stdout, flush=True)


@dataclass(frozen=True)
class FeedRef:
    """Detached snapshot of the feed fields the loop needs."""
    id: UUID
    user_id: str
    url: str
    name: str


@dataclass
class FeedError:
    feed_id: str
    url: str
    error: str


@dataclass
class RunResult:
    """Outcome of one ingestion run."""
    success: bool = True
    count: int = 0
    feeds_processed: int = 0
    feeds_failed: int = 0
    items_failed: int = 0
    errors: list[FeedError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'count': self.count,
            'errors': [asdict(e) for e in self.errors],
        }


class FeedIngestor:
    """
    Runs ingestion over a scope of feeds.

    Args:
        session_factory: callable returning a SQLAlchemy session
        enricher: ArticleEnricher (never raises)
        fetch: callable url -> list[CandidateItem], raising on feed failure
        window: max items considered per feed
    """

    def __init__(
        self,
        session_factory,
        enricher: ArticleEnricher,
        fetch: Callable[[str], list[CandidateItem]] = fetch_feed,
        window: int = ITEM_WINDOW,
    ):
        self.session_factory = session_factory
        self.enricher = enricher
        self.fetch = fetch
        self.window = window

    def refresh_user_feeds(self, user_id: Optional[str]) -> RunResult:
        """Refresh the active feeds of one authenticated user."""
        if not user_id:
            raise AuthorizationError("Unauthorized")
        return self._run(user_id=user_id)

    def refresh_all_feeds(self) -> RunResult:
        """Refresh every active feed; articles go to each feed's owner."""
        return self._run(user_id=None)

    def _run(self, user_id: Optional[str]) -> RunResult:
        scope = f"user={user_id}" if user_id else "all"
        run_start = time.time()
        logger.info(json.dumps({
            "event": "refresh_start",
            "scope": scope,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }))

        result = RunResult()
        session = self.session_factory()
        try:
            feeds = self._list_feeds(session, user_id)
            _log_ingest(f"Found {len(feeds)} active feeds ({scope})")

            for idx, feed in enumerate(feeds):
                _log_ingest(f"[{idx + 1}/{len(feeds)}] Processing feed '{feed.name}'...")
                try:
                    items = self.fetch(feed.url)
                except Exception as e:
                    logger.error(f"Failed to fetch feed {feed.url}: {e}")
                    result.feeds_failed += 1
                    result.errors.append(FeedError(feed_id=str(feed.id), url=feed.url, error=str(e)))
                    continue

                created = self._ingest_items(session, feed, items, result)
                result.feeds_processed += 1
                _log_ingest(f"Feed '{feed.name}': {created} new articles")
        finally:
            session.close()

        duration = time.time() - run_start
        _log_ingest(
            f"Refresh complete ({scope}): {result.count} new articles, "
            f"{result.feeds_failed} failed feeds, {duration:.1f}s"
        )
        logger.info(json.dumps({
            "event": "refresh_complete",
            "scope": scope,
            "count": result.count,
            "feeds_processed": result.feeds_processed,
            "feeds_failed": result.feeds_failed,
            "items_failed": result.items_failed,
            "duration_seconds": round(duration, 2),
        }))
        return result

    def _list_feeds(self, session, user_id: Optional[str]) -> list[FeedRef]:
        query = session.query(Feed).filter(Feed.is_active == True)
        if user_id:
            query = query.filter(Feed.user_id == user_id)
        return [FeedRef(id=f.id, user_id=f.user_id, url=f.url, name=f.name) for f in query.all()]

    def _ingest_items(self, session, feed: FeedRef, items: list[CandidateItem], result: RunResult) -> int:
        created = 0
        for item in items[:self.window]:
            if not item.is_complete:
                continue
            try:
                saved = self._store_item(session, feed, item)
            except SQLAlchemyError as e:
                session.rollback()
                result.items_failed += 1
                logger.warning(f"Database error for article {item.link}: {e}")
                continue
            if saved is None:
                continue

            if saved.outcome is SaveOutcome.CREATED:
                created += 1
                result.count += 1
            elif saved.outcome is SaveOutcome.ALREADY_EXISTS:
                logger.debug(f"Article already stored by a concurrent run: {item.link}")
            else:
                result.items_failed += 1
                logger.warning(f"Failed to store article {item.link}: {saved.reason}")
        return created

    def _store_item(self, session, feed: FeedRef, item: CandidateItem) -> Optional[SaveResult]:
        """Dedup, enrich and save one item. None means the user already has it."""
        if article_exists(session, feed.user_id, item.link):
            return None

        enrichment = self.enricher.analyze(item.title, item.content)

        return save_article(
            session,
            user_id=feed.user_id,
            feed_id=feed.id,
            title=item.title,
            url=item.link,
            content=item.content,
            summary=enrichment.summary,
            viral_score=enrichment.score,
            published_at=item.published_at or datetime.now(timezone.utc),
            status=ArticleStatus.REVIEW,
        )
