"""
Feed Curator Services

This package contains the services behind feed ingestion, management and
publishing:
- rss_fetcher: Fetch and parse RSS/Atom feeds into candidate items
- dedup: Check whether a user already has an article
- enrichment: Summarize and score articles via Claude
- article_store: Persist articles with explicit outcomes
- ingestion: Orchestrate per-user and system-wide refresh runs
- feeds / articles / categories: Per-user management operations
- newsletters: Newsletter drafts and HTML export
- social / posts / scheduler / tone: Social post drafts, scheduling and voice
"""

from curator.services.rss_fetcher import fetch_feed, feed_title, FeedFetchError, CandidateItem
from curator.services.dedup import article_exists
from curator.services.enrichment import ArticleEnricher, Enrichment, build_enricher, parse_enrichment_response
from curator.services.article_store import save_article, SaveOutcome, SaveResult
from curator.services.ingestion import FeedIngestor, RunResult

__all__ = [
    'fetch_feed',
    'feed_title',
    'FeedFetchError',
    'CandidateItem',
    'article_exists',
    'ArticleEnricher',
    'Enrichment',
    'build_enricher',
    'parse_enrichment_response',
    'save_article',
    'SaveOutcome',
    'SaveResult',
    'FeedIngestor',
    'RunResult',
]
