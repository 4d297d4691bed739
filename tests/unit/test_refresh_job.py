"""
Unit tests for the scheduled refresh script.
"""

from unittest.mock import MagicMock

from curator.services.ingestion import FeedError, RunResult
from scripts.refresh_job import main


def test_success_exit_code():
    ingestor = MagicMock()
    ingestor.refresh_all_feeds.return_value = RunResult(
        count=4,
        feeds_processed=2,
        feeds_failed=1,
        errors=[FeedError(feed_id="f1", url="https://example.com/feed.xml", error="HTTP 500")],
    )

    assert main(ingestor) == 0
    ingestor.refresh_all_feeds.assert_called_once_with()


def test_failure_exit_code():
    ingestor = MagicMock()
    ingestor.refresh_all_feeds.side_effect = RuntimeError("database unavailable")

    assert main(ingestor) == 1
