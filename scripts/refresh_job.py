#!/usr/bin/env python
"""
Scheduled Feed Refresh Job

Refreshes every active feed for every user. Intended for a cron trigger
when the web process is not the one being scheduled.

Usage:
    python scripts/refresh_job.py

Exit codes:
    0 - Success (individual feed failures are logged, not fatal)
    1 - Failure
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from curator.database import create_db_engine, create_session_factory
from curator.services.enrichment import build_enricher
from curator.services.ingestion import FeedIngestor

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger('refresh_job')


def main(ingestor=None):
    """Main entry point for the scheduled refresh."""
    logger.info("=" * 60)
    logger.info("FEED REFRESH JOB STARTING")
    logger.info("=" * 60)

    try:
        if ingestor is None:
            engine = create_db_engine()
            ingestor = FeedIngestor(create_session_factory(engine), build_enricher())

        result = ingestor.refresh_all_feeds()

        logger.info("=" * 60)
        logger.info("JOB SUMMARY")
        logger.info("=" * 60)
        logger.info(f"New Articles:      {result.count}")
        logger.info(f"Feeds Processed:   {result.feeds_processed}")
        logger.info(f"Feeds Failed:      {result.feeds_failed}")
        logger.info(f"Items Failed:      {result.items_failed}")

        for error in result.errors:
            logger.warning(f"Feed {error.url}: {error.error}")

        logger.info("JOB COMPLETED SUCCESSFULLY")
        return 0

    except Exception as e:
        logger.error(f"JOB FAILED: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
