"""
Root pytest configuration for Feed Curator tests

Adds project root to Python path and provides an in-memory database,
session fixtures and a Flask test client wired to fakes.
"""
import os
import random
import sys

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

# Add project root to Python path so tests can import curator
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from curator import create_app
from curator.database import Base, create_session_factory
from curator.services.enrichment import ArticleEnricher
from curator.services.social import SocialPostWriter
from tests.fixtures.sample_data import StaticFetcher


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory SQLite database with the full schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """
    Provides a database session for tests.

    Session is automatically closed after each test.
    """
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def offline_enricher():
    """Enricher with no API key configured (placeholder mode)."""
    return ArticleEnricher(client=None, rng=random.Random(7))


@pytest.fixture
def fetcher():
    return StaticFetcher()


@pytest.fixture
def app(session_factory, offline_enricher, fetcher, tmp_path):
    app = create_app({
        'TESTING': True,
        'SESSION_FACTORY': session_factory,
        'ENRICHER': offline_enricher,
        'FEED_FETCHER': fetcher,
        'FEED_TITLE_FETCHER': lambda url: "Fetched Feed Title",
        'SOCIAL_WRITER': SocialPostWriter(client=None),
        'UPLOAD_DIR': str(tmp_path / "uploads"),
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()
