"""
Database configuration and session management for Feed Curator

The engine and session factory are created by the application factory
(or a script's entry point) and handed to the services that need them.
"""
import logging
import os
import time

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Create declarative base for all models
Base = declarative_base()


def _sanitize_url(database_url: str) -> str:
    """Hide the password part of a database URL for logging."""
    if '@' in database_url:
        parts = database_url.split('@')
        return parts[0].split(':')[0] + ':***@' + parts[1]
    return database_url[:30] + "..."


def create_db_engine(database_url=None):
    """
    Create SQLAlchemy engine with connection pooling

    Args:
        database_url: Optional database URL override

    Returns:
        SQLAlchemy engine instance
    """
    if database_url is None:
        database_url = os.getenv("DATABASE_URL")

    if not database_url:
        raise ValueError("DATABASE_URL environment variable not set")

    logger.info(f"Connecting to: {_sanitize_url(database_url)}")

    engine_start = time.time()
    engine = create_engine(
        database_url,
        pool_size=5,               # Base connection pool size
        max_overflow=10,           # Max additional connections
        pool_pre_ping=True,        # Verify connections before use
        pool_recycle=3600,         # Recycle connections after 1 hour
        connect_args={"connect_timeout": 30},
        echo=os.getenv("FLASK_DEBUG", "False") == "True"
    )
    logger.info(f"Engine created in {time.time() - engine_start:.1f}s")

    return engine


def create_session_factory(engine):
    """Build the session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

