"""
Feed Curator Flask Application Factory
"""
import logging
import os
from flask import Flask
from dotenv import load_dotenv

# Silence verbose SQLAlchemy logging
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def create_app(config=None):
    """
    Flask application factory

    Builds the shared collaborators (session factory, enricher, feed
    fetcher, social post writer) once and stores them on the app. Tests
    pass their own through `config`.

    Args:
        config: Optional configuration dictionary; may contain
            SESSION_FACTORY, ENRICHER, FEED_FETCHER, FEED_TITLE_FETCHER
            and SOCIAL_WRITER overrides

    Returns:
        Flask application instance
    """
    # Load environment variables
    load_dotenv()

    app = Flask(__name__)

    # Default configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key')
    app.config['DATABASE_URL'] = os.environ.get('DATABASE_URL')
    app.config['ANTHROPIC_API_KEY'] = os.environ.get('ANTHROPIC_API_KEY')
    app.config['UPLOAD_DIR'] = os.environ.get('UPLOAD_DIR', 'uploads')

    # Load custom configuration
    if config:
        app.config.from_mapping(config)

    from curator.database import create_db_engine, create_session_factory
    from curator.services.enrichment import build_enricher
    from curator.services.ingestion import FeedIngestor
    from curator.services.rss_fetcher import fetch_feed, feed_title
    from curator.services.social import build_social_writer

    session_factory = app.config.get('SESSION_FACTORY')
    if session_factory is None:
        session_factory = create_session_factory(create_db_engine(app.config['DATABASE_URL']))

    enricher = app.config.get('ENRICHER')
    if enricher is None:
        enricher = build_enricher(app.config.get('ANTHROPIC_API_KEY'))

    social_writer = app.config.get('SOCIAL_WRITER')
    if social_writer is None:
        social_writer = build_social_writer(app.config.get('ANTHROPIC_API_KEY'))

    app.extensions['curator'] = {
        'session_factory': session_factory,
        'ingestor': FeedIngestor(
            session_factory,
            enricher,
            fetch=app.config.get('FEED_FETCHER') or fetch_feed,
        ),
        'feed_title': app.config.get('FEED_TITLE_FETCHER') or feed_title,
        'social_writer': social_writer,
    }

    # Register blueprints
    from curator.routes import main
    app.register_blueprint(main)

    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=5000)
