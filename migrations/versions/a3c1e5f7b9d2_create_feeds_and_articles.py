"""create_feeds_and_articles

Create feeds and articles tables for feed ingestion.

Revision ID: a3c1e5f7b9d2
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a3c1e5f7b9d2'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create feeds, articles and the article_status enum."""

    article_status = postgresql.ENUM('REVIEW', 'APPROVED', 'REJECTED', name='article_status')
    article_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'feeds',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('url', sa.String(1000), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('category', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_feeds_user_id', 'feeds', ['user_id'])
    op.create_index('ix_feeds_is_active', 'feeds', ['is_active'])
    op.create_index('ix_feeds_user_category', 'feeds', ['user_id', 'category'])

    op.create_table(
        'articles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('feed_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('feeds.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('url', sa.String(1000), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False, server_default=''),
        sa.Column('viral_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', postgresql.ENUM('REVIEW', 'APPROVED', 'REJECTED', name='article_status', create_type=False), nullable=False, server_default='REVIEW'),
        sa.Column('is_liked', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.UniqueConstraint('user_id', 'url', name='uq_articles_user_url'),
    )
    op.create_index('ix_articles_user_published', 'articles', ['user_id', 'published_at'])
    op.create_index('ix_articles_feed_id', 'articles', ['feed_id'])


def downgrade() -> None:
    """Drop articles, feeds and the article_status enum."""
    op.drop_index('ix_articles_feed_id', 'articles')
    op.drop_index('ix_articles_user_published', 'articles')
    op.drop_table('articles')

    op.drop_index('ix_feeds_user_category', 'feeds')
    op.drop_index('ix_feeds_is_active', 'feeds')
    op.drop_index('ix_feeds_user_id', 'feeds')
    op.drop_table('feeds')

    postgresql.ENUM(name='article_status').drop(op.get_bind(), checkfirst=True)
