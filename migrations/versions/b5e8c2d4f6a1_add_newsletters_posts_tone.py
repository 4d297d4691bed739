"""add_newsletters_posts_tone

Add newsletters, newsletter_articles, posts and tone_profiles tables.

Revision ID: b5e8c2d4f6a1
Revises: a3c1e5f7b9d2
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'b5e8c2d4f6a1'
down_revision: Union[str, Sequence[str], None] = 'a3c1e5f7b9d2'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create newsletter, post and tone profile tables and the post enums."""

    postgresql.ENUM('TWITTER', 'LINKEDIN', name='post_platform').create(op.get_bind(), checkfirst=True)
    postgresql.ENUM('DRAFT', 'SCHEDULED', 'PUBLISHED', name='post_status').create(op.get_bind(), checkfirst=True)

    op.create_table(
        'newsletters',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('intro', sa.Text(), nullable=True),
        sa.Column('outro', sa.Text(), nullable=True),
        sa.Column('header_color', sa.String(20), nullable=False, server_default='#4f46e5'),
        sa.Column('text_color', sa.String(20), nullable=False, server_default='#1f2937'),
        sa.Column('footer_text', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_newsletters_user_updated', 'newsletters', ['user_id', 'updated_at'])

    op.create_table(
        'newsletter_articles',
        sa.Column('newsletter_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('newsletters.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('article_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'posts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('article_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('articles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('platform', postgresql.ENUM('TWITTER', 'LINKEDIN', name='post_platform', create_type=False), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('scheduled_for', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', postgresql.ENUM('DRAFT', 'SCHEDULED', 'PUBLISHED', name='post_status', create_type=False), nullable=False, server_default='DRAFT'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_posts_user_scheduled', 'posts', ['user_id', 'scheduled_for'])
    op.create_index('ix_posts_user_status', 'posts', ['user_id', 'status'])

    op.create_table(
        'tone_profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(100), nullable=False, unique=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('style', sa.String(50), nullable=False),
        sa.Column('keywords', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )


def downgrade() -> None:
    """Drop the newsletter, post and tone profile tables and the post enums."""
    op.drop_table('tone_profiles')

    op.drop_index('ix_posts_user_status', 'posts')
    op.drop_index('ix_posts_user_scheduled', 'posts')
    op.drop_table('posts')

    op.drop_table('newsletter_articles')
    op.drop_index('ix_newsletters_user_updated', 'newsletters')
    op.drop_table('newsletters')

    postgresql.ENUM(name='post_status').drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name='post_platform').drop(op.get_bind(), checkfirst=True)
