"""
SQLAlchemy Models for the Feed Curator Database Schema

Feeds are owned by one user; articles are owned by one user and keep a
weak back-reference to the feed they came from. Newsletters and social
posts are built from a user's articles.
"""
import enum
from datetime import datetime
from uuid import UUID, uuid4
from typing import Optional

from sqlalchemy import (
    Column, String, Text, DateTime, Integer, Boolean, Uuid,
    Enum as SAEnum, ForeignKey, Index, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship, Mapped
from sqlalchemy.sql import func

from curator.database import Base


# ============================================================================
# Enum Definitions
# ============================================================================

class ArticleStatus(enum.Enum):
    """Article review status"""
    REVIEW = "review"
    APPROVED = "approved"
    REJECTED = "rejected"


class PostPlatform(enum.Enum):
    """Social network a post is written for"""
    TWITTER = "twitter"
    LINKEDIN = "linkedin"


class PostStatus(enum.Enum):
    """Post publishing state"""
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


# ============================================================================
# Entity Models
# ============================================================================

class Feed(Base):
    """
    A user's subscription to one external RSS/Atom URL
    """
    __tablename__ = "feeds"

    # Primary Key
    id: Mapped[UUID] = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Core Fields
    user_id: Mapped[str] = Column(String(100), nullable=False)
    url: Mapped[str] = Column(String(1000), nullable=False)
    name: Mapped[str] = Column(String(200), nullable=False)
    category: Mapped[Optional[str]] = Column(String(50), nullable=True)
    is_active: Mapped[bool] = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    # Relationships
    articles: Mapped[list["Article"]] = relationship("Article", back_populates="feed", passive_deletes=True)

    # Indexes
    __table_args__ = (
        Index("ix_feeds_user_id", "user_id"),
        Index("ix_feeds_is_active", "is_active"),
        Index("ix_feeds_user_category", "user_id", "category"),
    )


class Article(Base):
    """
    Deduplicated, enriched content record

    Unique per (user_id, url). Created by ingestion in REVIEW status.
    """
    __tablename__ = "articles"

    # Primary Key
    id: Mapped[UUID] = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Ownership
    user_id: Mapped[str] = Column(String(100), nullable=False)
    feed_id: Mapped[Optional[UUID]] = Column(
        Uuid(as_uuid=True),
        ForeignKey("feeds.id", ondelete="SET NULL"),
        nullable=True
    )

    # Core Fields
    title: Mapped[str] = Column(Text, nullable=False)
    url: Mapped[str] = Column(String(1000), nullable=False)
    content: Mapped[str] = Column(Text, nullable=False, default="")
    published_at: Mapped[datetime] = Column(DateTime(timezone=True), nullable=False)

    # AI-Generated Content
    summary: Mapped[str] = Column(Text, nullable=False, default="")
    viral_score: Mapped[int] = Column(Integer, nullable=False, default=0)

    # Workflow State
    status: Mapped[ArticleStatus] = Column(
        SAEnum(ArticleStatus, native_enum=True, name="article_status"),
        nullable=False,
        default=ArticleStatus.REVIEW
    )
    is_liked: Mapped[bool] = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    # Relationships
    feed: Mapped[Optional["Feed"]] = relationship("Feed", back_populates="articles")

    __table_args__ = (
        UniqueConstraint("user_id", "url", name="uq_articles_user_url"),
        Index("ix_articles_user_published", "user_id", "published_at"),
        Index("ix_articles_feed_id", "feed_id"),
    )


class Newsletter(Base):
    """
    A newsletter draft: ordered articles plus intro/outro and styling
    """
    __tablename__ = "newsletters"

    # Primary Key
    id: Mapped[UUID] = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Core Fields
    user_id: Mapped[str] = Column(String(100), nullable=False)
    title: Mapped[str] = Column(String(300), nullable=False)
    intro: Mapped[Optional[str]] = Column(Text, nullable=True)
    outro: Mapped[Optional[str]] = Column(Text, nullable=True)

    # Styling
    header_color: Mapped[str] = Column(String(20), nullable=False, default="#4f46e5")
    text_color: Mapped[str] = Column(String(20), nullable=False, default="#1f2937")
    footer_text: Mapped[Optional[str]] = Column(Text, nullable=True)
    logo_url: Mapped[Optional[str]] = Column(String(500), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    # Relationships
    article_links: Mapped[list["NewsletterArticle"]] = relationship(
        "NewsletterArticle",
        back_populates="newsletter",
        order_by="NewsletterArticle.position",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        Index("ix_newsletters_user_updated", "user_id", "updated_at"),
    )


class NewsletterArticle(Base):
    """
    Placement of an article in a newsletter
    """
    __tablename__ = "newsletter_articles"

    newsletter_id: Mapped[UUID] = Column(
        Uuid(as_uuid=True),
        ForeignKey("newsletters.id", ondelete="CASCADE"),
        primary_key=True
    )
    article_id: Mapped[UUID] = Column(
        Uuid(as_uuid=True),
        ForeignKey("articles.id", ondelete="CASCADE"),
        primary_key=True
    )
    position: Mapped[int] = Column(Integer, nullable=False, default=0)

    # Relationships
    newsletter: Mapped["Newsletter"] = relationship("Newsletter", back_populates="article_links")
    article: Mapped["Article"] = relationship("Article")


class Post(Base):
    """
    Social post drafted from an article, optionally scheduled
    """
    __tablename__ = "posts"

    # Primary Key
    id: Mapped[UUID] = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # Ownership
    user_id: Mapped[str] = Column(String(100), nullable=False)
    article_id: Mapped[Optional[UUID]] = Column(
        Uuid(as_uuid=True),
        ForeignKey("articles.id", ondelete="SET NULL"),
        nullable=True
    )

    # Core Fields
    platform: Mapped[PostPlatform] = Column(
        SAEnum(PostPlatform, native_enum=True, name="post_platform"),
        nullable=False
    )
    content: Mapped[str] = Column(Text, nullable=False)
    scheduled_for: Mapped[Optional[datetime]] = Column(DateTime(timezone=True), nullable=True)
    status: Mapped[PostStatus] = Column(
        SAEnum(PostStatus, native_enum=True, name="post_status"),
        nullable=False,
        default=PostStatus.DRAFT
    )

    # Timestamps
    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    # Relationships
    article: Mapped[Optional["Article"]] = relationship("Article")

    __table_args__ = (
        Index("ix_posts_user_scheduled", "user_id", "scheduled_for"),
        Index("ix_posts_user_status", "user_id", "status"),
    )


class ToneProfile(Base):
    """
    A user's writing voice, used for "custom" tone social posts
    """
    __tablename__ = "tone_profiles"

    id: Mapped[UUID] = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[str] = Column(String(100), nullable=False, unique=True)
    name: Mapped[str] = Column(String(200), nullable=False)
    description: Mapped[str] = Column(Text, nullable=False, default="")
    style: Mapped[str] = Column(String(50), nullable=False)
    keywords: Mapped[list[str]] = Column(JSON, nullable=False, default=list)

    updated_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )


# ============================================================================
# Serialization Helpers
# ============================================================================

def feed_to_dict(feed: Feed) -> dict:
    """JSON-ready representation of a feed."""
    return {
        'id': str(feed.id),
        'url': feed.url,
        'name': feed.name,
        'category': feed.category,
        'is_active': feed.is_active,
        'created_at': feed.created_at.isoformat() if feed.created_at else None,
    }


def article_to_dict(article: Article) -> dict:
    """JSON-ready representation of an article, including its feed name."""
    return {
        'id': str(article.id),
        'feed_id': str(article.feed_id) if article.feed_id else None,
        'feed_name': article.feed.name if article.feed else None,
        'title': article.title,
        'url': article.url,
        'content': article.content,
        'summary': article.summary,
        'viral_score': article.viral_score,
        'published_at': article.published_at.isoformat() if article.published_at else None,
        'status': article.status.value,
        'is_liked': article.is_liked,
    }


def newsletter_to_dict(newsletter: Newsletter) -> dict:
    """JSON-ready newsletter with its articles in order."""
    return {
        'id': str(newsletter.id),
        'title': newsletter.title,
        'intro': newsletter.intro,
        'outro': newsletter.outro,
        'header_color': newsletter.header_color,
        'text_color': newsletter.text_color,
        'footer_text': newsletter.footer_text,
        'logo_url': newsletter.logo_url,
        'updated_at': newsletter.updated_at.isoformat() if newsletter.updated_at else None,
        'articles': [
            dict(article_to_dict(link.article), position=link.position)
            for link in newsletter.article_links
        ],
    }


def post_to_dict(post: Post) -> dict:
    return {
        'id': str(post.id),
        'article_id': str(post.article_id) if post.article_id else None,
        'article_title': post.article.title if post.article else None,
        'platform': post.platform.value,
        'content': post.content,
        'scheduled_for': post.scheduled_for.isoformat() if post.scheduled_for else None,
        'status': post.status.value,
        'created_at': post.created_at.isoformat() if post.created_at else None,
    }


def tone_profile_to_dict(profile: ToneProfile) -> dict:
    return {
        'name': profile.name,
        'description': profile.description,
        'style': profile.style,
        'keywords': list(profile.keywords or []),
    }
