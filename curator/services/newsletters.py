"""
Newsletter drafting for a single user.

A newsletter is an ordered list of the user's articles with an intro, an
outro and a few styling fields. Export renders an email-ready HTML page
with the Jinja2 template in templates/newsletter/.
"""

import logging
import os
import time
from typing import Optional
from uuid import UUID

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy import func
from sqlalchemy.orm import joinedload
from werkzeug.utils import secure_filename

from curator.models import Article, Newsletter, NewsletterArticle

logger = logging.getLogger(__name__)

# Base URL prefixed to relative logo paths in exported HTML
PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', '')

# Fields a user may change through update_newsletter
EDITABLE_FIELDS = (
    'title', 'intro', 'outro', 'header_color', 'text_color', 'footer_text', 'logo_url'
)


def get_template_env() -> Environment:
    """Get Jinja2 environment for newsletter templates."""
    template_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'templates')
    return Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(['html', 'xml'])
    )


def _owned(session, user_id: str, newsletter_id: UUID) -> Optional[Newsletter]:
    return session.query(Newsletter).filter(
        Newsletter.id == newsletter_id,
        Newsletter.user_id == user_id
    ).first()


def list_newsletters(session, user_id: str) -> list[Newsletter]:
    """The user's newsletters, most recently edited first, with articles loaded."""
    return session.query(Newsletter).options(
        joinedload(Newsletter.article_links).joinedload(NewsletterArticle.article).joinedload(Article.feed)
    ).filter(
        Newsletter.user_id == user_id
    ).order_by(Newsletter.updated_at.desc()).all()


def get_newsletter(session, user_id: str, newsletter_id: UUID) -> Optional[Newsletter]:
    return session.query(Newsletter).options(
        joinedload(Newsletter.article_links).joinedload(NewsletterArticle.article).joinedload(Article.feed)
    ).filter(
        Newsletter.id == newsletter_id,
        Newsletter.user_id == user_id
    ).first()


def create_newsletter(
    session,
    user_id: str,
    title: str,
    intro: Optional[str] = None,
    outro: Optional[str] = None,
) -> Newsletter:
    """
    Create an empty newsletter.

    Raises:
        ValueError: blank title
    """
    title = title.strip() if isinstance(title, str) else ''
    if not title:
        raise ValueError("Newsletter title is required")

    newsletter = Newsletter(user_id=user_id, title=title[:300], intro=intro, outro=outro)
    session.add(newsletter)
    session.commit()
    logger.info(f"Newsletter created for user {user_id}: {newsletter.id}")
    return newsletter


def update_newsletter(session, user_id: str, newsletter_id: UUID, changes: dict) -> bool:
    """
    Apply editable field changes; unknown keys are ignored.

    Returns:
        False if the user has no such newsletter
    """
    newsletter = _owned(session, user_id, newsletter_id)
    if not newsletter:
        return False

    for key in EDITABLE_FIELDS:
        if key in changes:
            setattr(newsletter, key, changes[key])
    if not isinstance(newsletter.title, str) or not newsletter.title.strip():
        session.rollback()
        raise ValueError("Newsletter title is required")

    session.commit()
    return True


def add_article_to_newsletter(
    session,
    user_id: str,
    newsletter_id: UUID,
    article_id: UUID,
    position: Optional[int] = None,
) -> int:
    """
    Place one of the user's articles in the newsletter.

    Without a position the article goes to the end. Adding an article that
    is already there only moves it.

    Returns:
        The position used

    Raises:
        LookupError: newsletter or article not found for this user
    """
    newsletter = _owned(session, user_id, newsletter_id)
    if not newsletter:
        raise LookupError("Newsletter not found")

    article = session.query(Article.id).filter(
        Article.id == article_id,
        Article.user_id == user_id
    ).first()
    if not article:
        raise LookupError("Article not found")

    if position is None:
        max_position = session.query(func.max(NewsletterArticle.position)).filter(
            NewsletterArticle.newsletter_id == newsletter_id
        ).scalar()
        position = (max_position if max_position is not None else -1) + 1

    link = session.get(NewsletterArticle, (newsletter_id, article_id))
    if link:
        link.position = position
    else:
        session.add(NewsletterArticle(newsletter_id=newsletter_id, article_id=article_id, position=position))
    newsletter.updated_at = func.now()
    session.commit()
    return position


def remove_article_from_newsletter(session, user_id: str, newsletter_id: UUID, article_id: UUID) -> bool:
    """
    Returns:
        False if the newsletter is not the user's or the article is not in it
    """
    if not _owned(session, user_id, newsletter_id):
        return False

    removed = session.query(NewsletterArticle).filter(
        NewsletterArticle.newsletter_id == newsletter_id,
        NewsletterArticle.article_id == article_id
    ).delete(synchronize_session=False)
    session.commit()
    return removed > 0


def reorder_articles(session, user_id: str, newsletter_id: UUID, article_ids: list[UUID]) -> bool:
    """
    Set each listed article's position to its index in `article_ids`.

    Ids that are not in the newsletter are skipped.

    Returns:
        False if the user has no such newsletter
    """
    if not _owned(session, user_id, newsletter_id):
        return False

    links = {
        link.article_id: link
        for link in session.query(NewsletterArticle).filter(
            NewsletterArticle.newsletter_id == newsletter_id
        )
    }
    for index, article_id in enumerate(article_ids):
        link = links.get(article_id)
        if link:
            link.position = index
    session.commit()
    return True


def delete_newsletter(session, user_id: str, newsletter_id: UUID) -> bool:
    newsletter = _owned(session, user_id, newsletter_id)
    if not newsletter:
        return False

    session.delete(newsletter)
    session.commit()
    logger.info(f"Newsletter deleted for user {user_id}: {newsletter_id}")
    return True


def render_newsletter_html(newsletter: Newsletter, base_url: str = PUBLIC_BASE_URL) -> str:
    """
    Render the email HTML for a newsletter.

    Args:
        newsletter: Newsletter with article_links loaded
        base_url: Prefix for a relative logo_url

    Returns:
        Rendered HTML string
    """
    env = get_template_env()
    template = env.get_template('newsletter/email.html')

    logo_src = None
    if newsletter.logo_url:
        logo_src = newsletter.logo_url if '://' in newsletter.logo_url else base_url + newsletter.logo_url

    return template.render(
        newsletter=newsletter,
        articles=[link.article for link in newsletter.article_links],
        logo_src=logo_src,
    ).strip()


def export_newsletter(session, user_id: str, newsletter_id: UUID) -> str:
    """
    Raises:
        LookupError: no such newsletter for this user
    """
    newsletter = get_newsletter(session, user_id, newsletter_id)
    if not newsletter:
        raise LookupError("Newsletter not found")
    return render_newsletter_html(newsletter)


# Logo uploads
ALLOWED_LOGO_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.svg', '.webp'}


def save_newsletter_logo(user_id: str, filename: str, data: bytes, upload_dir: str) -> str:
    """
    Store an uploaded logo under upload_dir.

    Returns:
        Public path of the stored file, e.g. /uploads/logo-<user>-<ts>.png

    Raises:
        ValueError: empty upload or unsupported file type
    """
    if not data:
        raise ValueError("No file provided")
    extension = os.path.splitext(filename or '')[1].lower()
    if extension not in ALLOWED_LOGO_EXTENSIONS:
        raise ValueError(f"Unsupported logo type: {extension or 'none'}")

    stored_name = secure_filename(f"logo-{user_id}-{int(time.time() * 1000)}{extension}")
    os.makedirs(upload_dir, exist_ok=True)
    with open(os.path.join(upload_dir, stored_name), 'wb') as f:
        f.write(data)

    logger.info(f"Logo uploaded for user {user_id}: {stored_name}")
    return f"/uploads/{stored_name}"
