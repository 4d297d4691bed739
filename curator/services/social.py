"""
Social Post Generator

Drafts a Twitter/X thread and a LinkedIn post from one of the user's
articles with Claude, honoring the requested tone and style. When the
model is unavailable or fails, template posts built from the article's
title and summary are saved instead, so the caller always gets drafts.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from anthropic import Anthropic

from curator.models import Article, Post, PostPlatform, PostStatus, ToneProfile

logger = logging.getLogger(__name__)

# Configuration
MODEL = os.environ.get("SOCIAL_MODEL", "claude-haiku-4-5")
TEMPERATURE = 0.7
TWITTER_MAX_TOKENS = 500
LINKEDIN_MAX_TOKENS = 600

DEFAULT_LINKEDIN_TONE = "professional"
DEFAULT_LINKEDIN_STYLE = "professional"
DEFAULT_TWITTER_TONE = "witty"
DEFAULT_TWITTER_STYLE = "hooky"
CUSTOM_TONE = "custom"

LINKEDIN_STYLE_HINTS = {
    "viral": "- Use strong hooks, emotion, and controversy",
    "hooky": "- Start with curiosity gap or provocative question",
    "story": "- Use narrative arc with beginning, middle, end",
}

TWITTER_STYLE_HINTS = {
    "viral": "- Use strong hooks, emotional triggers, and controversy",
    "hooky": "- Start with curiosity gap or provocative question",
    "thread": "- Create 3-5 tweet thread with numbered format",
    "story": "- Use narrative storytelling across tweets",
}

LINKEDIN_PROMPT = """You are a LinkedIn content expert. Create an engaging post with these specifications:
- Tone: {tone}
- Style: {style}
{hint}
Format with line breaks for readability. Keep it professional yet engaging."""

TWITTER_PROMPT = """You are a Twitter/X content expert. Create an engaging thread with these specifications:
- Tone: {tone}
- Style: {style}
{hint}
Format as a thread. First tweet is the hook, last tweet includes a CTA. Keep tweets punchy (under 280 chars)."""

ARTICLE_PROMPT = """Create a {kind} about this article:

Title: {title}
Summary: {summary}
URL: {url}"""


@dataclass
class PostOptions:
    """Tone and style choices per platform; None means the default."""
    linkedin_tone: Optional[str] = None
    linkedin_style: Optional[str] = None
    twitter_tone: Optional[str] = None
    twitter_style: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PostOptions":
        data = data or {}
        return cls(
            linkedin_tone=data.get('linkedin_tone') or None,
            linkedin_style=data.get('linkedin_style') or None,
            twitter_tone=data.get('twitter_tone') or None,
            twitter_style=data.get('twitter_style') or None,
        )

    @property
    def wants_custom_tone(self) -> bool:
        return CUSTOM_TONE in (self.linkedin_tone, self.twitter_tone)


def _resolve_tone(requested: Optional[str], default: str, profile: Optional[ToneProfile]) -> str:
    if requested == CUSTOM_TONE:
        if profile is None:
            logger.warning("Custom tone requested but no tone profile saved - using default")
            return default
        return f"{profile.name} ({profile.style})"
    return requested or default


def build_linkedin_prompt(tone: str, style: str) -> str:
    return LINKEDIN_PROMPT.format(tone=tone, style=style, hint=LINKEDIN_STYLE_HINTS.get(style, ''))


def build_twitter_prompt(tone: str, style: str) -> str:
    return TWITTER_PROMPT.format(tone=tone, style=style, hint=TWITTER_STYLE_HINTS.get(style, ''))


def fallback_twitter_post(article: Article) -> str:
    summary = (article.summary or '')[:200]
    return f"🚀 Just read: {article.title}\n\nKey takeaway: {summary}\n\nFull story: {article.url}"


def fallback_linkedin_post(article: Article) -> str:
    return (
        f"📰 Interesting read: {article.title}\n\n{article.summary or ''}\n\n"
        f"What are your thoughts on this? 💭\n\nRead more: {article.url}"
    )


class SocialPostWriter:
    """
    Thin wrapper over a shared Anthropic client for free-text posts.

    A None client means no credential is configured; write() then raises
    and callers use their template fallback.
    """

    def __init__(self, client: Optional[Anthropic] = None, model: str = MODEL):
        self.client = client
        self.model = model

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def write(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """
        Raises:
            RuntimeError: no client configured or the model returned no text
        """
        if self.client is None:
            raise RuntimeError("ANTHROPIC_API_KEY not configured")

        start_time = time.time()
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=TEMPERATURE,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}]
        )
        text = response.content[0].text.strip() if response.content else ''
        if not text:
            raise RuntimeError("Empty response from model")

        logger.debug(f"Social post generated in {time.time() - start_time:.1f}s")
        return text


def build_social_writer(api_key: Optional[str] = None, model: str = MODEL) -> SocialPostWriter:
    """Create the post writer; falls back to ANTHROPIC_API_KEY."""
    if api_key is None:
        api_key = os.environ.get('ANTHROPIC_API_KEY')
    if not api_key:
        return SocialPostWriter(client=None, model=model)
    return SocialPostWriter(client=Anthropic(api_key=api_key), model=model)


def generate_social_posts(
    session,
    user_id: str,
    article_id: UUID,
    writer: SocialPostWriter,
    options: Optional[PostOptions] = None,
) -> dict:
    """
    Draft and save one Twitter and one LinkedIn post for an article.

    Returns:
        {'success': True, 'posts': {'twitter': Post, 'linkedin': Post},
         'used_fallback': bool}

    Raises:
        LookupError: no such article for this user
    """
    options = options or PostOptions()
    article = session.query(Article).filter(
        Article.id == article_id,
        Article.user_id == user_id
    ).first()
    if not article:
        raise LookupError("Article not found")

    profile = None
    if options.wants_custom_tone:
        profile = session.query(ToneProfile).filter(ToneProfile.user_id == user_id).first()

    twitter_style = options.twitter_style or DEFAULT_TWITTER_STYLE
    linkedin_style = options.linkedin_style or DEFAULT_LINKEDIN_STYLE
    twitter_system = build_twitter_prompt(
        _resolve_tone(options.twitter_tone, DEFAULT_TWITTER_TONE, profile), twitter_style
    )
    linkedin_system = build_linkedin_prompt(
        _resolve_tone(options.linkedin_tone, DEFAULT_LINKEDIN_TONE, profile), linkedin_style
    )

    used_fallback = False
    try:
        twitter_content = writer.write(
            twitter_system,
            ARTICLE_PROMPT.format(kind="Twitter thread", title=article.title, summary=article.summary, url=article.url),
            TWITTER_MAX_TOKENS,
        )
        linkedin_content = writer.write(
            linkedin_system,
            ARTICLE_PROMPT.format(kind="LinkedIn post", title=article.title, summary=article.summary, url=article.url),
            LINKEDIN_MAX_TOKENS,
        )
    except Exception as e:
        logger.error(f"Social post generation error for article {article_id}: {e}")
        used_fallback = True
        twitter_content = fallback_twitter_post(article)
        linkedin_content = fallback_linkedin_post(article)

    twitter_post = Post(
        user_id=user_id,
        article_id=article.id,
        platform=PostPlatform.TWITTER,
        content=twitter_content,
        status=PostStatus.DRAFT,
    )
    linkedin_post = Post(
        user_id=user_id,
        article_id=article.id,
        platform=PostPlatform.LINKEDIN,
        content=linkedin_content,
        status=PostStatus.DRAFT,
    )
    session.add_all([twitter_post, linkedin_post])
    session.commit()

    logger.info(f"Social posts drafted for article {article_id} (fallback={used_fallback})")
    return {
        'success': True,
        'posts': {'twitter': twitter_post, 'linkedin': linkedin_post},
        'used_fallback': used_fallback,
    }
