"""
Unit tests for social post drafting.

Covers prompt building, custom tone resolution, the Claude call through
SocialPostWriter, and the template fallback. No network access.
"""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from curator.models import Post, PostPlatform, PostStatus
from curator.services.social import (
    LINKEDIN_MAX_TOKENS, TWITTER_MAX_TOKENS,
    PostOptions, SocialPostWriter, build_linkedin_prompt, build_social_writer, build_twitter_prompt,
    fallback_linkedin_post, fallback_twitter_post, generate_social_posts,
)
from curator.services.tone import save_tone_profile
from tests.fixtures.sample_data import create_article


def _mock_client(*texts, error=None):
    client = MagicMock()
    if error is not None:
        client.messages.create.side_effect = error
    else:
        client.messages.create.side_effect = [
            MagicMock(content=[MagicMock(text=text)]) for text in texts
        ]
    return client


@pytest.fixture
def article(db_session):
    row = create_article(
        url="https://example.com/robots",
        title="Robots Learn to Dance",
        summary="A lab taught robots the tango.",
    )
    db_session.add(row)
    db_session.commit()
    return row


class TestPrompts:

    def test_twitter_prompt_includes_style_hint(self):
        prompt = build_twitter_prompt("witty", "thread")
        assert "- Tone: witty" in prompt
        assert "- Style: thread" in prompt
        assert "3-5 tweet thread" in prompt

    def test_unknown_style_has_no_hint(self):
        prompt = build_linkedin_prompt("calm", "haiku")
        assert "- Style: haiku" in prompt
        assert "curiosity gap" not in prompt

    def test_options_from_dict_ignores_blank_values(self):
        options = PostOptions.from_dict({'twitter_tone': '', 'linkedin_tone': 'custom'})
        assert options.twitter_tone is None
        assert options.wants_custom_tone is True
        assert PostOptions.from_dict(None) == PostOptions()


class TestFallbackTemplates:

    def test_twitter(self, article):
        text = fallback_twitter_post(article)
        assert text.startswith("🚀 Just read: Robots Learn to Dance")
        assert "Key takeaway: A lab taught robots the tango." in text
        assert text.endswith("Full story: https://example.com/robots")

    def test_twitter_truncates_summary(self):
        article = create_article(summary="x" * 500)
        assert "x" * 201 not in fallback_twitter_post(article)

    def test_linkedin(self, article):
        text = fallback_linkedin_post(article)
        assert text.startswith("📰 Interesting read: Robots Learn to Dance")
        assert text.endswith("Read more: https://example.com/robots")


class TestSocialPostWriter:

    def test_calls_messages_api(self):
        client = _mock_client("  Thread text  ")
        writer = SocialPostWriter(client=client, model="test-model")

        assert writer.write("system", "user", 123) == "Thread text"

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs['model'] == "test-model"
        assert kwargs['max_tokens'] == 123
        assert kwargs['system'] == "system"
        assert kwargs['messages'] == [{"role": "user", "content": "user"}]

    def test_without_client_raises(self):
        with pytest.raises(RuntimeError):
            SocialPostWriter(client=None).write("s", "u", 10)

    def test_empty_text_raises(self):
        with pytest.raises(RuntimeError, match="Empty response"):
            SocialPostWriter(client=_mock_client("   ")).write("s", "u", 10)

    def test_build_without_key_is_disabled(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert build_social_writer().enabled is False

    def test_build_with_key(self):
        with patch("curator.services.social.Anthropic") as anthropic_cls:
            writer = build_social_writer("sk-test")
        anthropic_cls.assert_called_once_with(api_key="sk-test")
        assert writer.enabled is True


class TestGenerateSocialPosts:

    def test_saves_model_drafts(self, db_session, article):
        client = _mock_client("Tweet thread", "LinkedIn post")

        result = generate_social_posts(db_session, "user_a", article.id, SocialPostWriter(client=client))

        assert result['success'] is True
        assert result['used_fallback'] is False
        assert result['posts']['twitter'].content == "Tweet thread"
        assert result['posts']['linkedin'].content == "LinkedIn post"

        posts = db_session.query(Post).all()
        assert len(posts) == 2
        assert {p.platform for p in posts} == {PostPlatform.TWITTER, PostPlatform.LINKEDIN}
        assert all(p.status == PostStatus.DRAFT and p.article_id == article.id for p in posts)

        twitter_call, linkedin_call = client.messages.create.call_args_list
        assert twitter_call.kwargs['max_tokens'] == TWITTER_MAX_TOKENS
        assert "Robots Learn to Dance" in twitter_call.kwargs['messages'][0]['content']
        assert linkedin_call.kwargs['max_tokens'] == LINKEDIN_MAX_TOKENS

    def test_defaults_tones(self, db_session, article):
        client = _mock_client("t", "l")

        generate_social_posts(db_session, "user_a", article.id, SocialPostWriter(client=client))

        twitter_call, linkedin_call = client.messages.create.call_args_list
        assert "- Tone: witty" in twitter_call.kwargs['system']
        assert "- Style: hooky" in twitter_call.kwargs['system']
        assert "- Tone: professional" in linkedin_call.kwargs['system']

    def test_custom_tone_uses_saved_profile(self, db_session, article):
        save_tone_profile(db_session, "user_a", "Dry Wit", "sarcastic")
        client = _mock_client("t", "l")

        generate_social_posts(
            db_session, "user_a", article.id, SocialPostWriter(client=client),
            PostOptions(twitter_tone="custom"),
        )

        twitter_call, linkedin_call = client.messages.create.call_args_list
        assert "- Tone: Dry Wit (sarcastic)" in twitter_call.kwargs['system']
        assert "- Tone: professional" in linkedin_call.kwargs['system']

    def test_custom_tone_without_profile_uses_default(self, db_session, article):
        client = _mock_client("t", "l")

        generate_social_posts(
            db_session, "user_a", article.id, SocialPostWriter(client=client),
            PostOptions(twitter_tone="custom"),
        )

        assert "- Tone: witty" in client.messages.create.call_args_list[0].kwargs['system']

    def test_api_error_falls_back_to_templates(self, db_session, article):
        client = _mock_client(error=Exception("overloaded"))

        result = generate_social_posts(db_session, "user_a", article.id, SocialPostWriter(client=client))

        assert result['used_fallback'] is True
        assert result['posts']['twitter'].content == fallback_twitter_post(article)
        assert result['posts']['linkedin'].content == fallback_linkedin_post(article)
        assert db_session.query(Post).count() == 2

    def test_no_client_falls_back_to_templates(self, db_session, article):
        result = generate_social_posts(db_session, "user_a", article.id, SocialPostWriter(client=None))
        assert result['used_fallback'] is True

    def test_other_users_article(self, db_session, article):
        with pytest.raises(LookupError, match="Article not found"):
            generate_social_posts(db_session, "user_b", article.id, SocialPostWriter(client=None))
        assert db_session.query(Post).count() == 0

    def test_missing_article(self, db_session):
        with pytest.raises(LookupError):
            generate_social_posts(db_session, "user_a", uuid4(), SocialPostWriter(client=None))
